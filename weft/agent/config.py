"""Agent configuration value object."""

from __future__ import annotations

import dataclasses
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from ..memory import Memory, StaticMemory
from ..settings import get_settings
from ..tools import StaticToolset, Toolset
from ..tracing import Tracer, noop_tracer
from ..types import (
    Approver,
    AssistantMessage,
    ChatCompleter,
    Message,
    Reasoning,
    StreamCallback,
    ToolChoice,
)

Finalizer = Callable[[AssistantMessage], Awaitable[None] | None]


@dataclass(frozen=True)
class AgentConfig:
    """
    Everything an Agent needs for a run.

    Instances are never mutated: options derive new configs through
    ``replace``. The memory and toolset objects are shared by every config
    derived from the same agent and synchronize themselves.
    """

    name: str
    description: str = ""
    completer: ChatCompleter | None = None
    toolset: Toolset = field(default_factory=StaticToolset)
    memory: Memory = field(default_factory=StaticMemory)

    # starter messages and template values
    messages: tuple[Message, ...] = ()
    values: Mapping[str, Any] = field(default_factory=dict)

    # model and sampling
    model: str = ""
    model_mapper: Mapping[str, str] = field(default_factory=dict)
    temperature: float | None = None
    max_tokens: int | None = None
    top_p: float | None = None
    top_k: int | None = None
    reasoning: Reasoning | None = None
    tool_choice: ToolChoice = ToolChoice.AUTO

    # loop behaviour
    parallelism: int = 5
    iterations: int = 120
    strict_iterations: bool = False
    approvers: tuple[Approver, ...] = ()
    finalizers: tuple[Finalizer, ...] = ()
    loaders: tuple[OptionLoader, ...] = ()

    # observability
    streamer: StreamCallback | None = None
    tracer: Tracer = field(default_factory=noop_tracer)
    attributes: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_settings(cls, name: str) -> AgentConfig:
        settings = get_settings()
        return cls(
            name=name,
            model=settings.default_model,
            iterations=settings.iterations,
            parallelism=settings.parallelism,
        )

    def replace(self, **changes: Any) -> AgentConfig:
        return dataclasses.replace(self, **changes)

    def resolve_model(self) -> str:
        return self.model_mapper.get(self.model, self.model)


Option = Callable[[AgentConfig], AgentConfig]
OptionLoader = Callable[[AgentConfig], Awaitable[AgentConfig]]


def apply_options(config: AgentConfig, options: tuple[Option, ...] | list[Option]) -> AgentConfig:
    for option in options:
        config = option(config)
    return config
