"""Provider-agnostic completion envelope and the ChatCompleter boundary."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from .messages import AssistantMessage, Message, MessageBlock
from .tools import Tool

if TYPE_CHECKING:
    from .stream import Chunk

StreamCallback = Callable[["Chunk"], Awaitable[None]]


class ToolChoice(StrEnum):
    AUTO = "auto"
    REQUIRED = "required"
    NONE = "none"


class FinishReason(StrEnum):
    STOP = "stop"
    LENGTH = "length"
    TOOL_CALLS = "tool_calls"
    CONTENT_FILTER = "content_filter"


@dataclass(frozen=True)
class Reasoning:
    enabled: bool = False
    budget: int = 0
    effort: str = ""


@dataclass
class CompletionUsage:
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    cached_prompt_tokens: int = 0


@dataclass
class CompletionRequest:
    model: str
    messages: list[Message]
    tools: list[Tool] = field(default_factory=list)
    tool_choice: ToolChoice = ToolChoice.AUTO
    parallel_tool_calls: bool = False
    max_tokens: int | None = None
    temperature: float | None = None
    top_p: float | None = None
    top_k: int | None = None
    reasoning: Reasoning | None = None
    stream: StreamCallback | None = None


@dataclass
class CompletionResponse:
    content: list[MessageBlock] = field(default_factory=list)
    finish_reason: FinishReason = FinishReason.STOP
    usage: CompletionUsage = field(default_factory=CompletionUsage)
    model: str = ""

    def to_message(self) -> AssistantMessage:
        return AssistantMessage(content=tuple(self.content))


@runtime_checkable
class ChatCompleter(Protocol):
    """The sole seam between the orchestration core and a model backend."""

    async def complete(self, request: CompletionRequest) -> CompletionResponse: ...
