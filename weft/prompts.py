"""Prompt loaders and starter-message rendering."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Protocol, runtime_checkable

from jinja2 import TemplateError
from jinja2.sandbox import SandboxedEnvironment

from .errors import ConfigurationError
from .types import AssistantMessage, Message, SystemMessage, TextBlock, UserMessage

logger = logging.getLogger(__name__)

_env = SandboxedEnvironment(keep_trailing_newline=True)


@dataclass(frozen=True)
class Prompt:
    name: str
    version: str = ""
    model: str = ""
    messages: tuple[Message, ...] = ()
    temperature: float | None = None
    max_tokens: int | None = None
    top_p: float | None = None
    top_k: int | None = None


@runtime_checkable
class PromptLoader(Protocol):
    async def load(self) -> Prompt: ...


class StaticPrompt:
    """A prompt made of a single system message."""

    def __init__(self, text: str, name: str = "static", version: str = "0.1.0") -> None:
        self._prompt = Prompt(name=name, version=version, messages=(SystemMessage(text),))

    async def load(self) -> Prompt:
        return self._prompt


def static_prompt(text: str) -> StaticPrompt:
    return StaticPrompt(text)


def template_values(
    name: str, values: Mapping[str, Any] | None = None, now: datetime | None = None
) -> dict[str, Any]:
    now = now or datetime.now().astimezone()
    return {
        **(values or {}),
        "name": name,
        "date": now.strftime("%Y-%m-%d"),
        "time": now.strftime("%H:%M:%S"),
        "datetime": now.isoformat(timespec="seconds"),
    }


def render(template: str, values: Mapping[str, Any]) -> str:
    try:
        return _env.from_string(template).render(values)
    except TemplateError as e:
        raise ConfigurationError(f"failed to render message template: {e}") from e


def render_message(message: Message, values: Mapping[str, Any]) -> Message:
    """Render the text of system, user and assistant messages; others pass through."""
    match message:
        case SystemMessage() | UserMessage():
            return replace(message, content=render(message.content, values))
        case AssistantMessage():
            blocks = tuple(
                TextBlock(text=render(b.text, values)) if isinstance(b, TextBlock) else b
                for b in message.content
            )
            return replace(message, content=blocks)
        case _:
            return message


def render_messages(
    name: str, messages: Iterable[Message], values: Mapping[str, Any] | None = None
) -> list[Message]:
    context = template_values(name, values)
    return [render_message(m, context) for m in messages]
