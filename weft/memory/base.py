"""Memory protocol and lookup helpers."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from ..types import AssistantMessage, Message, UserMessage


@runtime_checkable
class Memory(Protocol):
    """Append-only ordered log of messages.

    Implementations must serialize concurrent writes: ``list()`` reflects the
    exact append history, and ``extend`` commits its whole batch at once.
    """

    async def append(self, message: Message) -> None: ...
    async def extend(self, messages: Sequence[Message]) -> None: ...
    def list(self) -> list[Message]: ...


def last_message(memory: Memory) -> Message | None:
    messages = memory.list()
    return messages[-1] if messages else None


def last_assistant_message(memory: Memory) -> AssistantMessage | None:
    for message in reversed(memory.list()):
        if isinstance(message, AssistantMessage):
            return message
    return None


def last_user_message(memory: Memory) -> UserMessage | None:
    for message in reversed(memory.list()):
        if isinstance(message, UserMessage):
            return message
    return None
