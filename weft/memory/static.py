"""Unlimited in-process memory."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Sequence

from ..types import Message


class StaticMemory:
    """Keeps every message for the lifetime of the object."""

    def __init__(self, messages: Iterable[Message] = ()) -> None:
        self._messages: list[Message] = list(messages)
        self._lock = asyncio.Lock()

    async def append(self, message: Message) -> None:
        async with self._lock:
            self._store([message])

    async def extend(self, messages: Sequence[Message]) -> None:
        if not messages:
            return
        async with self._lock:
            self._store(messages)

    def list(self) -> list[Message]:
        return list(self._messages)

    def clear(self) -> None:
        self._messages.clear()

    def _store(self, messages: Sequence[Message]) -> None:
        self._messages.extend(messages)

    def __len__(self) -> int:
        return len(self._messages)
