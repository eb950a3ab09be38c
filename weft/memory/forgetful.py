"""Memory that only remembers the current user turn."""

from __future__ import annotations

from collections.abc import Sequence

from ..types import Message, UserMessage
from .static import StaticMemory


class ForgetfulMemory(StaticMemory):
    """Resets to empty whenever a new UserMessage is recorded."""

    def _store(self, messages: Sequence[Message]) -> None:
        for message in messages:
            if isinstance(message, UserMessage):
                self._messages.clear()
            self._messages.append(message)
