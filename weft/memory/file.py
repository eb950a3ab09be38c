"""Memory decorator that mirrors every write to a JSON-lines transcript."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Sequence
from pathlib import Path

from ..errors import MemoryWriteError, WeftError
from ..types import Message, message_from_dict, message_to_dict
from .base import Memory
from .static import StaticMemory

logger = logging.getLogger(__name__)


class FileMemory:
    """Write each message to ``path`` before delegating to ``inner``.

    The transcript holds one JSON object per line. A failed write raises
    ``MemoryWriteError`` and the inner memory is left untouched.
    """

    def __init__(self, path: str | Path, inner: Memory | None = None) -> None:
        self.path = Path(path)
        self.inner: Memory = inner if inner is not None else StaticMemory()
        self._lock = asyncio.Lock()

    @classmethod
    async def restore(cls, path: str | Path, inner: Memory | None = None) -> FileMemory:
        """Replay an existing transcript into ``inner`` and keep mirroring to it."""
        memory = cls(path, inner)
        if not memory.path.exists():
            return memory

        messages: list[Message] = []
        with memory.path.open(encoding="utf-8") as f:
            for lineno, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    messages.append(message_from_dict(json.loads(line)))
                except ValueError as e:
                    raise WeftError(
                        "MEMORY_CORRUPT", f"corrupt transcript {memory.path} at line {lineno}", e
                    ) from e
        await memory.inner.extend(messages)
        logger.debug("Restored %d messages from %s", len(messages), memory.path)
        return memory

    async def append(self, message: Message) -> None:
        await self.extend([message])

    async def extend(self, messages: Sequence[Message]) -> None:
        if not messages:
            return
        async with self._lock:
            lines = "".join(json.dumps(message_to_dict(m)) + "\n" for m in messages)
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with self.path.open("a", encoding="utf-8") as f:
                    f.write(lines)
            except OSError as e:
                raise MemoryWriteError(f"failed to write transcript {self.path}", e) from e
            await self.inner.extend(messages)

    def list(self) -> list[Message]:
        return self.inner.list()
