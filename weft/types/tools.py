"""Tool types."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import IntEnum
from typing import TYPE_CHECKING, Any

from .messages import ToolCall

if TYPE_CHECKING:
    from ..memory import Memory


@dataclass(frozen=True)
class Tool:
    name: str
    description: str = ""
    input_schema: dict[str, Any] | None = None
    output_schema: dict[str, Any] | None = None
    kind: str = ""  # backend-hosted tool type, empty for local tools

    @property
    def builtin(self) -> bool:
        return bool(self.kind)


class ToolCallApproval(IntEnum):
    UNDECIDED = 0
    APPROVED = 1
    REJECTED = 2


@dataclass
class ToolContext:
    agent: str = ""
    call_id: str = ""
    tool_name: str = ""
    memory: Memory | None = None
    signal: asyncio.Event | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


ToolHandler = Callable[[str, ToolContext], Awaitable[Any] | Any]
Approver = Callable[[ToolCall], ToolCallApproval]
