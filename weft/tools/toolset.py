"""Name-indexed tool registry."""

from __future__ import annotations

import inspect
import logging
from typing import Any, Protocol, runtime_checkable

from ..errors import UnknownToolError
from ..types import Tool, ToolContext, ToolHandler

logger = logging.getLogger(__name__)


@runtime_checkable
class Toolset(Protocol):
    def list(self) -> list[Tool]: ...
    async def call(self, name: str, arguments: str, ctx: ToolContext) -> Any: ...


class StaticToolset:
    """Tools registered in insertion order, each name at most once."""

    def __init__(self) -> None:
        self._tools: list[Tool] = []
        self._handlers: dict[str, ToolHandler] = {}

    def add(self, tool: Tool, handler: ToolHandler) -> None:
        if tool.name in self._handlers:
            self._tools = [tool if t.name == tool.name else t for t in self._tools]
        else:
            self._tools.append(tool)
        self._handlers[tool.name] = handler

    def extend(self, tool: Tool, handler: ToolHandler) -> StaticToolset:
        """Return a copy with ``tool`` registered; this toolset is unchanged."""
        clone = self.copy()
        clone.add(tool, handler)
        return clone

    def copy(self) -> StaticToolset:
        clone = StaticToolset()
        clone._tools = list(self._tools)
        clone._handlers = dict(self._handlers)
        return clone

    def get(self, name: str) -> Tool | None:
        return next((t for t in self._tools if t.name == name), None)

    def list(self) -> list[Tool]:
        return list(self._tools)

    async def call(self, name: str, arguments: str, ctx: ToolContext) -> Any:
        handler = self._handlers.get(name)
        if handler is None:
            raise UnknownToolError(name)
        result = handler(arguments, ctx)
        if inspect.isawaitable(result):
            result = await result
        return result

    def __contains__(self, name: object) -> bool:
        return name in self._handlers

    def __len__(self) -> int:
        return len(self._tools)


def as_static(toolset: Toolset | None) -> StaticToolset:
    """Adapt any toolset to a StaticToolset; StaticToolsets are returned as is."""
    if toolset is None:
        return StaticToolset()
    if isinstance(toolset, StaticToolset):
        return toolset

    static = StaticToolset()
    for tool in toolset.list():
        static.add(tool, _delegate(toolset, tool.name))
    return static


def _delegate(toolset: Toolset, name: str) -> ToolHandler:
    async def handler(arguments: str, ctx: ToolContext) -> Any:
        return await toolset.call(name, arguments, ctx)

    return handler
