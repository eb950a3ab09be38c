"""Backend-hosted tools: declared to the model, never executed locally."""

from __future__ import annotations

from typing import Any

from ..errors import BuiltinToolError
from ..types import Tool, ToolContext, ToolHandler

WEB_SEARCH = "web_search"
CODE_EXECUTION = "code_execution"
BASH = "bash"


def builtin_tool(name: str, kind: str, description: str = "") -> tuple[Tool, ToolHandler]:
    tool = Tool(name=name, description=description, kind=kind)

    def handler(arguments: str, ctx: ToolContext) -> Any:
        raise BuiltinToolError(name)

    return tool, handler
