"""Tools defined from a Python function and a Pydantic input model."""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import BaseModel

from ..types import Tool, ToolContext, ToolHandler
from .schema import PydanticSchema


def inline_tool(
    name: str,
    description: str,
    fn: Callable[[Any, ToolContext], Awaitable[Any] | Any],
    input_model: type[BaseModel],
    output_model: type[BaseModel] | None = None,
) -> tuple[Tool, ToolHandler]:
    """Build a tool descriptor and handler around ``fn(params, ctx)``.

    Arguments are validated into ``input_model`` before ``fn`` is called; a
    validation failure raises ``ToolArgumentsError``.
    """
    schema = PydanticSchema(input_model)
    tool = Tool(
        name=name,
        description=description,
        input_schema=schema.to_json_schema(),
        output_schema=output_model.model_json_schema() if output_model else None,
    )

    async def handler(arguments: str, ctx: ToolContext) -> Any:
        params = schema.parse(name, arguments)
        result = fn(params, ctx)
        if inspect.isawaitable(result):
            result = await result
        return result

    return tool, handler
