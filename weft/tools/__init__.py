"""Tool registry, inline tools and built-in tool descriptors."""

from .toolset import Toolset, StaticToolset, as_static
from .schema import PydanticSchema
from .inline import inline_tool
from .builtin import builtin_tool, WEB_SEARCH, CODE_EXECUTION, BASH
from .storage import Storage, InMemoryStorage, storage_tools, storage_read_tool

__all__ = [
    "Toolset",
    "StaticToolset",
    "as_static",
    "PydanticSchema",
    "inline_tool",
    "builtin_tool",
    "WEB_SEARCH",
    "CODE_EXECUTION",
    "BASH",
    "Storage",
    "InMemoryStorage",
    "storage_tools",
    "storage_read_tool",
]
