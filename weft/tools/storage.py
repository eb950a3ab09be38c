"""File storage boundary and the tools that read and write through it."""

from __future__ import annotations

import asyncio
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, Field

from ..types import Tool, ToolContext, ToolHandler
from .inline import inline_tool


@runtime_checkable
class Storage(Protocol):
    async def exists(self, filename: str) -> bool: ...
    async def read(self, filename: str) -> bytes: ...
    async def write(self, filename: str, content: bytes) -> None: ...
    async def delete(self, filename: str) -> None: ...


class InMemoryStorage:
    def __init__(self) -> None:
        self._files: dict[str, bytes] = {}
        self._lock = asyncio.Lock()

    async def exists(self, filename: str) -> bool:
        return filename in self._files

    async def read(self, filename: str) -> bytes:
        try:
            return self._files[filename]
        except KeyError:
            raise FileNotFoundError(filename) from None

    async def write(self, filename: str, content: bytes) -> None:
        async with self._lock:
            self._files[filename] = content

    async def delete(self, filename: str) -> None:
        async with self._lock:
            self._files.pop(filename, None)


class Filename(BaseModel):
    filename: str


class File(BaseModel):
    filename: str
    content: str = Field(default="")


def storage_read_tool(storage: Storage) -> tuple[Tool, ToolHandler]:
    async def read_file(params: Filename, ctx: ToolContext) -> str:
        content = await storage.read(params.filename)
        return content.decode("utf-8", errors="replace")

    return inline_tool(
        "read_file", "Read a file from the storage using its filename", read_file, Filename
    )


def storage_tools(storage: Storage) -> list[tuple[Tool, ToolHandler]]:
    async def write_file(params: File, ctx: ToolContext) -> str:
        existed = await storage.exists(params.filename)
        await storage.write(params.filename, params.content.encode("utf-8"))
        return "File updated" if existed else "File created"

    async def delete_file(params: Filename, ctx: ToolContext) -> str:
        await storage.delete(params.filename)
        return "File deleted"

    return [
        storage_read_tool(storage),
        inline_tool(
            "write_file",
            "Write a file in the storage. The filename is a short identifier: 1-5 words "
            "separated by dash plus an extension (.md, .cpp, etc). The filename must be unique.",
            write_file,
            File,
        ),
        inline_tool(
            "delete_file", "Delete a file in the storage using its filename", delete_file, Filename
        ),
    ]
