"""Streaming chunks and index-keyed assembly of streamed content."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from .completion import CompletionResponse, CompletionUsage, FinishReason
from .messages import (
    MessageBlock,
    ReasoningBlock,
    ServerToolCallBlock,
    TextBlock,
    ToolCall,
    ToolCallBlock,
    ToolResultBlock,
)


class ChunkType(StrEnum):
    TEXT = "text"
    TOOL_CALL_START = "tool_call_start"
    TOOL_CALL_DELTA = "tool_call_delta"
    TOOL_CALL_EXECUTE = "tool_call_execute"  # emitted by the agent, not the backend
    TOOL_CALL_COMPLETE = "tool_call_complete"  # emitted by the agent, not the backend
    REASONING = "thinking_delta"
    SIGNATURE = "thinking_signature"
    SERVER_TOOL_CALL_START = "server_tool_call_start"
    SERVER_TOOL_CALL_DELTA = "server_tool_call_delta"
    TOOL_RESULT = "tool_result"
    USAGE = "usage"
    FINISH = "finish"


AGENT_CHUNK_TYPES = frozenset({ChunkType.TOOL_CALL_EXECUTE, ChunkType.TOOL_CALL_COMPLETE})

_CALL_KINDS = {
    ChunkType.TOOL_CALL_START: "tool_call",
    ChunkType.TOOL_CALL_DELTA: "tool_call",
    ChunkType.SERVER_TOOL_CALL_START: "server_tool_call",
    ChunkType.SERVER_TOOL_CALL_DELTA: "server_tool_call",
}


@dataclass(frozen=True)
class Chunk:
    type: ChunkType
    index: int = 0
    text: str = ""
    call: ToolCall | None = None
    signature: str = ""
    result: Any = None
    usage: CompletionUsage | None = None
    finish_reason: FinishReason | None = None

    @property
    def from_agent(self) -> bool:
        return self.type in AGENT_CHUNK_TYPES


@dataclass
class _BlockBuilder:
    type: str
    text: str = ""
    signature: str = ""
    call_id: str = ""
    name: str = ""
    arguments: str = ""
    result: Any = None

    def build(self) -> MessageBlock:
        if self.type == "tool_call":
            return ToolCallBlock(call=ToolCall(self.call_id, self.name, self.arguments))
        if self.type == "server_tool_call":
            return ServerToolCallBlock(call=ToolCall(self.call_id, self.name, self.arguments))
        if self.type == "reasoning":
            return ReasoningBlock(text=self.text, signature=self.signature)
        if self.type == "tool_result":
            return ToolResultBlock(call_id=self.call_id, result=self.result)
        return TextBlock(text=self.text)


@dataclass
class ChunkAssembler:
    """
    Fold streamed chunks into content blocks.

    Blocks are keyed by chunk index, so chunks for different indices may arrive
    interleaved in any order. Agent-originated chunks are ignored.
    """

    usage: CompletionUsage = field(default_factory=CompletionUsage)
    finish_reason: FinishReason = FinishReason.STOP
    _blocks: dict[int, _BlockBuilder] = field(default_factory=dict)

    def feed(self, chunk: Chunk) -> None:
        if chunk.from_agent:
            return

        match chunk.type:
            case ChunkType.TEXT:
                self._block(chunk.index, "text").text += chunk.text
            case ChunkType.REASONING:
                self._block(chunk.index, "reasoning").text += chunk.text
            case ChunkType.SIGNATURE:
                self._block(chunk.index, "reasoning").signature += chunk.signature
            case ChunkType.TOOL_CALL_START | ChunkType.SERVER_TOOL_CALL_START:
                block = self._block(chunk.index, _CALL_KINDS[chunk.type])
                if chunk.call:
                    block.call_id = chunk.call.id or block.call_id
                    block.name = chunk.call.name or block.name
                    block.arguments += chunk.call.arguments
            case ChunkType.TOOL_CALL_DELTA | ChunkType.SERVER_TOOL_CALL_DELTA:
                block = self._block(chunk.index, _CALL_KINDS[chunk.type])
                if chunk.call:
                    block.arguments += chunk.call.arguments
                else:
                    block.arguments += chunk.text
            case ChunkType.TOOL_RESULT:
                block = self._block(chunk.index, "tool_result")
                if isinstance(chunk.result, ToolResultBlock):
                    block.call_id = chunk.result.call_id
                    block.result = chunk.result.result
                else:
                    block.result = chunk.result
            case ChunkType.USAGE:
                if chunk.usage:
                    self.usage = chunk.usage
            case ChunkType.FINISH:
                if chunk.finish_reason is not None:
                    self.finish_reason = chunk.finish_reason

    def content(self) -> list[MessageBlock]:
        return [self._blocks[i].build() for i in sorted(self._blocks)]

    def response(self, model: str = "") -> CompletionResponse:
        return CompletionResponse(
            content=self.content(),
            finish_reason=self.finish_reason,
            usage=self.usage,
            model=model,
        )

    def _block(self, index: int, kind: str) -> _BlockBuilder:
        block = self._blocks.get(index)
        if block is None:
            block = self._blocks[index] = _BlockBuilder(type=kind)
        return block
