"""Core type definitions, re-exported from sub-modules."""

from .messages import (
    Message, MessageBlock, SystemMessage, UserMessage, AssistantMessage, ToolResult, ToolError,
    ToolCall, TextBlock, ToolCallBlock, ReasoningBlock, ServerToolCallBlock, ToolResultBlock,
    message_to_dict, message_from_dict, strip_json_fence, normalize_name,
)
from .tools import Tool, ToolCallApproval, ToolContext, ToolHandler, Approver
from .completion import (
    ChatCompleter, CompletionRequest, CompletionResponse, CompletionUsage,
    FinishReason, Reasoning, StreamCallback, ToolChoice,
)
from .stream import Chunk, ChunkType, ChunkAssembler

__all__ = [
    "Message", "MessageBlock", "SystemMessage", "UserMessage", "AssistantMessage", "ToolResult", "ToolError",
    "ToolCall", "TextBlock", "ToolCallBlock", "ReasoningBlock", "ServerToolCallBlock", "ToolResultBlock",
    "message_to_dict", "message_from_dict", "strip_json_fence", "normalize_name",
    "Tool", "ToolCallApproval", "ToolContext", "ToolHandler", "Approver",
    "ChatCompleter", "CompletionRequest", "CompletionResponse", "CompletionUsage",
    "FinishReason", "Reasoning", "StreamCallback", "ToolChoice",
    "Chunk", "ChunkType", "ChunkAssembler",
]
