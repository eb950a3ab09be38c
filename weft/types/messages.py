"""Message types: conversation entries and assistant content blocks."""

from __future__ import annotations

import hashlib
import json
import re
from dataclasses import dataclass, field
from typing import Annotated, Any, Literal, TypeVar

from pydantic import BaseModel, Field, TypeAdapter
from pydantic_core import to_jsonable_python

M = TypeVar("M", bound=BaseModel)


@dataclass(frozen=True)
class ToolCall:
    id: str
    name: str
    arguments: str = ""


# -- Assistant content blocks --


@dataclass(frozen=True)
class TextBlock:
    text: str
    type: Literal["text"] = "text"


@dataclass(frozen=True)
class ToolCallBlock:
    call: ToolCall
    type: Literal["tool_call"] = "tool_call"


@dataclass(frozen=True)
class ReasoningBlock:
    text: str = ""
    signature: str = ""
    type: Literal["reasoning"] = "reasoning"


@dataclass(frozen=True)
class ServerToolCallBlock:
    """A call to a backend-hosted tool (web search, code execution...)."""

    call: ToolCall
    type: Literal["server_tool_call"] = "server_tool_call"


@dataclass(frozen=True)
class ToolResultBlock:
    """Result of a server tool call, returned inline by the backend."""

    call_id: str
    result: Any = None
    type: Literal["tool_result"] = "tool_result"


MessageBlock = TextBlock | ToolCallBlock | ReasoningBlock | ServerToolCallBlock | ToolResultBlock


# -- Messages --


@dataclass(frozen=True)
class SystemMessage:
    content: str
    role: Literal["system"] = "system"


@dataclass(frozen=True)
class UserMessage:
    content: str
    role: Literal["user"] = "user"


@dataclass(frozen=True)
class AssistantMessage:
    content: tuple[MessageBlock, ...] = ()
    role: Literal["assistant"] = "assistant"

    @classmethod
    def from_text(cls, *text: str) -> AssistantMessage:
        return cls(content=tuple(TextBlock(text=t) for t in text))

    @property
    def tool_calls(self) -> list[ToolCall]:
        return [b.call for b in self.content if isinstance(b, ToolCallBlock)]

    def text(self) -> str:
        return "".join(b.text for b in self.content if isinstance(b, TextBlock))

    def is_empty(self) -> bool:
        reply = self.text().strip().upper()
        return not self.tool_calls and reply in ("", "NO RESPONSE")

    def unmarshal(self, model: type[M] | None = None) -> M | Any:
        """Parse the reply as JSON, optionally validating it into ``model``."""
        if self.tool_calls:
            raise ValueError("assistant message contains tool usage")
        payload = strip_json_fence(self.text())
        if model is not None:
            return model.model_validate_json(payload)
        return json.loads(payload)


@dataclass(frozen=True)
class ToolResult:
    call_id: str
    result: Any = None
    role: Literal["tool_result"] = "tool_result"

    def __str__(self) -> str:
        if self.result is None:
            return ""
        if isinstance(self.result, str):
            return self.result
        if isinstance(self.result, (bytes, bytearray)):
            return self.result.decode("utf-8", errors="replace")
        return json.dumps(to_jsonable_python(self.result, fallback=str))


@dataclass(frozen=True)
class ToolError:
    call_id: str
    error: str
    role: Literal["tool_error"] = "tool_error"

    def __str__(self) -> str:
        return f"ERROR: {self.error}"


Message = SystemMessage | UserMessage | AssistantMessage | ToolResult | ToolError

_message_adapter: TypeAdapter[Any] | None = None


def _adapter() -> TypeAdapter[Any]:
    global _message_adapter
    if _message_adapter is None:
        _message_adapter = TypeAdapter(Annotated[Message, Field(discriminator="role")])
    return _message_adapter


def message_to_dict(message: Message) -> dict[str, Any]:
    return to_jsonable_python(message, fallback=str)


def message_from_dict(data: dict[str, Any]) -> Message:
    return _adapter().validate_python(data)


def strip_json_fence(text: str) -> str:
    text = text.strip().strip("`")
    if text.startswith("json"):
        text = text[len("json"):]
    return text.strip()


_name_validator = re.compile(r"[\s<|\\/>]")


def normalize_name(name: str) -> str:
    """Make ``name`` safe for backends that accept participant names."""
    if normalized := _name_validator.sub("_", name):
        return normalized
    return hashlib.md5(name.encode()).hexdigest()
