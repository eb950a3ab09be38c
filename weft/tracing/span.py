"""
Tracing - spans around runs, model calls and tool calls.

A span records the lifecycle of one operation and is handed to its tracer
when closed. Spans nest through a context variable, so concurrent tool
tasks each see their own parent.
"""

from __future__ import annotations

import contextvars
import json
import time
from dataclasses import dataclass, field
from enum import StrEnum
from types import TracebackType
from typing import TYPE_CHECKING, Any
from uuid import uuid4

if TYPE_CHECKING:
    from .tracer import Tracer

_current_span: contextvars.ContextVar[Span | None] = contextvars.ContextVar(
    "weft_current_span", default=None
)


def current_span() -> Span | None:
    return _current_span.get()


class SpanKind(StrEnum):
    TASK = "task"
    LLM = "llm"
    TOOL = "tool"
    FUNCTION = "function"


def _payload(value: Any) -> Any:
    """Decode JSON text so exporters receive structured data."""
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8", errors="replace")
    if isinstance(value, str):
        try:
            return json.loads(value)
        except ValueError:
            return value
    return value


@dataclass
class Span:
    name: str
    kind: SpanKind = SpanKind.FUNCTION
    id: str = field(default_factory=lambda: uuid4().hex[:16])
    root_id: str = ""
    parent_id: str | None = None
    input: Any = None
    output: Any = None
    error: str = ""
    metrics: dict[str, float] = field(default_factory=dict)
    metadata: dict[str, Any] = field(default_factory=dict)
    start_time: float = field(default_factory=time.time)
    end_time: float = 0.0
    tracer: Tracer | None = field(default=None, repr=False, compare=False)
    _token: contextvars.Token | None = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.root_id = self.root_id or self.id
        self.input = _payload(self.input)

    @property
    def closed(self) -> bool:
        return self.end_time > 0

    @property
    def duration_ms(self) -> float:
        if not self.closed:
            return 0.0
        return (self.end_time - self.start_time) * 1000

    def set_metadata(self, key: str, value: Any) -> None:
        self.metadata[key] = value

    def set_metric(self, key: str, value: float) -> None:
        self.metrics[key] = float(value)

    def set_output(self, output: Any) -> None:
        self.output = _payload(output)

    def set_error(self, error: BaseException | str) -> None:
        self.error = str(error) or type(error).__name__

    def close(self) -> None:
        if self.closed:
            return
        self.end_time = time.time()
        if self.tracer is not None:
            self.tracer.record(self)

    def close_with_error(self, error: BaseException | str) -> None:
        self.set_error(error)
        self.close()

    def close_with_output(self, output: Any) -> None:
        self.set_output(output)
        self.close()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "root_id": self.root_id,
            "parent_id": self.parent_id,
            "name": self.name,
            "kind": self.kind.value,
            "input": self.input,
            "output": self.output,
            "error": self.error,
            "metrics": dict(self.metrics),
            "metadata": dict(self.metadata),
            "start_time": self.start_time,
            "end_time": self.end_time,
            "duration_ms": self.duration_ms,
        }

    def __enter__(self) -> Span:
        self._token = _current_span.set(self)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._token is not None:
            _current_span.reset(self._token)
            self._token = None
        if exc is not None:
            self.close_with_error(exc)
        else:
            self.close()
