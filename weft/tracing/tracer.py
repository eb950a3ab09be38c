"""Tracer implementations."""

from __future__ import annotations

from typing import Any

from ..infra.logging import get_logger
from .span import Span, SpanKind, current_span


class Tracer:
    """Creates spans linked to the current span; subclasses export them in ``record``."""

    def start_span(
        self,
        name: str,
        kind: SpanKind = SpanKind.FUNCTION,
        input: Any = None,
        attributes: dict[str, Any] | None = None,
    ) -> Span:
        parent = current_span()
        return Span(
            name=name,
            kind=kind,
            root_id=parent.root_id if parent else "",
            parent_id=parent.id if parent else None,
            input=input,
            metadata=dict(attributes or {}),
            tracer=self,
        )

    def record(self, span: Span) -> None:
        raise NotImplementedError


class NoopTracer(Tracer):
    def record(self, span: Span) -> None:
        pass


class MemoryTracer(Tracer):
    """Keeps finished spans in memory, in closing order."""

    def __init__(self) -> None:
        self.spans: list[Span] = []

    def record(self, span: Span) -> None:
        self.spans.append(span)

    def by_kind(self, kind: SpanKind) -> list[Span]:
        return [s for s in self.spans if s.kind == kind]

    def clear(self) -> None:
        self.spans.clear()


class LoggingTracer(Tracer):
    """Emits each finished span as a structured log event."""

    def __init__(self, name: str = "weft.tracing") -> None:
        self._log = get_logger(name)

    def record(self, span: Span) -> None:
        event = span.to_dict()
        if span.error:
            self._log.warning("span_closed", **event)
        else:
            self._log.info("span_closed", **event)


_noop = NoopTracer()


def noop_tracer() -> NoopTracer:
    return _noop
