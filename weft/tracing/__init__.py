"""Tracing boundary, re-exported from sub-modules."""

from .span import Span, SpanKind, current_span
from .tracer import Tracer, NoopTracer, MemoryTracer, LoggingTracer, noop_tracer

__all__ = [
    "Span",
    "SpanKind",
    "current_span",
    "Tracer",
    "NoopTracer",
    "MemoryTracer",
    "LoggingTracer",
    "noop_tracer",
]
