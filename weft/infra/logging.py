"""Structured logging configuration using structlog.

Library modules log through ``logging.getLogger(__name__)``; applications call
``configure_logging`` once to route those records through the same structlog
processors as ``get_logger`` loggers, rendered as console text or JSON.
"""

from __future__ import annotations

import logging
import sys

import structlog

from ..settings import get_settings

_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


def _level(log_level: str) -> str:
    level = (log_level or "").upper()
    return level if level in _LEVELS else "INFO"


def configure_logging(log_level: str | None = None, json_format: bool | None = None) -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        log_level: Logging level name, case-insensitive; unknown names fall back to INFO.
            Defaults to ``WEFT_LOG_LEVEL``.
        json_format: Render JSON lines instead of the console format.
            Defaults to ``WEFT_LOG_JSON``.
    """
    settings = get_settings()
    if log_level is None:
        log_level = settings.log_level
    if json_format is None:
        json_format = settings.log_json

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_format:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    handler.set_name("weft")

    root_logger = logging.getLogger()
    for existing in list(root_logger.handlers):
        if existing.get_name() == "weft":
            root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(_level(log_level))


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger bound to ``name``."""
    return structlog.get_logger(name)
