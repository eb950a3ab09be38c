"""Finalizers: checks a terminal reply must pass before the run ends."""

from __future__ import annotations

import inspect
import json
import logging
from collections.abc import Sequence

from ..errors import FinalizerError
from ..types import AssistantMessage, strip_json_fence
from .config import Finalizer

logger = logging.getLogger(__name__)


def require_json(reply: AssistantMessage) -> None:
    try:
        json.loads(strip_json_fence(reply.text()))
    except ValueError as e:
        raise FinalizerError("response must be a valid JSON", e) from e


async def run_finalizers(finalizers: Sequence[Finalizer], reply: AssistantMessage) -> str | None:
    """Run finalizers in order; return the first failure's message, or None."""
    for finalizer in finalizers:
        try:
            result = finalizer(reply)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.debug("Finalizer %r rejected the reply: %s", finalizer, e)
            return str(e) or type(e).__name__
    return None
