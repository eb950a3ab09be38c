"""Outcome of one loop iteration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..types import AssistantMessage

if TYPE_CHECKING:
    from .core import Agent


@dataclass(frozen=True)
class Continue:
    """Issue another model request; ``draft`` is the reply that did not end the run."""

    draft: AssistantMessage


@dataclass(frozen=True)
class HandOff:
    """Transfer the conversation to ``agent``."""

    agent: Agent
    message: str | None = None


@dataclass(frozen=True)
class Done:
    reply: AssistantMessage


StepOutcome = Continue | HandOff | Done
