"""
Pytest Configuration and Fixtures
"""

from __future__ import annotations

import pytest

from weft.memory import StaticMemory
from weft.settings import get_settings
from weft.tracing import MemoryTracer
from weft.types import UserMessage


@pytest.fixture(autouse=True)
def fresh_settings():
    """Settings are cached per process; reset around each test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def memory() -> StaticMemory:
    """Returns an empty in-process memory."""
    return StaticMemory()


@pytest.fixture
def question() -> StaticMemory:
    """Returns a memory holding a single user question."""
    return StaticMemory([UserMessage("2+2?")])


@pytest.fixture
def tracer() -> MemoryTracer:
    return MemoryTracer()
