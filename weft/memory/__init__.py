"""Conversation memory, re-exported from sub-modules."""

from .base import Memory, last_message, last_assistant_message, last_user_message
from .static import StaticMemory
from .forgetful import ForgetfulMemory
from .file import FileMemory

__all__ = [
    "Memory",
    "StaticMemory",
    "ForgetfulMemory",
    "FileMemory",
    "last_message",
    "last_assistant_message",
    "last_user_message",
]
