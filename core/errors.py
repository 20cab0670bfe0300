"""Exception types raised by TaskDesk services."""
from __future__ import annotations

from typing import Optional


class TaskDeskError(Exception):
    """Base class for application errors."""


class ValidationError(TaskDeskError, ValueError):
    """User input rejected by a field rule."""

    def __init__(self, message: str, *, field: Optional[str] = None):
        super().__init__(message)
        self.field = field
        self.message = message


class DecodeError(TaskDeskError, ValueError):
    """An import document is malformed as a whole."""


__all__ = ["TaskDeskError", "ValidationError", "DecodeError"]
