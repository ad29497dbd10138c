"""
Error types for digestlog.

Every library error derives from ``DigestlogError`` and carries a category
plus a small context mapping so callers can branch on the kind of failure
without parsing messages.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Broad classification of library errors."""

    LEVEL = "level"
    CONFIG = "config"
    LIFECYCLE = "lifecycle"


class DigestlogError(Exception):
    """Base error for digestlog.

    Args:
        message: Human-readable description.
        category: Error category (default CONFIG).
        **context: Extra key/value details attached to the error.
    """

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory = ErrorCategory.CONFIG,
        **context: Any,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.category = category
        self.context: dict[str, Any] = dict(context)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": type(self).__name__,
            "message": self.message,
            "category": self.category.value,
            "context": dict(self.context),
        }


class UnknownLevelError(DigestlogError, ValueError):
    """Raised when a severity name or rank is not on the scale."""

    def __init__(self, level: object, valid: list[str]) -> None:
        super().__init__(
            f"Unknown severity level {level!r}; expected one of: {', '.join(valid)}",
            category=ErrorCategory.LEVEL,
            level=level,
        )
        self.level = level


class ConfigurationError(DigestlogError):
    """Raised when a sink, transport or lifecycle is misconfigured."""


__all__ = [
    "ConfigurationError",
    "DigestlogError",
    "ErrorCategory",
    "UnknownLevelError",
]
