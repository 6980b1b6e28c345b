"""
Exceptions raised by the hierarchy pipeline.

Every public operation either returns a value or raises one of these, so
callers (the HTTP router, the CLI) can map failures to responses without
looking at internal state.
"""

from __future__ import annotations

from typing import Any


class HierarchyError(Exception):
    """Base exception for hierarchy errors."""

    def __init__(self, message: str, details: str | None = None):
        self.message = message
        self.details = details
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.message,
            "type": type(self).__name__,
            "details": self.details,
        }


class SchemaError(HierarchyError):
    """The header row is missing, malformed, or names illegal columns."""


class RecordError(HierarchyError):
    """A data row violates the schema or the contiguity rule."""

    def __init__(
        self,
        message: str,
        line: str | None = None,
        details: str | None = None,
        line_number: int | None = None,
    ):
        self.line = line
        self.line_number = line_number
        super().__init__(message, details=details)

    def __str__(self) -> str:
        if self.line is None:
            return self.message
        where = f" on line {self.line_number}" if self.line_number else ""
        return f"{self.message}{where}: {self.line.rstrip()!r}"

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["line"] = self.line
        result["line_number"] = self.line_number
        return result


class StreamError(HierarchyError):
    """The underlying row source failed for a reason other than end of input."""


class StreamConsumedError(HierarchyError):
    """An extraction was requested from a source that has already been read."""


class EmptyInputError(HierarchyError):
    """Tree construction was given zero records."""
