"""Hardening utilities shared by the Arbor server and scripts.

Provides resource limits for extraction, user-friendly error formatting,
input validation with path traversal prevention, and a service health
check. Nothing here retries: every failure is reported once to the caller.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from arbor.hierarchy.errors import (
    EmptyInputError,
    HierarchyError,
    RecordError,
    SchemaError,
    StreamConsumedError,
    StreamError,
)

# ---------------------------------------------------------------------------
# 1. Resource Limits
# ---------------------------------------------------------------------------


@dataclass
class ResourceLimits:
    """Thresholds for extraction resource usage.

    Attributes:
        max_upload_mb: Maximum accepted request body in megabytes.
        max_concurrent_operations: Worker threads used by concurrent extraction.
        max_pending_lines: Lines read ahead of the workers before the reader
            waits for a free slot.
    """

    max_upload_mb: int = 50
    max_concurrent_operations: int = 4
    max_pending_lines: int = 1024

    def __post_init__(self) -> None:
        if self.max_upload_mb < 1:
            raise ValueError("max_upload_mb must be at least 1")
        if self.max_concurrent_operations < 1:
            raise ValueError("max_concurrent_operations must be at least 1")
        if self.max_pending_lines < 1:
            raise ValueError("max_pending_lines must be at least 1")

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024


# ---------------------------------------------------------------------------
# 2. Error Formatting
# ---------------------------------------------------------------------------


@dataclass
class UserFriendlyError:
    """A structured error designed for end-user consumption.

    Attributes:
        message: Clear description for the user.
        suggestion: Actionable guidance.
        component: Originating subsystem.
        error_code: Machine-readable identifier (e.g. "CSV_001").
        technical_detail: Debugging info for logs only -- never shown to users.
    """

    message: str
    suggestion: str
    component: str
    error_code: str
    technical_detail: str = ""

    def to_dict(self) -> dict[str, str]:
        """Serialize for API responses (excludes technical_detail).

        Returns:
            Dictionary safe for sending to end users.
        """
        return {
            "message": self.message,
            "suggestion": self.suggestion,
            "component": self.component,
            "error_code": self.error_code,
        }


class ErrorFormatter:
    """Convert internal exceptions to user-friendly messages.

    Returned errors never expose stack traces or internal structure; the
    offending input line, if any, is kept in ``technical_detail`` only.
    """

    def format_hierarchy_error(self, error: Exception) -> UserFriendlyError:
        """Format an error raised while building a hierarchy.

        Args:
            error: The caught exception.

        Returns:
            User-friendly error with actionable suggestion.
        """
        message, suggestion, code_suffix = _classify_error(error)
        detail = f"{type(error).__name__}: {error}"
        if isinstance(error, HierarchyError) and error.details:
            detail = f"{detail} ({error.details})"
        return UserFriendlyError(
            message=message,
            suggestion=suggestion,
            component="arbor",
            error_code=f"CSV_{code_suffix}",
            technical_detail=detail,
        )


def _classify_error(error: Exception) -> tuple[str, str, str]:
    """Map an exception to (message, suggestion, code_suffix).

    Args:
        error: The caught exception.

    Returns:
        Tuple of user message, suggestion text, and error code suffix.
    """
    if isinstance(error, SchemaError):
        return (
            "Invalid csv header",
            "The first line must list item_id, level_1 and optionally level_2 "
            "and level_3, each at most once.",
            "001",
        )
    if isinstance(error, RecordError):
        return (
            "Invalid csv content",
            "Every row needs an item_id, a value for level_1, and no empty "
            "level before a populated one.",
            "002",
        )
    if isinstance(error, EmptyInputError):
        return (
            "Invalid csv content",
            "Provide at least one data row after the header.",
            "003",
        )
    if isinstance(error, StreamError):
        return (
            "The input could not be read.",
            "Check that the upload is complete UTF-8 text and try again.",
            "004",
        )
    if isinstance(error, StreamConsumedError):
        return (
            "The input was already processed.",
            "Submit the data again in a new request.",
            "005",
        )
    if isinstance(error, UnicodeDecodeError):
        return (
            "The input is not valid UTF-8 text.",
            "Save the file with UTF-8 encoding and try again.",
            "006",
        )
    return (
        "An unexpected error occurred.",
        "If this keeps happening, please report the issue.",
        "999",
    )


# ---------------------------------------------------------------------------
# 3. Input Validation
# ---------------------------------------------------------------------------

# Characters that could be used for path traversal
_TRAVERSAL_PATTERN = re.compile(r"(\.\.[\\/]|[\\/]\.\.)")
# Null bytes in paths
_NULL_BYTE = re.compile(r"\x00")

CSV_MEDIA_TYPE = "text/csv"


class ValidationError(Exception):
    """Raised when input validation fails."""


class InputValidator:
    """Validate inputs at system boundaries.

    All methods raise ``ValidationError`` on failure.
    """

    def validate_file_path(
        self,
        path: str | Path,
        *,
        must_exist: bool = True,
        allowed_extensions: tuple[str, ...] | None = None,
    ) -> Path:
        """Validate a file path, preventing traversal attacks.

        Args:
            path: Raw path from user input.
            must_exist: Require the file to exist on disk.
            allowed_extensions: Restrict to these suffixes (e.g. (".csv",)).

        Returns:
            Resolved, validated Path.

        Raises:
            ValidationError: On any validation failure.
        """
        raw = str(path)
        self._check_traversal(raw)
        resolved = Path(raw).resolve()

        if allowed_extensions is not None:
            if resolved.suffix.lower() not in {e.lower() for e in allowed_extensions}:
                allowed = ", ".join(allowed_extensions)
                raise ValidationError(f"File type not allowed. Accepted types: {allowed}")

        if must_exist and not resolved.is_file():
            raise ValidationError("File does not exist.")

        return resolved

    def validate_content_type(self, content_type: str | None) -> str:
        """Check that a request declares a CSV body.

        Media type parameters such as ``charset`` are accepted and ignored.

        Args:
            content_type: Raw ``Content-Type`` header value.

        Returns:
            The bare media type.

        Raises:
            ValidationError: When the media type is missing or not text/csv.
        """
        media_type = (content_type or "").split(";", 1)[0].strip().lower()
        if media_type != CSV_MEDIA_TYPE:
            raise ValidationError(f"Unsupported content type: {media_type or 'none'}")
        return media_type

    # ------------------------------------------------------------------

    @staticmethod
    def _check_traversal(raw: str) -> None:
        """Reject paths with traversal sequences or null bytes.

        Args:
            raw: Raw path string.

        Raises:
            ValidationError: On dangerous patterns.
        """
        if _NULL_BYTE.search(raw):
            raise ValidationError("Path contains null bytes.")
        if _TRAVERSAL_PATTERN.search(raw):
            raise ValidationError("Path traversal is not allowed.")


# ---------------------------------------------------------------------------
# 4. Health Checks
# ---------------------------------------------------------------------------


@dataclass
class HealthCheck:
    """Result of a component health check.

    Attributes:
        component: Subsystem name.
        status: One of "healthy", "degraded", "unavailable".
        message: Human-readable description.
        checked_at: UTC timestamp of the check.
    """

    component: str
    status: str
    message: str
    checked_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        """Serialize for API responses."""
        return {
            "component": self.component,
            "status": self.status,
            "message": self.message,
            "checked_at": self.checked_at.isoformat(),
        }


def check_extraction(limits: ResourceLimits | None) -> HealthCheck:
    """Report whether the extraction service has been configured.

    Args:
        limits: Active limits, or None if the service was never configured.

    Returns:
        HealthCheck for the arbor component.
    """
    if limits is None:
        return HealthCheck(
            component="arbor",
            status="unavailable",
            message="arbor is not configured.",
        )
    return HealthCheck(
        component="arbor",
        status="healthy",
        message=(
            f"arbor is operational with {limits.max_concurrent_operations} "
            "extraction workers."
        ),
    )
