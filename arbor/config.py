"""Runtime settings for the Arbor server and scripts.

Settings are plain dataclasses. ``ArborSettings.from_env`` reads overrides
from ``ARBOR_*`` environment variables so the server can be tuned without
code changes.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from arbor.hierarchy.extraction import ExtractionStrategy
from shared.hardening import ResourceLimits

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ArborSettings:
    """Service configuration.

    Attributes:
        limits: Upload size and worker pool limits.
        default_strategy: Strategy used when a caller does not pick one.
        log_level: Root logging level name.
    """

    limits: ResourceLimits = field(default_factory=ResourceLimits)
    default_strategy: ExtractionStrategy = ExtractionStrategy.SEQUENTIAL
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        self.default_strategy = ExtractionStrategy(self.default_strategy)
        self.log_level = self.log_level.upper()
        if self.log_level not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.log_level}")

    @property
    def logging_level(self) -> int:
        return logging.getLevelName(self.log_level)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ArborSettings:
        """Build settings from ``ARBOR_*`` environment variables.

        Args:
            environ: Mapping to read instead of ``os.environ`` (for tests).

        Returns:
            Settings with defaults for any unset variable.

        Raises:
            ValueError: If a variable holds an invalid value.
        """
        env = os.environ if environ is None else environ
        defaults = ResourceLimits()
        limits = ResourceLimits(
            max_upload_mb=_int_setting(env, "ARBOR_MAX_UPLOAD_MB", defaults.max_upload_mb),
            max_concurrent_operations=_int_setting(
                env, "ARBOR_MAX_WORKERS", defaults.max_concurrent_operations
            ),
            max_pending_lines=_int_setting(
                env, "ARBOR_MAX_PENDING_LINES", defaults.max_pending_lines
            ),
        )
        return cls(
            limits=limits,
            default_strategy=env.get("ARBOR_STRATEGY", ExtractionStrategy.SEQUENTIAL.value),
            log_level=env.get("ARBOR_LOG_LEVEL", "INFO"),
        )


def _int_setting(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
