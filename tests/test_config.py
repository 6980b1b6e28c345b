"""Tests for ArborSettings."""

from __future__ import annotations

import logging

import pytest

from arbor.config import ArborSettings
from arbor.hierarchy.extraction import ExtractionStrategy
from shared.hardening import ResourceLimits


class TestArborSettings:
    """Defaults, validation and environment overrides."""

    def test_defaults(self):
        settings = ArborSettings()
        assert settings.default_strategy is ExtractionStrategy.SEQUENTIAL
        assert settings.log_level == "INFO"
        assert settings.logging_level == logging.INFO
        assert settings.limits == ResourceLimits()

    def test_strategy_string_is_coerced(self):
        settings = ArborSettings(default_strategy="concurrent")
        assert settings.default_strategy is ExtractionStrategy.CONCURRENT

    def test_log_level_is_normalized(self):
        assert ArborSettings(log_level="debug").logging_level == logging.DEBUG

    def test_unknown_log_level(self):
        with pytest.raises(ValueError, match="log level"):
            ArborSettings(log_level="chatty")

    def test_from_env_empty(self):
        assert ArborSettings.from_env({}) == ArborSettings()

    def test_from_env_overrides(self):
        settings = ArborSettings.from_env(
            {
                "ARBOR_MAX_WORKERS": "8",
                "ARBOR_MAX_PENDING_LINES": "32",
                "ARBOR_MAX_UPLOAD_MB": "5",
                "ARBOR_STRATEGY": "concurrent",
                "ARBOR_LOG_LEVEL": "warning",
            }
        )
        assert settings.limits.max_concurrent_operations == 8
        assert settings.limits.max_pending_lines == 32
        assert settings.limits.max_upload_bytes == 5 * 1024 * 1024
        assert settings.default_strategy is ExtractionStrategy.CONCURRENT
        assert settings.log_level == "WARNING"

    def test_blank_values_use_defaults(self):
        settings = ArborSettings.from_env({"ARBOR_MAX_WORKERS": "  "})
        assert settings.limits.max_concurrent_operations == 4

    @pytest.mark.parametrize(
        "env",
        [
            {"ARBOR_MAX_WORKERS": "many"},
            {"ARBOR_MAX_WORKERS": "0"},
            {"ARBOR_MAX_UPLOAD_MB": "-1"},
            {"ARBOR_STRATEGY": "parallel"},
        ],
    )
    def test_invalid_env(self, env):
        with pytest.raises(ValueError):
            ArborSettings.from_env(env)

    def test_reads_os_environ(self, monkeypatch):
        monkeypatch.setenv("ARBOR_MAX_WORKERS", "2")
        assert ArborSettings.from_env().limits.max_concurrent_operations == 2
