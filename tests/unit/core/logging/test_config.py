"""
Tests for LoggingConfig.
"""

import logging

import pytest

from rest_query_engine.core.logging.config import LogFormat, LoggingConfig, LogLevel


class TestLoggingConfig:
    """Tests for LoggingConfig class."""

    def test_defaults(self):
        """LoggingConfig has sensible defaults."""
        config = LoggingConfig()
        assert config.level == LogLevel.INFO
        assert config.format == LogFormat.TEXT
        assert config.enable_console is True
        assert config.enable_file is False
        assert config.enable_correlation_id is True
        assert config.log_attempts is True
        assert config.extra_fields == {}

    def test_create_from_strings(self):
        """create() accepts plain strings in any case."""
        config = LoggingConfig.create(level="debug", format="JSON", extra_fields={"service": "runner"})
        assert config.level == LogLevel.DEBUG
        assert config.format == LogFormat.JSON
        assert config.extra_fields == {"service": "runner"}

    def test_create_invalid_level(self):
        with pytest.raises(ValueError):
            LoggingConfig.create(level="LOUD")

    def test_create_invalid_format(self):
        with pytest.raises(ValueError):
            LoggingConfig.create(format="xml")

    def test_file_requires_path(self):
        """enable_file without file_path is rejected."""
        with pytest.raises(ValueError, match="file_path"):
            LoggingConfig(enable_file=True)

    def test_invalid_rotation(self):
        with pytest.raises(ValueError):
            LoggingConfig(max_bytes=0)
        with pytest.raises(ValueError):
            LoggingConfig(backup_count=-1)

    def test_frozen(self):
        config = LoggingConfig()
        with pytest.raises(Exception):
            config.level = LogLevel.DEBUG

    def test_level_number(self):
        assert LoggingConfig().level_number == logging.INFO
        assert LoggingConfig.create(level="error").level_number == logging.ERROR

    def test_with_level(self):
        config = LoggingConfig.create(format="json")
        debug = config.with_level("debug")
        assert debug.level == LogLevel.DEBUG
        assert debug.format == LogFormat.JSON
        assert config.level == LogLevel.INFO

    def test_has_output(self, tmp_path):
        assert LoggingConfig().has_output
        assert not LoggingConfig(enable_console=False).has_output
        assert LoggingConfig(enable_console=False, enable_file=True, file_path=str(tmp_path / "a.log")).has_output
