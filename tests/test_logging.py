"""
Tests for logging configuration.
"""
import logging
from unittest.mock import patch

import pytest

from retention_planner.common import logging as planner_logging


@pytest.fixture
def unconfigured(monkeypatch):
    """Reset the configured flag for the duration of a test."""
    monkeypatch.setattr(planner_logging, "_LOGGING_CONFIGURED", False)


class TestResolveLogLevel:
    """Test log level resolution."""

    def test_explicit_level(self):
        """Test an explicit level name in any case."""
        assert planner_logging.resolve_log_level("debug") == logging.DEBUG
        assert planner_logging.resolve_log_level("ERROR") == logging.ERROR

    def test_environment_level(self, monkeypatch):
        """Test the level is read from the environment."""
        monkeypatch.setenv(planner_logging.LOG_LEVEL_ENV_VAR, "info")
        assert planner_logging.resolve_log_level() == logging.INFO

    def test_default_level(self, monkeypatch):
        """Test the default level without configuration."""
        monkeypatch.delenv(planner_logging.LOG_LEVEL_ENV_VAR, raising=False)
        assert planner_logging.resolve_log_level() == logging.WARNING

    def test_unknown_level_falls_back_to_info(self):
        """Test unknown names fall back to INFO."""
        assert planner_logging.resolve_log_level("chatty") == logging.INFO
        assert planner_logging.resolve_log_level("basic_format") == logging.INFO


class TestConfigureLogging:
    """Test process-wide logging setup."""

    def test_configures_once(self, unconfigured):
        """Test repeated calls configure logging only once."""
        with patch.object(planner_logging.logging, "basicConfig") as mock_basic:
            planner_logging.configure_logging("DEBUG")
            planner_logging.configure_logging("ERROR")

        mock_basic.assert_called_once_with(level=logging.DEBUG, format=planner_logging.LOG_FORMAT)
