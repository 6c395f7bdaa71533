# tests/core/test_logging.py
"""Tests for structured logging configuration."""

import json
import logging

import pytest

from seqcheck.core.logging import configure_logging, get_logger


class TestLoggingConfig:
    """Tests for logging configuration."""

    def test_get_logger_returns_logger(self) -> None:
        logger = get_logger("test")

        assert hasattr(logger, "info")
        assert hasattr(logger, "bind")

    def test_json_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(json_output=True)
        get_logger("test").info("test message", key="value")

        captured = capsys.readouterr()
        data = json.loads(captured.err.strip().split("\n")[-1])
        assert data["event"] == "test message"
        assert data["key"] == "value"
        assert data["level"] == "info"
        assert captured.out == ""

    def test_console_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(json_output=False)
        get_logger("test").info("test message", key="value")

        captured = capsys.readouterr()
        assert "test message" in captured.err
        assert "key" in captured.err

    def test_stdlib_records_formatted(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Third-party stdlib loggers go through the same renderer."""
        configure_logging(json_output=True)
        logging.getLogger("some.library").warning("from stdlib")

        data = json.loads(capsys.readouterr().err.strip().split("\n")[-1])
        assert data["event"] == "from stdlib"

    def test_level_filters(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(json_output=True, level="WARNING")
        get_logger("test").info("hidden")

        assert "hidden" not in capsys.readouterr().err

    def test_noisy_loggers_clamped(self) -> None:
        configure_logging(level="DEBUG")

        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
        assert logging.getLogger("psycopg").level == logging.WARNING
