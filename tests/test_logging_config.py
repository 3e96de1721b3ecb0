"""
Tests for structured JSON logging configuration.

Tests logging_config.py module functionality.
"""

import json
import logging
import sys

import pytest

from src.logging_config import JSONFormatter, setup_logging


def _record(level=logging.INFO, msg="Test message", exc_info=None, **extra):
    record = logging.LogRecord(
        name="test_logger",
        level=level,
        pathname="test.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    record.module = "test_module"
    record.funcName = "test_function"
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def restore_root_logger():
    """Put the root logger back the way the test found it."""
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    yield root_logger
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)


class TestJSONFormatter:
    """Test JSONFormatter class."""

    def test_basic_log_formatting(self):
        """Test that basic log record is formatted as JSON."""
        result = JSONFormatter().format(_record())
        log_data = json.loads(result)

        assert log_data["level"] == "INFO"
        assert log_data["logger"] == "test_logger"
        assert log_data["message"] == "Test message"
        assert log_data["module"] == "test_module"
        assert log_data["function"] == "test_function"
        assert log_data["line"] == 42
        assert log_data["timestamp"].endswith("Z")

    def test_context_fields_included(self):
        """Test that review context attributes are copied into the entry."""
        record = _record(
            operation="post_reply",
            location="accounts/1/locations/2",
            review_id="abc",
            status_code=404,
        )

        log_data = json.loads(JSONFormatter().format(record))

        assert log_data["operation"] == "post_reply"
        assert log_data["location"] == "accounts/1/locations/2"
        assert log_data["review_id"] == "abc"
        assert log_data["status_code"] == 404

    def test_unknown_attributes_not_included(self):
        log_data = json.loads(JSONFormatter().format(_record(access_token="secret")))

        assert "access_token" not in log_data

    def test_log_with_exception(self):
        """Test that exception info is included."""
        try:
            raise ValueError("Test error")
        except ValueError:
            exc_info = sys.exc_info()

        log_data = json.loads(
            JSONFormatter().format(_record(logging.ERROR, "Error occurred", exc_info))
        )

        assert "ValueError" in log_data["exception"]
        assert "Test error" in log_data["exception"]


class TestSetupLogging:
    """Test setup_logging function."""

    def test_setup_logging_default(self, restore_root_logger):
        """Test that setup_logging configures root logger."""
        setup_logging(level="INFO")

        root_logger = logging.getLogger()
        assert root_logger.level == logging.INFO
        assert len(root_logger.handlers) == 1
        handler = root_logger.handlers[0]
        assert isinstance(handler.formatter, JSONFormatter)
        assert handler.stream is sys.stderr

    def test_setup_logging_custom_level(self, restore_root_logger):
        """Test that custom log level is applied, case-insensitively."""
        setup_logging(level="debug")

        assert logging.getLogger().level == logging.DEBUG

    def test_unknown_level_falls_back_to_info(self, restore_root_logger):
        setup_logging(level="chatty")

        assert logging.getLogger().level == logging.INFO

    def test_setup_logging_noisy_libraries_silenced(self, restore_root_logger):
        """Test that noisy libraries have WARNING level."""
        setup_logging(level="INFO")

        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("httpcore").level == logging.WARNING
        assert logging.getLogger("uvicorn.access").level == logging.WARNING

    def test_logging_goes_to_stderr(self, capsys, restore_root_logger):
        """Test that log output is JSON on stderr and stdout stays clean."""
        setup_logging(level="INFO")

        logging.getLogger("test_logger").info(
            "Test JSON output", extra={"operation": "get_reviews"}
        )

        captured = capsys.readouterr()
        assert captured.out == ""
        log_data = json.loads(captured.err.strip().split("\n")[-1])
        assert log_data["message"] == "Test JSON output"
        assert log_data["operation"] == "get_reviews"
