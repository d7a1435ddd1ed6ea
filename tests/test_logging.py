"""Tests for rolecore.logging module."""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Iterator
from unittest.mock import patch

import pytest

from rolecore import LogLevel, RbacConfig, get_subject_logger, safe_preview, setup_logging
from rolecore.logging import RbacFormatter


@pytest.fixture(autouse=True)
def reset_rolecore_logger() -> Iterator[None]:
    """Undo setup_logging() side effects between tests."""
    yield
    logger = logging.getLogger("rolecore")
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


def _record(msg: str = "Test message", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="rolecore.test",
        level=logging.INFO,
        pathname="",
        lineno=0,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestSafePreview:
    """Tests for safe_preview function."""

    def test_none_value(self) -> None:
        assert safe_preview(None) == ""

    def test_string_with_whitespace(self) -> None:
        """Test that whitespace is normalized."""
        assert safe_preview("admin\n\teditor  author") == "admin editor author"

    def test_string_truncation(self) -> None:
        result = safe_preview("a" * 300, limit=100)
        assert len(result) == 100
        assert result.endswith("…")

    def test_list_value(self) -> None:
        assert safe_preview(["admin", 2]) == '["admin", 2]'

    def test_set_sorted(self) -> None:
        """Sets render in a stable order."""
        assert safe_preview({"b", "a"}) == "['a', 'b']"

    def test_other_value(self) -> None:
        assert safe_preview(42) == "42"


class TestRbacFormatter:
    """Tests for RbacFormatter."""

    def test_json_format(self) -> None:
        formatter = RbacFormatter(json_format=True)
        result = formatter.format(_record(subject_id=42, requested="admin"))

        data = json.loads(result)
        assert data["level"] == "INFO"
        assert data["message"] == "Test message"
        assert data["subject_id"] == "42"
        assert data["requested"] == "admin"

    def test_json_without_subject(self) -> None:
        data = json.loads(RbacFormatter(json_format=True).format(_record()))
        assert "subject_id" not in data

    def test_subject_id_excluded(self) -> None:
        formatter = RbacFormatter(include_subject_id=False, json_format=True)
        data = json.loads(formatter.format(_record(subject_id=42)))
        assert "subject_id" not in data

    def test_plain_format(self) -> None:
        result = RbacFormatter(json_format=False).format(_record(subject_id="u-1"))
        assert "INFO" in result
        assert "rolecore.test" in result
        assert "subject_id=u-1" in result
        assert result.endswith(": Test message")


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_setup_with_config(self) -> None:
        logger = setup_logging(config=RbacConfig(log_level=LogLevel.DEBUG), json_format=False)
        assert logger.name == "rolecore"
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1

    def test_root_logger_untouched(self) -> None:
        root = logging.getLogger()
        handlers = list(root.handlers)
        setup_logging(config=RbacConfig())
        assert root.handlers == handlers

    def test_no_duplicate_handlers(self) -> None:
        setup_logging(config=RbacConfig())
        logger = setup_logging(config=RbacConfig())
        assert len(logger.handlers) == 1

    @patch.dict(os.environ, {"LOG_LEVEL": "WARNING", "LOG_JSON": "true"}, clear=True)
    def test_setup_with_env(self) -> None:
        logger = setup_logging()
        assert logger.level == logging.WARNING
        assert logger.handlers[0].formatter.json_format is True  # type: ignore[union-attr]

    def test_json_output(self, capsys: pytest.CaptureFixture) -> None:
        setup_logging(config=RbacConfig(log_json=True))

        logging.getLogger("rolecore.engine").info("Test message")

        data = json.loads(capsys.readouterr().err.strip())
        assert data["level"] == "INFO"
        assert data["message"] == "Test message"
        assert data["logger"] == "rolecore.engine"


class TestSubjectLogger:
    """Tests for the subject logger adapter."""

    def test_logger_with_subject_id(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = get_subject_logger("rolecore.test", subject_id=42)

        with caplog.at_level(logging.INFO, logger="rolecore.test"):
            logger.info("Role check failed", extra={"requested": "admin"})

        record = caplog.records[0]
        assert record.subject_id == 42
        assert record.requested == "admin"

    def test_per_call_override(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = get_subject_logger("rolecore.test", subject_id=42)

        with caplog.at_level(logging.INFO, logger="rolecore.test"):
            logger.info("Other subject", subject_id=7)

        assert caplog.records[0].subject_id == 7

    def test_logger_without_subject(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = get_subject_logger("rolecore.test")

        with caplog.at_level(logging.INFO, logger="rolecore.test"):
            logger.info("Test message")

        assert not hasattr(caplog.records[0], "subject_id")
