"""Logging utilities for rolecore.

This module provides:
- Logging configuration from RbacConfig
- Safe previews of values (role lists, entities) for log lines
- Structured logging with automatic subject_id propagation
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from .config import LogLevel, RbacConfig

# LogRecord attributes that are not user-supplied extras.
_RESERVED_ATTRS = frozenset(
    {
        "name", "msg", "args", "created", "filename", "funcName",
        "levelname", "levelno", "lineno", "module", "msecs",
        "message", "pathname", "process", "processName", "relativeCreated",
        "thread", "threadName", "taskName", "exc_info", "exc_text", "stack_info",
        "subject_id",
    }
)


def safe_preview(value: Any, limit: int = 240) -> str:
    """Create a single-line, length-bounded preview of a value for logging.

    Args:
        value: The value to preview (any type)
        limit: Maximum length of the preview (default: 240)

    Returns:
        A truncated string representation
    """
    if value is None:
        return ""

    if isinstance(value, str):
        s = value
    elif isinstance(value, (dict, list, tuple)):
        try:
            s = json.dumps(value, default=str, ensure_ascii=False)
        except (TypeError, ValueError):
            s = str(value)
    elif isinstance(value, (set, frozenset)):
        s = str(sorted(str(v) for v in value))
    else:
        s = str(value)

    s = " ".join(s.split())

    if len(s) > limit:
        return s[: limit - 1] + "…"

    return s


class RbacFormatter(logging.Formatter):
    """Formatter that includes subject_id, as JSON or plain text."""

    def __init__(
        self,
        include_subject_id: bool = True,
        json_format: bool = True,
        *args: Any,
        **kwargs: Any,
    ):
        super().__init__(*args, **kwargs)
        self.include_subject_id = include_subject_id
        self.json_format = json_format

    def format(self, record: logging.LogRecord) -> str:
        subject_id = getattr(record, "subject_id", None)

        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if self.include_subject_id and subject_id is not None:
            log_data["subject_id"] = str(subject_id)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and key not in log_data:
                log_data[key] = safe_preview(value)

        if self.json_format:
            return json.dumps(log_data, default=str, ensure_ascii=False)

        parts = [
            f"[{log_data['timestamp']}]",
            f"{log_data['level']}",
            f"{log_data['logger']}",
        ]
        if "subject_id" in log_data:
            parts.append(f"subject_id={log_data['subject_id']}")
        parts.append(f": {log_data['message']}")
        return " ".join(parts)


class SubjectLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that adds subject_id to every record.

    Usage:
        logger = get_subject_logger(__name__, subject_id=user.id)
        logger.info("Role check failed", extra={"requested": "admin"})
    """

    def __init__(self, logger: logging.Logger, subject_id: Optional[int | str] = None):
        super().__init__(logger, {})
        self.subject_id = subject_id

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        subject_id = kwargs.pop("subject_id", self.subject_id)
        extra = kwargs.get("extra", {})
        if subject_id is not None:
            extra["subject_id"] = subject_id
        kwargs["extra"] = extra
        return msg, kwargs


def setup_logging(
    config: Optional[RbacConfig] = None,
    json_format: Optional[bool] = None,
    logger_name: str = "rolecore",
) -> logging.Logger:
    """Configure the ``rolecore`` logger hierarchy.

    Only the package logger is touched; the application's root logger is
    left alone.

    Args:
        config: RbacConfig instance (if None, loads from environment)
        json_format: Override ``config.log_json``
        logger_name: Logger to configure (default: ``"rolecore"``)

    Returns:
        The configured logger.
    """
    if config is None:
        from .config import load_rbac_config_from_env

        config = load_rbac_config_from_env()

    level_map = {
        LogLevel.DEBUG: logging.DEBUG,
        LogLevel.INFO: logging.INFO,
        LogLevel.WARNING: logging.WARNING,
        LogLevel.ERROR: logging.ERROR,
        LogLevel.CRITICAL: logging.CRITICAL,
    }
    log_level = level_map.get(LogLevel(config.log_level), logging.INFO)
    use_json = config.log_json if json_format is None else json_format

    logger = logging.getLogger(logger_name)
    logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(RbacFormatter(include_subject_id=True, json_format=use_json))
    logger.addHandler(console_handler)

    return logger


def get_subject_logger(name: str, subject_id: Optional[int | str] = None) -> SubjectLoggerAdapter:
    """Get a logger adapter bound to a subject.

    Args:
        name: Logger name (typically __name__)
        subject_id: Subject identity included in all records
    """
    return SubjectLoggerAdapter(logging.getLogger(name), subject_id=subject_id)


__all__ = [
    "RbacFormatter",
    "SubjectLoggerAdapter",
    "get_subject_logger",
    "safe_preview",
    "setup_logging",
]
