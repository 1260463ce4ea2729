"""
Structured JSON logging configuration for speakable.

Usage:
    from speakable.logging_config import setup_logging

    setup_logging()          # uses SPEAKABLE_LOG_LEVEL env var (default: WARNING)
    setup_logging("DEBUG")   # explicit level
    setup_logging(debug=True)# force DEBUG (e.g. from SPEAKABLE_DEBUG=true)

Set SPEAKABLE_DEBUG=true to see every rendering fallback (unresolved
mentions, invalid timestamps, unknown node types).

String extras longer than 120 characters are cut short, so a message
preview never spills a whole 4000-character chat message into the log.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any

# LogRecord attributes that are not "extra" fields
_STANDARD_FIELDS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "message",
        "taskName",
    }
)

# Longest string extra written as-is
MAX_FIELD_CHARS = 120


def _truncate(value: Any) -> Any:
    if isinstance(value, str) and len(value) > MAX_FIELD_CHARS:
        return value[:MAX_FIELD_CHARS] + f"... (+{len(value) - MAX_FIELD_CHARS} chars)"
    return value


class JSONFormatter(logging.Formatter):
    """Format log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }

        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)

        if record.stack_info:
            payload["stack"] = self.formatStack(record.stack_info)

        for key, value in record.__dict__.items():
            if key not in _STANDARD_FIELDS and not key.startswith("_"):
                payload[key] = _truncate(value)

        # Keep non-ASCII names (ja placeholders, display names) readable
        return json.dumps(payload, default=str, ensure_ascii=False)


def resolve_level(level: str | None = None, *, debug: bool | None = None) -> int:
    """Work out the effective level.

    Priority:
      1. ``debug=True`` kwarg → force DEBUG level
      2. ``level`` argument (explicit)
      3. ``SPEAKABLE_DEBUG=true`` env var → DEBUG
      4. ``SPEAKABLE_LOG_LEVEL`` env var
      5. Default: WARNING
    """
    if debug is True:
        return logging.DEBUG
    if level is not None:
        return getattr(logging, level.upper(), logging.WARNING)
    if os.environ.get("SPEAKABLE_DEBUG", "").lower() in ("1", "true", "yes"):
        return logging.DEBUG
    env_level = os.environ.get("SPEAKABLE_LOG_LEVEL", "WARNING").upper()
    return getattr(logging, env_level, logging.WARNING)


def setup_logging(
    level: str | None = None,
    *,
    debug: bool | None = None,
) -> None:
    """Configure structured JSON logging for the speakable package.

    Args:
        level: Log level string (DEBUG, INFO, WARNING, ERROR). Case-insensitive.
        debug: If True, force DEBUG level regardless of env vars.
    """
    effective_level = resolve_level(level, debug=debug)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter())

    pkg_logger = logging.getLogger("speakable")
    pkg_logger.setLevel(effective_level)
    # Avoid duplicate handlers if called multiple times
    if not pkg_logger.handlers:
        pkg_logger.addHandler(handler)
    else:
        pkg_logger.handlers[0] = handler

    pkg_logger.debug(
        "Logging initialised",
        extra={"log_level": logging.getLevelName(effective_level)},
    )
