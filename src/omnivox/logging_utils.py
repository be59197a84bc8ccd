"""
Structured logging helpers for omnivox.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any

SECRET_MARKERS = ("api_key", "token", "secret")


class LogFormat(str, Enum):
    HUMAN = "human"
    JSON = "json"


def redact(key: str, value: Any) -> Any:
    if not isinstance(value, str):
        return value
    lowered = key.lower()
    if any(marker in lowered for marker in SECRET_MARKERS) or lowered.endswith("key"):
        if len(value) <= 4:
            return "****"
        return f"****{value[-4:]}"
    return value


class EventLogger:
    """Emits provider and pipeline events in human or JSON format."""

    def __init__(self, logger: logging.Logger, log_format: LogFormat | None = None) -> None:
        self.logger = logger
        self.log_format = log_format

    def log(self, event_type: str, *, level: str = "info", **fields: Any) -> None:
        timestamp = datetime.now(timezone.utc).isoformat()
        redacted = {key: redact(key, value) for key, value in fields.items()}
        log_method = getattr(self.logger, level, self.logger.info)

        if (self.log_format or _default_format) == LogFormat.JSON:
            payload = {
                "timestamp": timestamp,
                "event": event_type,
                "fields": redacted,
            }
            log_method(json.dumps(payload, separators=(",", ":"), default=str))
            return

        field_blob = " ".join(f"{key}={redacted[key]}" for key in sorted(redacted))
        message = f"[{event_type}] {timestamp}"
        if field_blob:
            message = f"{message} | {field_blob}"
        log_method(message)


_default_format = LogFormat.HUMAN


def set_default_format(fmt: str | LogFormat) -> None:
    """Switch the format used by loggers obtained through ``get_event_logger``."""
    global _default_format
    try:
        _default_format = LogFormat(fmt)
    except ValueError:
        _default_format = LogFormat.HUMAN


def get_event_logger(name: str) -> EventLogger:
    return EventLogger(logging.getLogger(name))


def create_event_logger(logger: logging.Logger, fmt: str | LogFormat) -> EventLogger:
    try:
        log_format = LogFormat(fmt)
    except ValueError:
        log_format = LogFormat.HUMAN
    return EventLogger(logger, log_format)
