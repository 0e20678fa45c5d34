"""Logging configuration utilities for the admin backend."""

import json
import logging
import re
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional

from horusec_admin.domain.log_fields import ROOT_LOGGER_NAME, FieldLoggerAdapter

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s :: %(message)s %(field_text)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
MAX_BYTES = 10 * 1024 * 1024
BACKUP_COUNT = 5

SENSITIVE_KEY_PATTERN = re.compile(r"(?i)(authorization|token|secret|password|api[_-]?key)")
SENSITIVE_VALUE_PATTERNS = [
    re.compile(r"\b[A-Fa-f0-9]{32,}\b"),
    re.compile(r"\b[A-Za-z0-9+/]{32,}={0,2}\b"),
]


def redact_sensitive(key: str, value: Any) -> Any:
    """Redact field values that carry credentials."""
    if SENSITIVE_KEY_PATTERN.search(key):
        return "[REDACTED]"
    if not isinstance(value, str) or not value:
        return value

    for pattern in SENSITIVE_VALUE_PATTERNS:
        if pattern.search(value):
            return "[REDACTED]"

    return value


class FieldDefaultsFilter(logging.Filter):  # pylint: disable=too-few-public-methods
    """Ensure component and fields attributes exist in log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "component"):
            record.component = record.name
        if not hasattr(record, "fields"):
            record.fields = {}
        record.field_text = " ".join(
            f"{key}={redact_sensitive(key, value)}"
            for key, value in sorted(record.fields.items())
        )
        return True


class JsonFormatter(logging.Formatter):
    """JSON formatter with stable key ordering for structured logging."""

    def __init__(self, datefmt: Optional[str] = None):
        super().__init__(datefmt=datefmt)

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "component": getattr(record, "component", record.name),
            "message": record.getMessage(),
        }

        if hasattr(record, "event"):
            log_data["event"] = record.event

        for key, value in getattr(record, "fields", {}).items():
            if key in log_data:
                key = f"field.{key}"
            log_data[key] = redact_sensitive(key, value)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, sort_keys=True, default=str)


def _resolve_level(level_name: str) -> int:
    """Map a level name to its number, falling back to INFO for unknown names."""
    level = logging.getLevelName(level_name.upper())
    return level if isinstance(level, int) else logging.INFO


def _writes_to_stdout(destination: Optional[str]) -> bool:
    return not destination or destination.lower() == "stdout"


def _build_formatter(use_json: bool) -> logging.Formatter:
    if use_json:
        return JsonFormatter(DATE_FORMAT)
    return logging.Formatter(LOG_FORMAT, DATE_FORMAT)


def _build_handler(
    destination: Optional[str], level: int, use_json: bool = True
) -> logging.Handler:
    """Create the stdout or rotating file handler with field defaults applied."""
    handler: logging.Handler
    if _writes_to_stdout(destination):
        handler = logging.StreamHandler(sys.stdout)
    else:
        log_path = Path(destination)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            log_path, maxBytes=MAX_BYTES, backupCount=BACKUP_COUNT
        )
    handler.setLevel(level)
    handler.setFormatter(_build_formatter(use_json))
    handler.addFilter(FieldDefaultsFilter())
    return handler


def configure_logging(
    level: str = "INFO", destination: Optional[str] = None, use_json: bool = True
) -> FieldLoggerAdapter:
    """Route the ``horusec_admin`` logger tree to a single handler.

    Calling this again replaces the previous handler, closing it first.
    """
    numeric_level = _resolve_level(level)
    root = logging.getLogger(ROOT_LOGGER_NAME)
    while root.handlers:
        stale = root.handlers[0]
        root.removeHandler(stale)
        stale.close()
    root.setLevel(numeric_level)
    root.propagate = False
    root.addHandler(_build_handler(destination, numeric_level, use_json))

    adapter = FieldLoggerAdapter(root)
    adapter.info(
        "Logging configured",
        extra={
            "event": "logging_configured",
            "fields": {
                "destination": "stdout" if _writes_to_stdout(destination) else destination,
                "use_json": use_json,
            },
        },
    )
    return adapter
