"""Structured logging for the benchmark service.

Two output shapes share one set of fields (timestamp, level, logger,
message, request ID and any `extra=` passed by the caller such as mode,
rows and elapsed_ms):

- JsonFormatter: one JSON object per line, for anything outside dev
- ConsoleFormatter: a pipe separated line with extras as key=value

Usage:
    from workmem.observability.logging import configure_logging

    configure_logging(json_format=False, level="DEBUG")
"""

from __future__ import annotations

import contextvars
import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="")

# Attributes every LogRecord has; anything else came from extra=
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message",
    "asctime",
    "taskName",
}

# Loggers that are noisy at INFO under load
QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "httpx", "httpcore")


def record_extras(record: logging.LogRecord) -> dict[str, Any]:
    """Fields passed through `extra=`, in insertion order."""
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _RECORD_ATTRS and not key.startswith("_")
    }


def _jsonable(value: Any) -> Any:
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return str(value)
    return value


class JsonFormatter(logging.Formatter):
    """One JSON object per record.

    {"timestamp": "2026-01-10T12:34:56.789000+00:00", "level": "INFO",
     "logger": "workmem.persistence.executor",
     "message": "Successfully executed query with work_mem=64kB",
     "request_id": "abc-123", "mode": "degraded", "rows": 2000, "elapsed_ms": 41.7}
    """

    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        request_id = request_id_var.get()
        if request_id:
            data["request_id"] = request_id
        data.update({key: _jsonable(value) for key, value in record_extras(record).items()})

        if record.exc_info:
            exc_type, exc, _ = record.exc_info
            data["exception"] = {
                "type": exc_type.__name__ if exc_type else None,
                "message": str(exc) if exc else None,
                "traceback": self.formatException(record.exc_info),
            }
        return json.dumps(data, default=str, ensure_ascii=False)


class ConsoleFormatter(logging.Formatter):
    """Human-readable formatter for development.

    2026-01-10 12:34:56 | INFO     | workmem.persistence.executor | Successfully
    executed query with work_mem=64kB | mode=degraded rows=2000 | req=abc-1234
    """

    LEVEL_COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__()
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        level = f"{record.levelname:8}"
        if self.use_colors:
            level = f"{self.LEVEL_COLORS.get(record.levelname, '')}{level}{self.RESET}"

        timestamp = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")
        parts = [timestamp, level, record.name, record.getMessage()]

        extras = record_extras(record)
        if extras:
            parts.append(" ".join(f"{key}={value}" for key, value in extras.items()))

        request_id = request_id_var.get()
        if request_id:
            parts.append(f"req={request_id[:8]}")

        line = " | ".join(parts)
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def configure_logging(
    json_format: bool = True,
    level: str = "INFO",
    use_colors: bool = True,
) -> None:
    """Install a single stderr handler on the root logger.

    Args:
        json_format: JsonFormatter when true, ConsoleFormatter otherwise
        level: Root log level name, case-insensitive
        use_colors: ANSI colors in console output (only on a TTY)
    """
    formatter: logging.Formatter = (
        JsonFormatter() if json_format else ConsoleFormatter(use_colors=use_colors)
    )
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level.upper())

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
