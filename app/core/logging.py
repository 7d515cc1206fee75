"""Reelpulse — Structured JSON Logging.

One JSON object per line on stdout. Request-scoped context (endpoint,
time window, record count, store latency) is passed through `extra=`.
"""

import logging
import json
import sys
from datetime import datetime, timezone
from app.config import settings

CONTEXT_FIELDS = ("endpoint", "time_window", "record_count", "duration_ms", "status_code")

# Per-request chatter from the server and the store client
NOISY_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "sqlalchemy.engine")


class JSONFormatter(logging.Formatter):
    """Renders a log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(
            {key: getattr(record, key) for key in CONTEXT_FIELDS if hasattr(record, key)}
        )
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def _level() -> int:
    return getattr(logging, settings.log_level.upper(), logging.INFO)


def get_logger(name: str) -> logging.Logger:
    """`reelpulse.<name>` logger writing JSON to stdout."""
    logger = logging.getLogger(f"reelpulse.{name}")
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JSONFormatter())
        logger.addHandler(handler)
    logger.setLevel(_level())
    return logger


def quiet_noisy_loggers() -> None:
    """Raise third-party loggers to WARNING unless running at DEBUG."""
    if _level() <= logging.DEBUG:
        return
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
