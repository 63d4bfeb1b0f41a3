"""
Structured Logging: JSON Output for Production

Configures Python logging to emit structured JSON logs.
Each log entry includes timestamp, level, module, and
any additional context fields.

Usage:
    from draftcheck.logging import get_logger
    logger = get_logger("coordinator")
    logger.info("Slow tier degraded", extra={"tier": "SLOW", "status_code": 503})
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone


LOG_LEVEL = os.getenv("DRAFTCHECK_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = os.getenv("DRAFTCHECK_LOG_FORMAT", "json")  # "json" or "text"

EXTRA_FIELDS = (
    "tier", "sensitivity", "status_code", "duration_ms", "retry_after",
    "error_type", "content_length", "cache_key", "attempt", "endpoint",
)


class JSONFormatter(logging.Formatter):
    """Formats log records as JSON lines."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key in EXTRA_FIELDS:
            val = getattr(record, key, None)
            if val is not None:
                entry[key] = val

        if record.exc_info and record.exc_info[0]:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable format for development."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s [%(levelname)-8s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


def setup_logging(fmt: str = LOG_FORMAT, level: str = LOG_LEVEL) -> logging.Logger:
    """Configure the draftcheck logger. Call once at startup."""
    root = logging.getLogger("draftcheck")
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(TextFormatter())

    root.addHandler(handler)

    # Suppress noisy third-party loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    return root


def get_logger(name: str) -> logging.Logger:
    """Get a named logger under the draftcheck namespace."""
    return logging.getLogger(f"draftcheck.{name}")
