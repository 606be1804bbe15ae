# server/logging_config.py
"""
Structured JSON logging for the Scholarship Match backend.

Every log line is one JSON object on stdout with:
- timestamp (UTC, ISO 8601)
- level
- message
- channel (http, store, matching, resume, llm)
- context (request_id plus business ids such as profile_id)
- extra (latency, counts, ...)
"""

import json
import logging
import os
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# Request id of the HTTP request currently being served; set by the
# middleware in app.py and attached to every log entry.
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

CHANNELS = ["http", "store", "matching", "resume", "llm"]


def _log_level() -> int:
    return getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)


class StructuredJsonFormatter(logging.Formatter):
    """Formats a LogRecord as a single JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z",
            "level": record.levelname,
            "message": record.getMessage(),
            "channel": getattr(record, "channel", record.name.split(".")[-1]),
            "context": {
                "request_id": request_id_var.get(""),
                **(getattr(record, "context", {}) or {}),
            },
            "extra": getattr(record, "extra_data", {}) or {},
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str, ensure_ascii=False)


def setup_logging() -> logging.Logger:
    """
    Install the JSON formatter on the root logger and register the
    channel loggers. Safe to call more than once.
    """
    handler = logging.StreamHandler()
    handler.setFormatter(StructuredJsonFormatter())

    root_logger = logging.getLogger()
    root_logger.setLevel(_log_level())
    root_logger.handlers = [handler]

    for channel in CHANNELS:
        logging.getLogger(f"scholarmatch.{channel}").setLevel(_log_level())

    return root_logger


def get_logger(channel: str) -> logging.Logger:
    """Return the logger for one of the CHANNELS."""
    return logging.getLogger(f"scholarmatch.{channel}")


def log_with_context(
    logger: logging.Logger,
    level: str,
    message: str,
    context: Optional[Dict[str, Any]] = None,
    extra_data: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Emit a log entry carrying business context (profile_id, scholarship_id,
    ...) and extra metadata (duration_ms, counts, ...).
    """
    logger.log(
        getattr(logging, level.upper(), logging.INFO),
        message,
        extra={
            "context": context or {},
            "extra_data": extra_data or {},
            "channel": logger.name.split(".")[-1],
        },
    )


def generate_request_id() -> str:
    return str(uuid.uuid4())
