"""
Logging for the NourishNote service.

Everything logs through the "nourishnote" logger. Records are stamped with the
request id and the journal owner (X-User-Id) of the request being served, so a
quota rejection or a failed extraction can be traced back to one user and one
call. Production emits one JSON object per line; elsewhere lines are plain.
"""

import json
import logging
import os
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Optional

request_id_ctx_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
user_id_ctx_var: ContextVar[Optional[str]] = ContextVar("user_id", default=None)

# Structured attributes copied from a record into the output when present
LOG_FIELDS = ("event", "user_id", "entry_id", "thread_id", "error_code", "status", "path", "latency_bucket")

LATENCY_BUCKETS = ((10, "<10ms"), (100, "10-100ms"), (500, "100-500ms"), (1000, "500-1000ms"))

MAX_FIELD_CHARS = 300


def get_request_id(default: Optional[str] = None) -> Optional[str]:
    return request_id_ctx_var.get() or default


def latency_bucket_ms(latency_ms: Optional[float]) -> str:
    if latency_ms is None:
        return "unknown"
    for upper, label in LATENCY_BUCKETS:
        if latency_ms < upper:
            return label
    return ">=1000ms"


class LogContextFilter(logging.Filter):
    """Fill request_id and user_id from the current request when not given."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request_id", None) is None:
            record.request_id = request_id_ctx_var.get()
        if getattr(record, "user_id", None) is None:
            record.user_id = user_id_ctx_var.get()
        return True


def _fields(record: logging.LogRecord) -> dict:
    return {key: getattr(record, key) for key in LOG_FIELDS if getattr(record, key, None) is not None}


def _timestamp(record: logging.LogRecord) -> str:
    return datetime.fromtimestamp(record.created, timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": _timestamp(record),
            "level": record.levelname,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
            **_fields(record),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class PrettyFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        rid = getattr(record, "request_id", None)
        pairs = " ".join(f"{k}={v}" for k, v in _fields(record).items() if k != "event")
        line = f"{_timestamp(record)} {record.levelname:<7} [nourishnote]"
        if rid:
            line += f" [rid={rid}]"
        line += f" {record.getMessage()}"
        if pairs:
            line += f" ({pairs})"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def configure_logging(env: str = "development") -> None:
    logger = logging.getLogger("nourishnote")
    logger.setLevel(logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter() if env.lower() == "production" else PrettyFormatter())
    handler.addFilter(LogContextFilter())

    logger.handlers = [handler]
    logger.propagate = True


def _clip(value) -> str:
    text = str(value)
    if len(text) <= MAX_FIELD_CHARS:
        return text
    return text[:MAX_FIELD_CHARS] + "...<truncated>"


def log_event(event: str, *, level: str = "info", user_id: Optional[str] = None, **fields) -> None:
    """Log a named domain event (``entry.created``, ``quota.rejected``...).

    Extra keyword fields become record attributes; long values are clipped.
    """
    logger = logging.getLogger("nourishnote")
    if not logger.handlers:
        configure_logging(os.getenv("ENV", "development"))

    extra = {key: _clip(value) for key, value in fields.items()}
    extra["event"] = event
    extra["user_id"] = user_id or user_id_ctx_var.get()
    extra["request_id"] = request_id_ctx_var.get()
    getattr(logger, level, logger.info)(event, extra=extra)
