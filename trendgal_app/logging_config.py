"""JSON logging for the TrendGal pipeline.

Every line carries the request correlation id and, when one is active, the
pipeline operation (``app:analyze_image``, ``app:recommend_products``) so a
single recommendation request can be followed across Vision, Gemini and
Yahoo Shopping calls.
"""

from __future__ import annotations

import contextlib
import contextvars
import json
import logging
import os
import re
import uuid
from typing import Any, Dict, Iterator, Optional

SERVICE_NAME = "trendgal"

CORRELATION_ID: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("correlation_id", default=None)
OPERATION: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("operation", default=None)

# Attributes every LogRecord has; anything else on a record came from ``extra``.
_RECORD_ATTRIBUTES = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "taskName"}

SECRET_FIELDS = frozenset(
    {
        "appid",
        "api_key",
        "gemini_api_key",
        "google_api_key",
        "yahoo_client_id",
        "image_base64",
        "imageBase64",
        "image_bytes",
        "prompt",
    }
)

_QUERY_SECRET = re.compile(r"(appid|key)=[^&\s]+", re.IGNORECASE)
_DATA_URL = re.compile(r"^data:image/[\w.+-]+;base64,", re.IGNORECASE)


class JsonFormatter(logging.Formatter):
    """One JSON object per line, request metadata first."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        message = super().format(record)
        payload: Dict[str, Any] = {
            "timestamp": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S%z"),
            "level": record.levelname,
            "service": SERVICE_NAME,
            "logger": record.name,
            "event": getattr(record, "event", record.getMessage()),
            "correlation_id": getattr(record, "correlation_id", None) or CORRELATION_ID.get(),
            "operation": getattr(record, "operation", None) or OPERATION.get(),
            "message": message,
        }
        payload.update(
            (key, redact_for_log(value))
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRIBUTES and key not in payload
        )
        return json.dumps(payload, ensure_ascii=False)


def configure_logging(level: int | str | None = None) -> None:
    """Install the JSON handler on the root logger (``LOG_LEVEL`` by default)."""

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    logging.basicConfig(level=level or os.getenv("LOG_LEVEL", "INFO"), handlers=[handler], force=True)


def _redact_string(value: str) -> str:
    if _DATA_URL.match(value):
        return f"[image data url, {len(value)} chars]"
    return _QUERY_SECRET.sub(lambda match: f"{match.group(1)}=[redacted]", value)


def redact_for_log(payload: Any) -> Any:
    """Mask credentials, query-string secrets and raw image payloads."""

    if payload is None or isinstance(payload, (bool, int, float)):
        return payload
    if isinstance(payload, str):
        return _redact_string(payload)
    if isinstance(payload, (bytes, bytearray)):
        return f"[{len(payload)} bytes]"
    if isinstance(payload, dict):
        return {
            key: "[redacted]" if key in SECRET_FIELDS else redact_for_log(value)
            for key, value in payload.items()
        }
    if isinstance(payload, (list, tuple, set)):
        return [redact_for_log(item) for item in payload]
    return str(payload)


def get_logger(name: str) -> logging.Logger:
    if not logging.getLogger().handlers:
        configure_logging()
    return logging.getLogger(name)


def ensure_correlation_id(correlation_id: str | None = None) -> str:
    """Return the active correlation id, assigning ``correlation_id`` or a new one."""

    if correlation_id:
        CORRELATION_ID.set(correlation_id)
        return correlation_id
    current = CORRELATION_ID.get()
    if current:
        return current
    generated = uuid.uuid4().hex
    CORRELATION_ID.set(generated)
    return generated


@contextlib.contextmanager
def correlation_context(correlation_id: str | None = None) -> Iterator[str]:
    token = CORRELATION_ID.set(correlation_id or ensure_correlation_id())
    try:
        yield CORRELATION_ID.get()
    finally:
        CORRELATION_ID.reset(token)


def log_event(logger: logging.Logger, level: int, event: str, **fields: Any) -> None:
    """Log ``event`` with ``fields`` attached as redacted JSON attributes."""

    correlation_id = ensure_correlation_id(fields.pop("correlation_id", None))
    exc_info = fields.pop("exc_info", None)
    logger.log(
        level,
        event,
        exc_info=exc_info,
        extra={"event": event, "correlation_id": correlation_id, **redact_for_log(fields)},
    )


@contextlib.contextmanager
def operation_context(name: str, correlation_id: str | None = None) -> Iterator[str]:
    """Tag every log line inside the block with ``name`` and one correlation id."""

    operation_token = OPERATION.set(name)
    try:
        with correlation_context(ensure_correlation_id(correlation_id)) as scoped_id:
            yield scoped_id
    finally:
        OPERATION.reset(operation_token)


__all__ = [
    "JsonFormatter",
    "configure_logging",
    "correlation_context",
    "ensure_correlation_id",
    "get_logger",
    "log_event",
    "operation_context",
    "redact_for_log",
]
