"""JSON logging, PII scrubbing and correlation ids for the Clovet services."""

from __future__ import annotations

import contextlib
import contextvars
import dataclasses
import json
import logging
import os
import re
import time
import uuid
from typing import Any, Dict, Iterator, Mapping

SERVICE_NAME = "clovet"
CORRELATION_ID: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "clovet_correlation_id", default=None
)

# Attributes every LogRecord carries; anything else on a record came from ``extra=``.
_RECORD_ATTRIBUTES = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__
) | {"message", "asctime", "taskName"}

# Shopper identity, uploaded photos and seller details never reach the logs.
SENSITIVE_KEYS = frozenset(
    {
        "user_id",
        "email",
        "password",
        "full_name",
        "display_name",
        "image_url",
        "url",
        "seller",
        "description",
    }
)
REDACTED = "[redacted]"
_EMAIL_PATTERN = re.compile(r"[\w.+\-]+@[\w\-]+(?:\.[\w\-]+)+")
_URL_PATTERN = re.compile(r"(?:https?|data):\S+", re.IGNORECASE)
_NOISY_LOGGERS = ("urllib3", "httpx", "httpcore")


def scrub_text(value: str) -> str:
    """Mask emails and links embedded anywhere in ``value``."""

    value = _EMAIL_PATTERN.sub("[redacted-email]", value)
    return _URL_PATTERN.sub("[redacted-url]", value)


def redact_for_log(payload: Any) -> Any:
    """Return a JSON-friendly copy of ``payload`` with sensitive values masked."""

    if payload is None or isinstance(payload, (bool, int, float)):
        return payload
    if isinstance(payload, str):
        return scrub_text(payload)
    if isinstance(payload, (bytes, bytearray)):
        return f"<{len(payload)} bytes>"
    if dataclasses.is_dataclass(payload) and not isinstance(payload, type):
        return redact_for_log(dataclasses.asdict(payload))
    if isinstance(payload, Mapping):
        return {
            str(key): REDACTED if key in SENSITIVE_KEYS else redact_for_log(value)
            for key, value in payload.items()
        }
    if isinstance(payload, (list, tuple, set, frozenset)):
        return [redact_for_log(item) for item in payload]
    return scrub_text(str(payload))


class JsonFormatter(logging.Formatter):
    """One JSON object per record, carrying the correlation id and scrubbed extras."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        message = record.getMessage()
        payload: Dict[str, Any] = {
            "timestamp": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S%z"),
            "level": record.levelname,
            "service": SERVICE_NAME,
            "environment": os.getenv("APP_ENV") or "local",
            "logger": record.name,
            "message": scrub_text(message),
            "event": getattr(record, "event", message),
            "correlation_id": getattr(record, "correlation_id", None) or CORRELATION_ID.get(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        extras = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRIBUTES and key not in payload
        }
        payload.update(redact_for_log(extras))
        return json.dumps(payload, default=str)


def configure_logging(level: int | str | None = None) -> None:
    """Route root logging through :class:`JsonFormatter` at ``LOG_LEVEL`` (default INFO)."""

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level or os.getenv("LOG_LEVEL", "INFO").upper())
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    if not logging.getLogger().handlers:
        configure_logging()
    return logging.getLogger(name)


def ensure_correlation_id(correlation_id: str | None = None) -> str:
    """Adopt ``correlation_id``, else keep the current one, else mint a new one."""

    if correlation_id:
        CORRELATION_ID.set(correlation_id)
        return correlation_id
    current = CORRELATION_ID.get()
    if current:
        return current
    minted = uuid.uuid4().hex
    CORRELATION_ID.set(minted)
    return minted


@contextlib.contextmanager
def correlation_context(correlation_id: str | None = None) -> Iterator[str]:
    """Temporarily bind a correlation id, restoring the previous one on exit."""

    token = CORRELATION_ID.set(correlation_id or CORRELATION_ID.get() or uuid.uuid4().hex)
    try:
        yield CORRELATION_ID.get()
    finally:
        CORRELATION_ID.reset(token)


def log_event(logger: logging.Logger, level: int, event: str, **fields: Any) -> None:
    """Log ``event`` with scrubbed structured fields and the active correlation id."""

    correlation_id = ensure_correlation_id(fields.pop("correlation_id", None))
    exc_info = fields.pop("exc_info", None)
    logger.log(
        level,
        event,
        exc_info=exc_info,
        extra={"event": event, "correlation_id": correlation_id, **redact_for_log(fields)},
    )


@contextlib.contextmanager
def operation_context(name: str, **attributes: Any) -> Iterator[str]:
    """Bind a correlation id for an application operation and log its duration.

    A failure is logged as ``operation_failed`` and re-raised.
    """

    logger = logging.getLogger(__name__)
    started = time.perf_counter()
    with correlation_context(attributes.pop("correlation_id", None)) as correlation_id:
        try:
            yield correlation_id
        except Exception as exc:
            log_event(
                logger,
                logging.WARNING,
                "operation_failed",
                operation=name,
                error_type=type(exc).__name__,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
                **attributes,
            )
            raise
        log_event(
            logger,
            logging.DEBUG,
            "operation_completed",
            operation=name,
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
            **attributes,
        )


__all__ = [
    "CORRELATION_ID",
    "JsonFormatter",
    "SENSITIVE_KEYS",
    "configure_logging",
    "correlation_context",
    "ensure_correlation_id",
    "get_logger",
    "log_event",
    "operation_context",
    "redact_for_log",
    "scrub_text",
]
