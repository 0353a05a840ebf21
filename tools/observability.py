"""Timing and outcome logs for calls to remote collaborators."""

from __future__ import annotations

import logging
import time
from functools import wraps
from typing import Any, Callable, Dict, ParamSpec, TypeVar

from clovet_app.logging_config import ensure_correlation_id, get_logger, log_event

LOGGER = get_logger(__name__)
P = ParamSpec("P")
R = TypeVar("R")
_MAX_LOGGED_ARGS = 6


def _argument_preview(kwargs: Dict[str, Any]) -> Dict[str, Any]:
    preview = dict(list(kwargs.items())[:_MAX_LOGGED_ARGS])
    if len(kwargs) > _MAX_LOGGED_ARGS:
        preview["truncated"] = True
    return preview


def _outcome_fields(result: Any) -> Dict[str, Any]:
    """Summarize a collaborator result without logging its content."""

    if isinstance(result, list):
        return {"result_count": len(result)}
    success = getattr(result, "success", None)
    if isinstance(success, bool):
        return {"success": success}
    return {}


def instrument_call(call_name: str) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Log ``call_started``, then ``call_completed`` or ``call_failed`` with ``duration_ms``.

    Exceptions are logged with their type and any ``status_code`` they carry,
    then re-raised unchanged.
    """

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            correlation_id = ensure_correlation_id()
            start = time.perf_counter()
            log_event(
                LOGGER,
                logging.INFO,
                "call_started",
                call=call_name,
                correlation_id=correlation_id,
                kwargs=_argument_preview(kwargs),
            )
            try:
                result = func(*args, **kwargs)
            except Exception as exc:
                log_event(
                    LOGGER,
                    logging.WARNING,
                    "call_failed",
                    call=call_name,
                    correlation_id=correlation_id,
                    duration_ms=round((time.perf_counter() - start) * 1000, 2),
                    error_type=type(exc).__name__,
                    status_code=getattr(exc, "status_code", None),
                )
                raise
            log_event(
                LOGGER,
                logging.INFO,
                "call_completed",
                call=call_name,
                correlation_id=correlation_id,
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
                **_outcome_fields(result),
            )
            return result

        return wrapper

    return decorator


__all__ = ["instrument_call"]
