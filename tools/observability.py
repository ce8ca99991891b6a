"""Structured call logging for the external collaborators (Vision, Gemini, Yahoo)."""

from __future__ import annotations

import logging
import time
from functools import wraps
from typing import Any, Callable, Optional, ParamSpec, TypeVar

from pydantic import BaseModel, ValidationError

from trendgal_app.logging_config import get_logger, log_event

LOGGER = get_logger(__name__)
P = ParamSpec("P")
R = TypeVar("R")


def _call_arguments(kwargs: dict) -> dict:
    return {key: value for key, value in kwargs.items() if value is not None}


def _result_size(result: Any) -> Optional[int]:
    if isinstance(result, (list, tuple)):
        return len(result)
    if isinstance(result, str):
        return len(result)
    return None


def instrument_tool(
    tool_name: str,
    input_model: type[BaseModel] | None = None,
    service: str | None = None,
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Log start, outcome and latency of a collaborator call.

    When ``input_model`` is given the keyword arguments are validated and
    normalised through it before the call; positional arguments (``self``
    included) are passed through untouched. ``service`` names the remote API
    behind the call so failures can be grouped per upstream.
    """

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            fields = {"tool": tool_name, "service": service}
            if input_model is not None:
                try:
                    kwargs = input_model.model_validate(kwargs).model_dump()
                except ValidationError as exc:
                    log_event(
                        LOGGER,
                        logging.WARNING,
                        "tool_validation_failed",
                        errors=exc.errors(include_url=False, include_context=False),
                        **fields,
                    )
                    raise

            log_event(LOGGER, logging.INFO, "tool_call_started", arguments=_call_arguments(kwargs), **fields)
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as exc:
                log_event(
                    LOGGER,
                    logging.ERROR,
                    "tool_call_failed",
                    error_type=type(exc).__name__,
                    duration_ms=round((time.perf_counter() - start) * 1000, 2),
                    exc_info=True,
                    **fields,
                )
                raise
            log_event(
                LOGGER,
                logging.INFO,
                "tool_call_completed",
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
                result_size=_result_size(result),
                **fields,
            )
            return result

        return wrapper

    return decorator


__all__ = ["instrument_tool"]
