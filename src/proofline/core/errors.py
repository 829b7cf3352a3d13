# src/proofline/core/errors.py
"""Public error kinds and the boundary that translates failures into them."""

from __future__ import annotations

import functools
import time
from collections.abc import Awaitable, Callable
from typing import Any, ParamSpec, TypeVar

import pydantic
from sqlalchemy.exc import SQLAlchemyError

from .logs import get_event_logger

P = ParamSpec("P")
R = TypeVar("R")


class ProoflineError(Exception):
    """Base class for errors surfaced to callers."""

    kind = "error"
    public_message = "Request failed"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.public_message)


class AccessDenied(ProoflineError):
    """Token, stakeholder or project mismatch.

    The message is always the generic one so callers cannot tell which
    part of the check failed.
    """

    kind = "access_denied"
    public_message = "Access denied"

    def __init__(self, message: str | None = None):
        super().__init__(self.public_message)


class NotFound(ProoflineError):
    """A referenced project or asset does not exist."""

    kind = "not_found"
    public_message = "Not found"


class ValidationError(ProoflineError):
    """A required field is missing or a value is out of range."""

    kind = "validation_error"
    public_message = "Invalid request"


class TransportError(ProoflineError):
    """The store or file storage failed; the action may be retried by the user."""

    kind = "transport_error"
    public_message = "Service temporarily unavailable, please try again"


def _describe_validation(exc: pydantic.ValidationError) -> str:
    first = exc.errors()[0] if exc.errors() else {}
    loc = ".".join(str(part) for part in first.get("loc", ()))
    msg = first.get("msg", "invalid value")
    return f"{loc}: {msg}" if loc else msg


def boundary(
    operation: str,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Translate failures raised inside ``operation`` into public error kinds.

    Domain errors pass through unchanged, pydantic validation failures
    become :class:`ValidationError`, and store or filesystem failures
    become :class:`TransportError`. Nothing is retried.
    """

    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            event_logger = get_event_logger()
            start_time = time.time()
            try:
                return await func(*args, **kwargs)
            except ProoflineError:
                raise
            except pydantic.ValidationError as exc:
                event_logger.log_error_handling_start(
                    error_type=type(exc).__name__,
                    operation=operation,
                    kind=ValidationError.kind,
                )
                raise ValidationError(_describe_validation(exc)) from exc
            except (SQLAlchemyError, OSError) as exc:
                event_logger.log_error_handling_start(
                    error_type=type(exc).__name__,
                    operation=operation,
                    kind=TransportError.kind,
                    processing_time_ms=(time.time() - start_time) * 1000,
                    error_message=str(exc),
                )
                raise TransportError() from exc

        return wrapper

    return decorator


def error_payload(exc: ProoflineError) -> dict[str, Any]:
    """Body returned to HTTP and RPC callers for ``exc``."""
    detail = str(exc) if isinstance(exc, (NotFound, ValidationError)) else exc.public_message
    return {"error": exc.kind, "detail": detail}


__all__ = [
    "ProoflineError",
    "AccessDenied",
    "NotFound",
    "ValidationError",
    "TransportError",
    "boundary",
    "error_payload",
]
