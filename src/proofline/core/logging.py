# src/proofline/core/logging.py
"""Logging helpers for Proofline."""

import json
import logging
import os
import sys

from proofline.config import config

_LOGGING_INITIALIZED = False

# Attributes every LogRecord carries; anything else is an ``extra``.
_RESERVED_ATTRS = frozenset(
    (
        "args",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
    )
)


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        data = {
            "time": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S%z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS:
                continue
            # Avoid non-serializable objects
            try:
                json.dumps(value)
                data[key] = value
            except (TypeError, ValueError):
                data[key] = str(value)
        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(data, ensure_ascii=False)


def _str_to_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def _plain_handler(log_level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    return handler


def init_logging(
    level: str | None = None,
    format: str | None = None,
    include_trace: bool | None = None,
) -> None:
    """
    Initialize global logging configuration for Proofline.

    Environment variables:
      - LOG_LEVEL: DEBUG|INFO|WARNING|ERROR|CRITICAL (default INFO)
      - PROOFLINE_LOG_FORMAT: plain|rich|json (default: rich if available, else plain)
      - PROOFLINE_LOG_INCLUDE_TRACE: bool (default False)
    """
    global _LOGGING_INITIALIZED
    if _LOGGING_INITIALIZED:
        return

    resolved_level = (level or config.system.log_level or "INFO").upper()
    resolved_format = (format or config.system.log_format or "").lower()
    resolved_include_trace = (
        include_trace
        if include_trace is not None
        else _str_to_bool(os.getenv("PROOFLINE_LOG_INCLUDE_TRACE"), default=False)
    )

    log_level = logging.getLevelName(resolved_level)
    if not isinstance(log_level, int):
        log_level = logging.INFO

    root = logging.getLogger()
    root.setLevel(log_level)
    for h in list(root.handlers):
        root.removeHandler(h)

    if not resolved_format:
        try:
            import rich  # noqa: F401

            resolved_format = "rich"
        except ImportError:
            resolved_format = "plain"

    handler: logging.Handler
    if resolved_format == "json":
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(log_level)
        handler.setFormatter(JsonFormatter())
    elif resolved_format == "rich":
        try:
            from rich.logging import RichHandler
        except ImportError:
            handler = _plain_handler(log_level)
        else:
            handler = RichHandler(
                level=log_level,
                rich_tracebacks=resolved_include_trace,
                show_time=True,
                show_level=True,
                show_path=False,
                markup=False,
            )
            handler.setFormatter(logging.Formatter("%(message)s"))
    else:
        handler = _plain_handler(log_level)

    root.addHandler(handler)

    # Reduce noisy libraries
    for noisy in ("uvicorn.access", "asyncio", "httpx", "aiosqlite", "sqlalchemy.engine"):
        logging.getLogger(noisy).setLevel(max(log_level, logging.WARNING))

    from proofline import __version__

    logging.getLogger("proofline.start").info(
        "Initializing logging | version=%s level=%s format=%s include_trace=%s",
        __version__,
        resolved_level,
        resolved_format,
        str(resolved_include_trace),
    )

    _LOGGING_INITIALIZED = True


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Get a logger with the provided name, or the package root if None.
    """
    return logging.getLogger(name or "proofline")
