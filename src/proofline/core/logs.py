# src/proofline/core/logs.py
"""Structured event logging for Proofline.

Every access check, review session, feedback submission and agency
mutation is recorded as a :class:`StructuredLogEvent`. Events are kept in
a bounded in-memory history (inspected in development and tests) and
forwarded as formatted lines to the standard ``proofline`` logger, so
they reach whatever handler :func:`proofline.core.logging.init_logging` installed.
"""

from __future__ import annotations

import functools
import inspect
import json
import logging
import threading
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, cast
from uuid import uuid4


class LogLevel(Enum):
    """Log levels with numeric values for filtering."""

    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40
    CRITICAL = 50


class EventType(Enum):
    """Event types for structured logging."""

    SYSTEM = "system"
    DATABASE_OPERATION = "database_operation"

    # Guest review events
    ACCESS_CHECK = "access_check"
    REVIEW_SESSION = "review_session"
    FEEDBACK_SUBMISSION = "feedback_submission"

    # Agency events
    AGENCY_ACTION = "agency_action"

    CHANGE_NOTIFICATION = "change_notification"

    ERROR = "error"
    WARNING = "warning"
    ERROR_HANDLING_START = "error_handling_start"


class Priority(Enum):
    """Event priority levels."""

    CRITICAL = 1  # Errors, failed access checks
    HIGH = 2  # Mutations, user actions
    NORMAL = 3  # Reads
    LOW = 4  # Debug traces


@dataclass
class EventMetrics:
    """Counters for logged events."""

    total_events: int = 0
    events_by_type: dict[str, int] = field(default_factory=dict)
    events_by_priority: dict[int, int] = field(default_factory=dict)

    def record_event(self, event_type: str, priority: int) -> None:
        self.total_events += 1
        self.events_by_type[event_type] = self.events_by_type.get(event_type, 0) + 1
        self.events_by_priority[priority] = self.events_by_priority.get(priority, 0) + 1


@dataclass
class StructuredLogEvent:
    """Structured log event with metadata."""

    event_id: str = field(default_factory=lambda: str(uuid4()))
    timestamp: float = field(default_factory=time.time)
    event_type: EventType = EventType.SYSTEM
    level: LogLevel = LogLevel.INFO
    priority: Priority = Priority.NORMAL
    message: str = ""
    component: str | None = None
    project_id: str | None = None
    user_id: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    processing_time_ms: float | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {
            "event_id": self.event_id,
            "timestamp": self.timestamp,
            "event_type": self.event_type.value,
            "level": self.level.name,
            "level_value": self.level.value,
            "priority": self.priority.value,
            "priority_name": self.priority.name,
            "message": self.message,
            "component": self.component,
            "project_id": self.project_id,
            "user_id": self.user_id,
            "metadata": self.metadata,
            "processing_time_ms": self.processing_time_ms,
        }

    def to_json(self) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), default=str)


_STDLIB_LEVELS = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.CRITICAL: logging.CRITICAL,
}


class EventLogger:
    """Structured logging front end.

    Keeps the last ``max_events`` events in memory, counts them by type
    and priority, and mirrors each one to the ``proofline`` stdlib logger.
    """

    def __init__(self, max_events: int = 10000):
        self.max_events = max_events
        self._events: deque[StructuredLogEvent] = deque(maxlen=max_events)
        # log() is called from sync and async code alike
        self._lock = threading.Lock()
        self._metrics = EventMetrics()
        self._traditional_logger = logging.getLogger("proofline")

    def log_event(self, event: StructuredLogEvent) -> None:
        """Store ``event`` and forward it to the traditional logger."""
        with self._lock:
            self._metrics.record_event(event.event_type.value, event.priority.value)
            self._events.append(event)
        self._log_to_traditional(event)

    def _log_to_traditional(self, event: StructuredLogEvent) -> None:
        parts = [f"[{event.event_type.value}]"]
        if event.component:
            parts.append(f"<{event.component}>")
        if event.project_id:
            parts.append(f"project={event.project_id}")
        key_metadata = self._format_key_metadata(event)
        if key_metadata:
            parts.append(key_metadata)
        timing = ""
        if event.processing_time_ms is not None:
            timing = f" [{event.processing_time_ms:.1f}ms]"
        self._traditional_logger.log(
            _STDLIB_LEVELS.get(event.level, logging.INFO),
            "%s %s%s",
            " ".join(parts),
            event.message,
            timing,
        )

    @staticmethod
    def _format_key_metadata(event: StructuredLogEvent) -> str:
        keys = ("operation", "table", "reason", "status", "kind")
        shown = [f"{k}={event.metadata[k]}" for k in keys if k in event.metadata]
        return " ".join(shown)

    def log(
        self,
        level: LogLevel,
        message: str,
        event_type: EventType = EventType.SYSTEM,
        priority: Priority = Priority.NORMAL,
        component: str | None = None,
        project_id: Any = None,
        user_id: Any = None,
        processing_time_ms: float | None = None,
        **metadata: Any,
    ) -> None:
        """Log a message with structured metadata.

        Args:
            level: Log level
            message: Log message
            event_type: Type of event
            priority: Event priority
            component: Optional component name
            project_id: Optional project the event concerns
            user_id: Optional agency user or stakeholder id
            processing_time_ms: Optional duration of the logged operation
            **metadata: Additional metadata
        """
        self.log_event(
            StructuredLogEvent(
                level=level,
                event_type=event_type,
                priority=priority,
                message=message,
                component=component,
                project_id=str(project_id) if project_id is not None else None,
                user_id=str(user_id) if user_id is not None else None,
                metadata=metadata,
                processing_time_ms=processing_time_ms,
            )
        )

    def debug(self, message: str, **kwargs: Any) -> None:
        self.log(LogLevel.DEBUG, message, priority=Priority.LOW, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self.log(LogLevel.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        kwargs.setdefault("event_type", EventType.WARNING)
        kwargs.setdefault("priority", Priority.HIGH)
        self.log(LogLevel.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        kwargs.setdefault("event_type", EventType.ERROR)
        kwargs.setdefault("priority", Priority.CRITICAL)
        self.log(LogLevel.ERROR, message, **kwargs)

    def log_database_operation(self, message: str, **kwargs: Any) -> None:
        """Log a store read or write."""
        self.log(
            LogLevel.DEBUG,
            message,
            event_type=EventType.DATABASE_OPERATION,
            priority=Priority.LOW,
            **kwargs,
        )

    def log_access_denied(self, reason: str, **kwargs: Any) -> None:
        """Record why an access check failed; the reason never leaves the server."""
        self.log(
            LogLevel.WARNING,
            "Access check failed",
            event_type=EventType.ACCESS_CHECK,
            priority=Priority.CRITICAL,
            reason=reason,
            **kwargs,
        )

    def log_user_action(self, action: str, user_id: str | None = None, **kwargs: Any) -> None:
        """Log an agency or stakeholder action."""
        kwargs.setdefault("event_type", EventType.AGENCY_ACTION)
        self.log(
            LogLevel.INFO,
            f"User action: {action}",
            priority=Priority.HIGH,
            user_id=user_id,
            **kwargs,
        )

    def log_error_handling_start(self, error_type: str, **kwargs: Any) -> None:
        """Log translation of a failure into a public error kind."""
        self.log(
            LogLevel.WARNING,
            f"Starting error handling for {error_type}",
            event_type=EventType.ERROR_HANDLING_START,
            priority=Priority.HIGH,
            **kwargs,
        )

    def get_events(
        self,
        event_type: EventType | None = None,
        limit: int = 100,
    ) -> list[StructuredLogEvent]:
        """Return the newest ``limit`` events, optionally of one type."""
        with self._lock:
            events = list(self._events)
        if event_type is not None:
            events = [e for e in events if e.event_type is event_type]
        return events[-limit:]

    def get_logs(self, limit: int = 100) -> list[str]:
        return [e.message for e in self.get_events(limit=limit)]

    def get_metrics(self) -> dict[str, Any]:
        with self._lock:
            return {
                "total_events": self._metrics.total_events,
                "events_by_type": dict(self._metrics.events_by_type),
                "events_by_priority": dict(self._metrics.events_by_priority),
                "stored_events": len(self._events),
            }

    def clear_logs(self) -> None:
        with self._lock:
            self._events.clear()
            self._metrics = EventMetrics()


# Global event logger instance
_event_logger: EventLogger | None = None


def get_event_logger() -> EventLogger:
    """Get global event logger instance."""
    global _event_logger
    if _event_logger is None:
        _event_logger = EventLogger()
    return _event_logger


def get_logger(name: str) -> logging.Logger:
    """Return a namespaced logger under the Proofline root logger."""
    return get_event_logger()._traditional_logger.getChild(name)


def log_message(message: str) -> None:
    """Store message in structured logging system."""
    get_event_logger().info(message, event_type=EventType.SYSTEM)


def _finish_call(func: Callable[..., Any], start_time: float, exc: Exception | None) -> None:
    event_logger = get_event_logger()
    elapsed = (time.time() - start_time) * 1000
    if exc is None:
        event_logger.debug(
            f"Exiting {func.__qualname__} successfully",
            component=func.__module__,
            processing_time_ms=elapsed,
        )
    else:
        event_logger.error(
            f"Error in {func.__qualname__}: {exc}",
            component=func.__module__,
            processing_time_ms=elapsed,
            error_type=type(exc).__name__,
        )


def log_calls(func: Callable[..., Any]) -> Callable[..., Any]:
    """Decorate func (sync or async) to log entry, exit and failures at DEBUG."""

    def _enter() -> float:
        get_event_logger().debug(f"Entering {func.__qualname__}", component=func.__module__)
        return time.time()

    if inspect.iscoroutinefunction(func):

        @functools.wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            start_time = _enter()
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                _finish_call(func, start_time, e)
                raise
            _finish_call(func, start_time, None)
            return result

        return cast(Callable[..., Any], async_wrapper)

    @functools.wraps(func)
    def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
        start_time = _enter()
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            _finish_call(func, start_time, e)
            raise
        _finish_call(func, start_time, None)
        return result

    return cast(Callable[..., Any], sync_wrapper)


def get_logs(limit: int = 100) -> list[str]:
    """Return the captured log messages."""
    return get_event_logger().get_logs(limit)


def clear_logs() -> None:
    """Remove all stored log messages."""
    get_event_logger().clear_logs()


__all__ = [
    "EventLogger",
    "StructuredLogEvent",
    "EventMetrics",
    "LogLevel",
    "EventType",
    "Priority",
    "get_event_logger",
    "log_message",
    "get_logger",
    "get_logs",
    "clear_logs",
    "log_calls",
]
