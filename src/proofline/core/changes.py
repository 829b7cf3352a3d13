# src/proofline/core/changes.py
"""Change notification hook.

Mutations call :func:`notify_changed`; listeners (the WebSocket
broadcaster, tests) react by reloading whatever aggregate they show.
There is no ordering or delivery guarantee: a listener that misses an
event catches up on the next timed re-sync.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field

from .logs import EventType, get_event_logger


class ChangeKind(str, Enum):
    """Kinds of rows whose change triggers a reload."""

    PROJECT = "project"
    ASSET = "asset"
    STAKEHOLDER = "stakeholder"
    COMMENT = "comment"
    APPROVAL = "approval"


class ChangeEvent(BaseModel):
    """Notification that a row changed."""

    kind: ChangeKind
    id: UUID
    project_id: UUID | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


Listener = Callable[[ChangeEvent], Awaitable[None]]

_listeners: list[Listener] = []


def add_listener(listener: Listener) -> None:
    """Register ``listener`` for every future change event."""
    if listener not in _listeners:
        _listeners.append(listener)


def remove_listener(listener: Listener) -> None:
    if listener in _listeners:
        _listeners.remove(listener)


async def notify_changed(
    kind: ChangeKind, id: UUID, project_id: UUID | None = None
) -> ChangeEvent:
    """Fan a change event out to all listeners.

    Listener failures are logged and dropped; the write that triggered
    the notification has already committed.
    """
    event = ChangeEvent(kind=kind, id=id, project_id=project_id)
    event_logger = get_event_logger()
    event_logger.debug(
        f"{kind.value} {id} changed",
        event_type=EventType.CHANGE_NOTIFICATION,
        project_id=project_id,
        kind=kind.value,
    )
    for listener in list(_listeners):
        try:
            await listener(event)
        except Exception as exc:  # noqa: BLE001
            event_logger.warning(
                f"Change listener {getattr(listener, '__qualname__', listener)!r} failed: {exc}",
                event_type=EventType.CHANGE_NOTIFICATION,
                project_id=project_id,
            )
    return event


def clear_listeners() -> None:
    """Remove every registered listener."""
    _listeners.clear()


__all__ = [
    "ChangeKind",
    "ChangeEvent",
    "Listener",
    "add_listener",
    "remove_listener",
    "notify_changed",
    "clear_listeners",
]
