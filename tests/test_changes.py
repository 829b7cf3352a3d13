"""Tests for the change notification hook."""

import uuid

from proofline.core.changes import (
    ChangeKind,
    add_listener,
    notify_changed,
    remove_listener,
)
from proofline.core.logs import EventType, get_event_logger


async def test_listeners_receive_events(changes):
    asset_id, project_id = uuid.uuid4(), uuid.uuid4()
    event = await notify_changed(ChangeKind.ASSET, asset_id, project_id)

    assert changes == [event]
    assert event.kind is ChangeKind.ASSET
    assert event.id == asset_id
    assert event.project_id == project_id
    assert event.model_dump(mode="json")["kind"] == "asset"


async def test_failing_listener_does_not_reach_caller(changes):
    async def broken(event):
        raise RuntimeError("socket closed")

    add_listener(broken)
    await notify_changed(ChangeKind.COMMENT, uuid.uuid4())

    assert len(changes) == 1
    warnings = get_event_logger().get_events(event_type=EventType.CHANGE_NOTIFICATION)
    assert any("socket closed" in e.message for e in warnings)


async def test_removed_listener_is_not_called():
    seen = []

    async def listener(event):
        seen.append(event)

    add_listener(listener)
    add_listener(listener)
    await notify_changed(ChangeKind.PROJECT, uuid.uuid4())
    remove_listener(listener)
    await notify_changed(ChangeKind.PROJECT, uuid.uuid4())

    assert len(seen) == 1
