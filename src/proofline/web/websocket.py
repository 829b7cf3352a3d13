# src/proofline/web/websocket.py
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, Optional, Set
from uuid import UUID

from fastapi import WebSocket

from proofline import agency
from proofline.core.changes import ChangeEvent
from proofline.core.errors import AccessDenied, NotFound, ProoflineError
from proofline.core.logging import get_logger
from proofline.core.logs import get_event_logger
from proofline.review import resolve_stakeholder
from proofline.review.tokens import parse_uuid

logger = get_logger(__name__)
event_logger = get_event_logger()

OwnershipCheck = Callable[[UUID, UUID], Awaitable[bool]]


@dataclass
class Subscription:
    """What one change-feed client may see.

    Guests and agency sockets opened for one project are pinned to
    ``project_id``. An agency dashboard socket (no ``project_id``) sees
    the projects ``agency_user_id`` owns; ownership is looked up once
    per project and cached.
    """

    project_id: Optional[UUID] = None
    agency_user_id: Optional[UUID] = None
    owned: Set[UUID] = field(default_factory=set)
    foreign: Set[UUID] = field(default_factory=set)


async def authorize_subscription(
    project_id: Optional[str],
    token: Optional[str],
    agency_user: Optional[str],
    owns_project: OwnershipCheck = agency.owns_project,
) -> Subscription:
    """Turn change-feed credentials into a :class:`Subscription`.

    A ``token`` makes the caller a guest of ``project_id``; otherwise the
    ``X-Agency-User`` identity is required. Anonymous callers get
    AccessDenied.
    """
    if token:
        stakeholder = await resolve_stakeholder(project_id, token)
        return Subscription(project_id=stakeholder.project_id)

    user_id = parse_uuid(agency_user)
    if user_id is None:
        event_logger.log_access_denied("anonymous_change_feed", project_id=project_id)
        raise AccessDenied()
    if project_id is None:
        return Subscription(agency_user_id=user_id)

    pid = parse_uuid(project_id)
    if pid is None or not await owns_project(user_id, pid):
        raise NotFound("Project not found")
    return Subscription(project_id=pid, agency_user_id=user_id)


class WebSocketManager:
    """Push change events to connected review and dashboard clients."""

    def __init__(self, owns_project: OwnershipCheck = agency.owns_project):
        self.active_connections: Dict[WebSocket, Subscription] = {}
        self.owns_project = owns_project

    async def connect(self, websocket: WebSocket, subscription: Subscription):
        await websocket.accept()
        self.active_connections[websocket] = subscription

    def disconnect(self, websocket: WebSocket):
        self.active_connections.pop(websocket, None)

    async def allows(self, subscription: Subscription, project_id: Optional[UUID]) -> bool:
        if project_id is None:
            return False
        if subscription.project_id is not None:
            return project_id == subscription.project_id
        if subscription.agency_user_id is None:
            return False
        if project_id in subscription.owned:
            return True
        if project_id in subscription.foreign:
            return False
        try:
            owned = await self.owns_project(subscription.agency_user_id, project_id)
        except ProoflineError as e:
            logger.warning(f"Ownership check for project {project_id} failed: {e}")
            return False
        (subscription.owned if owned else subscription.foreign).add(project_id)
        return owned

    async def broadcast(self, event: ChangeEvent):
        """Send ``event`` to every client allowed to see its project."""
        message = event.model_dump(mode="json")
        for connection, subscription in list(self.active_connections.items()):
            if not await self.allows(subscription, event.project_id):
                continue
            try:
                await connection.send_json(message)
            except Exception as e:
                # A dead client is dropped; it re-syncs on its refresh timer.
                logger.warning(f"Error sending change event to client: {e}")
                self.disconnect(connection)


# Create a global instance
websocket_manager = WebSocketManager()
