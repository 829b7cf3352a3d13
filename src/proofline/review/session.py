# src/proofline/review/session.py
"""Review session resolver: the read projection a guest reviewer may see."""

from __future__ import annotations

import time
from uuid import UUID

from proofline.config import config
from proofline.core.errors import AccessDenied, boundary
from proofline.core.logs import EventType, get_event_logger
from proofline.models import ReviewSession, Stakeholder
from proofline.store import get_session
from proofline.store.queries import load_project_aggregate

from .tokens import resolve_stakeholder_conn

event_logger = get_event_logger()


@boundary("open_review_session")
async def open_review_session(project_id: UUID | str, token: str | None) -> ReviewSession:
    """Validate ``token`` for ``project_id`` and load the full project aggregate.

    Read-only and idempotent; clients call it again to re-sync after a
    change notification or when the refresh timer fires. A bad token
    and a bad project both raise the same :class:`AccessDenied`.
    """
    start_time = time.time()
    async with get_session() as session:
        row = await resolve_stakeholder_conn(session, project_id, token)
        stakeholder = Stakeholder.model_validate(row)
        project = await load_project_aggregate(session, stakeholder.project_id)

    if project is None:
        event_logger.log_access_denied("project_missing", project_id=stakeholder.project_id)
        raise AccessDenied()

    event_logger.info(
        f"Review session opened by {stakeholder.name}",
        event_type=EventType.REVIEW_SESSION,
        project_id=project.id,
        user_id=stakeholder.id,
        processing_time_ms=(time.time() - start_time) * 1000,
        assets=len(project.assets),
    )
    return ReviewSession(
        stakeholder=stakeholder,
        project=project,
        refresh_interval_seconds=config.review.refresh_seconds,
    )


__all__ = ["open_review_session"]
