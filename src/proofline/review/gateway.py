# src/proofline/review/gateway.py
"""Feedback submission gateway: the only write path open to a guest reviewer."""

from __future__ import annotations

import time
from uuid import UUID

from proofline.core.changes import ChangeKind, notify_changed
from proofline.core.errors import AccessDenied, NotFound, boundary
from proofline.core.logs import EventType, get_event_logger
from proofline.models import ApprovalStatus, AuthorKind, FeedbackResult
from proofline.models.validators import normalize_optional_text
from proofline.store import commit_session, crud, get_session

from .state import check_capability, coerce_status, decide
from .tokens import authenticate_stakeholder_conn, parse_uuid

event_logger = get_event_logger()


@boundary("submit_feedback")
async def submit_feedback(
    asset_id: UUID | str,
    stakeholder_id: UUID | str,
    token: str | None,
    status: ApprovalStatus | str,
    feedback_text: str | None = None,
) -> FeedbackResult:
    """Append an optional comment and upsert the reviewer's approval row.

    The token is checked against the stakeholder, and the asset against
    the stakeholder's project, on every call. Comment and approval are
    written in one transaction: a failed check writes nothing. Calling
    again with the same arguments leaves one approval row (plus one more
    comment when ``feedback_text`` is non-empty).
    """
    start_time = time.time()
    decided_status = coerce_status(status)
    text = normalize_optional_text(feedback_text)

    async with get_session() as session:
        stakeholder = await authenticate_stakeholder_conn(session, stakeholder_id, token)

        aid = parse_uuid(asset_id)
        asset = await crud.get_asset_row(session, aid) if aid is not None else None
        if asset is None:
            raise NotFound("Asset not found")
        if asset.project_id != stakeholder.project_id:
            event_logger.log_access_denied(
                "asset_outside_project",
                project_id=stakeholder.project_id,
                stakeholder_id=str(stakeholder.id),
            )
            raise AccessDenied()
        check_capability(decided_status, stakeholder.can_approve)

        decision = decide(decided_status, text)
        comment = None
        if text:
            # Author identity comes from the grant, never from the request.
            comment = await crud.insert_comment(
                session,
                asset_id=asset.id,
                author_name=stakeholder.name,
                author_email=stakeholder.email,
                author_type=AuthorKind.CLIENT,
                content=text,
            )
        approval = await crud.upsert_approval(
            session,
            asset_id=asset.id,
            stakeholder_id=stakeholder.id,
            status=decision.status,
            feedback=decision.feedback,
            approved_at=decision.approved_at,
            updated_at=decision.updated_at,
        )
        await commit_session(session)
        project_id = asset.project_id

    event_logger.info(
        f"Feedback submitted by {stakeholder.name}",
        event_type=EventType.FEEDBACK_SUBMISSION,
        project_id=project_id,
        user_id=stakeholder.id,
        processing_time_ms=(time.time() - start_time) * 1000,
        status=decision.status.value,
        with_comment=comment is not None,
    )
    if comment is not None:
        await notify_changed(ChangeKind.COMMENT, comment.id, project_id)
    await notify_changed(ChangeKind.APPROVAL, approval.id, project_id)
    return FeedbackResult(approval=approval, comment=comment)


__all__ = ["submit_feedback"]
