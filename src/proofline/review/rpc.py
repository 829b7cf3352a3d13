# src/proofline/review/rpc.py
"""Remote procedure boundary for stores fronted by server-side functions.

Both procedures run the same server-side checks as the session resolver
and the feedback gateway; the client never makes the authorization
decision.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from proofline.models import ApprovalStatus

from .gateway import submit_feedback
from .session import open_review_session


class GetProjectForReviewArgs(BaseModel):
    project_id: str
    access_token: str = ""


class SubmitClientFeedbackArgs(BaseModel):
    asset_id: str
    stakeholder_id: str
    access_token: str = ""
    status: ApprovalStatus | str
    feedback: str | None = Field(default=None)


async def get_project_for_review(project_id: UUID | str, access_token: str) -> dict[str, Any]:
    """Return ``{"project": ..., "stakeholder": ...}`` for a valid token."""
    review = await open_review_session(project_id, access_token)
    return {
        "project": review.project.model_dump(mode="json"),
        "stakeholder": review.stakeholder.model_dump(mode="json"),
    }


async def submit_client_feedback(
    asset_id: UUID | str,
    stakeholder_id: UUID | str,
    access_token: str,
    status: ApprovalStatus | str,
    feedback: str | None,
) -> None:
    await submit_feedback(asset_id, stakeholder_id, access_token, status, feedback)


__all__ = [
    "GetProjectForReviewArgs",
    "SubmitClientFeedbackArgs",
    "get_project_for_review",
    "submit_client_feedback",
]
