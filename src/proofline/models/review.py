# src/proofline/models/review.py
"""Read projections and feedback payloads for guest review."""

from __future__ import annotations

from uuid import UUID

from pydantic import Field

from .approval import Approval
from .asset import Asset
from .base_model import ProoflineBaseModel as BaseModel
from .comment import Comment
from .project import Project
from .stakeholder import Stakeholder


class AssetView(Asset):
    """An asset with its comment log (oldest first) and approval rows."""

    comments: list[Comment] = Field(default_factory=list)
    approvals: list[Approval] = Field(default_factory=list)

    def approval_for(self, stakeholder_id: UUID) -> Approval | None:
        for approval in self.approvals:
            if approval.stakeholder_id == stakeholder_id:
                return approval
        return None


class ProjectAggregate(Project):
    """A project with every asset, comment and approval under it."""

    assets: list[AssetView] = Field(default_factory=list)


class ReviewSession(BaseModel):
    """What a guest reviewer is entitled to see.

    ``refresh_interval_seconds`` is the fallback re-sync timer for
    clients that miss a change notification.
    """

    stakeholder: Stakeholder
    project: ProjectAggregate
    refresh_interval_seconds: int = 30


class FeedbackResult(BaseModel):
    """Rows written by one feedback submission."""

    approval: Approval
    comment: Comment | None = None


__all__ = [
    "AssetView",
    "ProjectAggregate",
    "ReviewSession",
    "FeedbackResult",
]
