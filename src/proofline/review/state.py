# src/proofline/review/state.py
"""Approval state machine.

States are labels overwritten last-write-wins per (asset, stakeholder):
``pending`` is implicit (no row), and a reviewer may move freely between
``approved``, ``commented`` and ``rejected``. Entering ``approved``
stamps ``approved_at``; any other state clears it. Nothing here rolls
per-reviewer states up into an asset or project status.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from proofline.core.errors import AccessDenied, ValidationError
from proofline.models import ApprovalStatus, AssetView
from proofline.models.sqlalchemy_models import utc_now

SUBMITTABLE = frozenset(
    {ApprovalStatus.APPROVED, ApprovalStatus.COMMENTED, ApprovalStatus.REJECTED}
)


@dataclass(frozen=True)
class ApprovalDecision:
    """Field values the next approval upsert writes."""

    status: ApprovalStatus
    feedback: str | None
    approved_at: datetime | None
    updated_at: datetime


def coerce_status(value: ApprovalStatus | str) -> ApprovalStatus:
    """Parse a submitted status, rejecting unknown values and ``pending``."""
    if isinstance(value, ApprovalStatus):
        status = value
    else:
        try:
            status = ApprovalStatus(str(value).strip().lower())
        except ValueError:
            raise ValidationError(f"Unknown approval status: {value!r}") from None
    if status not in SUBMITTABLE:
        raise ValidationError("Status must be one of: approved, commented, rejected")
    return status


def check_capability(status: ApprovalStatus, can_approve: bool) -> None:
    """Reviewers without approval rights may only comment."""
    if status.is_decision and not can_approve:
        raise AccessDenied()


def decide(
    status: ApprovalStatus, feedback: str | None, now: datetime | None = None
) -> ApprovalDecision:
    """Compute the approval row for ``status`` entered at ``now``."""
    now = now or utc_now()
    return ApprovalDecision(
        status=status,
        feedback=feedback,
        approved_at=now if status is ApprovalStatus.APPROVED else None,
        updated_at=now,
    )


def approval_status_for(asset: AssetView, stakeholder_id: UUID) -> ApprovalStatus:
    """Current status of ``stakeholder_id`` on ``asset``; ``pending`` if none."""
    approval = asset.approval_for(stakeholder_id)
    return approval.status if approval is not None else ApprovalStatus.PENDING


__all__ = [
    "SUBMITTABLE",
    "ApprovalDecision",
    "coerce_status",
    "check_capability",
    "decide",
    "approval_status_for",
]
