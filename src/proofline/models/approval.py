# src/proofline/models/approval.py
"""Per-reviewer approval state of an asset."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from uuid import UUID

from .base_model import ProoflineBaseModel as BaseModel


class ApprovalStatus(str, Enum):
    """Disposition of one reviewer towards one asset.

    ``pending`` is implicit: it is what a reviewer shows before any
    approval row exists. The other three are overwritten last-write-wins.
    """

    PENDING = "pending"
    APPROVED = "approved"
    COMMENTED = "commented"
    REJECTED = "rejected"

    @property
    def is_decision(self) -> bool:
        """True for the statuses that need approval rights."""
        return self in (ApprovalStatus.APPROVED, ApprovalStatus.REJECTED)


class Approval(BaseModel):
    """The single approval row for an (asset, stakeholder) pair."""

    id: UUID
    asset_id: UUID
    stakeholder_id: UUID
    status: ApprovalStatus
    feedback: str | None = None
    approved_at: datetime | None = None
    updated_at: datetime


__all__ = ["ApprovalStatus", "Approval"]
