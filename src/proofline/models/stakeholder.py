# src/proofline/models/stakeholder.py
"""External reviewers granted access to one project."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import EmailStr

from .base_model import ProoflineBaseModel as BaseModel
from .validators import NonEmptyStr, OptionalText


class StakeholderCreate(BaseModel):
    """Fields an agency supplies when sharing a project."""

    name: NonEmptyStr
    email: EmailStr
    role: OptionalText = None
    can_approve: bool = True


class Stakeholder(BaseModel):
    """A reviewer grant. The access token is never part of this record."""

    id: UUID
    project_id: UUID
    name: str
    email: str
    role: str | None = None
    can_approve: bool = True
    created_at: datetime


class StakeholderGrant(BaseModel):
    """Result of granting access: the only place the plaintext token appears."""

    stakeholder: Stakeholder
    access_token: str
    review_url: str


__all__ = ["StakeholderCreate", "Stakeholder", "StakeholderGrant"]
