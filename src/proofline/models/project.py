# src/proofline/models/project.py
"""Projects owned by an agency identity."""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from uuid import UUID

from pydantic import Field

from .base_model import ProoflineBaseModel as BaseModel
from .validators import NonEmptyStr


class ProjectStatus(str, Enum):
    """Lifecycle status of a project, set by the owning agency."""

    SETUP = "setup"
    IN_PROGRESS = "in-progress"
    FILMING = "filming"
    EDITING = "editing"
    IN_REVIEW = "in-review"
    REVISIONS = "revisions"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ProjectCreate(BaseModel):
    """Fields an agency supplies when creating a project."""

    name: NonEmptyStr
    client_company: NonEmptyStr
    due_date: date | None = None


class Project(BaseModel):
    """A client project and its lifecycle status."""

    id: UUID
    name: str = Field(..., min_length=1)
    agency_user_id: UUID
    client_company: str = Field(..., min_length=1)
    status: ProjectStatus = ProjectStatus.SETUP
    due_date: date | None = None
    created_at: datetime


class ProjectSummary(BaseModel):
    """Dashboard counters for one agency identity."""

    total_projects: int = 0
    projects_by_status: dict[str, int] = Field(default_factory=dict)
    total_assets: int = 0
    assets_awaiting_review: int = 0
    approvals_by_status: dict[str, int] = Field(default_factory=dict)


__all__ = ["ProjectStatus", "ProjectCreate", "Project", "ProjectSummary"]
