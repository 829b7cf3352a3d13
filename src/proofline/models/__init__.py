"""Pydantic and ORM models for projects, assets, reviewers and feedback."""

from .approval import Approval, ApprovalStatus
from .asset import Asset, FileKind
from .base import Base  # Import SQLAlchemy Base
from .base_model import ProoflineBaseModel
from .comment import AuthorKind, Comment
from .project import Project, ProjectCreate, ProjectStatus, ProjectSummary
from .review import (
    AssetView,
    FeedbackResult,
    ProjectAggregate,
    ReviewSession,
)
from .sqlalchemy_models import (
    ApprovalSQL,
    AssetSQL,
    CommentSQL,
    ProjectSQL,
    StakeholderSQL,
)
from .stakeholder import Stakeholder, StakeholderCreate, StakeholderGrant

__all__ = [
    "ProoflineBaseModel",
    "Project",
    "ProjectCreate",
    "ProjectStatus",
    "ProjectSummary",
    "Asset",
    "FileKind",
    "Stakeholder",
    "StakeholderCreate",
    "StakeholderGrant",
    "Comment",
    "AuthorKind",
    "Approval",
    "ApprovalStatus",
    "AssetView",
    "ProjectAggregate",
    "ReviewSession",
    "FeedbackResult",
    "Base",  # Export SQLAlchemy Base
    "ProjectSQL",
    "AssetSQL",
    "StakeholderSQL",
    "CommentSQL",
    "ApprovalSQL",
]
