# src/proofline/models/sqlalchemy_models.py
"""SQLAlchemy ORM models for the review store."""

from __future__ import annotations

import uuid
from datetime import UTC, date, datetime

from sqlalchemy import (
    BigInteger,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


def utc_now() -> datetime:
    return datetime.now(UTC)


class ProjectSQL(Base):
    """A client project owned by one agency identity.

    Every agency-side query filters on ``agency_user_id``; a project is
    never visible to another agency.
    """

    __tablename__ = "project"
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    agency_user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    client_company: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="setup")
    due_date: Mapped[date | None] = mapped_column(Date)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    assets: Mapped[list[AssetSQL]] = relationship(
        "AssetSQL",
        back_populates="project",
        order_by="AssetSQL.created_at",
        cascade="all, delete-orphan",
    )
    stakeholders: Mapped[list[StakeholderSQL]] = relationship(
        "StakeholderSQL",
        back_populates="project",
        order_by="StakeholderSQL.created_at",
        cascade="all, delete-orphan",
    )


class AssetSQL(Base):
    """An uploaded file under a project.

    The binary lives in object storage; only its URL, coarse type and
    size are kept here.
    """

    __tablename__ = "asset"
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("project.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    file_url: Mapped[str] = mapped_column(Text, nullable=False)
    file_type: Mapped[str] = mapped_column(String(32), nullable=False)
    file_size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    created_by: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    project: Mapped[ProjectSQL] = relationship("ProjectSQL", back_populates="assets")
    comments: Mapped[list[CommentSQL]] = relationship(
        "CommentSQL",
        back_populates="asset",
        order_by="CommentSQL.created_at",
        cascade="all, delete-orphan",
    )
    approvals: Mapped[list[ApprovalSQL]] = relationship(
        "ApprovalSQL",
        back_populates="asset",
        order_by="ApprovalSQL.updated_at",
        cascade="all, delete-orphan",
    )


class StakeholderSQL(Base):
    """A reviewer grant on one project.

    Only the SHA-256 digest of the bearer token is stored.
    """

    __tablename__ = "project_stakeholder"
    __table_args__ = (
        Index("ix_project_stakeholder_project_token", "project_id", "access_token_hash"),
    )
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("project.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(Text, nullable=False)
    role: Mapped[str | None] = mapped_column(Text)
    access_token_hash: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    can_approve: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    project: Mapped[ProjectSQL] = relationship("ProjectSQL", back_populates="stakeholders")


class CommentSQL(Base):
    """Append-only comment on an asset."""

    __tablename__ = "comment"
    __table_args__ = (Index("ix_comment_asset_created", "asset_id", "created_at"),)
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    asset_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("asset.id", ondelete="CASCADE"), nullable=False
    )
    author_name: Mapped[str] = mapped_column(Text, nullable=False)
    author_email: Mapped[str | None] = mapped_column(Text)
    author_type: Mapped[str] = mapped_column(String(16), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    asset: Mapped[AssetSQL] = relationship("AssetSQL", back_populates="comments")


class ApprovalSQL(Base):
    """One reviewer's current disposition towards one asset.

    Written only through the ``ON CONFLICT`` upsert keyed on
    ``uq_approval_asset_stakeholder``.
    """

    __tablename__ = "approval"
    __table_args__ = (
        UniqueConstraint("asset_id", "stakeholder_id", name="uq_approval_asset_stakeholder"),
    )
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    asset_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("asset.id", ondelete="CASCADE"), nullable=False
    )
    stakeholder_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("project_stakeholder.id", ondelete="CASCADE"), nullable=False
    )
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    feedback: Mapped[str | None] = mapped_column(Text)
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    asset: Mapped[AssetSQL] = relationship("AssetSQL", back_populates="approvals")


__all__ = [
    "utc_now",
    "ProjectSQL",
    "AssetSQL",
    "StakeholderSQL",
    "CommentSQL",
    "ApprovalSQL",
]
