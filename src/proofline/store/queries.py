# src/proofline/store/queries.py
"""Aggregate reads: a project with everything under it, and dashboard counts."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from proofline.models import (
    ApprovalSQL,
    AssetSQL,
    ProjectAggregate,
    ProjectSQL,
    ProjectSummary,
)


def _aggregate_query():
    return select(ProjectSQL).options(
        selectinload(ProjectSQL.assets).selectinload(AssetSQL.comments),
        selectinload(ProjectSQL.assets).selectinload(AssetSQL.approvals),
    )


async def load_project_aggregate(
    session: AsyncSession, project_id: UUID
) -> ProjectAggregate | None:
    """Return the project with its assets, comments (oldest first) and approvals."""

    result = await session.execute(
        _aggregate_query()
        .where(ProjectSQL.id == project_id)
        .execution_options(populate_existing=True)
    )
    row = result.scalar_one_or_none()
    if row is None:
        return None
    return ProjectAggregate.model_validate(row)


async def list_project_aggregates(
    session: AsyncSession, agency_user_id: UUID
) -> list[ProjectAggregate]:
    """Return every project owned by ``agency_user_id``, newest first."""

    result = await session.execute(
        _aggregate_query()
        .where(ProjectSQL.agency_user_id == agency_user_id)
        .order_by(ProjectSQL.created_at.desc())
        .execution_options(populate_existing=True)
    )
    return [ProjectAggregate.model_validate(r) for r in result.scalars().all()]


async def summarize_projects(session: AsyncSession, agency_user_id: UUID) -> ProjectSummary:
    """Count projects per status, assets, and approvals per status."""

    owned = select(ProjectSQL.id).where(ProjectSQL.agency_user_id == agency_user_id)

    status_rows = await session.execute(
        select(ProjectSQL.status, func.count())
        .where(ProjectSQL.agency_user_id == agency_user_id)
        .group_by(ProjectSQL.status)
    )
    projects_by_status = {status: count for status, count in status_rows.all()}

    total_assets = await session.scalar(
        select(func.count()).select_from(AssetSQL).where(AssetSQL.project_id.in_(owned))
    )

    # An asset awaits review until at least one reviewer has approved it.
    approved_assets = (
        select(ApprovalSQL.asset_id).where(ApprovalSQL.status == "approved").distinct()
    )
    awaiting = await session.scalar(
        select(func.count())
        .select_from(AssetSQL)
        .where(AssetSQL.project_id.in_(owned), AssetSQL.id.not_in(approved_assets))
    )

    approval_rows = await session.execute(
        select(ApprovalSQL.status, func.count())
        .join(AssetSQL, AssetSQL.id == ApprovalSQL.asset_id)
        .where(AssetSQL.project_id.in_(owned))
        .group_by(ApprovalSQL.status)
    )
    approvals_by_status = {status: count for status, count in approval_rows.all()}

    return ProjectSummary(
        total_projects=sum(projects_by_status.values()),
        projects_by_status=projects_by_status,
        total_assets=total_assets or 0,
        assets_awaiting_review=awaiting or 0,
        approvals_by_status=approvals_by_status,
    )


__all__ = [
    "load_project_aggregate",
    "list_project_aggregates",
    "summarize_projects",
]
