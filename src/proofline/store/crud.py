# src/proofline/store/crud.py
"""Row-level create/read/update operations used by the services.

Every function takes an open session and leaves committing to the
caller, so one service call maps to one transaction.
"""

from __future__ import annotations

import time
import uuid
from datetime import datetime
from uuid import UUID

from sqlalchemy import DateTime, Uuid, bindparam, select
from sqlalchemy import text as sa_text
from sqlalchemy.ext.asyncio import AsyncSession

from proofline.core.logs import get_event_logger
from proofline.models import (
    Approval,
    ApprovalSQL,
    ApprovalStatus,
    Asset,
    AssetSQL,
    AuthorKind,
    Comment,
    CommentSQL,
    FileKind,
    Project,
    ProjectCreate,
    ProjectSQL,
    ProjectStatus,
    Stakeholder,
    StakeholderCreate,
    StakeholderSQL,
)
from proofline.models.sqlalchemy_models import utc_now

event_logger = get_event_logger()

_UPSERT_APPROVAL = (
    sa_text(
        "INSERT INTO approval "
        "(id, asset_id, stakeholder_id, status, feedback, approved_at, updated_at) "
        "VALUES (:id, :aid, :sid, :status, :feedback, :approved_at, :updated_at) "
        "ON CONFLICT (asset_id, stakeholder_id) DO UPDATE SET "
        "status = excluded.status, feedback = excluded.feedback, "
        "approved_at = excluded.approved_at, updated_at = excluded.updated_at"
    )
    .bindparams(
        bindparam("id", type_=Uuid()),
        bindparam("aid", type_=Uuid()),
        bindparam("sid", type_=Uuid()),
        bindparam("approved_at", type_=DateTime(timezone=True)),
        bindparam("updated_at", type_=DateTime(timezone=True)),
    )
)


async def insert_project(
    session: AsyncSession, agency_user_id: UUID, data: ProjectCreate
) -> Project:
    """Insert a new project in ``setup`` status owned by ``agency_user_id``."""

    row = ProjectSQL(
        name=data.name,
        client_company=data.client_company,
        agency_user_id=agency_user_id,
        due_date=data.due_date,
        status=ProjectStatus.SETUP.value,
    )
    session.add(row)
    await session.flush()
    event_logger.log_database_operation(
        f"Inserted project {row.id}", operation="insert", table="project", project_id=row.id
    )
    return Project.model_validate(row)


async def get_owned_project_row(
    session: AsyncSession, agency_user_id: UUID, project_id: UUID
) -> ProjectSQL | None:
    """Return ``project_id`` only if ``agency_user_id`` owns it."""

    result = await session.execute(
        select(ProjectSQL).where(
            ProjectSQL.id == project_id, ProjectSQL.agency_user_id == agency_user_id
        )
    )
    return result.scalar_one_or_none()


async def set_project_status(
    session: AsyncSession, row: ProjectSQL, status: ProjectStatus
) -> Project:
    row.status = status.value
    await session.flush()
    event_logger.log_database_operation(
        f"Project status set to {status.value}",
        operation="update",
        table="project",
        project_id=row.id,
        status=status.value,
    )
    return Project.model_validate(row)


async def insert_asset(
    session: AsyncSession,
    *,
    project_id: UUID,
    name: str,
    description: str | None,
    file_url: str,
    file_type: FileKind,
    file_size: int,
    created_by: UUID,
) -> Asset:
    row = AssetSQL(
        project_id=project_id,
        name=name,
        description=description,
        file_url=file_url,
        file_type=file_type.value,
        file_size=file_size,
        created_by=created_by,
    )
    session.add(row)
    await session.flush()
    event_logger.log_database_operation(
        f"Inserted asset {row.id}", operation="insert", table="asset", project_id=project_id
    )
    return Asset.model_validate(row)


async def get_asset_row(session: AsyncSession, asset_id: UUID) -> AssetSQL | None:
    return await session.get(AssetSQL, asset_id)


async def insert_stakeholder(
    session: AsyncSession, project_id: UUID, data: StakeholderCreate, token_hash: str
) -> Stakeholder:
    row = StakeholderSQL(
        project_id=project_id,
        name=data.name,
        email=data.email,
        role=data.role,
        can_approve=data.can_approve,
        access_token_hash=token_hash,
    )
    session.add(row)
    await session.flush()
    event_logger.log_database_operation(
        f"Inserted stakeholder {row.id}",
        operation="insert",
        table="project_stakeholder",
        project_id=project_id,
    )
    return Stakeholder.model_validate(row)


async def find_stakeholder_by_token_hash(
    session: AsyncSession, project_id: UUID, token_hash: str
) -> StakeholderSQL | None:
    """Look up a grant by its composite (project, token digest) key."""

    result = await session.execute(
        select(StakeholderSQL).where(
            StakeholderSQL.project_id == project_id,
            StakeholderSQL.access_token_hash == token_hash,
        )
    )
    return result.scalar_one_or_none()


async def get_stakeholder_row(
    session: AsyncSession, stakeholder_id: UUID
) -> StakeholderSQL | None:
    return await session.get(StakeholderSQL, stakeholder_id)


async def list_stakeholders(session: AsyncSession, project_id: UUID) -> list[Stakeholder]:
    result = await session.execute(
        select(StakeholderSQL)
        .where(StakeholderSQL.project_id == project_id)
        .order_by(StakeholderSQL.created_at)
    )
    return [Stakeholder.model_validate(r) for r in result.scalars().all()]


async def insert_comment(
    session: AsyncSession,
    *,
    asset_id: UUID,
    author_name: str,
    author_email: str | None,
    author_type: AuthorKind,
    content: str,
) -> Comment:
    """Append a comment; comments are never updated afterwards."""

    row = CommentSQL(
        asset_id=asset_id,
        author_name=author_name,
        author_email=author_email,
        author_type=author_type.value,
        content=content,
    )
    session.add(row)
    await session.flush()
    event_logger.log_database_operation(
        f"Appended comment {row.id} to asset {asset_id}",
        operation="insert",
        table="comment",
    )
    return Comment.model_validate(row)


async def upsert_approval(
    session: AsyncSession,
    *,
    asset_id: UUID,
    stakeholder_id: UUID,
    status: ApprovalStatus,
    feedback: str | None,
    approved_at: datetime | None,
    updated_at: datetime | None = None,
) -> Approval:
    """Insert or replace the approval row for (``asset_id``, ``stakeholder_id``)."""

    start_time = time.time()
    await session.execute(
        _UPSERT_APPROVAL,
        {
            "id": uuid.uuid4(),
            "aid": asset_id,
            "sid": stakeholder_id,
            "status": status.value,
            "feedback": feedback,
            "approved_at": approved_at,
            "updated_at": updated_at or utc_now(),
        },
    )
    result = await session.execute(
        select(ApprovalSQL)
        .where(
            ApprovalSQL.asset_id == asset_id,
            ApprovalSQL.stakeholder_id == stakeholder_id,
        )
        .execution_options(populate_existing=True)
    )
    row = result.scalar_one()
    event_logger.log_database_operation(
        f"Upserted approval for asset {asset_id}",
        operation="upsert",
        table="approval",
        status=status.value,
        processing_time_ms=(time.time() - start_time) * 1000,
    )
    return Approval.model_validate(row)


__all__ = [
    "insert_project",
    "get_owned_project_row",
    "set_project_status",
    "insert_asset",
    "get_asset_row",
    "insert_stakeholder",
    "find_stakeholder_by_token_hash",
    "get_stakeholder_row",
    "list_stakeholders",
    "insert_comment",
    "upsert_approval",
]
