# src/proofline/agency/service.py
"""Agency-side operations: projects, asset uploads, comments and dashboards.

Every call carries the ``agency_user_id`` the identity store resolved,
and every read or write is scoped to projects that identity owns. A
project owned by someone else is reported as missing.
"""

from __future__ import annotations

import secrets
import time
from datetime import date
from pathlib import PurePath
from uuid import UUID

from proofline.config import config
from proofline.core.changes import ChangeKind, notify_changed
from proofline.core.errors import NotFound, ValidationError, boundary
from proofline.core.logs import get_event_logger
from proofline.models import (
    Asset,
    AuthorKind,
    Comment,
    FileKind,
    Project,
    ProjectAggregate,
    ProjectCreate,
    ProjectStatus,
    ProjectSummary,
)
from proofline.models.validators import normalize_optional_text
from proofline.storage import get_storage
from proofline.store import commit_session, crud, get_session
from proofline.store.queries import (
    list_project_aggregates,
    load_project_aggregate,
    summarize_projects,
)

event_logger = get_event_logger()


@boundary("create_project")
async def create_project(
    agency_user_id: UUID,
    name: str,
    client_company: str,
    due_date: date | str | None = None,
) -> Project:
    """Create a project in ``setup`` status."""
    data = ProjectCreate.model_validate(
        {"name": name, "client_company": client_company, "due_date": due_date or None}
    )
    async with get_session() as session:
        project = await crud.insert_project(session, agency_user_id, data)
        await commit_session(session)

    event_logger.log_user_action("create_project", user_id=agency_user_id, project_id=project.id)
    await notify_changed(ChangeKind.PROJECT, project.id, project.id)
    return project


@boundary("list_projects")
async def list_projects(agency_user_id: UUID) -> list[ProjectAggregate]:
    """Every owned project, newest first, with assets, comments and approvals."""
    async with get_session() as session:
        return await list_project_aggregates(session, agency_user_id)


@boundary("get_project")
async def get_project(agency_user_id: UUID, project_id: UUID) -> ProjectAggregate:
    async with get_session() as session:
        if await crud.get_owned_project_row(session, agency_user_id, project_id) is None:
            raise NotFound("Project not found")
        project = await load_project_aggregate(session, project_id)
    if project is None:
        raise NotFound("Project not found")
    return project


@boundary("owns_project")
async def owns_project(agency_user_id: UUID, project_id: UUID) -> bool:
    async with get_session() as session:
        return await crud.get_owned_project_row(session, agency_user_id, project_id) is not None


def _coerce_project_status(value: ProjectStatus | str) -> ProjectStatus:
    if isinstance(value, ProjectStatus):
        return value
    normalized = str(value).strip().lower().replace("_", "-")
    try:
        return ProjectStatus(normalized)
    except ValueError:
        raise ValidationError(f"Unknown project status: {value!r}") from None


@boundary("update_project_status")
async def update_project_status(
    agency_user_id: UUID, project_id: UUID, status: ProjectStatus | str
) -> Project:
    """Set the lifecycle status; any status may follow any other."""
    new_status = _coerce_project_status(status)
    async with get_session() as session:
        row = await crud.get_owned_project_row(session, agency_user_id, project_id)
        if row is None:
            raise NotFound("Project not found")
        project = await crud.set_project_status(session, row, new_status)
        await commit_session(session)

    event_logger.log_user_action(
        "update_project_status",
        user_id=agency_user_id,
        project_id=project_id,
        status=new_status.value,
    )
    await notify_changed(ChangeKind.PROJECT, project_id, project_id)
    return project


def _content_type(value: str | None) -> str:
    return (value or "").split(";", 1)[0].strip().lower()


def _storage_path(project_id: UUID, filename: str) -> str:
    """``projects/{project_id}/{millis}-{random}.{ext}``"""
    ext = PurePath(filename).suffix.lstrip(".").lower() or "bin"
    return f"projects/{project_id}/{int(time.time() * 1000)}-{secrets.token_hex(4)}.{ext}"


def _validate_upload(filename: str, content_type: str, data: bytes) -> None:
    if not filename.strip():
        raise ValidationError("File name is required")
    if not data:
        raise ValidationError("File is empty")
    limit = config.storage.max_upload_bytes
    if len(data) > limit:
        raise ValidationError(f"File exceeds the {limit} byte upload limit")
    if content_type not in config.storage.allowed_content_types:
        raise ValidationError(f"Unsupported file type: {content_type or 'unknown'}")


@boundary("upload_asset")
async def upload_asset(
    agency_user_id: UUID,
    project_id: UUID,
    *,
    filename: str,
    content_type: str | None,
    data: bytes,
    name: str | None = None,
    description: str | None = None,
) -> Asset:
    """Store the file and record it as an asset of ``project_id``.

    The display name defaults to the file name. If the asset row cannot
    be written the stored file is removed again.
    """
    mime = _content_type(content_type)
    _validate_upload(filename, mime, data)
    display_name = normalize_optional_text(name) or filename.strip()

    storage = get_storage()
    async with get_session() as session:
        if await crud.get_owned_project_row(session, agency_user_id, project_id) is None:
            raise NotFound("Project not found")

        path = _storage_path(project_id, filename)
        file_url = await storage.put(path, data, mime)
        try:
            asset = await crud.insert_asset(
                session,
                project_id=project_id,
                name=display_name,
                description=normalize_optional_text(description),
                file_url=file_url,
                file_type=FileKind.from_content_type(mime),
                file_size=len(data),
                created_by=agency_user_id,
            )
            await commit_session(session)
        except Exception:
            await storage.delete(path)
            raise

    event_logger.log_user_action(
        "upload_asset",
        user_id=agency_user_id,
        project_id=project_id,
        asset_id=str(asset.id),
        size=len(data),
    )
    await notify_changed(ChangeKind.ASSET, asset.id, project_id)
    return asset


@boundary("add_agency_comment")
async def add_agency_comment(
    agency_user_id: UUID,
    asset_id: UUID,
    *,
    author_name: str,
    author_email: str | None,
    content: str,
) -> Comment:
    """Append an agency-authored comment to an asset of an owned project."""
    text = normalize_optional_text(content)
    if text is None:
        raise ValidationError("Comment content is required")
    author = normalize_optional_text(author_name) or normalize_optional_text(author_email)
    if author is None:
        raise ValidationError("Author name is required")

    async with get_session() as session:
        asset = await crud.get_asset_row(session, asset_id)
        if asset is None or (
            await crud.get_owned_project_row(session, agency_user_id, asset.project_id)
        ) is None:
            raise NotFound("Asset not found")
        comment = await crud.insert_comment(
            session,
            asset_id=asset_id,
            author_name=author,
            author_email=normalize_optional_text(author_email),
            author_type=AuthorKind.AGENCY,
            content=text,
        )
        await commit_session(session)
        project_id = asset.project_id

    event_logger.log_user_action("add_comment", user_id=agency_user_id, project_id=project_id)
    await notify_changed(ChangeKind.COMMENT, comment.id, project_id)
    return comment


@boundary("project_summary")
async def project_summary(agency_user_id: UUID) -> ProjectSummary:
    async with get_session() as session:
        return await summarize_projects(session, agency_user_id)


__all__ = [
    "create_project",
    "list_projects",
    "get_project",
    "owns_project",
    "update_project_status",
    "upload_asset",
    "add_agency_comment",
    "project_summary",
]
