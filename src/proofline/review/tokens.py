# src/proofline/review/tokens.py
"""Access token registry: mint and validate per-stakeholder bearer tokens.

A token is scoped to exactly one project. Only its SHA-256 digest is
stored, and lookups go through the composite (project, digest) key, so
presenting a token against any other project fails exactly like an
unknown token.
"""

from __future__ import annotations

import hashlib
import hmac
import secrets
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from proofline.config import config
from proofline.core.changes import ChangeKind, notify_changed
from proofline.core.errors import AccessDenied, NotFound, boundary
from proofline.core.logs import EventType, get_event_logger
from proofline.models import Stakeholder, StakeholderCreate, StakeholderGrant, StakeholderSQL
from proofline.store import commit_session, get_session
from proofline.store import crud

event_logger = get_event_logger()

MIN_TOKEN_BYTES = 16


def mint_access_token(nbytes: int | None = None) -> str:
    """Return a new URL-safe token with at least 128 bits of randomness."""
    return secrets.token_urlsafe(max(nbytes or config.review.token_bytes, MIN_TOKEN_BYTES))


def hash_access_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def build_review_link(project_id: UUID, token: str) -> str:
    """Shareable link: ``{public_url}/{review_path}/{project_id}/{token}``."""
    return f"{config.system.public_url}/{config.review.review_path}/{project_id}/{token}"


def parse_uuid(value: UUID | str | None) -> UUID | None:
    """Parse ``value`` as a UUID, returning ``None`` when it is not one."""
    if isinstance(value, UUID):
        return value
    if not value:
        return None
    try:
        return UUID(str(value))
    except ValueError:
        return None


@boundary("grant_stakeholder_access")
async def grant_stakeholder_access(
    agency_user_id: UUID,
    project_id: UUID,
    grant: StakeholderCreate | dict[str, Any],
) -> StakeholderGrant:
    """Create a reviewer grant on a project owned by ``agency_user_id``.

    The returned :class:`StakeholderGrant` is the only place the
    plaintext token ever appears; the caller delivers the link.
    """
    data = StakeholderCreate.model_validate(grant)
    token = mint_access_token()

    async with get_session() as session:
        project = await crud.get_owned_project_row(session, agency_user_id, project_id)
        if project is None:
            raise NotFound("Project not found")
        stakeholder = await crud.insert_stakeholder(
            session, project_id, data, hash_access_token(token)
        )
        await commit_session(session)

    event_logger.log_user_action(
        "grant_stakeholder_access",
        user_id=agency_user_id,
        project_id=project_id,
        stakeholder_id=str(stakeholder.id),
    )
    await notify_changed(ChangeKind.STAKEHOLDER, stakeholder.id, project_id)
    return StakeholderGrant(
        stakeholder=stakeholder,
        access_token=token,
        review_url=build_review_link(project_id, token),
    )


async def resolve_stakeholder_conn(
    session: AsyncSession, project_id: UUID | str, token: str | None
) -> StakeholderSQL:
    """Return the grant matching (``project_id``, ``token``) or raise AccessDenied.

    Every failure raises the same error; the reason is only logged.
    """
    pid = parse_uuid(project_id)
    if pid is None or not token:
        event_logger.log_access_denied("malformed_credentials", project_id=project_id)
        raise AccessDenied()

    digest = hash_access_token(token)
    row = await crud.find_stakeholder_by_token_hash(session, pid, digest)
    if row is None or not hmac.compare_digest(row.access_token_hash, digest):
        event_logger.log_access_denied("unknown_token_for_project", project_id=pid)
        raise AccessDenied()
    return row


async def authenticate_stakeholder_conn(
    session: AsyncSession, stakeholder_id: UUID | str, token: str | None
) -> StakeholderSQL:
    """Return stakeholder ``stakeholder_id`` if ``token`` is its token, else AccessDenied."""
    sid = parse_uuid(stakeholder_id)
    if sid is None or not token:
        event_logger.log_access_denied("malformed_credentials")
        raise AccessDenied()

    row = await crud.get_stakeholder_row(session, sid)
    if row is None or not hmac.compare_digest(row.access_token_hash, hash_access_token(token)):
        event_logger.log_access_denied("stakeholder_token_mismatch", stakeholder_id=str(sid))
        raise AccessDenied()
    return row


@boundary("resolve_stakeholder")
async def resolve_stakeholder(project_id: UUID | str, token: str | None) -> Stakeholder:
    """Validate ``token`` against ``project_id`` and return its stakeholder."""
    async with get_session() as session:
        row = await resolve_stakeholder_conn(session, project_id, token)
        stakeholder = Stakeholder.model_validate(row)
    event_logger.debug(
        "Access token accepted",
        event_type=EventType.ACCESS_CHECK,
        project_id=stakeholder.project_id,
        user_id=stakeholder.id,
    )
    return stakeholder


@boundary("list_stakeholders")
async def list_project_stakeholders(agency_user_id: UUID, project_id: UUID) -> list[Stakeholder]:
    """Return the grants of a project owned by ``agency_user_id`` (without tokens)."""
    async with get_session() as session:
        project = await crud.get_owned_project_row(session, agency_user_id, project_id)
        if project is None:
            raise NotFound("Project not found")
        return await crud.list_stakeholders(session, project_id)


__all__ = [
    "MIN_TOKEN_BYTES",
    "mint_access_token",
    "hash_access_token",
    "build_review_link",
    "parse_uuid",
    "grant_stakeholder_access",
    "resolve_stakeholder_conn",
    "authenticate_stakeholder_conn",
    "resolve_stakeholder",
    "list_project_stakeholders",
]
