"""Tests for the access token registry."""

import uuid

import pytest
from sqlalchemy import select

from proofline import agency
from proofline.core.errors import AccessDenied, NotFound, ValidationError
from proofline.core.logs import EventType, get_event_logger
from proofline.models import StakeholderSQL
from proofline.review import resolve_stakeholder
from proofline.review.tokens import (
    MIN_TOKEN_BYTES,
    build_review_link,
    hash_access_token,
    mint_access_token,
    parse_uuid,
)
from proofline.store import get_session


def test_minted_tokens_are_unique_and_long():
    tokens = {mint_access_token() for _ in range(50)}
    assert len(tokens) == 50
    # token_urlsafe renders 32 bytes as 43 characters
    assert all(len(t) >= 43 for t in tokens)


def test_mint_never_goes_below_128_bits():
    token = mint_access_token(4)
    # 16 bytes of base64url without padding
    assert len(token) >= 22
    assert MIN_TOKEN_BYTES == 16


def test_hash_is_sha256_hex():
    digest = hash_access_token("abc")
    assert len(digest) == 64
    assert digest == hash_access_token("abc")
    assert digest != hash_access_token("abd")


def test_build_review_link():
    pid = uuid.UUID("00000000-0000-0000-0000-000000000001")
    link = build_review_link(pid, "tok")
    assert link.endswith(f"/review/{pid}/tok")
    assert link.startswith("http")


@pytest.mark.parametrize("value", [None, "", "not-a-uuid", "1234"])
def test_parse_uuid_rejects_garbage(value):
    assert parse_uuid(value) is None


async def test_grant_returns_token_and_link(acme):
    grant = acme.grant
    assert grant.stakeholder.name == "Jane Doe"
    assert grant.stakeholder.email == "jane@acme.co"
    assert grant.stakeholder.role == "CMO"
    assert grant.stakeholder.can_approve is True
    assert grant.review_url.endswith(f"/{acme.project.id}/{grant.access_token}")


async def test_only_token_digest_is_stored(acme):
    async with get_session() as session:
        row = (await session.execute(select(StakeholderSQL))).scalar_one()
    assert row.access_token_hash == hash_access_token(acme.token)
    assert acme.token not in row.access_token_hash


async def test_resolve_returns_granted_stakeholder(acme):
    stakeholder = await resolve_stakeholder(acme.project.id, acme.token)
    assert stakeholder.id == acme.stakeholder_id
    assert stakeholder.project_id == acme.project.id


async def test_resolve_accepts_string_project_id(acme):
    stakeholder = await resolve_stakeholder(str(acme.project.id), acme.token)
    assert stakeholder.id == acme.stakeholder_id


async def test_wrong_token_and_wrong_project_are_indistinguishable(acme):
    other = await agency.create_project(acme.agency_id, "Other", "Other Co")

    with pytest.raises(AccessDenied) as wrong_token:
        await resolve_stakeholder(acme.project.id, mint_access_token())
    with pytest.raises(AccessDenied) as wrong_project:
        await resolve_stakeholder(other.id, acme.token)
    with pytest.raises(AccessDenied) as unknown_project:
        await resolve_stakeholder(uuid.uuid4(), acme.token)

    messages = {str(e.value) for e in (wrong_token, wrong_project, unknown_project)}
    assert messages == {"Access denied"}
    assert {e.value.kind for e in (wrong_token, wrong_project, unknown_project)} == {
        "access_denied"
    }


@pytest.mark.parametrize("project_id,token", [("nope", "x"), (None, "x")])
async def test_malformed_credentials_are_denied(acme, project_id, token):
    with pytest.raises(AccessDenied):
        await resolve_stakeholder(project_id, token)


async def test_empty_token_is_denied(acme):
    with pytest.raises(AccessDenied):
        await resolve_stakeholder(acme.project.id, "")


async def test_denial_reason_is_logged_without_token(acme):
    bad = mint_access_token()
    with pytest.raises(AccessDenied):
        await resolve_stakeholder(acme.project.id, bad)

    events = get_event_logger().get_events(event_type=EventType.ACCESS_CHECK)
    assert events[-1].metadata["reason"] == "unknown_token_for_project"
    assert all(bad not in e.to_json() for e in get_event_logger().get_events(limit=1000))


async def test_grant_on_foreign_project_is_not_found(acme):
    with pytest.raises(NotFound):
        await agency.grant_stakeholder_access(
            uuid.uuid4(), acme.project.id, {"name": "Eve", "email": "eve@acme.co"}
        )


@pytest.mark.parametrize(
    "grant",
    [
        {"name": "", "email": "x@acme.co"},
        {"name": "Bob", "email": "not-an-email"},
        {"email": "x@acme.co"},
    ],
)
async def test_grant_validates_fields(acme, grant):
    with pytest.raises(ValidationError):
        await agency.grant_stakeholder_access(acme.agency_id, acme.project.id, grant)


@pytest.mark.parametrize("email", ["jane@acme..co", "x@-bad-.com", "jane@", "@acme.co"])
async def test_grant_rejects_malformed_email(acme, email):
    with pytest.raises(ValidationError):
        await agency.grant_stakeholder_access(
            acme.agency_id, acme.project.id, {"name": "Bob", "email": email}
        )
    stakeholders = await agency.list_project_stakeholders(acme.agency_id, acme.project.id)
    assert [s.name for s in stakeholders] == ["Jane Doe"]


async def test_each_grant_gets_its_own_token(acme):
    second = await agency.grant_stakeholder_access(
        acme.agency_id, acme.project.id, {"name": "Ann", "email": "ann@acme.co"}
    )
    assert second.access_token != acme.token
    resolved = await resolve_stakeholder(acme.project.id, second.access_token)
    assert resolved.id == second.stakeholder.id


async def test_list_stakeholders_omits_tokens(acme):
    stakeholders = await agency.list_project_stakeholders(acme.agency_id, acme.project.id)
    assert [s.id for s in stakeholders] == [acme.stakeholder_id]
    assert "access_token" not in stakeholders[0].model_dump()


async def test_list_stakeholders_of_foreign_project(acme):
    with pytest.raises(NotFound):
        await agency.list_project_stakeholders(uuid.uuid4(), acme.project.id)
