"""Tests for opening a guest review session."""

import uuid

import pytest

from proofline import agency
from proofline.config import config
from proofline.core.errors import AccessDenied
from proofline.models import ApprovalStatus, FileKind
from proofline.review import open_review_session, submit_feedback
from proofline.review.state import approval_status_for
from proofline.review.tokens import mint_access_token


async def test_grant_and_review_scenario(acme):
    review = await open_review_session(acme.project.id, acme.token)

    assert review.stakeholder.name == "Jane Doe"
    assert review.stakeholder.id == acme.stakeholder_id
    assert review.project.id == acme.project.id
    assert review.project.name == "Acme Launch"
    assert review.project.client_company == "Acme Co"
    assert len(review.project.assets) == 1

    asset = review.project.assets[0]
    assert asset.name == "Hero Banner"
    assert asset.file_type is FileKind.IMAGE
    assert asset.file_size == 2 * 1024 * 1024
    assert asset.comments == []
    assert asset.approvals == []
    assert approval_status_for(asset, review.stakeholder.id) is ApprovalStatus.PENDING


async def test_session_carries_refresh_interval(acme):
    review = await open_review_session(acme.project.id, acme.token)
    assert review.refresh_interval_seconds == config.review.refresh_seconds


async def test_session_is_read_only_and_repeatable(acme):
    first = await open_review_session(acme.project.id, acme.token)
    second = await open_review_session(acme.project.id, acme.token)
    assert first.model_dump() == second.model_dump()


async def test_session_reflects_later_feedback(acme):
    await open_review_session(acme.project.id, acme.token)
    await submit_feedback(
        acme.asset.id, acme.stakeholder_id, acme.token, "commented", "Make the logo bigger"
    )

    review = await open_review_session(acme.project.id, acme.token)
    asset = review.project.assets[0]
    assert [c.content for c in asset.comments] == ["Make the logo bigger"]
    assert approval_status_for(asset, acme.stakeholder_id) is ApprovalStatus.COMMENTED


async def test_session_lists_every_reviewers_approval(acme):
    ann = await agency.grant_stakeholder_access(
        acme.agency_id, acme.project.id, {"name": "Ann", "email": "ann@acme.co"}
    )
    await submit_feedback(acme.asset.id, acme.stakeholder_id, acme.token, "approved")
    await submit_feedback(acme.asset.id, ann.stakeholder.id, ann.access_token, "rejected")

    review = await open_review_session(acme.project.id, ann.access_token)
    asset = review.project.assets[0]
    assert len(asset.approvals) == 2
    assert approval_status_for(asset, acme.stakeholder_id) is ApprovalStatus.APPROVED
    assert approval_status_for(asset, ann.stakeholder.id) is ApprovalStatus.REJECTED


async def test_bad_token_and_bad_project_both_deny(acme):
    other = await agency.create_project(acme.agency_id, "Other", "Other Co")
    attempts = [
        (acme.project.id, mint_access_token()),
        (other.id, acme.token),
        (uuid.uuid4(), acme.token),
        ("not-a-uuid", acme.token),
        (acme.project.id, None),
    ]
    for project_id, token in attempts:
        with pytest.raises(AccessDenied) as exc:
            await open_review_session(project_id, token)
        assert str(exc.value) == "Access denied"


async def test_session_does_not_include_other_projects(acme):
    other = await agency.create_project(acme.agency_id, "Other", "Other Co")
    await agency.upload_asset(
        acme.agency_id,
        other.id,
        filename="brief.pdf",
        content_type="application/pdf",
        data=b"%PDF-1.4",
    )
    review = await open_review_session(acme.project.id, acme.token)
    assert [a.id for a in review.project.assets] == [acme.asset.id]
