"""Tests for the HTTP surface."""

import uuid
from unittest import mock

import pytest
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient
from starlette.websockets import WebSocketDisconnect

from proofline import agency
from proofline.core.changes import ChangeEvent, ChangeKind
from proofline.core.errors import AccessDenied, NotFound
from proofline.web.main import create_app
from proofline.web.routes import websocket_endpoint
from proofline.web.websocket import Subscription, WebSocketManager, authorize_subscription


@pytest.fixture
async def client(db):
    app = create_app(use_lifespan=False)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest.fixture
def agency_headers(agency_id):
    return {"X-Agency-User": str(agency_id)}


async def _setup_review(client, headers):
    project = (
        await client.post(
            "/api/projects",
            json={"name": "Acme Launch", "client_company": "Acme Co"},
            headers=headers,
        )
    ).json()
    asset = (
        await client.post(
            f"/api/projects/{project['id']}/assets",
            files={"file": ("hero.png", b"\x89PNG\r\n\x1a\n" + b"\0" * 64, "image/png")},
            data={"name": "Hero Banner"},
            headers=headers,
        )
    ).json()
    grant = (
        await client.post(
            f"/api/projects/{project['id']}/stakeholders",
            json={"name": "Jane Doe", "email": "jane@acme.co", "role": "CMO"},
            headers=headers,
        )
    ).json()
    return project, asset, grant


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


@pytest.mark.parametrize("headers", [{}, {"X-Agency-User": "someone"}])
async def test_agency_routes_require_identity(client, headers):
    response = await client.get("/api/projects", headers=headers)
    assert response.status_code == 401


async def test_agency_flow(client, agency_headers):
    project, asset, grant = await _setup_review(client, agency_headers)
    assert project["status"] == "setup"
    assert asset["file_type"] == "image"
    assert asset["name"] == "Hero Banner"
    assert grant["review_url"].endswith(f"/review/{project['id']}/{grant['access_token']}")

    response = await client.patch(
        f"/api/projects/{project['id']}/status",
        json={"status": "in-review"},
        headers=agency_headers,
    )
    assert response.status_code == 200
    assert response.json()["status"] == "in-review"

    response = await client.post(
        f"/api/assets/{asset['id']}/comments",
        json={"author_name": "Studio", "content": "v2 uploaded"},
        headers=agency_headers,
    )
    assert response.status_code == 201
    assert response.json()["author_type"] == "agency"

    listing = (await client.get("/api/projects", headers=agency_headers)).json()
    assert [p["id"] for p in listing["projects"]] == [project["id"]]
    assert listing["projects"][0]["assets"][0]["comments"][0]["content"] == "v2 uploaded"

    stakeholders = (
        await client.get(f"/api/projects/{project['id']}/stakeholders", headers=agency_headers)
    ).json()["stakeholders"]
    assert [s["name"] for s in stakeholders] == ["Jane Doe"]
    assert "access_token" not in stakeholders[0]

    summary = (await client.get("/api/summary", headers=agency_headers)).json()
    assert summary["total_projects"] == 1
    assert summary["assets_awaiting_review"] == 1


async def test_foreign_project_is_404(client, agency_headers):
    project, _, _ = await _setup_review(client, agency_headers)
    response = await client.get(
        f"/api/projects/{project['id']}", headers={"X-Agency-User": str(uuid.uuid4())}
    )
    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


async def test_validation_errors_are_422(client, agency_headers):
    response = await client.post(
        "/api/projects", json={"name": " ", "client_company": "Acme"}, headers=agency_headers
    )
    assert response.status_code == 422
    assert response.json()["error"] == "validation_error"

    response = await client.post("/api/projects", json={}, headers=agency_headers)
    assert response.status_code == 422
    assert response.json()["error"] == "validation_error"


async def test_uploaded_file_is_served(client, agency_headers):
    _, asset, _ = await _setup_review(client, agency_headers)
    assert asset["file_url"].startswith("http://testserver/files/projects/")

    response = await client.get(asset["file_url"])
    assert response.status_code == 200
    assert response.content.startswith(b"\x89PNG")
    assert response.headers["content-type"] == "image/png"

    missing = await client.get("/files/projects/nothing-here.png")
    assert missing.status_code == 404


async def test_upload_rejects_disallowed_type(client, agency_headers):
    project, _, _ = await _setup_review(client, agency_headers)
    response = await client.post(
        f"/api/projects/{project['id']}/assets",
        files={"file": ("run.sh", b"#!/bin/sh", "application/x-sh")},
        headers=agency_headers,
    )
    assert response.status_code == 422


async def test_guest_review_and_feedback(client, agency_headers):
    project, asset, grant = await _setup_review(client, agency_headers)
    token = grant["access_token"]

    review = await client.get(f"/api/review/{project['id']}/{token}")
    assert review.status_code == 200
    body = review.json()
    assert body["stakeholder"]["name"] == "Jane Doe"
    assert body["refresh_interval_seconds"] == 30
    assert len(body["project"]["assets"]) == 1

    response = await client.post(
        f"/api/review/{project['id']}/{token}/feedback",
        json={
            "asset_id": asset["id"],
            "stakeholder_id": grant["stakeholder"]["id"],
            "status": "approved",
            "feedback": "Looks great, ship it",
        },
    )
    assert response.status_code == 201
    result = response.json()
    assert result["approval"]["status"] == "approved"
    assert result["approval"]["approved_at"] is not None
    assert result["comment"]["author_type"] == "client"


async def test_guest_denials_are_uniform(client, agency_headers):
    project, asset, grant = await _setup_review(client, agency_headers)
    other = (
        await client.post(
            "/api/projects",
            json={"name": "Other", "client_company": "Other Co"},
            headers=agency_headers,
        )
    ).json()

    bad_token = await client.get(f"/api/review/{project['id']}/wrong-token")
    bad_project = await client.get(f"/api/review/{other['id']}/{grant['access_token']}")
    assert bad_token.status_code == bad_project.status_code == 403
    assert bad_token.json() == bad_project.json() == {
        "error": "access_denied",
        "detail": "Access denied",
    }

    response = await client.post(
        f"/api/review/{other['id']}/{grant['access_token']}/feedback",
        json={
            "asset_id": asset["id"],
            "stakeholder_id": grant["stakeholder"]["id"],
            "status": "approved",
        },
    )
    assert response.status_code == 403


async def test_rpc_procedures(client, agency_headers):
    project, asset, grant = await _setup_review(client, agency_headers)

    response = await client.post(
        "/rpc/get_project_for_review",
        json={"project_id": project["id"], "access_token": grant["access_token"]},
    )
    assert response.status_code == 200
    assert set(response.json()) == {"project", "stakeholder"}

    response = await client.post(
        "/rpc/submit_client_feedback",
        json={
            "asset_id": asset["id"],
            "stakeholder_id": grant["stakeholder"]["id"],
            "access_token": grant["access_token"],
            "status": "rejected",
            "feedback": "Wrong logo",
        },
    )
    assert response.status_code == 204

    response = await client.post(
        "/rpc/submit_client_feedback",
        json={
            "asset_id": asset["id"],
            "stakeholder_id": grant["stakeholder"]["id"],
            "access_token": "forged",
            "status": "approved",
        },
    )
    assert response.status_code == 403

    approvals = (
        await client.get(f"/api/projects/{project['id']}", headers=agency_headers)
    ).json()["assets"][0]["approvals"]
    assert [a["status"] for a in approvals] == ["rejected"]


async def test_agency_comment_email_is_validated(client, agency_headers):
    _, asset, _ = await _setup_review(client, agency_headers)
    response = await client.post(
        f"/api/assets/{asset['id']}/comments",
        json={"author_name": "Studio", "author_email": "studio@@agency", "content": "v2"},
        headers=agency_headers,
    )
    assert response.status_code == 422


class _FakeSocket:
    def __init__(self, fail=False):
        self.sent = []
        self.fail = fail
        self.accepted = False
        self.closed = None

    async def accept(self):
        self.accepted = True

    async def close(self, code=1000, reason=None):
        self.closed = code

    async def send_json(self, message):
        if self.fail:
            raise RuntimeError("gone")
        self.sent.append(message)


def _event(kind, project_id):
    return ChangeEvent(kind=kind, id=uuid.uuid4(), project_id=project_id)


@pytest.mark.parametrize("headers", [{}, {"X-Agency-User": "someone"}])
def test_change_feed_rejects_anonymous_clients(headers):
    client = TestClient(create_app(use_lifespan=False))
    with pytest.raises(WebSocketDisconnect) as exc_info:
        with client.websocket_connect("/ws/changes", headers=headers):
            pass
    assert exc_info.value.code == 1008


async def test_change_feed_rejects_foreign_token(acme, agency_id):
    other = await agency.create_project(agency_id, "Other", "Other Co")
    socket = _FakeSocket()
    manager = WebSocketManager()
    with mock.patch("proofline.web.routes.websocket_manager", manager):
        await websocket_endpoint(
            socket, project_id=str(other.id), token=acme.token, x_agency_user=None
        )
    assert socket.closed == 1008
    assert not socket.accepted
    assert manager.active_connections == {}


async def test_authorize_guest_is_pinned_to_token_project(acme):
    subscription = await authorize_subscription(str(acme.project.id), acme.token, None)
    assert subscription.project_id == acme.project.id
    assert subscription.agency_user_id is None

    with pytest.raises(AccessDenied):
        await authorize_subscription(str(acme.project.id), "wrong-token", None)
    with pytest.raises(AccessDenied):
        await authorize_subscription(None, acme.token, None)


async def test_authorize_agency_subscriptions(acme):
    owner = str(acme.agency_id)
    dashboard = await authorize_subscription(None, None, owner)
    assert dashboard.project_id is None
    assert dashboard.agency_user_id == acme.agency_id

    pinned = await authorize_subscription(str(acme.project.id), None, owner)
    assert pinned.project_id == acme.project.id

    with pytest.raises(NotFound):
        await authorize_subscription(str(acme.project.id), None, str(uuid.uuid4()))
    with pytest.raises(AccessDenied):
        await authorize_subscription(str(acme.project.id), None, None)


async def test_guest_socket_only_sees_its_project():
    manager = WebSocketManager()
    watched = uuid.uuid4()
    guest, anonymous, dead = _FakeSocket(), _FakeSocket(), _FakeSocket(fail=True)
    await manager.connect(guest, Subscription(project_id=watched))
    await manager.connect(anonymous, Subscription())
    await manager.connect(dead, Subscription(project_id=watched))

    await manager.broadcast(_event(ChangeKind.APPROVAL, watched))
    await manager.broadcast(_event(ChangeKind.STAKEHOLDER, uuid.uuid4()))
    await manager.broadcast(_event(ChangeKind.ASSET, None))

    assert [m["kind"] for m in guest.sent] == ["approval"]
    assert anonymous.sent == []
    assert dead not in manager.active_connections


async def test_dashboard_socket_only_sees_owned_projects(acme):
    stranger = uuid.uuid4()
    foreign = await agency.create_project(stranger, "Rival Launch", "Rival Co")
    manager = WebSocketManager()
    dashboard = _FakeSocket()
    await manager.connect(dashboard, Subscription(agency_user_id=acme.agency_id))

    await manager.broadcast(_event(ChangeKind.COMMENT, acme.project.id))
    await manager.broadcast(_event(ChangeKind.PROJECT, foreign.id))
    await manager.broadcast(_event(ChangeKind.APPROVAL, acme.project.id))

    assert [m["project_id"] for m in dashboard.sent] == [str(acme.project.id)] * 2


async def test_dashboard_ownership_is_looked_up_once_per_project():
    mine, theirs = uuid.uuid4(), uuid.uuid4()
    calls = []

    async def owns(user_id, project_id):
        calls.append(project_id)
        return project_id == mine

    manager = WebSocketManager(owns_project=owns)
    dashboard = _FakeSocket()
    await manager.connect(dashboard, Subscription(agency_user_id=uuid.uuid4()))
    for project_id in (mine, theirs, mine, theirs):
        await manager.broadcast(_event(ChangeKind.ASSET, project_id))

    assert len(dashboard.sent) == 2
    assert calls == [mine, theirs]
