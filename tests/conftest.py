"""Shared fixtures: an in-memory review store and a temporary file store."""

import uuid
from dataclasses import dataclass

import pytest
from sqlalchemy.pool import StaticPool

from proofline import agency
from proofline.core.changes import add_listener, clear_listeners
from proofline.core.logs import clear_logs
from proofline.models import Asset, Project, StakeholderGrant
from proofline.storage import LocalObjectStorage, set_storage
from proofline.store import configure_engine, create_all, dispose_engine, drop_all

PNG_HEADER = b"\x89PNG\r\n\x1a\n"


@pytest.fixture(autouse=True)
def reset_process_state(tmp_path):
    """Fresh change listeners, event log and file storage for every test."""
    clear_listeners()
    clear_logs()
    set_storage(LocalObjectStorage(tmp_path / "uploads", "http://testserver/files"))
    yield
    clear_listeners()
    set_storage(None)


@pytest.fixture
async def db():
    """An empty SQLite database shared by every session of the test."""
    engine = configure_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await create_all()
    yield engine
    await drop_all()
    await dispose_engine()


@pytest.fixture
def changes():
    """Collect every change event emitted during the test."""
    events = []

    async def collect(event):
        events.append(event)

    add_listener(collect)
    return events


@pytest.fixture
def agency_id():
    return uuid.uuid4()


@dataclass
class ReviewSetup:
    agency_id: uuid.UUID
    project: Project
    asset: Asset
    grant: StakeholderGrant

    @property
    def token(self) -> str:
        return self.grant.access_token

    @property
    def stakeholder_id(self) -> uuid.UUID:
        return self.grant.stakeholder.id


@pytest.fixture
async def acme(db, agency_id) -> ReviewSetup:
    """Acme Launch with one 2 MB image asset and Jane Doe as reviewer."""
    project = await agency.create_project(agency_id, "Acme Launch", "Acme Co")
    asset = await agency.upload_asset(
        agency_id,
        project.id,
        filename="hero-banner.png",
        content_type="image/png",
        data=PNG_HEADER + b"\0" * (2 * 1024 * 1024 - len(PNG_HEADER)),
        name="Hero Banner",
    )
    grant = await agency.grant_stakeholder_access(
        agency_id,
        project.id,
        {"name": "Jane Doe", "email": "jane@acme.co", "role": "CMO"},
    )
    return ReviewSetup(agency_id=agency_id, project=project, asset=asset, grant=grant)
