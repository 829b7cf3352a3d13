# src/proofline/store/db.py
"""Database engine, session creation, migrations, and helpers."""

from __future__ import annotations

import asyncio
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from alembic import command as alembic_command
from alembic.config import Config
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from proofline.config import config
from proofline.core.logs import get_event_logger, log_calls
from proofline.models.base import Base

event_logger = get_event_logger()

_ENGINE: AsyncEngine | None = None
_SESSION_FACTORY: async_sessionmaker[AsyncSession] | None = None


def configure_engine(url: str | None = None, **engine_kwargs: Any) -> AsyncEngine:
    """Create the process-wide engine for ``url`` (default: configured URL).

    Any existing engine is replaced; call :func:`dispose_engine` first to
    close its connections.
    """
    global _ENGINE, _SESSION_FACTORY
    engine_kwargs.setdefault("echo", config.database.echo)
    _ENGINE = create_async_engine(url or config.database.url, **engine_kwargs)
    _SESSION_FACTORY = async_sessionmaker(
        bind=_ENGINE, class_=AsyncSession, expire_on_commit=False
    )
    return _ENGINE


def get_engine() -> AsyncEngine:
    if _ENGINE is None:
        return configure_engine()
    return _ENGINE


async def dispose_engine() -> None:
    global _ENGINE, _SESSION_FACTORY
    if _ENGINE is not None:
        await _ENGINE.dispose()
    _ENGINE = None
    _SESSION_FACTORY = None


@asynccontextmanager
async def get_session() -> AsyncIterator[AsyncSession]:
    """Return a SQLAlchemy asynchronous session.

    Uncommitted work is rolled back when the block exits, so an error
    before :func:`commit_session` leaves no partial write behind.
    """
    if _SESSION_FACTORY is None:
        configure_engine()
    assert _SESSION_FACTORY is not None

    start_time = time.time()
    try:
        async with _SESSION_FACTORY() as session:
            yield session
    except SQLAlchemyError as exc:
        event_logger.error(
            f"Database session error: {exc}",
            component=__name__,
            operation="session",
            processing_time_ms=(time.time() - start_time) * 1000,
        )
        raise


async def commit_session(session: AsyncSession) -> None:
    """Explicitly commit the transaction on a session."""

    start_time = time.time()
    await session.commit()
    event_logger.log_database_operation(
        "Session committed",
        operation="session_commit",
        processing_time_ms=(time.time() - start_time) * 1000,
    )


@log_calls
async def create_all() -> None:
    """Create every table directly from the ORM metadata."""
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@log_calls
async def drop_all() -> None:
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


def _alembic_config() -> Config:
    root = Path(__file__).resolve().parents[3]
    cfg = Config(str(root / "alembic.ini"))
    cfg.set_main_option("script_location", str(root / "migrations"))
    cfg.attributes["url"] = get_engine().url.render_as_string(hide_password=False)
    cfg.attributes["skip_logging"] = True
    return cfg


async def ensure_schema() -> None:
    """Apply Alembic migrations up to ``head``.

    Alembic's command API is blocking, so it runs in a worker thread.
    """
    start_time = time.time()
    event_logger.info("Applying database migrations", operation="schema_ensure")
    try:
        await asyncio.to_thread(alembic_command.upgrade, _alembic_config(), "head")
    except Exception as exc:
        event_logger.log_error_handling_start(
            error_type=type(exc).__name__,
            operation="schema_ensure",
            error_message=str(exc),
        )
        raise
    event_logger.info(
        "Database schema up to date",
        operation="schema_ensure",
        processing_time_ms=(time.time() - start_time) * 1000,
    )


__all__ = [
    "configure_engine",
    "get_engine",
    "dispose_engine",
    "get_session",
    "commit_session",
    "create_all",
    "drop_all",
    "ensure_schema",
]
