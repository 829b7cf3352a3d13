# scripts/init_db.py
"""Bring the Proofline database schema up to date."""

from __future__ import annotations

import asyncio

from proofline.config import config
from proofline.core.env import load_env
from proofline.core.logging import get_logger, init_logging
from proofline.store import configure_engine, dispose_engine, ensure_schema

logger = get_logger(__name__)


async def init_db() -> None:
    """Apply every pending Alembic migration to the configured database."""
    configure_engine()
    logger.info("Migrating %s", config.database.url.rsplit("@", 1)[-1])
    try:
        await ensure_schema()
    finally:
        await dispose_engine()
    logger.info("Database ready")


if __name__ == "__main__":  # pragma: no cover - CLI execution
    load_env()
    init_logging()
    asyncio.run(init_db())
