# src/proofline/store/__init__.py
"""Database access helpers for the review store."""

from .db import (
    commit_session,
    configure_engine,
    create_all,
    dispose_engine,
    drop_all,
    ensure_schema,
    get_engine,
    get_session,
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
