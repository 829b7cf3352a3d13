# src/proofline/models/comment.py
"""Append-only feedback comments on an asset."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import Field

from .base_model import ProoflineBaseModel as BaseModel


class AuthorKind(str, Enum):
    """Who wrote a comment."""

    AGENCY = "agency"
    CLIENT = "client"


class Comment(BaseModel):
    """A single comment. Never edited or deleted once created."""

    id: UUID
    asset_id: UUID
    author_name: str
    author_email: str | None = None
    author_type: AuthorKind
    content: str = Field(..., min_length=1)
    created_at: datetime


__all__ = ["AuthorKind", "Comment"]
