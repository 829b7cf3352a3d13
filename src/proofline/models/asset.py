# src/proofline/models/asset.py
"""Creative assets uploaded to a project."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import Field

from .base_model import ProoflineBaseModel as BaseModel


class FileKind(str, Enum):
    """Coarse file type shown to reviewers."""

    IMAGE = "image"
    DOCUMENT = "document"

    @classmethod
    def from_content_type(cls, content_type: str) -> FileKind:
        return cls.IMAGE if content_type.lower().startswith("image/") else cls.DOCUMENT


class Asset(BaseModel):
    """An uploaded file awaiting review.

    Immutable once created; comments and approvals hang off it.
    """

    id: UUID
    project_id: UUID
    name: str = Field(..., min_length=1)
    description: str | None = None
    file_url: str
    file_type: FileKind
    file_size: int = Field(..., ge=0)
    created_by: UUID
    created_at: datetime


__all__ = ["FileKind", "Asset"]
