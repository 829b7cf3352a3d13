# src/proofline/models/base_model.py
"""Shared Pydantic base model with tolerant enum handling."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator


class ProoflineBaseModel(BaseModel):
    """Base model that reads ORM rows and matches enum values case-insensitively."""

    model_config = ConfigDict(
        from_attributes=True,
        extra="ignore",
        validate_assignment=True,
    )

    @model_validator(mode="before")
    @classmethod
    def _coerce_enums(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        for field_name, field in cls.model_fields.items():
            field_type = field.annotation
            if not (isinstance(field_type, type) and issubclass(field_type, Enum)):
                continue
            value = data.get(field_name)
            if isinstance(value, str):
                for member in field_type:
                    if value.strip().lower() in {
                        member.name.lower(),
                        str(member.value).lower(),
                    }:
                        data = {**data, field_name: member}
                        break
        return data


__all__ = ["ProoflineBaseModel"]
