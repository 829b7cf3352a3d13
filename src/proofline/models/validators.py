"""Custom validators for Pydantic models."""

from __future__ import annotations

from typing import Annotated

from pydantic import AfterValidator


def validate_non_empty(value: str) -> str:
    """Ensure ``value`` is not empty or whitespace and return it stripped."""
    if not value.strip():
        raise ValueError("must not be empty")
    return value.strip()


def normalize_optional_text(value: str | None) -> str | None:
    """Strip ``value`` and collapse blank strings to ``None``."""
    if value is None:
        return None
    value = value.strip()
    return value or None


NonEmptyStr = Annotated[str, AfterValidator(validate_non_empty)]
OptionalText = Annotated[str | None, AfterValidator(normalize_optional_text)]


__all__ = [
    "validate_non_empty",
    "normalize_optional_text",
    "NonEmptyStr",
    "OptionalText",
]
