# src/proofline/config/config.py
"""Configuration system for Proofline.

Each section reads its own environment variables (and a local ``.env``)
through pydantic-settings. Names are case-insensitive.
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def _settings(env_prefix: str = "") -> SettingsConfigDict:
    return SettingsConfigDict(
        env_prefix=env_prefix,
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )


class DatabaseConfig(BaseSettings):
    """Database configuration settings."""

    model_config = _settings()

    database_url: str = ""
    postgres_user: str = "proofline"
    postgres_password: str = "proofline_password"
    postgres_db: str = "proofline"
    postgres_host: str = "localhost"
    postgres_port: str = "5432"
    echo: bool = Field(default=False, validation_alias="DATABASE_ECHO")
    migrate_on_start: bool = Field(default=True, validation_alias="DATABASE_MIGRATE_ON_START")

    @property
    def url(self) -> str:
        """Return ``DATABASE_URL`` if set, else a psycopg PostgreSQL URL."""
        if self.database_url:
            return self.database_url
        return (
            f"postgresql+psycopg://{self.postgres_user}:{self.postgres_password}@"
            f"{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )


class SystemConfig(BaseSettings):
    """System configuration settings."""

    model_config = _settings()

    log_level: str = "INFO"
    log_format: str = Field(default="", validation_alias="PROOFLINE_LOG_FORMAT")
    port: int = 8000
    public_url: str = Field(
        default="http://localhost:8000", validation_alias="PROOFLINE_PUBLIC_URL"
    )

    @field_validator("public_url")
    @classmethod
    def _strip_slash(cls, value: str) -> str:
        return value.rstrip("/")


class ReviewConfig(BaseSettings):
    """Guest review link and token settings."""

    model_config = _settings("REVIEW_")

    review_path: str = Field(default="review", validation_alias="REVIEW_PATH")
    # Bytes of randomness per access token; 16 bytes is the 128-bit floor.
    token_bytes: int = Field(default=32, ge=16)
    refresh_seconds: int = Field(default=30, ge=1)

    @field_validator("review_path")
    @classmethod
    def _strip_slashes(cls, value: str) -> str:
        return value.strip("/")


class StorageConfig(BaseSettings):
    """Object storage settings for uploaded asset binaries."""

    model_config = _settings("STORAGE_")

    root: str = "./proofline_uploads"
    public_url: str = "http://localhost:8000/files"
    max_upload_bytes: int = Field(
        default=10 * 1024 * 1024, gt=0, validation_alias="MAX_UPLOAD_BYTES"
    )
    allowed_content_types: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: [
            "image/png",
            "image/jpeg",
            "image/gif",
            "image/svg+xml",
            "image/webp",
            "application/pdf",
            "text/plain",
        ],
        validation_alias="ALLOWED_CONTENT_TYPES",
    )

    @field_validator("allowed_content_types", mode="before")
    @classmethod
    def _split_types(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [part.strip().lower() for part in value.split(",") if part.strip()]
        return value

    @field_validator("public_url")
    @classmethod
    def _strip_slash(cls, value: str) -> str:
        return value.rstrip("/")


class ProoflineConfig(BaseModel):
    """Main configuration class."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    system: SystemConfig = Field(default_factory=SystemConfig)
    review: ReviewConfig = Field(default_factory=ReviewConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)

    @classmethod
    def load(cls) -> ProoflineConfig:
        """Load every section from the environment and ``.env``."""
        return cls()


# Global configuration instance
config = ProoflineConfig.load()


def reload_config() -> ProoflineConfig:
    """Refresh the global ``config`` in place from the environment."""
    fresh = ProoflineConfig.load()
    for name in ProoflineConfig.model_fields:
        setattr(config, name, getattr(fresh, name))
    return config
