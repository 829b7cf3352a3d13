"""Configuration package for Proofline."""

from .config import (
    DatabaseConfig,
    ProoflineConfig,
    ReviewConfig,
    StorageConfig,
    SystemConfig,
    config,
    reload_config,
)

__all__ = [
    "DatabaseConfig",
    "SystemConfig",
    "ReviewConfig",
    "StorageConfig",
    "ProoflineConfig",
    "config",
    "reload_config",
]
