# src/proofline/core/env.py
"""Environment configuration utilities."""

from __future__ import annotations

from dotenv import load_dotenv

from ..config import ProoflineConfig, reload_config


def load_env() -> ProoflineConfig:
    """Load a local ``.env`` file and refresh the global configuration."""
    load_dotenv()
    return reload_config()


__all__ = ["load_env"]
