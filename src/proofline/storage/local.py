# src/proofline/storage/local.py
"""Object storage for asset binaries.

The store only keeps the URL returned by :meth:`ObjectStorage.put`; any
backend that can turn bytes into a fetchable URL will do.
"""

from __future__ import annotations

import asyncio
from pathlib import Path, PurePosixPath
from typing import Protocol

from proofline.config import config
from proofline.core.logs import get_event_logger, log_calls

event_logger = get_event_logger()


class ObjectStorage(Protocol):
    async def put(self, path: str, data: bytes, content_type: str) -> str:
        """Store ``data`` at ``path`` and return its public URL."""
        ...

    async def delete(self, path: str) -> None: ...


def _safe_relative(path: str) -> PurePosixPath:
    rel = PurePosixPath(path)
    if rel.is_absolute() or ".." in rel.parts or not rel.parts:
        raise ValueError(f"invalid storage path: {path!r}")
    return rel


class LocalObjectStorage:
    """Store files under a local directory and serve them from ``public_url``."""

    def __init__(self, root: str | Path | None = None, public_url: str | None = None):
        self.root = Path(root or config.storage.root)
        self.public_url = (public_url or config.storage.public_url).rstrip("/")

    def _write(self, target: Path, data: bytes) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)

    @log_calls
    async def put(self, path: str, data: bytes, content_type: str) -> str:
        rel = _safe_relative(path)
        await asyncio.to_thread(self._write, self.root.joinpath(*rel.parts), data)
        event_logger.debug(
            f"Stored {len(data)} bytes at {rel}",
            component=__name__,
            operation="storage_put",
            content_type=content_type,
        )
        return f"{self.public_url}/{rel.as_posix()}"

    @log_calls
    async def delete(self, path: str) -> None:
        rel = _safe_relative(path)
        await asyncio.to_thread(self.root.joinpath(*rel.parts).unlink, missing_ok=True)


_storage: ObjectStorage | None = None


def get_storage() -> ObjectStorage:
    global _storage
    if _storage is None:
        _storage = LocalObjectStorage()
    return _storage


def set_storage(storage: ObjectStorage | None) -> None:
    """Replace the process-wide storage backend (``None`` resets to local)."""
    global _storage
    _storage = storage


__all__ = ["ObjectStorage", "LocalObjectStorage", "get_storage", "set_storage"]
