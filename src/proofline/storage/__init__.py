"""Object storage backends for uploaded asset files."""

from .local import LocalObjectStorage, ObjectStorage, get_storage, set_storage

__all__ = ["ObjectStorage", "LocalObjectStorage", "get_storage", "set_storage"]
