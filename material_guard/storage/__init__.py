"""Material Guard stores.

This module provides the key-value stores that back storage tiers.
Each store implements the KeyValueStore interface.

Available stores:
    - MemoryStore: Volatile in-process store with an optional byte quota
    - DirectoryStore: Durable store keeping one file per key
    - GuardedStore: Wrapper translating any host store failure into StorageError

Usage:
    from material_guard.storage import open_store

    durable = open_store("directory", "./data/guard")
    volatile = open_store("memory")
"""

from pathlib import Path
from typing import Optional, Union

from .base import (
    GuardedStore,
    KeyValueStore,
    StorageError,
    StorageReadError,
    StorageWriteError,
    QuotaExceededError,
)
from .memory import MemoryStore
from .directory import DirectoryStore


def open_store(
    kind: str,
    path: Optional[Union[str, Path]] = None,
    quota_bytes: Optional[int] = None,
) -> KeyValueStore:
    """Create a store by kind name.

    Args:
        kind: "memory" or "directory"
        path: Root directory (required for "directory")
        quota_bytes: Byte quota (only honoured by "memory")

    Returns:
        KeyValueStore instance

    Raises:
        ValueError: If the kind is unknown or a required path is missing
    """
    if kind == "memory":
        return MemoryStore(quota_bytes=quota_bytes)
    elif kind == "directory":
        if path is None:
            raise ValueError("A path is required for a directory store")
        return DirectoryStore(path)
    else:
        raise ValueError(
            f"Store kind '{kind}' is not supported. "
            f"Supported kinds: memory, directory"
        )


__all__ = [
    "GuardedStore",
    "KeyValueStore",
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
    "QuotaExceededError",
    "MemoryStore",
    "DirectoryStore",
    "open_store",
]
