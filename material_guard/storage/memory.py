"""In-memory store.

Plays the role of a session storage area: contents live as long as the
object does. An optional byte quota reproduces the quota-exceeded failures
browsers raise when a storage area is full.
"""

import threading
from typing import Dict, List, Optional

from .base import KeyValueStore, QuotaExceededError


class MemoryStore(KeyValueStore):
    """Dictionary-backed store with an optional quota.

    Attributes:
        quota_bytes: Maximum total size of keys plus values (UTF-8), or None
        durable: False by default; pass durable=True to use it as the durable
            store in tests
    """

    def __init__(self, quota_bytes: Optional[int] = None, durable: bool = False):
        super().__init__()
        self.quota_bytes = quota_bytes
        self.durable = durable
        self._data: Dict[str, str] = {}
        self._lock = threading.RLock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError(f"Store values must be str, got {type(value).__name__}")

        with self._lock:
            if self.quota_bytes is not None:
                current = self.used_bytes() - self._entry_size(key, self._data.get(key))
                needed = self._entry_size(key, value)
                if current + needed > self.quota_bytes:
                    raise QuotaExceededError(
                        f"Writing '{key}' needs {needed} bytes, "
                        f"{self.quota_bytes - current} of {self.quota_bytes} free"
                    )
            self._data[key] = value

    def remove(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def keys(self) -> List[str]:
        with self._lock:
            return sorted(self._data)

    def clear(self) -> None:
        """Drop everything, as when the browsing context ends."""
        with self._lock:
            self._data.clear()

    def used_bytes(self) -> int:
        with self._lock:
            return sum(self._entry_size(k, v) for k, v in self._data.items())

    @staticmethod
    def _entry_size(key: str, value: Optional[str]) -> int:
        if value is None:
            return 0
        return len(key.encode("utf-8")) + len(value.encode("utf-8"))
