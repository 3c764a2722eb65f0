"""Heartbeat record: the last known-good summary of the material list.

The heartbeat lets loss detection compare live state against the last
successful primary write without reading a full envelope.
"""

import json
import logging
import math
from dataclasses import dataclass
from typing import Optional

from material_guard.storage.base import KeyValueStore, StorageError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HeartbeatRecord:
    """Last known-good {timestamp, count, fingerprint} triple.

    Attributes:
        timestamp: Epoch milliseconds of the write
        count: Number of materials written
        fingerprint: fingerprint() of the materials written
    """
    timestamp: int
    count: int
    fingerprint: str

    def age_seconds(self, now_ms: int) -> float:
        return (now_ms - self.timestamp) / 1000.0

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "count": self.count,
            "fingerprint": self.fingerprint,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "HeartbeatRecord":
        """Build from stored data.

        Raises:
            ValueError: If fields are missing or of the wrong type
        """
        if not isinstance(data, dict):
            raise ValueError("Heartbeat is not an object")
        timestamp = data.get("timestamp")
        count = data.get("count")
        # Older heartbeats stored the fingerprint as "checksum"
        value = data.get("fingerprint", data.get("checksum"))
        for name, field_value in (("timestamp", timestamp), ("count", count)):
            if isinstance(field_value, bool) or not isinstance(field_value, (int, float)):
                raise ValueError(f"Heartbeat {name} must be a number, got {field_value!r}")
            if isinstance(field_value, float) and not math.isfinite(field_value):
                raise ValueError(f"Heartbeat {name} must be finite, got {field_value!r}")
        if not isinstance(value, str):
            raise ValueError("Heartbeat fingerprint must be a string")
        return cls(timestamp=int(timestamp), count=int(count), fingerprint=value)


class HeartbeatStore:
    """Reads and writes the heartbeat under a single key.

    Read failures are logged and reported as "no heartbeat"; write failures
    propagate as StorageError so the caller can record them.
    """

    def __init__(self, store: KeyValueStore, key: str):
        self.store = store
        self.key = key

    def read(self) -> Optional[HeartbeatRecord]:
        try:
            raw = self.store.get(self.key)
        except StorageError as e:
            logger.warning(f"Heartbeat unreadable: {e}")
            return None

        if raw is None:
            return None

        try:
            return HeartbeatRecord.from_dict(json.loads(raw))
        except (ValueError, OverflowError, RecursionError) as e:
            logger.warning(f"Heartbeat corrupt, ignoring: {e}")
            return None

    def write(self, record: HeartbeatRecord) -> None:
        """Persist the heartbeat.

        Raises:
            StorageError: If the store rejects the write
        """
        self.store.set(self.key, json.dumps(record.to_dict()))

    def clear(self) -> None:
        self.store.remove(self.key)
