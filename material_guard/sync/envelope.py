"""Backup envelopes: timestamped, counted snapshots of the material list.

Envelope wire format (JSON):

    {
        "materials": [...],
        "metadata": {
            "timestamp": 1700000000000,
            "count": 3,
            "lastHeartbeat": 1700000000000,
            "schemaVersion": "1.0.0"
        }
    }

Timestamps are epoch milliseconds. A bare JSON array is the legacy format
and decodes to an envelope without metadata.
"""

import json
import math
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence


class EnvelopeError(ValueError):
    """Stored data is not a usable envelope (corrupt or schema mismatch)."""


@dataclass(frozen=True)
class EnvelopeMetadata:
    timestamp: int
    count: int
    last_heartbeat: int
    schema_version: str

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "count": self.count,
            "lastHeartbeat": self.last_heartbeat,
            "schemaVersion": self.schema_version,
        }


@dataclass(frozen=True)
class BackupEnvelope:
    """One tier's snapshot of the full material list.

    Attributes:
        materials: The records, exactly as the host supplied them
        metadata: Write metadata, or None for legacy bare-array data
    """
    materials: List[Any]
    metadata: Optional[EnvelopeMetadata] = None

    @property
    def count(self) -> int:
        return len(self.materials)

    @property
    def legacy(self) -> bool:
        return self.metadata is None

    @property
    def timestamp(self) -> Optional[int]:
        return self.metadata.timestamp if self.metadata else None

    def to_dict(self) -> dict:
        return {
            "materials": self.materials,
            "metadata": self.metadata.to_dict() if self.metadata else None,
        }


def build_envelope(records: Sequence[Any], now_ms: int, schema_version: str) -> BackupEnvelope:
    """Create an envelope for a write happening at ``now_ms``.

    The record list is copied (shallowly) so later host mutations of the
    list do not leak into the envelope.
    """
    materials = list(records)
    return BackupEnvelope(
        materials=materials,
        metadata=EnvelopeMetadata(
            timestamp=now_ms,
            count=len(materials),
            last_heartbeat=now_ms,
            schema_version=schema_version,
        ),
    )


def encode_envelope(envelope: BackupEnvelope) -> str:
    """Serialize an envelope to JSON.

    Raises:
        TypeError, ValueError: If a record is not JSON-serializable
    """
    return json.dumps(envelope.to_dict(), ensure_ascii=False, separators=(",", ":"))


def _int_field(metadata: dict, name: str) -> int:
    value = metadata.get(name)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise EnvelopeError(f"metadata.{name} must be a number, got {value!r}")
    if isinstance(value, float) and not math.isfinite(value):
        raise EnvelopeError(f"metadata.{name} must be finite, got {value!r}")
    return int(value)


def decode_envelope(raw: str, schema_major: Optional[str] = None) -> BackupEnvelope:
    """Parse and validate stored envelope text.

    Args:
        raw: Stored JSON text
        schema_major: If given, reject envelopes whose schemaVersion has a
            different major version

    Returns:
        BackupEnvelope

    Raises:
        EnvelopeError: If the text is not JSON, is not an envelope, has a
            count that disagrees with its materials, or has a foreign schema
    """
    try:
        data = json.loads(raw)
    except (TypeError, ValueError, RecursionError) as e:
        raise EnvelopeError(f"Not valid JSON: {e}") from e

    if isinstance(data, list):
        return BackupEnvelope(materials=data, metadata=None)

    if not isinstance(data, dict):
        raise EnvelopeError(f"Expected object or array, got {type(data).__name__}")

    materials = data.get("materials")
    if not isinstance(materials, list):
        raise EnvelopeError("Envelope has no materials array")

    raw_metadata = data.get("metadata")
    if raw_metadata is None:
        return BackupEnvelope(materials=materials, metadata=None)
    if not isinstance(raw_metadata, dict):
        raise EnvelopeError("Envelope metadata is not an object")

    schema_version = str(raw_metadata.get("schemaVersion", ""))
    if schema_major is not None and schema_version.split(".", 1)[0] != schema_major:
        raise EnvelopeError(
            f"Schema version {schema_version or '<missing>'} does not match major {schema_major}"
        )

    metadata = EnvelopeMetadata(
        timestamp=_int_field(raw_metadata, "timestamp"),
        count=_int_field(raw_metadata, "count"),
        last_heartbeat=_int_field(raw_metadata, "lastHeartbeat")
        if "lastHeartbeat" in raw_metadata else _int_field(raw_metadata, "timestamp"),
        schema_version=schema_version,
    )

    if metadata.count != len(materials):
        raise EnvelopeError(
            f"metadata.count is {metadata.count} but envelope holds {len(materials)} materials"
        )

    return BackupEnvelope(materials=materials, metadata=metadata)
