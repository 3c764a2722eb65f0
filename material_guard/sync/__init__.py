"""Write side of Material Guard.

Philosophy: PRIMARY IS TRUTH, THE MIRROR IS INSURANCE.

This module provides:
- BackupWriter: Envelope writes to primary and session-mirror, plus
  named-tier snapshots
- HeartbeatRecord / HeartbeatStore: Last known-good summary
- BackupEnvelope: The snapshot format shared by every tier
- TierSet: Routing of tiers to the durable and volatile stores

Write order: primary first, session-mirror second, heartbeat last.
"""

from material_guard.sync.envelope import BackupEnvelope, EnvelopeMetadata, EnvelopeError
from material_guard.sync.heartbeat import HeartbeatRecord, HeartbeatStore
from material_guard.sync.tiers import TierSet, TierRead, ReadStatus
from material_guard.sync.writer import BackupWriter, PersistResult

__all__ = [
    "BackupEnvelope",
    "EnvelopeMetadata",
    "EnvelopeError",
    "HeartbeatRecord",
    "HeartbeatStore",
    "TierSet",
    "TierRead",
    "ReadStatus",
    "BackupWriter",
    "PersistResult",
]
