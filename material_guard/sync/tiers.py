"""Tier routing: which store and key hold each tier's envelope."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from material_guard.config import GuardConfig, StorageTier
from material_guard.storage.base import KeyValueStore, StorageError
from material_guard.sync.envelope import BackupEnvelope, EnvelopeError, decode_envelope, encode_envelope

logger = logging.getLogger(__name__)


class ReadStatus(Enum):
    OK = "ok"
    ABSENT = "absent"
    CORRUPT = "corrupt"          # Unparseable, inconsistent or foreign schema
    UNREADABLE = "unreadable"    # The store itself failed


@dataclass(frozen=True)
class TierRead:
    """Outcome of reading one tier."""
    tier: StorageTier
    status: ReadStatus
    envelope: Optional[BackupEnvelope] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is ReadStatus.OK


class TierSet:
    """Routes tiers to the durable or volatile store.

    Durable tiers (primary, backup-1, backup-2, emergency) live in
    ``durable``; session-mirror lives in ``volatile``.
    """

    def __init__(self, durable: KeyValueStore, volatile: KeyValueStore, config: GuardConfig):
        self.durable = durable
        self.volatile = volatile
        self.config = config

    def store_for(self, tier: StorageTier) -> KeyValueStore:
        return self.volatile if tier.volatile else self.durable

    def key_for(self, tier: StorageTier) -> str:
        return self.config.tier_key(tier)

    def read(self, tier: StorageTier) -> TierRead:
        """Read and decode a tier. Never raises."""
        try:
            raw = self.store_for(tier).get(self.key_for(tier))
        except StorageError as e:
            logger.warning(f"Tier '{tier.value}' unreadable: {e}")
            return TierRead(tier, ReadStatus.UNREADABLE, error=str(e))

        if raw is None:
            return TierRead(tier, ReadStatus.ABSENT)

        try:
            envelope = decode_envelope(raw, schema_major=self.config.schema_major)
        except EnvelopeError as e:
            logger.warning(f"Tier '{tier.value}' corrupt: {e}")
            return TierRead(tier, ReadStatus.CORRUPT, error=str(e))

        return TierRead(tier, ReadStatus.OK, envelope=envelope)

    def write(self, tier: StorageTier, envelope: BackupEnvelope) -> None:
        """Encode and store an envelope, replacing the previous one.

        Raises:
            StorageError: If the store rejects the write
            TypeError, ValueError: If the materials are not JSON-serializable
        """
        self.store_for(tier).set(self.key_for(tier), encode_envelope(envelope))

    def clear(self, tier: StorageTier) -> None:
        self.store_for(tier).remove(self.key_for(tier))
