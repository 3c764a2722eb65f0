"""Configuration dataclasses for Material Guard."""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple


SCHEMA_VERSION = "1.0.0"


class StorageTier(Enum):
    """Named persistence targets for material envelopes."""
    PRIMARY = "primary"                 # Durable, written on every persist
    BACKUP_1 = "backup-1"               # Durable, lifecycle snapshots
    BACKUP_2 = "backup-2"
    EMERGENCY = "emergency"
    SESSION_MIRROR = "session-mirror"   # Volatile, written on every persist

    @property
    def volatile(self) -> bool:
        """True if the tier lives in the volatile store."""
        return self is StorageTier.SESSION_MIRROR


# Recovery scans tiers in this order
TIER_PRIORITY: Tuple[StorageTier, ...] = (
    StorageTier.PRIMARY,
    StorageTier.BACKUP_1,
    StorageTier.BACKUP_2,
    StorageTier.EMERGENCY,
    StorageTier.SESSION_MIRROR,
)

# Tiers written by snapshot() when none are named
SNAPSHOT_TIERS: Tuple[StorageTier, ...] = (
    StorageTier.BACKUP_1,
    StorageTier.BACKUP_2,
    StorageTier.EMERGENCY,
)


def parse_tier(value) -> StorageTier:
    """Coerce a tier name or StorageTier into a StorageTier.

    Raises:
        ValueError: If the name is not a known tier
    """
    if isinstance(value, StorageTier):
        return value
    try:
        return StorageTier(value)
    except ValueError:
        known = ", ".join(t.value for t in StorageTier)
        raise ValueError(f"Unknown storage tier '{value}' (known: {known})") from None


@dataclass
class GuardConfig:
    """Configuration for a MaterialGuard instance.

    Attributes:
        key_prefix: Namespace for every storage key this instance touches
        schema_version: Version stamped into written envelopes
        default_enabled: Preservation flag value when none is persisted
        stale_after_seconds: Heartbeat age beyond which loss is assumed
        regression_min_count: Heartbeat count that must be exceeded before
            the ratio check applies
        regression_ratio: Live/heartbeat count ratio below which loss is assumed
    """
    key_prefix: str = "materials"
    schema_version: str = SCHEMA_VERSION
    default_enabled: bool = True
    stale_after_seconds: float = 60.0
    regression_min_count: int = 5
    regression_ratio: float = 0.5

    def __post_init__(self):
        """Validate thresholds and normalise the key prefix."""
        self.key_prefix = self.key_prefix.rstrip("-")
        if not self.key_prefix:
            raise ValueError("key_prefix must not be empty")
        if self.stale_after_seconds <= 0:
            raise ValueError("stale_after_seconds must be positive")
        if self.regression_min_count < 0:
            raise ValueError("regression_min_count must not be negative")
        if not 0 < self.regression_ratio <= 1:
            raise ValueError("regression_ratio must be in (0, 1]")

    def tier_key(self, tier: StorageTier) -> str:
        """Storage key holding the envelope for a tier."""
        return f"{self.key_prefix}-{tier.value}"

    @property
    def heartbeat_key(self) -> str:
        return f"{self.key_prefix}-heartbeat"

    @property
    def enabled_key(self) -> str:
        return f"{self.key_prefix}-preservation-enabled"

    @property
    def restore_attempts_key(self) -> str:
        return f"{self.key_prefix}-restore-attempts"

    @property
    def schema_major(self) -> str:
        return self.schema_version.split(".", 1)[0]
