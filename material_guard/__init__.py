"""Material Guard - client-side durability for an in-memory material list.

Protects a warehouse's inventory records ("materials") against accidental
loss from reloads, failed migrations, storage quota errors and concurrent
overwrites by keeping redundant snapshots across several storage tiers.

Key Features:
    - Per-mutation backups to a durable primary tier and a volatile mirror
    - Lifecycle snapshots to backup-1, backup-2 and emergency tiers
    - Heartbeat-based detection of silent regressions
    - Priority-ordered recovery that never merges tiers
    - Read-only cross-tier audits for debug tooling
    - A persisted switch that turns the whole layer into a pass-through

Quick Start:
    from material_guard import MaterialGuard, DirectoryStore, MemoryStore

    guard = MaterialGuard(DirectoryStore("./data/guard"), MemoryStore())

    result = guard.recover()
    materials = result.records if result.success else []

    materials.append({"id": "m-1", "pieceCount": 12,
                      "location": {"aisleId": "A", "shelfIndex": 2}})
    guard.persist(materials)

Classes:
    MaterialGuard: Main interface for the durability layer
    GuardConfig: Per-instance configuration
    StorageTier: Enum of storage tiers
    MemoryStore / DirectoryStore: Volatile and durable stores

See Also:
    - examples/ for usage patterns
"""

__version__ = "1.0.0"
__license__ = "MIT"

from .config import (
    GuardConfig,
    StorageTier,
    TIER_PRIORITY,
    SCHEMA_VERSION,
)

from .manager import MaterialGuard

from .storage import (
    KeyValueStore,
    MemoryStore,
    DirectoryStore,
    StorageError,
    StorageReadError,
    StorageWriteError,
    QuotaExceededError,
    open_store,
)

from .sync import BackupEnvelope, HeartbeatRecord, PersistResult
from .recovery import (
    AuditReport,
    LossAssessment,
    LossReason,
    RecoveryResult,
    matches_seed,
    mock_marker_predicate,
    never_default,
)
from .utils.hashing import fingerprint

__all__ = [
    "__version__",
    "__license__",
    "MaterialGuard",
    "GuardConfig",
    "StorageTier",
    "TIER_PRIORITY",
    "SCHEMA_VERSION",
    "KeyValueStore",
    "MemoryStore",
    "DirectoryStore",
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
    "QuotaExceededError",
    "open_store",
    "BackupEnvelope",
    "HeartbeatRecord",
    "PersistResult",
    "AuditReport",
    "LossAssessment",
    "LossReason",
    "RecoveryResult",
    "matches_seed",
    "mock_marker_predicate",
    "never_default",
    "fingerprint",
    "create_guard",
]


def create_guard(
    store_dir: str = None,
    key_prefix: str = "materials",
    enabled_by_default: bool = True,
) -> MaterialGuard:
    """Convenience function to create a MaterialGuard.

    Args:
        store_dir: Directory for the durable store (in-memory if None)
        key_prefix: Namespace for storage keys
        enabled_by_default: Preservation flag value when none is persisted

    Returns:
        Configured MaterialGuard instance

    Example:
        guard = create_guard("./data/guard")
    """
    config = GuardConfig(key_prefix=key_prefix, default_enabled=enabled_by_default)
    durable = DirectoryStore(store_dir) if store_dir else MemoryStore(durable=True)
    return MaterialGuard(durable, MemoryStore(), config=config)
