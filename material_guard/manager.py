"""Main MaterialGuard class - the durability layer the host application talks to.

This module wires the backup writer, loss detector, recovery orchestrator and
reconciliation auditor to one durable store, one volatile store and one
configuration. Every collaborator in the host calls into this instance; no
state lives at module level, so several instances (one per test, say) never
interfere.

Example:
    from material_guard import MaterialGuard, DirectoryStore, MemoryStore

    guard = MaterialGuard(DirectoryStore("./data/guard"), MemoryStore())

    # On start
    result = guard.recover()
    materials = result.records if result.success else load_seed_data()

    # After every mutation
    guard.persist(materials)

    # On mount / periodically
    if guard.detect_loss(materials):
        offer_recovery()
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Iterable, List, Optional, Sequence

from .config import GuardConfig, StorageTier, TIER_PRIORITY
from .recovery.audit import AuditReport, audit_tiers
from .recovery.detector import LossAssessment, LossDetector
from .recovery.orchestrator import RecoveryOrchestrator, RecoveryResult
from .recovery.seed import DefaultDatasetPredicate
from .storage.base import GuardedStore, KeyValueStore, StorageError
from .storage.memory import MemoryStore
from .sync.heartbeat import HeartbeatRecord, HeartbeatStore
from .sync.tiers import TierSet
from .sync.writer import BackupWriter, PersistResult
from .toggle import PreservationToggle


logger = logging.getLogger(__name__)


class MaterialGuard:
    """Client-side durability layer for the material list.

    The MaterialGuard keeps redundant snapshots of the host's materials and
    gets them back when live state regresses. It handles:

    - Per-mutation backups to the primary tier and the session mirror
    - Lifecycle snapshots to backup-1, backup-2 and emergency
    - Heartbeat-based loss detection
    - Priority-ordered recovery from exactly one tier
    - Read-only cross-tier audits for debug tooling
    - A persisted preservation switch gating all of the above

    No exception raised inside the layer reaches the caller, except
    ValueError/TypeError for invalid arguments.

    Attributes:
        config: Instance configuration
        durable: Store for primary, backups, heartbeat and flag
        volatile: Store for the session mirror
    """

    def __init__(
        self,
        durable: Optional[KeyValueStore] = None,
        volatile: Optional[KeyValueStore] = None,
        config: Optional[GuardConfig] = None,
        is_default_dataset: Optional[DefaultDatasetPredicate] = None,
        clock: Callable[[], float] = time.time,
        on_tier_failure: Optional[Callable[[StorageTier, Exception], None]] = None,
    ):
        """Initialize the MaterialGuard.

        Args:
            durable: Durable store. Defaults to an in-memory store, which
                only makes sense in tests.
            volatile: Volatile store for the session mirror
            config: Instance configuration
            is_default_dataset: Predicate recognising the host's seed data;
                matching tiers are skipped by recovery
            clock: Returns the current time in epoch seconds
            on_tier_failure: Called with (tier, error) when a tier write fails
        """
        self.config = config or GuardConfig()

        if durable is None:
            logger.warning("No durable store given - snapshots will not survive this process")
            durable = MemoryStore(durable=True)
        self.durable = durable
        self.volatile = volatile if volatile is not None else MemoryStore()

        self._lock = threading.RLock()
        self._clock = clock

        # Internal I/O goes through these so host failures arrive as StorageError
        self._durable_io = GuardedStore(self.durable)
        self._volatile_io = GuardedStore(self.volatile)

        self._tiers = TierSet(self._durable_io, self._volatile_io, self.config)
        self._heartbeat = HeartbeatStore(self._durable_io, self.config.heartbeat_key)
        self._toggle = PreservationToggle(
            self._durable_io, self.config.enabled_key, default=self.config.default_enabled
        )
        self._writer = BackupWriter(
            self._tiers, self._heartbeat, self._toggle, self.config,
            clock=clock, on_tier_failure=on_tier_failure,
        )
        self._detector = LossDetector(self._heartbeat, self._toggle, self.config, clock=clock)
        self._orchestrator = RecoveryOrchestrator(self._tiers, self._toggle, is_default_dataset)

        self._toggle.initialize()
        logger.debug(
            f"MaterialGuard ready: durable={self.durable.describe()}, "
            f"volatile={self.volatile.describe()}, prefix='{self.config.key_prefix}'"
        )

    # -- writes ---------------------------------------------------------

    def persist(self, records: Sequence[Any]) -> PersistResult:
        """Back up the materials after a host mutation.

        Writes primary and session-mirror, then refreshes the heartbeat.
        A no-op when preservation is disabled.
        """
        with self._lock:
            return self._writer.persist(records)

    def persist_named_tier(self, tier, records: Sequence[Any]) -> bool:
        """Write one tier (e.g. "emergency" before a destructive reset).

        Raises:
            ValueError: If the tier name is unknown
        """
        with self._lock:
            return self._writer.persist_named_tier(tier, records)

    def snapshot(self, records: Sequence[Any], tiers: Optional[Iterable] = None) -> PersistResult:
        """Write backup-1, backup-2 and emergency (or the named tiers)."""
        with self._lock:
            return self._writer.snapshot(records, tiers)

    # -- detection and recovery -----------------------------------------

    def assess(self, live_records: Sequence[Any]) -> LossAssessment:
        """Loss check with the rule that fired, for diagnostics."""
        with self._lock:
            return self._detector.assess(live_records)

    def detect_loss(self, live_records: Sequence[Any]) -> bool:
        """True if live materials look like they regressed unexpectedly."""
        return self.assess(live_records).loss_detected

    def recover(self) -> RecoveryResult:
        """Pick the best tier to restore from.

        Returns:
            RecoveryResult; when success is False the host must fall back to
            its own default dataset
        """
        with self._lock:
            result = self._orchestrator.recover()
            if result.success:
                self._record_restore_attempt()
            return result

    def restore(self) -> RecoveryResult:
        """Recover, then write the recovered list back as the new primary.

        After a successful restore the primary tier, session mirror and
        heartbeat all reflect the recovered materials.
        """
        with self._lock:
            result = self.recover()
            if result.success:
                persisted = self._writer.persist(result.records)
                if not persisted.success:
                    logger.warning(
                        f"Recovered from '{result.source.value}' but write-back was incomplete: "
                        f"{persisted.to_dict()['failed']}"
                    )
            return result

    def audit(self) -> AuditReport:
        """Read every tier and report whether they agree. No side effects."""
        with self._lock:
            return audit_tiers(self._tiers)

    # -- toggle ---------------------------------------------------------

    def is_enabled(self) -> bool:
        return self._toggle.is_enabled()

    def set_enabled(self, enabled: bool) -> None:
        """Persist the preservation flag.

        Raises:
            TypeError: If ``enabled`` is not a bool
        """
        with self._lock:
            self._toggle.set_enabled(enabled)

    # -- diagnostics ----------------------------------------------------

    def heartbeat(self) -> Optional[HeartbeatRecord]:
        """Current heartbeat, or None if none has been written."""
        return self._heartbeat.read()

    @property
    def restore_attempts(self) -> int:
        """Number of successful recoveries recorded in the durable store."""
        try:
            raw = self._durable_io.get(self.config.restore_attempts_key)
        except StorageError as e:
            logger.warning(f"Restore attempt counter unreadable: {e}")
            return 0
        try:
            return int(raw) if raw is not None else 0
        except ValueError:
            return 0

    def available_tiers(self) -> List[StorageTier]:
        """Tiers holding a non-empty envelope, in recovery priority order."""
        with self._lock:
            available = []
            for tier in TIER_PRIORITY:
                read = self._tiers.read(tier)
                if read.ok and read.envelope.materials:
                    available.append(tier)
            return available

    def status(self) -> dict:
        """Summary for debug panels and the CLI.

        Returns:
            Dict containing:
                - enabled: Preservation flag
                - heartbeat: Heartbeat dict or None
                - heartbeat_age_seconds: Age of the heartbeat or None
                - restore_attempts: Successful recoveries recorded
                - available_tiers: Tier names with non-empty envelopes
                - all_consistent: Audit consistency flag
                - stores: Descriptions of the durable and volatile stores
        """
        with self._lock:
            heartbeat = self._heartbeat.read()
            now_ms = int(self._clock() * 1000)
            report = audit_tiers(self._tiers)
            return {
                "enabled": self._toggle.is_enabled(),
                "key_prefix": self.config.key_prefix,
                "heartbeat": heartbeat.to_dict() if heartbeat else None,
                "heartbeat_age_seconds": heartbeat.age_seconds(now_ms) if heartbeat else None,
                "restore_attempts": self.restore_attempts,
                "available_tiers": [
                    t.value for t in report.present if report.tiers[t].materials
                ],
                "all_consistent": report.all_consistent,
                "stores": {
                    "durable": self.durable.describe(),
                    "volatile": self.volatile.describe(),
                },
            }

    # -- operator actions -----------------------------------------------

    def clear_all(self) -> bool:
        """Delete every tier, the heartbeat and the restore counter.

        The preservation flag is kept. Use only for a deliberate
        "clear all data" action.

        Returns:
            True if every key was removed
        """
        with self._lock:
            success = True
            keys = [(self._tiers.store_for(t), self._tiers.key_for(t)) for t in TIER_PRIORITY]
            keys.append((self._durable_io, self.config.heartbeat_key))
            keys.append((self._durable_io, self.config.restore_attempts_key))

            for store, key in keys:
                try:
                    store.remove(key)
                except StorageError as e:
                    logger.error(f"Failed to clear '{key}': {e}")
                    success = False

            logger.info("Material preservation data cleared")
            return success

    def _record_restore_attempt(self) -> None:
        try:
            self._durable_io.set(self.config.restore_attempts_key, str(self.restore_attempts + 1))
        except StorageError as e:
            logger.warning(f"Could not record restore attempt: {e}")
