"""Backup writer for Material Guard.

Every host mutation is persisted to the primary tier and mirrored to the
volatile session tier. Tier writes are independent: a failure on one never
blocks the other, and never reaches the caller.

The coarser backup-1, backup-2 and emergency tiers are only written through
persist_named_tier() and snapshot(), at lifecycle moments the host chooses.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from material_guard.config import GuardConfig, SNAPSHOT_TIERS, StorageTier, parse_tier
from material_guard.storage.base import StorageError
from material_guard.sync.envelope import BackupEnvelope, build_envelope
from material_guard.sync.heartbeat import HeartbeatRecord, HeartbeatStore
from material_guard.sync.tiers import TierSet
from material_guard.toggle import PreservationToggle
from material_guard.utils.hashing import fingerprint

logger = logging.getLogger(__name__)


@dataclass
class PersistResult:
    """Result of a persist or snapshot call."""

    count: int = 0
    skipped: bool = False
    written: List[StorageTier] = field(default_factory=list)
    failed: Dict[StorageTier, str] = field(default_factory=dict)
    heartbeat_written: bool = False

    @property
    def success(self) -> bool:
        """True if every attempted tier was written."""
        return not self.skipped and bool(self.written) and not self.failed

    @property
    def partial(self) -> bool:
        """True if some tiers were written and others failed."""
        return bool(self.written) and bool(self.failed)

    def to_dict(self) -> dict:
        return {
            "count": self.count,
            "skipped": self.skipped,
            "success": self.success,
            "partial": self.partial,
            "written": [t.value for t in self.written],
            "failed": {t.value: err for t, err in self.failed.items()},
            "heartbeat_written": self.heartbeat_written,
        }


class BackupWriter:
    """Writes envelopes to tiers and keeps the heartbeat current.

    Attributes:
        tiers: Tier routing to the durable and volatile stores
        heartbeat: Heartbeat accessor
        toggle: Preservation flag; when off every write is a no-op
        on_tier_failure: Optional callback receiving (tier, error) when a
            tier write fails
    """

    def __init__(
        self,
        tiers: TierSet,
        heartbeat: HeartbeatStore,
        toggle: PreservationToggle,
        config: GuardConfig,
        clock: Callable[[], float] = time.time,
        on_tier_failure: Optional[Callable[[StorageTier, Exception], None]] = None,
    ):
        self.tiers = tiers
        self.heartbeat = heartbeat
        self.toggle = toggle
        self.config = config
        self.clock = clock
        self.on_tier_failure = on_tier_failure

    def _now_ms(self) -> int:
        return int(self.clock() * 1000)

    def persist(self, records: Sequence[Any]) -> PersistResult:
        """Persist the current materials after a host mutation.

        PRIMARY FIRST, SESSION MIRROR SECOND, then the heartbeat if the
        primary write succeeded.

        Args:
            records: The full material list (not mutated)

        Returns:
            PersistResult; callers may ignore it
        """
        if not self.toggle.is_enabled():
            return PersistResult(count=len(records), skipped=True)

        now_ms = self._now_ms()
        envelope = build_envelope(records, now_ms, self.config.schema_version)
        result = PersistResult(count=envelope.count)

        for tier in (StorageTier.PRIMARY, StorageTier.SESSION_MIRROR):
            self._write_tier(tier, envelope, result)

        if StorageTier.PRIMARY in result.written:
            self._write_heartbeat(envelope, now_ms, result)

        logger.debug(
            f"Persisted {result.count} materials to "
            f"{', '.join(t.value for t in result.written) or 'no tier'}",
            extra={"count": result.count},
        )
        return result

    def persist_named_tier(self, tier, records: Sequence[Any]) -> bool:
        """Write an envelope to a single tier.

        Writing the primary tier also refreshes the heartbeat.

        Args:
            tier: StorageTier or tier name
            records: The full material list

        Returns:
            True if the tier was written

        Raises:
            ValueError: If the tier name is unknown
        """
        tier = parse_tier(tier)
        if not self.toggle.is_enabled():
            return False

        now_ms = self._now_ms()
        envelope = build_envelope(records, now_ms, self.config.schema_version)
        result = PersistResult(count=envelope.count)
        self._write_tier(tier, envelope, result)

        if tier is StorageTier.PRIMARY and result.written:
            self._write_heartbeat(envelope, now_ms, result)

        return bool(result.written)

    def snapshot(
        self,
        records: Sequence[Any],
        tiers: Optional[Iterable] = None,
    ) -> PersistResult:
        """Write the same envelope to several tiers at once.

        Used before destructive resets and other lifecycle moments.

        Args:
            records: The full material list
            tiers: Tiers to write (default: backup-1, backup-2, emergency)

        Returns:
            PersistResult covering every tier attempted
        """
        targets = [parse_tier(t) for t in (tiers if tiers is not None else SNAPSHOT_TIERS)]
        if not self.toggle.is_enabled():
            return PersistResult(count=len(records), skipped=True)

        now_ms = self._now_ms()
        envelope = build_envelope(records, now_ms, self.config.schema_version)
        result = PersistResult(count=envelope.count)

        for tier in targets:
            self._write_tier(tier, envelope, result)

        if StorageTier.PRIMARY in result.written:
            self._write_heartbeat(envelope, now_ms, result)

        logger.info(
            f"Snapshot of {result.count} materials: "
            f"{len(result.written)} tier(s) written, {len(result.failed)} failed",
            extra={"count": result.count},
        )
        return result

    def _write_tier(self, tier: StorageTier, envelope: BackupEnvelope, result: PersistResult) -> None:
        try:
            self.tiers.write(tier, envelope)
            result.written.append(tier)
        except (StorageError, TypeError, ValueError, RecursionError) as e:
            logger.warning(
                f"Write to tier '{tier.value}' failed: {e}",
                extra={"tier": tier.value, "count": result.count},
            )
            result.failed[tier] = str(e)
            if self.on_tier_failure:
                try:
                    self.on_tier_failure(tier, e)
                except Exception as cb_error:
                    logger.error(f"on_tier_failure callback error: {cb_error}")

    def _write_heartbeat(self, envelope: BackupEnvelope, now_ms: int, result: PersistResult) -> None:
        record = HeartbeatRecord(
            timestamp=now_ms,
            count=envelope.count,
            fingerprint=fingerprint(envelope.materials),
        )
        try:
            self.heartbeat.write(record)
            result.heartbeat_written = True
        except StorageError as e:
            logger.warning(f"Heartbeat update failed: {e}")
