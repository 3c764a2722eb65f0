"""Recovery orchestration across storage tiers.

RecoveryOrchestrator scans tiers in priority order and returns the first
envelope holding real user data. It picks exactly one tier: lists are never
merged, and the returned list is exactly what that tier stored.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from material_guard.config import StorageTier, TIER_PRIORITY
from material_guard.recovery.seed import DefaultDatasetPredicate, never_default
from material_guard.sync.tiers import ReadStatus, TierSet
from material_guard.toggle import PreservationToggle

logger = logging.getLogger(__name__)

SKIP_ABSENT = "absent"
SKIP_CORRUPT = "corrupt"
SKIP_UNREADABLE = "unreadable"
SKIP_EMPTY = "empty"
SKIP_DEFAULT = "default_dataset"

_SKIP_FOR_STATUS = {
    ReadStatus.ABSENT: SKIP_ABSENT,
    ReadStatus.CORRUPT: SKIP_CORRUPT,
    ReadStatus.UNREADABLE: SKIP_UNREADABLE,
}


@dataclass
class RecoveryResult:
    """Result of a recovery scan.

    Attributes:
        success: Whether a tier qualified
        records: The selected tier's materials ([] on failure)
        source: The selected tier (None on failure)
        skipped: Tiers inspected before the source, with the reason each was passed over
        duration_ms: Scan duration in milliseconds
    """
    success: bool = False
    records: List[Any] = field(default_factory=list)
    source: Optional[StorageTier] = None
    skipped: Dict[StorageTier, str] = field(default_factory=dict)
    duration_ms: float = 0.0

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "count": len(self.records),
            "source": self.source.value if self.source else None,
            "skipped": {t.value: reason for t, reason in self.skipped.items()},
            "duration_ms": self.duration_ms,
        }


class RecoveryOrchestrator:
    """Selects the best snapshot to restore.

    Usage:
        orchestrator = RecoveryOrchestrator(tiers, toggle)
        result = orchestrator.recover()
        if result.success:
            print(f"Recovered {len(result.records)} materials from {result.source.value}")
    """

    def __init__(
        self,
        tiers: TierSet,
        toggle: PreservationToggle,
        is_default_dataset: Optional[DefaultDatasetPredicate] = None,
        priority: Sequence[StorageTier] = TIER_PRIORITY,
    ):
        self.tiers = tiers
        self.toggle = toggle
        self.is_default_dataset = is_default_dataset or never_default
        self.priority = tuple(priority)

    def recover(self) -> RecoveryResult:
        """Scan tiers and return the first qualifying envelope's materials.

        Returns:
            RecoveryResult; success=False means the caller must fall back
            to its own default dataset
        """
        start_time = time.perf_counter()
        result = RecoveryResult()

        if not self.toggle.is_enabled():
            logger.info("Preservation disabled - not recovering")
            return result

        for tier in self.priority:
            reason, materials = self._evaluate(tier)
            if reason is None:
                result.success = True
                result.records = materials
                result.source = tier
                break
            result.skipped[tier] = reason
            logger.debug(
                f"Skipping tier '{tier.value}': {reason}",
                extra={"tier": tier.value, "reason": reason},
            )

        result.duration_ms = (time.perf_counter() - start_time) * 1000

        if result.success:
            logger.info(
                f"Recovered {len(result.records)} materials from '{result.source.value}'",
                extra={"source": result.source.value, "count": len(result.records)},
            )
        else:
            logger.warning("No recoverable materials found in any tier")
        return result

    def _evaluate(self, tier: StorageTier) -> Tuple[Optional[str], List[Any]]:
        """Read a tier and decide whether it qualifies.

        Returns:
            (skip_reason, materials); skip_reason is None when the tier qualifies
        """
        read = self.tiers.read(tier)
        if not read.ok:
            return _SKIP_FOR_STATUS[read.status], []

        materials = read.envelope.materials
        if not materials:
            return SKIP_EMPTY, []

        try:
            if self.is_default_dataset(materials):
                return SKIP_DEFAULT, []
        except Exception as e:
            # Host-supplied predicate; a tier it chokes on is not trusted
            logger.warning(f"Default-dataset check failed on tier '{tier.value}': {e}")
            return SKIP_CORRUPT, []

        return None, materials
