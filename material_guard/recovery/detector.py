"""Loss detection via the heartbeat record.

The heartbeat approach:
1. Every successful primary write refreshes the heartbeat
2. A live session refreshes it continuously, so a stale heartbeat is
   suspicious on its own
3. Live data far smaller than the heartbeat count means something dropped it

This is a heuristic biased toward false positives: prompting the user is
cheaper than losing their data silently.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Sequence

from material_guard.config import GuardConfig
from material_guard.sync.heartbeat import HeartbeatRecord, HeartbeatStore
from material_guard.toggle import PreservationToggle

logger = logging.getLogger(__name__)


class LossReason(Enum):
    STALE_HEARTBEAT = "stale_heartbeat"
    HARD_LOSS = "hard_loss"
    SIGNIFICANT_REGRESSION = "significant_regression"


@dataclass(frozen=True)
class LossAssessment:
    """Outcome of comparing live materials against the heartbeat.

    Attributes:
        loss_detected: Whether the host should offer recovery
        reason: Which rule fired (None when no loss)
        live_count: Number of live materials
        heartbeat: Heartbeat compared against (None if absent or disabled)
    """
    loss_detected: bool
    reason: Optional[LossReason] = None
    live_count: int = 0
    heartbeat: Optional[HeartbeatRecord] = None

    def to_dict(self) -> dict:
        return {
            "loss_detected": self.loss_detected,
            "reason": self.reason.value if self.reason else None,
            "live_count": self.live_count,
            "heartbeat": self.heartbeat.to_dict() if self.heartbeat else None,
        }


class LossDetector:
    """Compares live materials against the heartbeat."""

    def __init__(
        self,
        heartbeat: HeartbeatStore,
        toggle: PreservationToggle,
        config: GuardConfig,
        clock: Callable[[], float] = time.time,
    ):
        self.heartbeat = heartbeat
        self.toggle = toggle
        self.config = config
        self.clock = clock

    def assess(self, live_records: Sequence[Any]) -> LossAssessment:
        """Apply the loss rules in order and report which one fired."""
        live_count = len(live_records) if live_records is not None else 0

        if not self.toggle.is_enabled():
            return LossAssessment(False, live_count=live_count)

        heartbeat = self.heartbeat.read()
        if heartbeat is None:
            return LossAssessment(False, live_count=live_count)

        now_ms = int(self.clock() * 1000)
        if heartbeat.age_seconds(now_ms) > self.config.stale_after_seconds:
            logger.info(
                f"Heartbeat is {heartbeat.age_seconds(now_ms):.0f}s old - possible loss",
                extra={"reason": LossReason.STALE_HEARTBEAT.value},
            )
            return LossAssessment(True, LossReason.STALE_HEARTBEAT, live_count, heartbeat)

        if heartbeat.count > 0 and live_count == 0:
            logger.warning(
                f"Material loss detected: {heartbeat.count} -> 0",
                extra={"reason": LossReason.HARD_LOSS.value, "count": live_count},
            )
            return LossAssessment(True, LossReason.HARD_LOSS, live_count, heartbeat)

        if (
            heartbeat.count > self.config.regression_min_count
            and live_count < heartbeat.count * self.config.regression_ratio
        ):
            logger.warning(
                f"Significant material regression: {heartbeat.count} -> {live_count}",
                extra={"reason": LossReason.SIGNIFICANT_REGRESSION.value, "count": live_count},
            )
            return LossAssessment(True, LossReason.SIGNIFICANT_REGRESSION, live_count, heartbeat)

        return LossAssessment(False, live_count=live_count, heartbeat=heartbeat)

    def detect_loss(self, live_records: Sequence[Any]) -> bool:
        """True if live state looks like it regressed unexpectedly."""
        return self.assess(live_records).loss_detected
