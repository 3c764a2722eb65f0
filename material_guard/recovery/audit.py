"""Cross-tier reconciliation audit.

Reads every tier without writing anything back and reports whether the
tiers agree. Diagnostic only: recovery never consults it.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from material_guard.config import StorageTier, TIER_PRIORITY
from material_guard.sync.envelope import BackupEnvelope
from material_guard.sync.tiers import ReadStatus, TierSet
from material_guard.utils.hashing import fingerprint, group_by_fingerprint


@dataclass
class AuditReport:
    """Result of a reconciliation audit.

    Attributes:
        tiers: Every tier mapped to its envelope, or None if absent/unusable
        fingerprints: Fingerprint of each present tier's materials
        unreadable: Tiers that held data which could not be decoded or read
        errors: Decode/read error per unreadable tier
    """
    tiers: Dict[StorageTier, Optional[BackupEnvelope]] = field(default_factory=dict)
    fingerprints: Dict[StorageTier, str] = field(default_factory=dict)
    unreadable: List[StorageTier] = field(default_factory=list)
    errors: Dict[StorageTier, str] = field(default_factory=dict)

    @property
    def present(self) -> List[StorageTier]:
        """Tiers holding a usable envelope, in priority order."""
        return [t for t, env in self.tiers.items() if env is not None]

    @property
    def all_consistent(self) -> bool:
        """True if every present tier has the same fingerprint."""
        return len(set(self.fingerprints.values())) <= 1

    def groups(self) -> Dict[str, List[str]]:
        """Fingerprint -> tier names sharing it."""
        return group_by_fingerprint({t.value: fp for t, fp in self.fingerprints.items()})

    def to_dict(self) -> dict:
        return {
            "all_consistent": self.all_consistent,
            "tiers": {
                t.value: (
                    {
                        "count": env.count,
                        "timestamp": env.timestamp,
                        "legacy": env.legacy,
                        "fingerprint": self.fingerprints[t],
                    }
                    if env is not None else None
                )
                for t, env in self.tiers.items()
            },
            "unreadable": [t.value for t in self.unreadable],
            "errors": {t.value: err for t, err in self.errors.items()},
            "groups": self.groups(),
        }


def audit_tiers(tiers: TierSet) -> AuditReport:
    """Read every tier and compare fingerprints.

    Not gated by the preservation flag, and has no side effects.

    Args:
        tiers: Tier routing to read through

    Returns:
        AuditReport covering all tiers in priority order
    """
    report = AuditReport()

    for tier in TIER_PRIORITY:
        read = tiers.read(tier)
        if read.ok:
            report.tiers[tier] = read.envelope
            report.fingerprints[tier] = fingerprint(read.envelope.materials)
        else:
            report.tiers[tier] = None
            if read.status is not ReadStatus.ABSENT:
                report.unreadable.append(tier)
                report.errors[tier] = read.error or read.status.value

    return report
