"""Recovery system for Material Guard.

Handles loss detection, tier selection for recovery, and cross-tier
reconciliation audits.

This package provides:
- detector: Heartbeat-based loss detection
- orchestrator: Priority scan that picks exactly one tier to restore
- audit: Read-only cross-tier consistency report
- seed: Predicates recognising the host's seed dataset
"""

from material_guard.recovery.detector import LossDetector, LossAssessment, LossReason
from material_guard.recovery.orchestrator import RecoveryOrchestrator, RecoveryResult
from material_guard.recovery.audit import AuditReport, audit_tiers
from material_guard.recovery.seed import (
    DefaultDatasetPredicate,
    never_default,
    matches_seed,
    mock_marker_predicate,
    DEMO_MODELS,
)

__all__ = [
    "LossDetector",
    "LossAssessment",
    "LossReason",
    "RecoveryOrchestrator",
    "RecoveryResult",
    "AuditReport",
    "audit_tiers",
    "DefaultDatasetPredicate",
    "never_default",
    "matches_seed",
    "mock_marker_predicate",
    "DEMO_MODELS",
]
