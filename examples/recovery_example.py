#!/usr/bin/env python3
"""Recovery example for Material Guard.

This example demonstrates:
1. Skipping an empty primary tier
2. Skipping corrupt tiers
3. Refusing to "restore" the host's own seed data
4. Diagnosing tier disagreement with an audit
5. Handling quota failures on the session mirror

Run this example:
    python recovery_example.py
"""

from material_guard import (
    GuardConfig,
    MaterialGuard,
    MemoryStore,
    StorageTier,
    matches_seed,
)

SEED = [
    {"id": "mock-1", "pieceCount": 5, "location": {"aisleId": "DEMO", "shelfIndex": 0}},
    {"id": "mock-2", "pieceCount": 7, "location": {"aisleId": "DEMO", "shelfIndex": 1}},
]


def user_materials(count: int) -> list:
    return [
        {"id": f"user-{i}", "pieceCount": i + 1, "location": {"aisleId": "C", "shelfIndex": i % 5}}
        for i in range(count)
    ]


def main():
    print("=" * 60)
    print("Material Guard - Recovery Example")
    print("=" * 60)

    durable = MemoryStore(durable=True)
    config = GuardConfig(key_prefix="demo")

    # -------------------------------------------------------------------------
    # Scenario 1: Primary emptied, backups intact
    # -------------------------------------------------------------------------
    print("\n[1] Primary emptied, backup-1 and backup-2 intact...")

    guard = MaterialGuard(durable, MemoryStore(), config=config, is_default_dataset=matches_seed(SEED))
    guard.persist_named_tier(StorageTier.BACKUP_1, user_materials(5))
    guard.persist_named_tier(StorageTier.BACKUP_2, user_materials(3))
    guard.persist([])

    result = guard.recover()
    print(f"    Source: {result.source.value}, records: {len(result.records)}")
    print(f"    Skipped: {result.to_dict()['skipped']}")

    # -------------------------------------------------------------------------
    # Scenario 2: Corrupt backup
    # -------------------------------------------------------------------------
    print("\n[2] backup-1 corrupted on disk...")

    durable.set(config.tier_key(StorageTier.BACKUP_1), '{"materials": [1, 2], "metadata": ')
    result = guard.recover()
    print(f"    Source: {result.source.value}, records: {len(result.records)}")
    print(f"    Skipped: {result.to_dict()['skipped']}")

    # -------------------------------------------------------------------------
    # Scenario 3: Only seed data left
    # -------------------------------------------------------------------------
    print("\n[3] Everything cleared, then the host seeds its demo data...")

    guard.clear_all()
    guard.persist(SEED)
    result = guard.recover()
    print(f"    Recovered: {result.success} (host falls back to its own seed)")

    # -------------------------------------------------------------------------
    # Scenario 4: Audit
    # -------------------------------------------------------------------------
    print("\n[4] Auditing tiers that disagree...")

    guard.persist(user_materials(4))
    guard.persist_named_tier("emergency", user_materials(2))
    report = guard.audit()
    print(f"    All consistent: {report.all_consistent}")
    for fp, names in report.groups().items():
        print(f"    {fp}: {', '.join(names)}")

    # -------------------------------------------------------------------------
    # Scenario 5: Mirror out of quota
    # -------------------------------------------------------------------------
    print("\n[5] Session mirror out of quota...")

    failures = []
    tight = MaterialGuard(
        MemoryStore(durable=True),
        MemoryStore(quota_bytes=64),
        config=config,
        on_tier_failure=lambda tier, error: failures.append(tier.value),
    )
    persisted = tight.persist(user_materials(20))
    print(f"    Written: {[t.value for t in persisted.written]}")
    print(f"    Failed tiers reported to callback: {failures}")
    print(f"    Heartbeat still updated: {persisted.heartbeat_written}")

    print("\n" + "=" * 60)
    print("Example complete!")
    print("=" * 60)


if __name__ == "__main__":
    main()
