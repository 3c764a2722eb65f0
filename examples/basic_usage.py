#!/usr/bin/env python3
"""Basic usage example for Material Guard.

This example demonstrates:
1. Creating a MaterialGuard over a directory store
2. Persisting materials after every mutation
3. Taking a snapshot before a destructive reset
4. Detecting the loss when live state is wiped
5. Restoring from the best tier after a "reload"

Run this example:
    python basic_usage.py
"""

import tempfile
from pathlib import Path

from material_guard import (
    DirectoryStore,
    GuardConfig,
    MaterialGuard,
    MemoryStore,
)


def material(index: int, aisle: str, shelf: int, pieces: int) -> dict:
    return {
        "id": f"mat-{index:03d}",
        "productId": f"prod-{index % 3}",
        "pieceCount": pieces,
        "location": {"aisleId": aisle, "shelfIndex": shelf},
    }


def main():
    with tempfile.TemporaryDirectory() as temp_dir:
        store_dir = Path(temp_dir) / "guard"

        print("=" * 60)
        print("Material Guard - Basic Usage Example")
        print("=" * 60)

        # ---------------------------------------------------------------------
        # Step 1: Create the guard
        # ---------------------------------------------------------------------
        print("\n[1] Creating MaterialGuard...")

        config = GuardConfig(key_prefix="warehouse-1")
        guard = MaterialGuard(DirectoryStore(store_dir), MemoryStore(), config=config)
        print(f"    Preservation enabled: {guard.is_enabled()}")
        print(f"    Durable store: {guard.durable.describe()}")

        # ---------------------------------------------------------------------
        # Step 2: Mutate and persist
        # ---------------------------------------------------------------------
        print("\n[2] Adding materials (persist after every mutation)...")

        materials = []
        for i in range(8):
            materials.append(material(i, aisle="A" if i < 4 else "B", shelf=i % 3, pieces=10 + i))
            result = guard.persist(materials)

        print(f"    Last persist wrote: {[t.value for t in result.written]}")
        heartbeat = guard.heartbeat()
        print(f"    Heartbeat: {heartbeat.count} materials, fingerprint {heartbeat.fingerprint}")

        # ---------------------------------------------------------------------
        # Step 3: Snapshot before a risky operation
        # ---------------------------------------------------------------------
        print("\n[3] Snapshot before resetting the layout...")

        snapshot = guard.snapshot(materials)
        print(f"    Snapshot tiers: {[t.value for t in snapshot.written]}")

        # ---------------------------------------------------------------------
        # Step 4: Something wipes the live list
        # ---------------------------------------------------------------------
        print("\n[4] Live state wiped by a bad migration...")

        live = []
        assessment = guard.assess(live)
        print(f"    Loss detected: {assessment.loss_detected}")
        print(f"    Reason: {assessment.reason.value if assessment.reason else None}")

        # ---------------------------------------------------------------------
        # Step 5: Reload and restore
        # ---------------------------------------------------------------------
        print("\n[5] Simulating a reload and restoring...")

        # New process: the durable directory survives, the session mirror does not
        reloaded = MaterialGuard(DirectoryStore(store_dir), MemoryStore(), config=config)
        restored = reloaded.restore()

        print(f"    Restored {len(restored.records)} materials from '{restored.source.value}'")
        print(f"    Identical to what was persisted: {restored.records == materials}")
        print(f"    Restore attempts recorded: {reloaded.restore_attempts}")

        audit = reloaded.audit()
        print(f"    Tiers consistent after restore: {audit.all_consistent}")

        print("\n" + "=" * 60)
        print("Example complete!")
        print("=" * 60)


if __name__ == "__main__":
    main()
