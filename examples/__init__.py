"""Example scripts for Material Guard.

Available examples:

basic_usage.py
    Core workflow: persist after mutations, snapshot, detect loss, restore.
    Start here.

recovery_example.py
    Recovery edge cases: empty and corrupt tiers, seed data, audits and
    quota failures on the session mirror.

Run any example:
    python examples/basic_usage.py
    python examples/recovery_example.py
"""
