"""Utility modules for Material Guard.

This package provides:
- hashing: Fast fingerprints of material collections
- logging: Text and JSON log output carrying tier/count context
"""

from material_guard.utils.hashing import fingerprint, group_by_fingerprint
from material_guard.utils.logging import ContextFormatter, JsonFormatter, configure_root_logger

__all__ = [
    "fingerprint",
    "group_by_fingerprint",
    "ContextFormatter",
    "JsonFormatter",
    "configure_root_logger",
]
