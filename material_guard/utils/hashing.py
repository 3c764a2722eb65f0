"""Fast fingerprints of material collections.

Uses xxhash for speed. Designed for change detection where speed matters
more than cryptographic security: two different collections can share a
fingerprint, so never use it to verify integrity.
"""

from collections.abc import Mapping
from typing import Any, Dict, Iterable, List

import xxhash

# Separators keep "ab"+"c" and "a"+"bc" apart
FIELD_SEPARATOR = "|"
RECORD_SEPARATOR = ";"


def _field(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def record_summary(record: Any) -> str:
    """Concatenate the fields that identify where a material is and how much of it.

    Uses id, pieceCount, location.aisleId and location.shelfIndex. Missing
    fields contribute empty strings.
    """
    location = _field(record, "location")
    return FIELD_SEPARATOR.join((
        _text(_field(record, "id")),
        _text(_field(record, "pieceCount")),
        _text(_field(location, "aisleId")) if location is not None else "",
        _text(_field(location, "shelfIndex")) if location is not None else "",
    ))


def fingerprint(records: Iterable[Any]) -> str:
    """Compute a short, deterministic fingerprint of a material collection.

    Order-sensitive: the same records in a different order give a different
    fingerprint.

    Args:
        records: Materials (mappings or objects with matching attributes)

    Returns:
        16-character hex digest (xxh64)
    """
    hasher = xxhash.xxh64()
    for index, record in enumerate(records or ()):
        if index:
            hasher.update(RECORD_SEPARATOR.encode("utf-8"))
        hasher.update(record_summary(record).encode("utf-8"))
    return hasher.hexdigest()


def group_by_fingerprint(fingerprints: Dict[str, str]) -> Dict[str, List[str]]:
    """Invert a name -> fingerprint mapping.

    Args:
        fingerprints: Mapping of tier name to fingerprint

    Returns:
        Dict mapping each distinct fingerprint to the sorted names sharing it
    """
    groups: Dict[str, List[str]] = {}
    for name, value in fingerprints.items():
        groups.setdefault(value, []).append(name)
    return {value: sorted(names) for value, names in groups.items()}
