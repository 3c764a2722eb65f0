"""Predicates deciding whether a material list is just the host's seed data.

Recovery must not "restore" the demo dataset the host ships with, but only
the host knows what that dataset looks like, so the check is injected as a
callable ``(records) -> bool``.
"""

from collections.abc import Mapping
from typing import Any, Callable, Iterable, Sequence

from material_guard.utils.hashing import fingerprint

DefaultDatasetPredicate = Callable[[Sequence[Any]], bool]


def never_default(records: Sequence[Any]) -> bool:
    """Treat every list as user data."""
    return False


def matches_seed(seed: Sequence[Any]) -> DefaultDatasetPredicate:
    """Build a predicate matching lists identical to ``seed``.

    Identity is judged by length and fingerprint, so reordering the seed
    counts as user data.
    """
    seed_count = len(seed)
    seed_fingerprint = fingerprint(seed)

    def is_seed(records: Sequence[Any]) -> bool:
        return len(records) == seed_count and fingerprint(records) == seed_fingerprint

    return is_seed


# Product models the bundled demo dataset ships with
DEMO_MODELS = (
    "Ferro de 12mm A500 NR",
    "Ferro de 16mm A500 NR",
    "Ferro de 20mm A500 NR",
)


def _get(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def mock_marker_predicate(
    id_prefixes: Iterable[str] = ("mock-",),
    max_count: int = 6,
    model_markers: Iterable[str] = DEMO_MODELS,
) -> DefaultDatasetPredicate:
    """Build a predicate flagging small lists that contain mock records.

    A record is a mock when its id starts with one of ``id_prefixes`` or its
    ``product.modelo`` contains one of ``model_markers``. A list counts as
    seed data when at least one record is a mock and the list holds no more
    than ``max_count`` records. Larger lists are assumed to be user data that
    happens to include a seeded row.
    """
    prefixes = tuple(id_prefixes)
    markers = tuple(model_markers)

    def is_mock_record(record: Any) -> bool:
        record_id = _get(record, "id")
        if isinstance(record_id, str) and record_id.startswith(prefixes):
            return True
        product = _get(record, "product")
        model = _get(product, "modelo") if product is not None else None
        return isinstance(model, str) and any(m in model for m in markers)

    def is_mock(records: Sequence[Any]) -> bool:
        if len(records) > max_count:
            return False
        return any(is_mock_record(r) for r in records)

    return is_mock
