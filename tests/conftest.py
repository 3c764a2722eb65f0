"""Shared pytest fixtures for Material Guard tests.

Provides in-memory stores, a controllable clock, configured guards and a
material factory so tests never depend on wall-clock time.
"""

import pytest

from material_guard.config import GuardConfig
from material_guard.manager import MaterialGuard
from material_guard.storage.memory import MemoryStore


class FakeClock:
    """Callable clock returning epoch seconds, advanced by hand."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_material(index: int, pieces: int = 10, aisle: str = "A", shelf: int = 0) -> dict:
    """Build one material record shaped like the host's."""
    return {
        "id": f"mat-{index:04d}",
        "productId": f"prod-{index % 7}",
        "product": {"modelo": f"Model {index % 7}", "cor": "white"},
        "pieceCount": pieces,
        "location": {"aisleId": aisle, "shelfIndex": shelf, "position": "front"},
    }


def make_materials(count: int, aisle: str = "A") -> list:
    return [make_material(i, pieces=i + 1, aisle=aisle, shelf=i % 4) for i in range(count)]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def durable():
    return MemoryStore(durable=True)


@pytest.fixture
def volatile():
    return MemoryStore()


@pytest.fixture
def config():
    return GuardConfig(key_prefix="test-materials")


@pytest.fixture
def guard(durable, volatile, config, clock):
    """MaterialGuard over in-memory stores with a fake clock."""
    return MaterialGuard(durable, volatile, config=config, clock=clock)


@pytest.fixture
def materials():
    """Ten realistic material records."""
    return make_materials(10)
