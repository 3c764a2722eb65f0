"""Tests for material_guard.storage module.

Validates the memory and directory stores against the get/set/remove
contract, quota enforcement, and failure translation.
"""

import errno
from unittest.mock import patch

import pytest

from material_guard.storage import (
    DirectoryStore,
    GuardedStore,
    MemoryStore,
    QuotaExceededError,
    StorageReadError,
    StorageWriteError,
    open_store,
)


@pytest.fixture(params=["memory", "directory"])
def store(request, tmp_path):
    if request.param == "memory":
        return MemoryStore()
    return DirectoryStore(tmp_path / "store")


class TestStoreContract:
    """Behaviour every store must share."""

    def test_missing_key_is_none(self, store):
        assert store.get("nope") is None

    def test_set_then_get(self, store):
        store.set("k", "value")
        assert store.get("k") == "value"

    def test_set_replaces(self, store):
        store.set("k", "one")
        store.set("k", "two")
        assert store.get("k") == "two"

    def test_remove(self, store):
        store.set("k", "v")
        store.remove("k")
        assert store.get("k") is None

    def test_remove_missing_is_noop(self, store):
        store.remove("never-set")

    def test_keys_sorted(self, store):
        store.set("b", "1")
        store.set("a", "2")
        assert store.keys() == ["a", "b"]

    def test_unicode_round_trip(self, store):
        store.set("k", "Prateleira 3, peças: 12 ✓")
        assert store.get("k") == "Prateleira 3, peças: 12 ✓"

    def test_non_string_value_rejected(self, store):
        with pytest.raises(TypeError):
            store.set("k", 42)


class TestMemoryStore:
    def test_volatile_by_default(self):
        assert MemoryStore().durable is False
        assert MemoryStore(durable=True).durable is True

    def test_quota_exceeded(self):
        store = MemoryStore(quota_bytes=20)
        store.set("k", "12345")
        with pytest.raises(QuotaExceededError):
            store.set("other", "x" * 50)
        assert store.get("other") is None

    def test_quota_counts_replacement_not_addition(self):
        """Overwriting a key frees its old value first."""
        store = MemoryStore(quota_bytes=12)
        store.set("k", "x" * 10)
        store.set("k", "y" * 10)
        assert store.get("k") == "y" * 10

    def test_quota_error_is_write_error(self):
        assert issubclass(QuotaExceededError, StorageWriteError)

    def test_clear(self):
        store = MemoryStore()
        store.set("a", "1")
        store.clear()
        assert store.keys() == []
        assert store.used_bytes() == 0


class TestDirectoryStore:
    def test_persists_across_instances(self, tmp_path):
        DirectoryStore(tmp_path).set("materials-primary", "[1]")
        assert DirectoryStore(tmp_path).get("materials-primary") == "[1]"

    def test_keys_with_unsafe_characters(self, tmp_path):
        store = DirectoryStore(tmp_path)
        store.set("a/b:c", "v")
        assert store.get("a/b:c") == "v"
        assert store.keys() == ["a/b:c"]

    def test_missing_root_has_no_keys(self, tmp_path):
        assert DirectoryStore(tmp_path / "absent").keys() == []

    def test_no_temp_files_left(self, tmp_path):
        store = DirectoryStore(tmp_path)
        store.set("k", "v")
        assert [p.name for p in tmp_path.iterdir() if p.name.startswith(".tmp-")] == []

    def test_enospc_becomes_quota_error(self, tmp_path):
        store = DirectoryStore(tmp_path)
        with patch("material_guard.storage.directory.os.replace",
                   side_effect=OSError(errno.ENOSPC, "No space left on device")):
            with pytest.raises(QuotaExceededError):
                store.set("k", "v")
        assert store.get("k") is None
        assert [p.name for p in tmp_path.iterdir() if p.name.startswith(".tmp-")] == []

    def test_other_oserror_becomes_write_error(self, tmp_path):
        store = DirectoryStore(tmp_path)
        with patch("material_guard.storage.directory.os.replace",
                   side_effect=OSError(errno.EACCES, "Permission denied")):
            with pytest.raises(StorageWriteError) as excinfo:
                store.set("k", "v")
        assert not isinstance(excinfo.value, QuotaExceededError)

    def test_failed_write_keeps_previous_value(self, tmp_path):
        store = DirectoryStore(tmp_path)
        store.set("k", "old")
        with patch("material_guard.storage.directory.os.replace",
                   side_effect=OSError(errno.EIO, "I/O error")):
            with pytest.raises(StorageWriteError):
                store.set("k", "new")
        assert store.get("k") == "old"

    def test_undecodable_file_is_read_error(self, tmp_path):
        store = DirectoryStore(tmp_path)
        store.set("k", "v")
        store._path_for("k").write_bytes(b"\xff\xfe\xfd")
        with pytest.raises(StorageReadError):
            store.get("k")


class TestOpenStore:
    def test_memory(self):
        assert isinstance(open_store("memory", quota_bytes=10), MemoryStore)

    def test_directory(self, tmp_path):
        store = open_store("directory", tmp_path)
        assert isinstance(store, DirectoryStore)
        assert store.root == tmp_path

    def test_directory_requires_path(self):
        with pytest.raises(ValueError):
            open_store("directory")

    def test_unknown_kind(self):
        with pytest.raises(ValueError, match="not supported"):
            open_store("sqlite")


class TestGuardedStore:
    """Host exceptions are translated into StorageError at the boundary."""

    def test_passes_through(self):
        inner = MemoryStore(durable=True)
        guarded = GuardedStore(inner)
        guarded.set("k", "v")
        assert inner.get("k") == "v"
        assert guarded.get("k") == "v"
        assert guarded.keys() == ["k"]
        guarded.remove("k")
        assert inner.keys() == []
        assert guarded.durable is True

    def test_oserror_on_set_becomes_write_error(self):
        inner = MemoryStore()
        with patch.object(inner, "set", side_effect=OSError(errno.ENOSPC, "No space left")):
            with pytest.raises(StorageWriteError) as exc_info:
                GuardedStore(inner).set("k", "v")
        assert isinstance(exc_info.value.__cause__, OSError)

    def test_runtime_error_on_get_becomes_read_error(self):
        inner = MemoryStore()
        with patch.object(inner, "get", side_effect=RuntimeError("driver crashed")):
            with pytest.raises(StorageReadError, match="driver crashed"):
                GuardedStore(inner).get("k")

    def test_remove_and_keys_translated(self):
        inner = MemoryStore()
        guarded = GuardedStore(inner)
        with patch.object(inner, "remove", side_effect=PermissionError("read-only")):
            with pytest.raises(StorageWriteError):
                guarded.remove("k")
        with patch.object(inner, "keys", side_effect=OSError("gone")):
            with pytest.raises(StorageReadError):
                guarded.keys()

    def test_storage_errors_unchanged(self):
        inner = MemoryStore(quota_bytes=5)
        with pytest.raises(QuotaExceededError):
            GuardedStore(inner).set("key", "too large")

    def test_describe_delegates(self, tmp_path):
        inner = DirectoryStore(tmp_path / "store")
        assert GuardedStore(inner).describe() == inner.describe()
