"""Tests for the material_guard command line interface."""

import json

import pytest

from material_guard.__main__ import build_parser, main
from material_guard.config import StorageTier
from material_guard.manager import MaterialGuard
from material_guard.storage.directory import DirectoryStore
from material_guard.storage.memory import MemoryStore

from conftest import make_materials


def open_guard(path):
    return MaterialGuard(DirectoryStore(path), MemoryStore())


@pytest.fixture
def store_dir(tmp_path):
    return tmp_path / "guard"


def run(store_dir, *args):
    return main(["--store-dir", str(store_dir), *args])


class TestParser:
    def test_store_dir_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["status"])

    def test_unknown_tier_rejected(self, store_dir):
        with pytest.raises(SystemExit):
            run(store_dir, "snapshot", "--input", "x.json", "--tier", "backup-9")

    def test_no_command_prints_help(self, store_dir, capsys):
        assert run(store_dir) == 0
        assert "usage" in capsys.readouterr().out.lower()


class TestStatusAndAudit:
    def test_status_empty(self, store_dir, capsys):
        assert run(store_dir, "status") == 0
        out = capsys.readouterr().out
        assert "Preservation: enabled" in out
        assert "Heartbeat: none" in out
        assert "Available tiers: none" in out

    def test_status_json(self, store_dir, capsys):
        open_guard(store_dir).persist(make_materials(4))
        assert run(store_dir, "status", "--json") == 0
        status = json.loads(capsys.readouterr().out)
        assert status["heartbeat"]["count"] == 4
        assert status["available_tiers"] == ["primary"]

    def test_audit_consistent(self, store_dir, capsys):
        guard = open_guard(store_dir)
        guard.persist(make_materials(3))
        guard.snapshot(make_materials(3))
        assert run(store_dir, "audit") == 0
        out = capsys.readouterr().out
        assert "[primary] 3 materials" in out
        assert "All consistent: True" in out

    def test_audit_inconsistent_exit_code(self, store_dir, capsys):
        guard = open_guard(store_dir)
        guard.persist(make_materials(3))
        guard.persist_named_tier("backup-1", make_materials(5))
        assert run(store_dir, "audit", "--json") == 1
        report = json.loads(capsys.readouterr().out)
        assert report["all_consistent"] is False


class TestRecover:
    def test_nothing_to_recover(self, store_dir, capsys):
        assert run(store_dir, "recover") == 1
        assert "No recoverable materials" in capsys.readouterr().err

    def test_recover_prints_records(self, store_dir, capsys):
        records = make_materials(2)
        open_guard(store_dir).persist_named_tier("backup-2", records)
        assert run(store_dir, "recover") == 0
        captured = capsys.readouterr()
        assert json.loads(captured.out) == records
        assert "skipped primary: absent" in captured.err

    def test_recover_to_file(self, store_dir, tmp_path, capsys):
        records = make_materials(3)
        open_guard(store_dir).persist(records)
        output = tmp_path / "out.json"
        assert run(store_dir, "recover", "--output", str(output)) == 0
        assert json.loads(output.read_text(encoding="utf-8")) == records
        assert "from primary" in capsys.readouterr().out

    def test_write_back(self, store_dir):
        records = make_materials(3)
        open_guard(store_dir).persist_named_tier("emergency", records)
        assert run(store_dir, "recover", "--write-back", "--output", str(store_dir / "x.json")) == 0
        guard = open_guard(store_dir)
        assert guard.recover().source is StorageTier.PRIMARY
        assert guard.heartbeat().count == 3


class TestSnapshotAndToggle:
    def test_snapshot_from_file(self, store_dir, tmp_path, capsys):
        records = make_materials(4)
        source = tmp_path / "materials.json"
        source.write_text(json.dumps(records), encoding="utf-8")

        assert run(store_dir, "snapshot", "--input", str(source)) == 0

        assert "backup-1, backup-2, emergency" in capsys.readouterr().out
        assert open_guard(store_dir).available_tiers() == [
            StorageTier.BACKUP_1, StorageTier.BACKUP_2, StorageTier.EMERGENCY,
        ]

    def test_snapshot_selected_tier(self, store_dir, tmp_path):
        source = tmp_path / "materials.json"
        source.write_text(json.dumps(make_materials(1)), encoding="utf-8")
        assert run(store_dir, "snapshot", "--input", str(source), "--tier", "backup-2") == 0
        assert open_guard(store_dir).available_tiers() == [StorageTier.BACKUP_2]

    def test_snapshot_rejects_non_array(self, store_dir, tmp_path, capsys):
        source = tmp_path / "materials.json"
        source.write_text('{"materials": []}', encoding="utf-8")
        assert run(store_dir, "snapshot", "--input", str(source)) == 1
        assert "JSON array" in capsys.readouterr().err

    def test_snapshot_missing_file(self, store_dir, tmp_path):
        assert run(store_dir, "snapshot", "--input", str(tmp_path / "absent.json")) == 1

    def test_disable_blocks_snapshot(self, store_dir, tmp_path, capsys):
        source = tmp_path / "materials.json"
        source.write_text("[]", encoding="utf-8")
        assert run(store_dir, "disable") == 0
        assert run(store_dir, "snapshot", "--input", str(source)) == 1
        assert "Preservation disabled" in capsys.readouterr().err
        assert open_guard(store_dir).is_enabled() is False

        assert run(store_dir, "enable") == 0
        assert open_guard(store_dir).is_enabled() is True

    def test_prefix_option(self, store_dir):
        assert run(store_dir, "--prefix", "wh", "disable") == 0
        assert open_guard(store_dir).is_enabled() is True


class TestClear:
    def test_requires_confirmation(self, store_dir, capsys):
        open_guard(store_dir).persist(make_materials(2))
        assert run(store_dir, "clear") == 1
        assert "--yes" in capsys.readouterr().err
        assert open_guard(store_dir).available_tiers() == [StorageTier.PRIMARY]

    def test_clear(self, store_dir):
        open_guard(store_dir).persist(make_materials(2))
        assert run(store_dir, "clear", "--yes") == 0
        guard = open_guard(store_dir)
        assert guard.available_tiers() == []
        assert guard.heartbeat() is None
