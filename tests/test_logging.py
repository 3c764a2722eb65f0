"""Tests for material_guard.utils.logging module."""

import json
import logging
import sys

import pytest

from material_guard.__main__ import main
from material_guard.manager import MaterialGuard
from material_guard.storage.memory import MemoryStore
from material_guard.utils.logging import (
    ContextFormatter,
    JsonFormatter,
    configure_root_logger,
    record_context,
)


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def read_json_lines(path, root):
    for handler in root.handlers:
        handler.flush()
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]


class TestRecordContext:
    def test_ordered_and_filtered(self):
        record = logging.makeLogRecord({"msg": "x", "count": 3, "tier": "backup-1", "user": "ana"})
        assert list(record_context(record).items()) == [("tier", "backup-1"), ("count", 3)]

    def test_zero_count_kept(self):
        record = logging.makeLogRecord({"msg": "x", "count": 0})
        assert record_context(record) == {"count": 0}


class TestJsonFormatter:
    def test_basic_fields(self):
        record = logging.makeLogRecord({
            "name": "material_guard.sync.writer",
            "levelname": "WARNING",
            "levelno": logging.WARNING,
            "msg": "Write to tier '%s' failed",
            "args": ("primary",),
        })
        data = json.loads(JsonFormatter().format(record))
        assert data["level"] == "WARNING"
        assert data["logger"] == "material_guard.sync.writer"
        assert data["message"] == "Write to tier 'primary' failed"
        assert data["timestamp"].endswith("+00:00")

    def test_context_fields_top_level(self):
        record = logging.makeLogRecord({"msg": "Backup written", "tier": "primary", "count": 42})
        data = json.loads(JsonFormatter().format(record))
        assert data["tier"] == "primary"
        assert data["count"] == 42

    def test_other_extras_excluded(self):
        record = logging.makeLogRecord({"msg": "x", "session": "abc", "when": object()})
        data = json.loads(JsonFormatter().format(record))
        assert set(data) == {"timestamp", "level", "logger", "message"}

    def test_exception_included(self):
        try:
            raise RuntimeError("disk gone")
        except RuntimeError:
            record = logging.makeLogRecord({"msg": "failed"})
            record.exc_info = sys.exc_info()
        data = json.loads(JsonFormatter().format(record))
        assert "RuntimeError: disk gone" in data["exception"]


class TestContextFormatter:
    def test_appends_context(self):
        record = logging.makeLogRecord({
            "name": "material_guard.sync.writer",
            "levelname": "WARNING",
            "msg": "Write to tier failed",
            "tier": "primary",
            "count": 3,
        })
        line = ContextFormatter().format(record)
        assert line.endswith("| material_guard.sync.writer | Write to tier failed [tier=primary count=3]")

    def test_plain_record_unchanged(self):
        record = logging.makeLogRecord({"levelname": "INFO", "msg": "Material preservation data cleared"})
        line = ContextFormatter().format(record)
        assert line.endswith("Material preservation data cleared")
        assert "[" not in line

    def test_context_stays_on_first_line(self):
        try:
            raise ValueError("bad envelope")
        except ValueError:
            record = logging.makeLogRecord({"msg": "Tier corrupt", "tier": "backup-2"})
            record.exc_info = sys.exc_info()
        first, _, rest = ContextFormatter().format(record).partition("\n")
        assert first.endswith("Tier corrupt [tier=backup-2]")
        assert "ValueError: bad envelope" in rest


class TestConfigureRootLogger:
    def test_replaces_handlers(self, restore_root_logger):
        configure_root_logger("WARNING", json_output=True)
        assert restore_root_logger.level == logging.WARNING
        assert len(restore_root_logger.handlers) == 1
        assert isinstance(restore_root_logger.handlers[0].formatter, JsonFormatter)

    def test_text_by_default(self, restore_root_logger):
        configure_root_logger()
        assert restore_root_logger.level == logging.INFO
        assert isinstance(restore_root_logger.handlers[0].formatter, ContextFormatter)

    def test_failed_tier_logged_with_context(self, restore_root_logger, tmp_path, config, clock, materials):
        log_file = tmp_path / "logs" / "guard.log"
        configure_root_logger("WARNING", json_output=True, log_file=log_file)
        guard = MaterialGuard(MemoryStore(durable=True), MemoryStore(quota_bytes=10),
                              config=config, clock=clock)

        guard.persist(materials)

        lines = read_json_lines(log_file, restore_root_logger)
        failed = [line for line in lines if line.get("tier") == "session-mirror"]
        assert len(failed) == 1
        assert failed[0]["level"] == "WARNING"
        assert failed[0]["count"] == len(materials)

    def test_cli_log_file(self, restore_root_logger, tmp_path):
        log_file = tmp_path / "guard.log"
        exit_code = main(["--log-json", "--log-file", str(log_file),
                          "--store-dir", str(tmp_path / "guard"), "recover"])
        assert exit_code == 1

        lines = read_json_lines(log_file, restore_root_logger)
        assert any(line["message"] == "No recoverable materials found in any tier" for line in lines)
        assert all(line["level"] in ("WARNING", "ERROR") for line in lines)
