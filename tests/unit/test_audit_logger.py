"""Unit tests for AuditLogger.

Writes to a real temp file; the write-failure path is forced by pointing
the logger at a directory.
"""

import json
import logging
from datetime import datetime
from pathlib import Path

import pytest

from guard.audit.logger import AuditLogger
from guard.audit.query import AuditQuery
from guard.models.audit import AuditFilters, AuditStatus
from guard.sanitize.sanitizer import Sanitizer


def _lines(path: Path) -> list[dict]:  # type: ignore[type-arg]
    return [json.loads(line) for line in path.read_text().splitlines()]


@pytest.fixture
def log_path(tmp_path: Path) -> Path:
    return tmp_path / ".direct" / "audit.log"


@pytest.fixture
def audit_logger(log_path: Path, sanitizer: Sanitizer) -> AuditLogger:
    return AuditLogger(log_path, sanitizer)


@pytest.mark.unit
def test_record_appends_one_json_line(audit_logger: AuditLogger, log_path: Path) -> None:
    audit_logger.record(1, "run", "x<-1", "success")

    entries = _lines(log_path)
    assert len(entries) == 1
    entry = entries[0]
    assert entry["sid"] == 1
    assert entry["tool"] == "run"
    assert entry["cmd"] == "x<-1"
    assert entry["cmd_sanitized"] == "x<-1"
    assert entry["status"] == "success"
    # second precision, UTC, trailing Z
    datetime.strptime(entry["ts"], "%Y-%m-%dT%H:%M:%SZ")


@pytest.mark.unit
def test_recorded_entry_is_queryable(audit_logger: AuditLogger, log_path: Path) -> None:
    audit_logger.record(1, "run", "x<-1", "success")

    records = AuditQuery(log_path).query(AuditFilters(tool="run"))
    assert len(records) == 1
    assert records[0].cmd_sanitized == "x<-1"
    assert records[0].sid == 1


@pytest.mark.unit
def test_records_are_appended_in_order(audit_logger: AuditLogger, log_path: Path) -> None:
    audit_logger.record("a", "run_code", "1 + 1", AuditStatus.SUCCESS)
    audit_logger.record("a", "run_code", 'system("ls")', AuditStatus.BLOCKED, reason="system")

    entries = _lines(log_path)
    assert [e["status"] for e in entries] == ["success", "blocked"]
    assert entries[1]["reason"] == "system"


@pytest.mark.unit
def test_cmd_sanitized_is_pii_redacted(audit_logger: AuditLogger, log_path: Path) -> None:
    audit_logger.record(1, "run_code", 'send_mail("jane@example.com")', "success")

    entry = _lines(log_path)[0]
    assert entry["cmd"] == 'send_mail("jane@example.com")'
    assert entry["cmd_sanitized"] == 'send_mail("[EMAIL]")'


@pytest.mark.unit
def test_full_commands_off_keeps_raw_text_off_disk(log_path: Path, sanitizer: Sanitizer) -> None:
    audit_logger = AuditLogger(log_path, sanitizer, log_full_commands=False)
    audit_logger.record(1, "run_code", 'send_mail("jane@example.com")', "success")

    raw = log_path.read_text()
    assert "jane@example.com" not in raw
    assert _lines(log_path)[0]["cmd"] == 'send_mail("[EMAIL]")'


@pytest.mark.unit
def test_extra_fields_written_and_none_dropped(audit_logger: AuditLogger, log_path: Path) -> None:
    audit_logger.record(
        1, "write_file", "a,b\n1,2\n", "success", path="data.csv", size_bytes=8, line_count=2
    )

    entry = _lines(log_path)[0]
    assert entry["path"] == "data.csv"
    assert entry["size_bytes"] == 8
    assert entry["line_count"] == 2
    assert "error" not in entry
    assert "duration_ms" not in entry


@pytest.mark.unit
def test_creates_missing_audit_directory(audit_logger: AuditLogger, log_path: Path) -> None:
    assert not log_path.parent.exists()
    audit_logger.record(1, "run_code", "1", "success")
    assert log_path.exists()


@pytest.mark.unit
def test_write_failure_never_raises(
    tmp_path: Path, sanitizer: Sanitizer, caplog: pytest.LogCaptureFixture
) -> None:
    # A directory in place of the log file makes open() fail
    broken = AuditLogger(tmp_path, sanitizer)

    with caplog.at_level(logging.ERROR, logger="guard.audit.logger"):
        broken.record(1, "run_code", "1", "success")

    assert "audit record lost" in caplog.text


@pytest.mark.unit
def test_invalid_status_never_raises(audit_logger: AuditLogger, log_path: Path) -> None:
    audit_logger.record(1, "run_code", "1", "exploded")
    assert not log_path.exists()


@pytest.mark.unit
def test_unencodable_command_still_recorded(audit_logger: AuditLogger, log_path: Path) -> None:
    audit_logger.record("s", "write_file", "x\ud800", "error", error="bad text")

    records = AuditQuery(log_path).query(AuditFilters())
    assert len(records) == 1
    assert records[0].cmd == "x?"
    assert records[0].cmd_sanitized == "x?"
    assert records[0].error == "bad text"
