"""Tests for the activity logger."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from captain.audit.logger import ActivityLogger, read_activity
from captain.models import ActivityEvent, ActivityEventType


def _make_event(**kwargs: object) -> ActivityEvent:
    defaults: dict[str, object] = {
        "event_type": ActivityEventType.DELIVERY,
        "hook": "ping",
        "action": "POST http://localhost:3000",
        "result": "success",
    }
    defaults.update(kwargs)
    return ActivityEvent(**defaults)  # type: ignore[arg-type]


def test_log_appends_json_line(tmp_path: Path) -> None:
    log_file = tmp_path / "activity.jsonl"
    logger = ActivityLogger(log_path=str(log_file))
    logger.log(_make_event())

    lines = log_file.read_text().strip().split("\n")
    assert len(lines) == 1
    parsed = json.loads(lines[0])
    assert parsed["event_type"] == "delivery"
    assert parsed["hook"] == "ping"


def test_log_multiple_events_append(tmp_path: Path) -> None:
    log_file = tmp_path / "activity.jsonl"
    logger = ActivityLogger(log_path=str(log_file))

    for i in range(3):
        logger.log(_make_event(hook=f"hook_{i}"))

    events = read_activity(log_file)
    assert [e.hook for e in events] == ["hook_0", "hook_1", "hook_2"]


def test_log_creates_file_if_missing(tmp_path: Path) -> None:
    log_file = tmp_path / "subdir" / "activity.jsonl"
    assert not log_file.exists()

    ActivityLogger(log_path=str(log_file)).log(_make_event())

    assert log_file.exists()


def test_rotation_keeps_backup_count(tmp_path: Path) -> None:
    log_file = tmp_path / "activity.jsonl"
    logger = ActivityLogger(log_path=str(log_file), max_bytes=1, backup_count=2)

    for i in range(5):
        logger.log(_make_event(hook=f"hook_{i}"))

    assert read_activity(log_file)[0].hook == "hook_4"
    assert read_activity(tmp_path / "activity.jsonl.1")[0].hook == "hook_3"
    assert read_activity(tmp_path / "activity.jsonl.2")[0].hook == "hook_2"
    assert not (tmp_path / "activity.jsonl.3").exists()


def test_read_activity_missing_file(tmp_path: Path) -> None:
    assert read_activity(tmp_path / "none.jsonl") == []


def test_from_env_reads_limits(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CAPTAIN_ACTIVITY_LOG_MAX_BYTES", "100")
    monkeypatch.setenv("CAPTAIN_ACTIVITY_LOG_BACKUP_COUNT", "2")
    logger = ActivityLogger.from_env(str(tmp_path / "a.jsonl"))
    assert logger._max_bytes == 100
    assert logger._backup_count == 2
