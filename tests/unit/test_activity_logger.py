"""Tests for the activity logger."""

from __future__ import annotations

import json
from pathlib import Path

from src.activity.logger import REDACTED, ActivityLogger, redact
from src.models import ActivityEvent, ActivityEventType


def _make_event(**kwargs: object) -> ActivityEvent:
    defaults: dict[str, object] = {
        "event_type": ActivityEventType.COMMAND_PROCESSED,
        "chat_id": "972501234567@c.us",
        "action": "command",
        "result": "success",
    }
    defaults.update(kwargs)
    return ActivityEvent(**defaults)  # type: ignore[arg-type]


def test_log_appends_json_line(tmp_path: Path) -> None:
    log_file = tmp_path / "activity.jsonl"
    ActivityLogger(log_path=str(log_file)).log(_make_event())

    lines = log_file.read_text().strip().split("\n")
    assert len(lines) == 1
    parsed = json.loads(lines[0])
    assert parsed["event_type"] == "command_processed"
    assert parsed["chat_id"] == "972501234567@c.us"
    assert parsed["timestamp"]


def test_log_multiple_events_append(tmp_path: Path) -> None:
    log_file = tmp_path / "activity.jsonl"
    logger = ActivityLogger(log_path=str(log_file))
    for i in range(3):
        logger.log(_make_event(action=f"action_{i}"))

    lines = log_file.read_text().strip().split("\n")
    assert [json.loads(line)["action"] for line in lines] == ["action_0", "action_1", "action_2"]


def test_log_creates_parent_dir(tmp_path: Path) -> None:
    log_file = tmp_path / "subdir" / "activity.jsonl"
    ActivityLogger(log_path=str(log_file)).log(_make_event())
    assert log_file.exists()


def test_details_are_redacted(tmp_path: Path) -> None:
    log_file = tmp_path / "activity.jsonl"
    ActivityLogger(log_path=str(log_file)).log(_make_event(details={
        "name": "Widget",
        "authToken": "abc",
        "nested": {"password": "p", "ok": 1},
    }))
    parsed = json.loads(log_file.read_text())
    assert parsed["details"]["name"] == "Widget"
    assert parsed["details"]["authToken"] == REDACTED
    assert parsed["details"]["nested"] == {"password": REDACTED, "ok": 1}


def test_non_ascii_written_verbatim(tmp_path: Path) -> None:
    log_file = tmp_path / "activity.jsonl"
    ActivityLogger(log_path=str(log_file)).log(_make_event(details={"name": "כוס"}))
    assert "כוס" in log_file.read_text(encoding="utf-8")


def test_rotation(tmp_path: Path) -> None:
    log_file = tmp_path / "activity.jsonl"
    logger = ActivityLogger(log_path=str(log_file), max_bytes=1, backup_count=2)
    for i in range(4):
        logger.log(_make_event(action=f"action_{i}"))

    assert json.loads(log_file.read_text())["action"] == "action_3"
    assert json.loads((tmp_path / "activity.jsonl.1").read_text())["action"] == "action_2"
    assert json.loads((tmp_path / "activity.jsonl.2").read_text())["action"] == "action_1"
    assert not (tmp_path / "activity.jsonl.3").exists()


def test_from_env(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("ACTIVITY_LOG_MAX_BYTES", "100")
    monkeypatch.setenv("ACTIVITY_LOG_BACKUP_COUNT", "2")
    logger = ActivityLogger.from_env(str(tmp_path / "a.jsonl"))
    assert logger._max_bytes == 100
    assert logger._backup_count == 2


def test_redact_lists() -> None:
    assert redact([{"token": "t"}, "plain"]) == [{"token": REDACTED}, "plain"]
