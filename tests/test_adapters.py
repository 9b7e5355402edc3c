import json
from datetime import datetime, timedelta

import pytest

from tasktidy.errors import ValidationError
from tasktidy.ingest.json_adapter import load_tasks
from tasktidy.storage.models import TaskSource, TaskStatus


def test_json_load_success(tmp_path):
    path = tmp_path / "tasks.json"
    payload = [
        {"id": "t1", "title": "Buy milk", "created_at": "2025-01-01T09:00:00"},
        {
            "title": "Dentist appointment",
            "source": "calendar",
            "source_id": "evt123",
            "priority": "2",
            "status": "in_progress",
            "description": "Bring insurance card",
        },
    ]
    path.write_text(json.dumps(payload), encoding="utf-8")

    tasks = load_tasks(str(path), "u1")
    assert len(tasks) == 2
    assert tasks[0].id == "t1"
    assert tasks[0].source == TaskSource.MANUAL
    assert tasks[1].source == TaskSource.CALENDAR
    assert tasks[1].source_id == "evt123"
    assert tasks[1].priority == 2
    assert tasks[1].status == TaskStatus.IN_PROGRESS
    assert all(t.user_id == "u1" for t in tasks)


@pytest.mark.parametrize(
    "item",
    [
        {"source": "manual"},
        {"title": "x", "source": "fax"},
        {"title": "x", "created_at": "yesterday"},
        {"title": "x", "priority": "high"},
        {"title": "x", "status": "someday"},
        "just a string",
    ],
)
def test_json_load_rejects_malformed_items(tmp_path, item):
    path = tmp_path / "tasks.json"
    path.write_text(json.dumps([item]), encoding="utf-8")
    with pytest.raises(ValidationError, match="Item 1"):
        load_tasks(str(path), "u1")


def test_json_payload_must_be_list(tmp_path):
    path = tmp_path / "tasks.json"
    path.write_text(json.dumps({"title": "x"}), encoding="utf-8")
    with pytest.raises(ValidationError):
        load_tasks(str(path), "u1")


def test_json_invalid_syntax(tmp_path):
    path = tmp_path / "tasks.json"
    path.write_text("[{", encoding="utf-8")
    with pytest.raises(ValidationError):
        load_tasks(str(path), "u1")


def test_json_offset_timestamps_become_naive_local(tmp_path):
    path = tmp_path / "tasks.json"
    payload = [
        {"title": "Buy milk", "created_at": "2025-01-01T09:00:00+00:00"},
        {"title": "Buy bread", "created_at": "2025-01-01T09:00:00-05:00"},
        {"title": "Buy eggs", "created_at": "2025-01-01T09:00:00"},
    ]
    path.write_text(json.dumps(payload), encoding="utf-8")

    tasks = load_tasks(str(path), "u1")
    assert all(t.created_at.tzinfo is None for t in tasks)
    assert tasks[1].created_at - tasks[0].created_at == timedelta(hours=5)
    assert tasks[2].created_at == datetime(2025, 1, 1, 9, 0, 0)