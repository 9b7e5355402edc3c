"""JSON adapter for bulk task import."""

from __future__ import annotations

import json
from datetime import datetime

from ..errors import ValidationError
from ..storage.models import Task, TaskSource, TaskStatus, naive_local


def _parse_item(item: dict, index: int, user_id: str) -> Task:
    if not isinstance(item, dict):
        raise ValidationError(f"Item {index}: expected an object")

    title = str(item.get("title") or "").strip()
    if not title:
        raise ValidationError(f"Item {index}: missing required field 'title'")

    try:
        source = TaskSource(str(item.get("source") or "manual").strip().lower())
    except ValueError as exc:
        raise ValidationError(f"Item {index}: invalid source '{item.get('source')}'") from exc

    try:
        status = TaskStatus(str(item.get("status") or "pending").strip().lower())
    except ValueError as exc:
        raise ValidationError(f"Item {index}: invalid status '{item.get('status')}'") from exc

    created_raw = item.get("created_at")
    try:
        created_at = datetime.fromisoformat(created_raw) if created_raw else datetime.now()
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Item {index}: malformed created_at") from exc
    created_at = naive_local(created_at)

    priority_raw = item.get("priority")
    priority = None
    if priority_raw is not None:
        try:
            priority = int(priority_raw)
        except (TypeError, ValueError) as exc:
            raise ValidationError(f"Item {index}: invalid priority") from exc

    task = Task(
        title=title,
        source=source,
        description=item.get("description") or None,
        source_id=str(item["source_id"]) if item.get("source_id") else None,
        priority=priority,
        status=status,
        user_id=user_id,
        created_at=created_at,
    )
    if item.get("id"):
        task.id = str(item["id"])
    return task


def load_tasks(file_path: str, user_id: str) -> list[Task]:
    """Parse a JSON file holding a list of task objects."""

    with open(file_path, encoding="utf-8") as handle:
        try:
            payload = json.load(handle)
        except json.JSONDecodeError as exc:
            raise ValidationError(f"Invalid JSON in {file_path}: {exc}") from exc

    if not isinstance(payload, list):
        raise ValidationError("JSON payload must be a list of objects")

    return [_parse_item(item, i, user_id) for i, item in enumerate(payload, start=1)]
