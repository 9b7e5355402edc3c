"""
Data models for tasks, duplicate groups and prevention events.
Plain dataclasses, no ORM.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class TaskSource(str, Enum):
    MANUAL = "manual"
    CALENDAR = "calendar"
    EMAIL = "email"
    AI = "ai"
    TODOIST = "todoist"
    IMPORT = "import"


# Sources fed by external integrations; tasks from these may be fuzzy-matched
# against each other even when the sources differ.
INTEGRATION_SOURCES: frozenset[TaskSource] = frozenset(
    {TaskSource.CALENDAR, TaskSource.EMAIL}
)


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


def _short_id() -> str:
    return str(uuid.uuid4())[:8]


def naive_local(dt: datetime) -> datetime:
    """Convert an offset-aware datetime to naive local time. Naive values pass through."""
    if dt.tzinfo is None:
        return dt
    return dt.astimezone().replace(tzinfo=None)


@dataclass
class Task:
    title: str
    source: TaskSource = TaskSource.MANUAL
    description: Optional[str] = None
    source_id: Optional[str] = None
    priority: Optional[int] = None
    status: TaskStatus = TaskStatus.PENDING
    user_id: str = ""
    created_at: datetime = field(default_factory=datetime.now)
    id: str = field(default_factory=_short_id)


@dataclass
class DuplicateGroup:
    """
    A cluster of tasks judged to be the same real-world to-do.
    Computed on demand from the live task list, never persisted.
    """

    id: str
    original: Task
    duplicates: list[Task]
    confidence: int = 0

    @property
    def members(self) -> list[Task]:
        return [self.original, *self.duplicates]

    @property
    def total_count(self) -> int:
        return 1 + len(self.duplicates)

    @property
    def sources(self) -> list[TaskSource]:
        seen: list[TaskSource] = []
        for task in self.members:
            if task.source and task.source not in seen:
                seen.append(task.source)
        return seen

    def member_ids(self) -> set[str]:
        return {t.id for t in self.members}


@dataclass
class PreventionEvent:
    user_id: str
    source: TaskSource
    was_duplicate: bool
    source_id: Optional[str] = None
    title: str = ""
    created_at: datetime = field(default_factory=datetime.now)


@dataclass
class SourceStat:
    count: int = 0
    duplicates: int = 0


@dataclass
class DeduplicationStat:
    total_tasks: int = 0
    duplicates_avoided: int = 0
    deduplication_rate: int = 0
    sources: dict[str, SourceStat] = field(default_factory=dict)
