"""
SQLite storage layer for tasktidy.

Holds the task list and the append-only prevention-event log.
Uses WAL journal mode for better concurrent read performance.
Schema migrations are applied automatically on startup.
"""
from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterable, Iterator, Optional

from ..errors import StorageError
from .models import PreventionEvent, Task, TaskSource, TaskStatus, naive_local

logger = logging.getLogger(__name__)

SCHEMA = """
PRAGMA journal_mode=WAL;

CREATE TABLE IF NOT EXISTS tasks (
    seq             INTEGER PRIMARY KEY AUTOINCREMENT,
    id              TEXT NOT NULL UNIQUE,
    user_id         TEXT NOT NULL,
    title           TEXT NOT NULL DEFAULT '',
    description     TEXT,
    source          TEXT NOT NULL DEFAULT 'manual',
    source_id       TEXT,
    priority        INTEGER,
    status          TEXT NOT NULL DEFAULT 'pending',
    created_at      TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS prevention_events (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id         TEXT NOT NULL,
    source          TEXT NOT NULL,
    source_id       TEXT,
    title           TEXT NOT NULL DEFAULT '',
    was_duplicate   INTEGER NOT NULL DEFAULT 0,
    created_at      TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_tasks_user       ON tasks(user_id, created_at);
CREATE INDEX IF NOT EXISTS idx_tasks_source_id  ON tasks(user_id, source, source_id);
CREATE INDEX IF NOT EXISTS idx_events_user      ON prevention_events(user_id, created_at);
"""


class Database:
    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._apply_schema()

    # ------------------------------------------------------------------
    # Connection management
    # ------------------------------------------------------------------

    @contextmanager
    def _conn(self) -> Iterator[sqlite3.Connection]:
        try:
            conn = sqlite3.connect(str(self.db_path))
        except sqlite3.Error as exc:
            raise StorageError(f"Could not open {self.db_path}: {exc}") from exc
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as exc:
            conn.rollback()
            raise StorageError(str(exc)) from exc
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _apply_schema(self) -> None:
        with self._conn() as conn:
            conn.executescript(SCHEMA)

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    def create_task(self, task: Task) -> Task:
        with self._conn() as conn:
            conn.execute(
                """INSERT INTO tasks
                   (id, user_id, title, description, source, source_id,
                    priority, status, created_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    task.id,
                    task.user_id,
                    task.title,
                    task.description,
                    task.source.value,
                    task.source_id,
                    task.priority,
                    task.status.value,
                    naive_local(task.created_at).isoformat(),
                ),
            )
        return task

    def get_task(self, task_id: str) -> Optional[Task]:
        with self._conn() as conn:
            row = conn.execute(
                "SELECT * FROM tasks WHERE id = ?", (task_id,)
            ).fetchone()
            return _row_to_task(row) if row else None

    def list_tasks(
        self, user_id: str, status: Optional[TaskStatus] = None
    ) -> list[Task]:
        """Tasks for a user, oldest first (ties broken by insertion order)."""
        query = "SELECT * FROM tasks WHERE user_id = ?"
        params: list = [user_id]
        if status:
            query += " AND status = ?"
            params.append(status.value)
        query += " ORDER BY created_at, seq"

        with self._conn() as conn:
            rows = conn.execute(query, params).fetchall()
            return [_row_to_task(r) for r in rows]

    def list_tasks_by_source(self, user_id: str, source: TaskSource) -> list[Task]:
        with self._conn() as conn:
            rows = conn.execute(
                "SELECT * FROM tasks WHERE user_id = ? AND source = ? "
                "ORDER BY created_at, seq",
                (user_id, source.value),
            ).fetchall()
            return [_row_to_task(r) for r in rows]

    def find_by_source_id(
        self, user_id: str, source: TaskSource, source_id: str
    ) -> Optional[Task]:
        with self._conn() as conn:
            row = conn.execute(
                "SELECT * FROM tasks WHERE user_id = ? AND source = ? AND source_id = ? "
                "LIMIT 1",
                (user_id, source.value, source_id),
            ).fetchone()
            return _row_to_task(row) if row else None

    def delete_tasks(self, task_ids: Iterable[str]) -> int:
        """
        Delete a batch of tasks in one transaction.
        Ids that are already gone are ignored. Returns the number removed.
        """
        ids = sorted(set(task_ids))
        if not ids:
            return 0

        placeholders = ", ".join("?" for _ in ids)
        with self._conn() as conn:
            cursor = conn.execute(
                f"DELETE FROM tasks WHERE id IN ({placeholders})", ids
            )
            removed = cursor.rowcount
        logger.debug(f"Deleted {removed} of {len(ids)} requested task(s)")
        return removed

    # ------------------------------------------------------------------
    # Prevention events
    # ------------------------------------------------------------------

    def log_prevention_event(self, event: PreventionEvent) -> None:
        with self._conn() as conn:
            conn.execute(
                """INSERT INTO prevention_events
                   (user_id, source, source_id, title, was_duplicate, created_at)
                   VALUES (?, ?, ?, ?, ?, ?)""",
                (
                    event.user_id,
                    event.source.value,
                    event.source_id,
                    event.title,
                    int(event.was_duplicate),
                    naive_local(event.created_at).isoformat(),
                ),
            )

    def get_prevention_events(
        self, user_id: str, start: datetime, end: datetime
    ) -> list[PreventionEvent]:
        with self._conn() as conn:
            rows = conn.execute(
                "SELECT * FROM prevention_events "
                "WHERE user_id = ? AND created_at BETWEEN ? AND ? ORDER BY created_at, id",
                (user_id, naive_local(start).isoformat(), naive_local(end).isoformat()),
            ).fetchall()
            return [_row_to_event(r) for r in rows]


# ------------------------------------------------------------------
# Row → model converters
# ------------------------------------------------------------------

def _row_to_task(row: sqlite3.Row) -> Task:
    return Task(
        id=row["id"],
        user_id=row["user_id"],
        title=row["title"] or "",
        description=row["description"],
        source=TaskSource(row["source"]),
        source_id=row["source_id"],
        priority=row["priority"],
        status=TaskStatus(row["status"]),
        created_at=datetime.fromisoformat(row["created_at"]),
    )


def _row_to_event(row: sqlite3.Row) -> PreventionEvent:
    return PreventionEvent(
        user_id=row["user_id"],
        source=TaskSource(row["source"]),
        source_id=row["source_id"],
        title=row["title"] or "",
        was_duplicate=bool(row["was_duplicate"]),
        created_at=datetime.fromisoformat(row["created_at"]),
    )
