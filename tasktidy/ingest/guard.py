"""
Ingestion-time duplicate guard.

Every pipeline that creates tasks (calendar sync, email parser, manual
entry, AI assistant, Todoist import) goes through create_task_if_unique.
It checks source identity first, then same-source content, and logs one
prevention event per attempt so stats stay accurate.

The content check blocks only an identical title, or a close title
together with a close description. Looser matches are left for analyze()
to report as potential duplicates.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Iterable, Optional

from ..dedup.similarity import description_similarity, normalize, title_similarity
from ..errors import StorageError
from ..storage.db import Database
from ..storage.models import PreventionEvent, Task

logger = logging.getLogger(__name__)

TITLE_THRESHOLD = 0.80
DESCRIPTION_THRESHOLD = 0.70


@dataclass
class IngestResult:
    created: int = 0
    duplicates: int = 0
    errors: int = 0

    @property
    def total(self) -> int:
        return self.created + self.duplicates + self.errors


def find_similar_task(store: Database, user_id: str, task: Task) -> Optional[Task]:
    """Existing task of the same source with the same title, or close title and description."""
    title = normalize(task.title)
    for existing in store.list_tasks_by_source(user_id, task.source):
        if title and title == normalize(existing.title):
            return existing
        if (
            title_similarity(task, existing) > TITLE_THRESHOLD
            and description_similarity(task, existing) > DESCRIPTION_THRESHOLD
        ):
            return existing
    return None


def should_save_task(store: Database, user_id: str, task: Task) -> tuple[bool, str]:
    """Returns (save?, reason). Source identity is checked before content."""
    if task.source_id:
        existing = store.find_by_source_id(user_id, task.source, task.source_id)
        if existing:
            return False, f"source id {task.source_id} already exists as {existing.id}"

    similar = find_similar_task(store, user_id, task)
    if similar:
        return False, f'similar to "{similar.title}" ({similar.id})'

    return True, ""


def create_task_if_unique(store: Database, user_id: str, task: Task) -> Optional[Task]:
    """Create the task unless it duplicates one already stored. Returns the stored task or None."""
    save, reason = should_save_task(store, user_id, task)

    created = None
    if save:
        created = store.create_task(replace(task, user_id=user_id))
        logger.info(f'Created unique task: "{task.title}"')
    else:
        logger.info(f'Skipping duplicate task "{task.title}": {reason}')

    store.log_prevention_event(
        PreventionEvent(
            user_id=user_id,
            source=task.source,
            source_id=task.source_id,
            title=task.title,
            was_duplicate=not save,
        )
    )
    return created


def ingest_tasks(store: Database, user_id: str, tasks: Iterable[Task]) -> IngestResult:
    """Run a batch through the guard. Per-task storage failures are counted."""
    result = IngestResult()
    for task in tasks:
        try:
            created = create_task_if_unique(store, user_id, task)
        except StorageError as exc:
            logger.error(f'Error ingesting "{task.title}": {exc}')
            result.errors += 1
            continue
        if created:
            result.created += 1
        else:
            result.duplicates += 1
    return result
