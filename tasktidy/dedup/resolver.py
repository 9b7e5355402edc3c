"""
Resolution of duplicate groups: merge (bulk delete) and dismiss.

The resolver keeps the groups from the last analysis pass so callers can
refer to them by id. It never re-analyzes on its own; after a merge the
caller fetches the task list again and calls analyze().
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from ..errors import NotFoundError, StorageError
from ..storage.db import Database
from ..storage.models import (
    INTEGRATION_SOURCES,
    DuplicateGroup,
    Task,
    TaskSource,
    naive_local,
)
from .grouping import analyze
from .similarity import DEFAULT_THRESHOLD

logger = logging.getLogger(__name__)


def newest_member(group: DuplicateGroup) -> Task:
    """Member with the latest created_at. Earlier members win ties."""
    newest = group.original
    for task in group.duplicates:
        if naive_local(task.created_at) > naive_local(newest.created_at):
            newest = task
    return newest


class DuplicateResolver:
    def __init__(
        self,
        store: Database,
        threshold: float = DEFAULT_THRESHOLD,
        integration_sources: Iterable[TaskSource] = INTEGRATION_SOURCES,
    ):
        self.store = store
        self.threshold = threshold
        self.integration_sources = frozenset(integration_sources)
        self._groups: dict[str, DuplicateGroup] = {}
        self._dismissed: set[str] = set()

    # ------------------------------------------------------------------
    # Analysis
    # ------------------------------------------------------------------

    def analyze(self, tasks: Sequence[Task]) -> list[DuplicateGroup]:
        """Run a fresh grouping pass. Previous dismissals are forgotten."""
        groups = analyze(tasks, self.threshold, self.integration_sources)
        self._groups = {g.id: g for g in groups}
        self._dismissed.clear()
        return self.groups

    def analyze_user(self, user_id: str) -> list[DuplicateGroup]:
        """Fetch the user's live task list and analyze it."""
        return self.analyze(self.store.list_tasks(user_id))

    @property
    def groups(self) -> list[DuplicateGroup]:
        return [g for gid, g in self._groups.items() if gid not in self._dismissed]

    def get_group(self, group_id: str) -> Optional[DuplicateGroup]:
        if group_id in self._dismissed:
            return None
        return self._groups.get(group_id)

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def merge_duplicates(self, group_id: str, keep_task_id: str) -> bool:
        """
        Delete every member of the group except keep_task_id, in one batch.
        Returns False (and leaves the group visible) on any failure.
        """
        try:
            group = self._require_group(group_id)
            if keep_task_id not in group.member_ids():
                raise NotFoundError(
                    f"Task '{keep_task_id}' is not a member of {group_id}"
                )

            to_delete = group.member_ids() - {keep_task_id}
            removed = self.store.delete_tasks(to_delete)
        except NotFoundError as exc:
            logger.warning(f"Merge skipped: {exc}")
            return False
        except StorageError as exc:
            logger.error(f"Error merging duplicates in {group_id}: {exc}")
            return False

        self._groups.pop(group_id, None)
        logger.info(
            f"Merged {group_id}: kept {keep_task_id}, removed {removed} of "
            f"{len(to_delete)} duplicate(s)"
        )
        return True

    def remove_all_but_newest(self, group: DuplicateGroup) -> bool:
        return self.merge_duplicates(group.id, newest_member(group).id)

    def dismiss(self, group_id: str) -> None:
        """Hide a group until the next analysis pass. Nothing is stored."""
        if group_id in self._groups:
            self._dismissed.add(group_id)

    def _require_group(self, group_id: str) -> DuplicateGroup:
        group = self.get_group(group_id)
        if group is None:
            raise NotFoundError(f"Duplicate group '{group_id}' not found")
        return group
