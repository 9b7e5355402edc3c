"""
Duplicate grouping over a user's task list.

Single forward pass in input order: each task that hasn't been claimed yet
collects every later unclaimed task it matches. The first task of a group
is its "original". Grouping is not transitive; a task that matches a
duplicate but not the original is left for a later pass of the loop.
"""
from __future__ import annotations

import logging
from typing import Iterable, Sequence

from ..storage.models import INTEGRATION_SOURCES, DuplicateGroup, Task, TaskSource
from .similarity import DEFAULT_THRESHOLD, are_potential_duplicates, task_similarity

logger = logging.getLogger(__name__)


def group_confidence(original: Task, duplicates: Sequence[Task]) -> int:
    """Mean original-vs-duplicate similarity as a 0–100 score."""
    if not duplicates:
        return 0
    total = sum(task_similarity(original, dup) for dup in duplicates)
    return round(total / len(duplicates) * 100)


def analyze(
    tasks: Sequence[Task],
    threshold: float = DEFAULT_THRESHOLD,
    integration_sources: Iterable[TaskSource] = INTEGRATION_SOURCES,
) -> list[DuplicateGroup]:
    """Find groups of potential duplicates. O(n²) over the snapshot."""
    integration = frozenset(integration_sources)
    groups: list[DuplicateGroup] = []
    processed: set[int] = set()

    for i, task in enumerate(tasks):
        if i in processed:
            continue

        duplicates: list[Task] = []
        for j in range(i + 1, len(tasks)):
            if j in processed:
                continue
            other = tasks[j]
            if are_potential_duplicates(task, other, threshold, integration):
                duplicates.append(other)
                processed.add(j)

        processed.add(i)
        if duplicates:
            groups.append(
                DuplicateGroup(
                    id=f"group-{task.id}",
                    original=task,
                    duplicates=duplicates,
                    confidence=group_confidence(task, duplicates),
                )
            )

    logger.debug(f"Analyzed {len(tasks)} tasks, found {len(groups)} duplicate group(s)")
    return groups
