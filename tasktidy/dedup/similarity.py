"""
Text similarity and the duplicate predicate for tasks.

Tasks arrive from several sources that never coordinate with each other,
so the same to-do can show up more than once. Two rules decide whether a
pair is a potential duplicate:

  * source identity: same source and same external id, regardless of text
  * fuzzy text: title/description similarity above a threshold, only
    between tasks whose sources are comparable
"""
from __future__ import annotations

import difflib
from typing import Iterable, Optional

from ..storage.models import INTEGRATION_SOURCES, Task, TaskSource

DEFAULT_THRESHOLD = 0.70


def normalize(text: Optional[str]) -> str:
    """Lowercase and trim. Anything that isn't a string becomes empty."""
    if not isinstance(text, str):
        return ""
    return text.lower().strip()


def similarity(a: Optional[str], b: Optional[str]) -> float:
    """Character-level sequence similarity between two strings (0–1).

    An empty string never matches anything, including another empty string.
    Strings are trimmed first, so whitespace-only strings count as empty.
    """
    a, b = normalize(a), normalize(b)
    if not a or not b:
        return 0.0
    return difflib.SequenceMatcher(None, a, b).ratio()


def title_similarity(first: Task, second: Task) -> float:
    return similarity(getattr(first, "title", None), getattr(second, "title", None))


def description_similarity(first: Task, second: Task) -> float:
    return similarity(
        getattr(first, "description", None), getattr(second, "description", None)
    )


def task_similarity(first: Task, second: Task) -> float:
    """
    Mean of title and description similarity.

    When neither task has a description the title decides alone; two bare
    titles would otherwise never clear the threshold.
    """
    title_sim = title_similarity(first, second)
    if not normalize(getattr(first, "description", None)) and not normalize(
        getattr(second, "description", None)
    ):
        return title_sim
    return (title_sim + description_similarity(first, second)) / 2


def same_source_identity(first: Task, second: Task) -> bool:
    """Both tasks come from the same origin record (source + external id)."""
    first_id = getattr(first, "source_id", None)
    second_id = getattr(second, "source_id", None)
    if not first_id or not second_id:
        return False
    return first.source == second.source and first_id == second_id


def sources_comparable(
    first: Task,
    second: Task,
    integration_sources: Iterable[TaskSource] = INTEGRATION_SOURCES,
) -> bool:
    """Same source, or both from the integration class (calendar/email)."""
    if first.source == second.source:
        return True
    integration = set(integration_sources)
    return first.source in integration and second.source in integration


def are_potential_duplicates(
    first: Task,
    second: Task,
    threshold: float = DEFAULT_THRESHOLD,
    integration_sources: Iterable[TaskSource] = INTEGRATION_SOURCES,
) -> bool:
    if same_source_identity(first, second):
        return True
    if not sources_comparable(first, second, integration_sources):
        return False
    return task_similarity(first, second) > threshold
