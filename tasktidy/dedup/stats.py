"""
Per-source duplicate prevention statistics.

Pure aggregation over the prevention-event log; accuracy depends on the
ingestion pipelines logging one event per creation attempt.
"""
from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta
from typing import Iterable, Optional, Union

from ..errors import StorageError, ValidationError
from ..storage.db import Database
from ..storage.models import DeduplicationStat, PreventionEvent, SourceStat

logger = logging.getLogger(__name__)

DEFAULT_TIMEFRAME = "7 days"

_TIMEFRAME_RE = re.compile(r"^\s*(\d+)\s*([a-z]+)\s*$")
_UNITS = {
    "m": "minutes", "min": "minutes", "mins": "minutes",
    "minute": "minutes", "minutes": "minutes",
    "h": "hours", "hr": "hours", "hrs": "hours", "hour": "hours", "hours": "hours",
    "d": "days", "day": "days", "days": "days",
    "w": "weeks", "week": "weeks", "weeks": "weeks",
}


def parse_timeframe(timeframe: Union[str, timedelta]) -> timedelta:
    """
    Parse a look-back window.

    Examples:
        "7 days"   → timedelta(days=7)
        "24h"      → timedelta(hours=24)
        "2 weeks"  → timedelta(weeks=2)
    """
    if isinstance(timeframe, timedelta):
        return timeframe

    match = _TIMEFRAME_RE.match(str(timeframe).lower())
    if not match or match.group(2) not in _UNITS:
        raise ValidationError(f"Unrecognized timeframe: '{timeframe}'")
    return timedelta(**{_UNITS[match.group(2)]: int(match.group(1))})


def aggregate_events(events: Iterable[PreventionEvent]) -> DeduplicationStat:
    stat = DeduplicationStat()
    for event in events:
        key = getattr(event.source, "value", event.source)
        per_source = stat.sources.setdefault(key, SourceStat())
        per_source.count += 1
        stat.total_tasks += 1
        if event.was_duplicate:
            per_source.duplicates += 1
            stat.duplicates_avoided += 1

    if stat.total_tasks:
        stat.deduplication_rate = round(100 * stat.duplicates_avoided / stat.total_tasks)
    return stat


def get_stats(
    store: Database,
    user_id: str,
    timeframe: Union[str, timedelta] = DEFAULT_TIMEFRAME,
    now: Optional[datetime] = None,
) -> Optional[DeduplicationStat]:
    """
    Prevention stats for one user over the window ending at `now`.
    Returns None when the event log can't be read.
    """
    window = parse_timeframe(timeframe)
    end = now or datetime.now()
    try:
        events = store.get_prevention_events(user_id, end - window, end)
    except StorageError as exc:
        logger.error(f"Error getting deduplication stats: {exc}")
        return None
    return aggregate_events(events)
