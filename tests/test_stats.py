from datetime import datetime, timedelta

import pytest

from tasktidy.dedup.stats import aggregate_events, get_stats, parse_timeframe
from tasktidy.errors import StorageError, ValidationError
from tasktidy.storage.models import PreventionEvent, SourceStat, TaskSource

NOW = datetime(2025, 3, 10, 12, 0, 0)


def event(source, was_duplicate, hours_ago=1, user_id="u1"):
    return PreventionEvent(
        user_id=user_id,
        source=source,
        was_duplicate=was_duplicate,
        created_at=NOW - timedelta(hours=hours_ago),
    )


def test_aggregate_scenario():
    stats = aggregate_events([
        event(TaskSource.CALENDAR, False),
        event(TaskSource.CALENDAR, True),
        event(TaskSource.EMAIL, False),
    ])
    assert stats.total_tasks == 3
    assert stats.duplicates_avoided == 1
    assert stats.deduplication_rate == 33
    assert stats.sources == {
        "calendar": SourceStat(count=2, duplicates=1),
        "email": SourceStat(count=1, duplicates=0),
    }


def test_aggregate_empty_rate_is_zero():
    stats = aggregate_events([])
    assert stats.total_tasks == 0
    assert stats.deduplication_rate == 0
    assert stats.sources == {}


def test_rate_stays_within_bounds():
    all_dupes = aggregate_events([event(TaskSource.EMAIL, True)] * 3)
    assert all_dupes.deduplication_rate == 100
    two_thirds = aggregate_events([event(TaskSource.EMAIL, True)] * 2 + [event(TaskSource.AI, False)])
    assert two_thirds.deduplication_rate == 67


def test_get_stats_reads_only_the_window_and_user(db):
    db.log_prevention_event(event(TaskSource.CALENDAR, False, hours_ago=2))
    db.log_prevention_event(event(TaskSource.CALENDAR, True, hours_ago=30))
    db.log_prevention_event(event(TaskSource.EMAIL, True, hours_ago=24 * 10))
    db.log_prevention_event(event(TaskSource.EMAIL, True, hours_ago=2, user_id="u2"))

    stats = get_stats(db, "u1", "7 days", now=NOW)
    assert stats.total_tasks == 2
    assert stats.duplicates_avoided == 1
    assert stats.deduplication_rate == 50

    day = get_stats(db, "u1", timedelta(hours=24), now=NOW)
    assert day.total_tasks == 1
    assert day.duplicates_avoided == 0


def test_get_stats_returns_none_on_storage_failure(db, monkeypatch):
    def boom(*args):
        raise StorageError("no such table")

    monkeypatch.setattr(db, "get_prevention_events", boom)
    assert get_stats(db, "u1", now=NOW) is None


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("7 days", timedelta(days=7)),
        ("7d", timedelta(days=7)),
        ("24 hours", timedelta(hours=24)),
        ("24h", timedelta(hours=24)),
        ("2 weeks", timedelta(weeks=2)),
        ("1 Day", timedelta(days=1)),
        ("30 min", timedelta(minutes=30)),
    ],
)
def test_parse_timeframe(raw, expected):
    assert parse_timeframe(raw) == expected


@pytest.mark.parametrize("raw", ["", "soon", "7 fortnights", "days 7"])
def test_parse_timeframe_rejects_garbage(raw):
    with pytest.raises(ValidationError):
        parse_timeframe(raw)
