from tasktidy.ingest.feeds import deduplicate_calendar_events, deduplicate_emails


def test_calendar_events_deduplicated_by_id_and_content():
    events = [
        {"id": "event1", "summary": "Weekly Team Meeting", "start": {"dateTime": "2024-01-15T10:00:00Z"}},
        {"id": "event1", "summary": "Weekly Team Meeting", "start": {"dateTime": "2024-01-15T10:00:00Z"}},
        {"id": "event2", "summary": "Weekly Team Meeting", "start": {"dateTime": "2024-01-15T10:00:00Z"}},
        {"id": "event3", "summary": "Daily Standup", "start": {"dateTime": "2024-01-15T09:00:00Z"}},
        {"id": "event4", "summary": "Client Review", "start": {"dateTime": "2024-01-15T14:00:00Z"}},
        {"id": "event5", "summary": "client review", "start": {"dateTime": "2024-01-15T14:00:00Z"}},
    ]
    unique = deduplicate_calendar_events(events)
    assert [e["id"] for e in unique] == ["event1", "event3", "event4"]


def test_same_title_at_different_times_kept():
    events = [
        {"id": "a", "summary": "Soccer practice", "start": {"date": "2024-01-15"}},
        {"id": "b", "summary": "Soccer practice", "start": {"date": "2024-01-22"}},
        {"summary": "No id event"},
    ]
    assert len(deduplicate_calendar_events(events)) == 3


def _email(message_id, snippet, sender="school@example.org"):
    return {
        "id": message_id,
        "snippet": snippet,
        "payload": {"headers": [{"name": "From", "value": sender}]},
    }


def test_emails_deduplicated_by_id_and_snippet_sender():
    emails = [
        _email("email1", "Please review the Q4 budget"),
        _email("email1", "Please review the Q4 budget"),
        _email("email2", "Meeting reminder for tomorrow"),
        _email("email3", "Please review the Q4 budget"),
        _email("email4", "Please review the Q4 budget", sender="boss@example.org"),
        _email("email5", "New project requirements"),
    ]
    unique = deduplicate_emails(emails)
    assert [e["id"] for e in unique] == ["email1", "email2", "email4", "email5"]


def test_emails_without_payload_are_handled():
    emails = [{"id": "x", "snippet": "Hi"}, {"id": "y", "snippet": "hi"}]
    assert [e["id"] for e in deduplicate_emails(emails)] == ["x"]
