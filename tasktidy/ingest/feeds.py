"""
Feed-level de-duplication for raw calendar events and email messages.

Shared calendars and multiple mail accounts deliver the same item more
than once in a single sync. These helpers drop repeats before the items
are turned into tasks. Input order is preserved.
"""
from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


def _event_start(event: dict) -> str:
    start = event.get("start") or {}
    return start.get("dateTime") or start.get("date") or ""


def _email_sender(email: dict) -> str:
    headers = (email.get("payload") or {}).get("headers") or []
    for header in headers:
        if header.get("name") == "From":
            return (header.get("value") or "").lower()
    return ""


def deduplicate_calendar_events(events: list[dict]) -> list[dict]:
    """Drop events seen by id, or by (title, start time)."""
    seen_ids: set[str] = set()
    seen_keys: set[tuple[str, str]] = set()
    unique: list[dict] = []

    for event in events:
        event_id = event.get("id")
        if event_id and event_id in seen_ids:
            logger.debug(f"Skipping duplicate event by id: {event.get('summary') or 'No title'}")
            continue

        key = ((event.get("summary") or "").lower().strip(), _event_start(event))
        if key in seen_keys:
            logger.debug(f"Skipping duplicate event by content: {event.get('summary') or 'No title'}")
            continue

        if event_id:
            seen_ids.add(event_id)
        seen_keys.add(key)
        unique.append(event)

    logger.info(f"Deduplicated {len(events)} events to {len(unique)} unique events")
    return unique


def deduplicate_emails(emails: list[dict]) -> list[dict]:
    """Drop messages seen by id, or by (snippet, sender)."""
    seen_ids: set[str] = set()
    seen_keys: set[tuple[str, str]] = set()
    unique: list[dict] = []

    for email in emails:
        message_id = email.get("id")
        if message_id and message_id in seen_ids:
            logger.debug(f"Skipping duplicate email by id: {email.get('snippet') or 'No subject'}")
            continue

        key = ((email.get("snippet") or "").lower().strip(), _email_sender(email))
        if key in seen_keys:
            logger.debug(f"Skipping duplicate email by content: {email.get('snippet') or 'No subject'}")
            continue

        if message_id:
            seen_ids.add(message_id)
        seen_keys.add(key)
        unique.append(email)

    logger.info(f"Deduplicated {len(emails)} emails to {len(unique)} unique emails")
    return unique
