"""
Context building for event notifications.

Scheduler jobs only store event_id and attempt; the event, its organizer and
its highlight are fetched fresh when a reminder fires so a highlight submitted
in the meantime (or a deleted event) is always noticed.
"""

from datetime import datetime

from sqlalchemy import select

from eventhub.database import get_connection
from eventhub.tables import event_highlights, events, users


async def get_event_with_highlight_and_organizer(event_id: int) -> dict | None:
    """
    Fetch an event together with its organizer email and highlight status.

    Args:
        event_id: The event ID to look up

    Returns:
        Dict with event_id, title, event_date, highlight_exists and
        organizer_email (None when missing or blank), or None if the event
        doesn't exist.
    """
    async with get_connection() as conn:
        query = (
            select(
                events.c.event_id,
                events.c.title,
                events.c.event_date,
                users.c.email.label("organizer_email"),
                event_highlights.c.highlight_id,
            )
            .select_from(
                events.outerjoin(users, events.c.organizer_id == users.c.user_id)
                .outerjoin(
                    event_highlights,
                    event_highlights.c.event_id == events.c.event_id,
                )
            )
            .where(events.c.event_id == event_id)
        )
        result = await conn.execute(query)
        row = result.mappings().first()

    if not row:
        return None

    email = (row["organizer_email"] or "").strip()
    return {
        "event_id": row["event_id"],
        "title": row["title"],
        "event_date": row["event_date"],
        "highlight_exists": row["highlight_id"] is not None,
        "organizer_email": email or None,
    }


def format_event_date(event_date: datetime) -> str:
    """Human-readable date for emails, e.g. "Saturday, March 14, 2026"."""
    return event_date.strftime("%A, %B %d, %Y")


def build_event_context(event: dict) -> dict:
    """
    Build the template context shared by all event notifications.

    Args:
        event: Dict with title and event_date (datetime)
    """
    event_date = event["event_date"]
    return {
        "event_title": event["title"],
        "event_date": format_event_date(event_date),
        "event_date_utc": event_date.isoformat(),
    }


def build_post_event_reminder_context(
    event: dict, attempt: int, max_attempts: int
) -> dict:
    """Context for the post_event_reminder template."""
    return {
        **build_event_context(event),
        "attempt": attempt,
        "max_attempts": max_attempts,
    }
