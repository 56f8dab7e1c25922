"""Database queries for events and their highlights."""

from datetime import datetime

from sqlalchemy import insert, select, update, func
from sqlalchemy.ext.asyncio import AsyncConnection

from ..enums import EventStatus
from ..tables import event_highlights, events, users


async def get_event_with_organizer(
    conn: AsyncConnection,
    event_id: int,
) -> dict | None:
    """Get an event with its organizer's email (organizer_email may be None)."""
    result = await conn.execute(
        select(events, users.c.email.label("organizer_email"))
        .select_from(
            events.outerjoin(users, events.c.organizer_id == users.c.user_id)
        )
        .where(events.c.event_id == event_id)
    )
    row = result.mappings().first()
    return dict(row) if row else None


async def update_event_status(
    conn: AsyncConnection,
    event_id: int,
    status: EventStatus,
    approved_by: int | None = None,
    approval_date: datetime | None = None,
) -> dict | None:
    """
    Set an event's review status.

    Returns:
        The updated event row, or None if the event doesn't exist
    """
    values = {"status": status, "updated_at": func.now()}
    if status == EventStatus.approved:
        values["approved_by"] = approved_by
        values["approval_date"] = approval_date

    result = await conn.execute(
        update(events)
        .where(events.c.event_id == event_id)
        .values(**values)
        .returning(events)
    )
    row = result.mappings().first()
    return dict(row) if row else None


async def get_event_highlight(
    conn: AsyncConnection,
    event_id: int,
) -> dict | None:
    """Get the highlight recorded for an event, if any."""
    result = await conn.execute(
        select(event_highlights).where(event_highlights.c.event_id == event_id)
    )
    row = result.mappings().first()
    return dict(row) if row else None


async def create_event_highlight(
    conn: AsyncConnection,
    event_id: int,
    attendance: int,
    ticket_sales: int,
    highlights: list[dict],
) -> dict:
    """Insert a highlight record and return it."""
    result = await conn.execute(
        insert(event_highlights)
        .values(
            event_id=event_id,
            attendance=attendance,
            ticket_sales=ticket_sales,
            highlights=highlights,
        )
        .returning(event_highlights)
    )
    return dict(result.mappings().one())
