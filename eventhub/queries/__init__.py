"""Query layer for database operations using SQLAlchemy Core."""

from .events import (
    create_event_highlight,
    get_event_highlight,
    get_event_with_organizer,
    update_event_status,
)

__all__ = [
    "get_event_with_organizer",
    "update_event_status",
    "get_event_highlight",
    "create_event_highlight",
]
