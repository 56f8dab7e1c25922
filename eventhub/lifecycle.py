"""
Event review and post-event lifecycle.

Each review operation has two halves: a database half that runs inside the
caller's transaction, and an on_event_* half to call after the commit, so
nothing goes out for a change that rolled back. Approval starts the
post-event highlight reminders and tells the organizer; rejection only tells
the organizer. Submitting a highlight does not touch the scheduler: the next
reminder to fire sees the highlight and stops the chain.

Notification failures are logged and never undo the status change.
"""

import logging
from datetime import datetime, timezone

import sentry_sdk
from sqlalchemy.ext.asyncio import AsyncConnection

from .enums import EventStatus, MessageType
from .notifications.context import build_event_context
from .notifications.dispatcher import dispatch
from .notifications.scheduler import PostEventReminderScheduler
from .queries.events import (
    create_event_highlight,
    get_event_highlight,
    get_event_with_organizer,
    update_event_status,
)

logger = logging.getLogger(__name__)

DEFAULT_REJECTION_REASON = "No reason provided"


# Exceptions
class EventLifecycleError(Exception):
    """Base exception for event lifecycle errors."""
    pass


class EventNotFoundError(EventLifecycleError):
    """The event does not exist."""

    def __init__(self, event_id: int):
        super().__init__(f"Event {event_id} not found")
        self.event_id = event_id


class InvalidEventStateError(EventLifecycleError):
    """The event is not in a state that allows the requested transition."""
    pass


class HighlightExistsError(EventLifecycleError):
    """A highlight was already submitted for the event."""
    pass


def _notify_organizer(event: dict, message_type: MessageType, context: dict) -> None:
    email = event.get("organizer_email")
    if not email:
        logger.warning(
            f"Organizer email not found for event {event['event_id']}, "
            f"skipping {message_type.value} notification"
        )
        return

    try:
        dispatch(email, message_type, context)
    except Exception as e:
        logger.error(
            f"Failed to send {message_type.value} notification for event "
            f"{event['event_id']}: {e}"
        )
        sentry_sdk.capture_exception(e)


async def _get_pending_event(conn: AsyncConnection, event_id: int) -> dict:
    event = await get_event_with_organizer(conn, event_id)
    if event is None:
        raise EventNotFoundError(event_id)
    if event["status"] != EventStatus.pending:
        raise InvalidEventStateError(
            f"Event {event_id} is already {EventStatus(event['status']).value}"
        )
    return event


async def approve_event(
    conn: AsyncConnection,
    event_id: int,
    approver_id: int,
) -> dict:
    """
    Mark a pending event approved.

    Only writes to the database. Once the caller's transaction has committed,
    pass the returned event to on_event_approved() to start its reminders.

    Args:
        conn: Connection inside the caller's transaction
        event_id: Event to approve
        approver_id: user_id of the reviewing admin / community manager

    Returns:
        The updated event row plus organizer_email

    Raises:
        EventNotFoundError: No such event
        InvalidEventStateError: Event was already reviewed
    """
    event = await _get_pending_event(conn, event_id)

    updated = await update_event_status(
        conn,
        event_id,
        EventStatus.approved,
        approved_by=approver_id,
        approval_date=datetime.now(timezone.utc),
    )
    logger.info(f"Event {event_id} approved by user {approver_id}")
    return {**updated, "organizer_email": event["organizer_email"]}


def on_event_approved(event: dict, reminders: PostEventReminderScheduler) -> None:
    """Start the post-event reminders and tell the organizer. Call after commit."""
    reminders.start_reminder_process(event["event_id"], event["event_date"])
    _notify_organizer(event, MessageType.event_approved, build_event_context(event))


async def reject_event(conn: AsyncConnection, event_id: int) -> dict:
    """
    Mark a pending event rejected. Notify with on_event_rejected() after commit.

    Raises:
        EventNotFoundError: No such event
        InvalidEventStateError: Event was already reviewed
    """
    event = await _get_pending_event(conn, event_id)

    updated = await update_event_status(conn, event_id, EventStatus.rejected)
    logger.info(f"Event {event_id} rejected")
    return {**updated, "organizer_email": event["organizer_email"]}


def on_event_rejected(event: dict, reason: str | None = None) -> None:
    """Tell the organizer why their event was rejected. Call after commit."""
    _notify_organizer(
        event,
        MessageType.event_rejected,
        {**build_event_context(event), "reason": reason or DEFAULT_REJECTION_REASON},
    )


async def bulk_approve_events(
    conn: AsyncConnection,
    event_ids: list[int],
    approver_id: int,
) -> tuple[dict, list[dict]]:
    """
    Approve several events, continuing past individual failures.

    Returns:
        ({"succeeded": [event_id, ...], "failed": [{"event_id", "error"}, ...]},
         approved events for on_event_approved())
    """
    result = {"succeeded": [], "failed": []}
    approved = []
    for event_id in event_ids:
        try:
            approved.append(await approve_event(conn, event_id, approver_id))
        except EventLifecycleError as e:
            result["failed"].append({"event_id": event_id, "error": str(e)})
        else:
            result["succeeded"].append(event_id)
    return result, approved


async def bulk_reject_events(
    conn: AsyncConnection,
    event_ids: list[int],
) -> tuple[dict, list[dict]]:
    """Reject several events. Same return shape as bulk_approve_events."""
    result = {"succeeded": [], "failed": []}
    rejected = []
    for event_id in event_ids:
        try:
            rejected.append(await reject_event(conn, event_id))
        except EventLifecycleError as e:
            result["failed"].append({"event_id": event_id, "error": str(e)})
        else:
            result["succeeded"].append(event_id)
    return result, rejected


async def submit_event_highlight(
    conn: AsyncConnection,
    event_id: int,
    attendance: int,
    ticket_sales: int,
    highlights: list[dict] | None = None,
) -> dict:
    """
    Record the post-event highlight for an event.

    Args:
        highlights: Media items, e.g. {"title": ..., "type": "video", "url": ...}

    Raises:
        ValueError: Negative attendance or ticket sales
        EventNotFoundError: No such event
        HighlightExistsError: The event already has a highlight
    """
    if attendance < 0 or ticket_sales < 0:
        raise ValueError("attendance and ticket_sales must be >= 0")

    event = await get_event_with_organizer(conn, event_id)
    if event is None:
        raise EventNotFoundError(event_id)

    if await get_event_highlight(conn, event_id) is not None:
        raise HighlightExistsError(
            f"Event highlight already exists for event {event_id}"
        )

    highlight = await create_event_highlight(
        conn,
        event_id,
        attendance=attendance,
        ticket_sales=ticket_sales,
        highlights=highlights or [],
    )
    logger.info(f"Highlight submitted for event {event_id}")
    return highlight
