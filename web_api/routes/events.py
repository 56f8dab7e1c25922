"""
Event review and post-event routes.

Endpoints:
- PATCH /api/events/{event_id}/approve - Approve a pending event, start highlight reminders
- PATCH /api/events/{event_id}/reject - Reject a pending event
- POST /api/events/bulk-approve - Approve several events
- POST /api/events/bulk-reject - Reject several events
- POST /api/events/{event_id}/highlight - Submit the post-event highlight
- GET /api/events/reminders - Pending post-event reminders (monitoring)

Authentication and role checks are applied by the host application when
mounting this router.
"""

from typing import Any, Literal

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field, model_validator

from eventhub.database import get_transaction
from eventhub.lifecycle import (
    EventLifecycleError,
    EventNotFoundError,
    approve_event,
    bulk_approve_events,
    bulk_reject_events,
    on_event_approved,
    on_event_rejected,
    reject_event,
    submit_event_highlight,
)
from eventhub.notifications.scheduler import PostEventReminderScheduler

router = APIRouter(prefix="/api/events", tags=["events"])


# --- Pydantic models ---


class ApproveEventRequest(BaseModel):
    """Schema for approving an event."""

    approver_id: int


class RejectEventRequest(BaseModel):
    """Schema for rejecting an event."""

    reason: str | None = None


class BulkApproveRequest(BaseModel):
    ids: list[int] = Field(min_length=1)
    approver_id: int


class BulkRejectRequest(BaseModel):
    ids: list[int] = Field(min_length=1)
    reason: str | None = None


class HighlightItem(BaseModel):
    """A photo or video from the event. url is required for videos."""

    title: str = Field(min_length=1)
    type: Literal["video", "image"]
    url: str | None = None

    @model_validator(mode="after")
    def check_video_url(self) -> "HighlightItem":
        if self.type == "video" and not (self.url or "").strip():
            raise ValueError("url is required for video highlights")
        return self


class SubmitHighlightRequest(BaseModel):
    highlights: list[HighlightItem] = Field(default_factory=list)
    attendance: int = Field(ge=0)
    ticket_sales: int = Field(ge=0)


# --- Helpers ---


def get_reminder_scheduler(request: Request) -> PostEventReminderScheduler:
    """FastAPI dependency returning the app's reminder scheduler."""
    reminders = getattr(request.app.state, "reminder_scheduler", None)
    if reminders is None:
        raise HTTPException(503, "Reminder scheduler not running")
    return reminders


def _http_error(e: EventLifecycleError) -> HTTPException:
    if isinstance(e, EventNotFoundError):
        return HTTPException(404, str(e))
    return HTTPException(409, str(e))


# --- Routes ---


@router.patch("/{event_id}/approve")
async def approve(
    event_id: int,
    request: ApproveEventRequest,
    reminders: PostEventReminderScheduler = Depends(get_reminder_scheduler),
) -> dict[str, Any]:
    """Approve a pending event. Its organizer starts getting highlight reminders after the event."""
    async with get_transaction() as conn:
        try:
            event = await approve_event(conn, event_id, request.approver_id)
        except EventLifecycleError as e:
            raise _http_error(e)

    on_event_approved(event, reminders)
    return {"status": "approved", "event": event}


@router.patch("/{event_id}/reject")
async def reject(event_id: int, request: RejectEventRequest) -> dict[str, Any]:
    """Reject a pending event."""
    async with get_transaction() as conn:
        try:
            event = await reject_event(conn, event_id)
        except EventLifecycleError as e:
            raise _http_error(e)

    on_event_rejected(event, request.reason)
    return {"status": "rejected", "event": event}


@router.post("/bulk-approve")
async def bulk_approve(
    request: BulkApproveRequest,
    reminders: PostEventReminderScheduler = Depends(get_reminder_scheduler),
) -> dict[str, Any]:
    """Approve several events; per-event failures are reported, not raised."""
    async with get_transaction() as conn:
        result, approved = await bulk_approve_events(
            conn, request.ids, request.approver_id
        )

    for event in approved:
        on_event_approved(event, reminders)
    return result


@router.post("/bulk-reject")
async def bulk_reject(request: BulkRejectRequest) -> dict[str, Any]:
    """Reject several events; per-event failures are reported, not raised."""
    async with get_transaction() as conn:
        result, rejected = await bulk_reject_events(conn, request.ids)

    for event in rejected:
        on_event_rejected(event, request.reason)
    return result


@router.post("/{event_id}/highlight", status_code=201)
async def submit_highlight(
    event_id: int, request: SubmitHighlightRequest
) -> dict[str, Any]:
    """
    Submit the post-event highlight.

    Pending reminders are not cancelled here; the next reminder to fire sees
    the highlight and ends the escalation without emailing.
    """
    async with get_transaction() as conn:
        try:
            highlight = await submit_event_highlight(
                conn,
                event_id,
                attendance=request.attendance,
                ticket_sales=request.ticket_sales,
                highlights=[item.model_dump() for item in request.highlights],
            )
        except EventLifecycleError as e:
            raise _http_error(e)

    return {"highlight": highlight}


@router.get("/reminders")
async def list_reminders(
    reminders: PostEventReminderScheduler = Depends(get_reminder_scheduler),
) -> dict[str, Any]:
    """Pending post-event reminders, soonest first."""
    return {
        "reminders": [
            {**r, "scheduled_for": r["scheduled_for"].isoformat()}
            for r in reminders.list_active_reminders()
        ]
    }
