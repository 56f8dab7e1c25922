"""
APScheduler-based post-event reminders.

Once an event is approved, its organizer is reminded to submit the event
highlights: first `initial_delay` after the event date, then every
`follow_up_interval` until a highlight exists or `max_attempts` reminders
have gone out.

Jobs are lightweight - they only carry event_id and attempt, and the event is
fetched fresh when a reminder fires. Completion is detected by that lookup, so
a highlight is noticed at most one follow-up interval (or the initial delay,
for the first attempt) after it was submitted.

Jobs are kept in memory. A process restart loses every pending reminder.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable

import sentry_sdk
from apscheduler.job import Job
from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from eventhub.config import ReminderSettings, get_reminder_settings
from eventhub.enums import MessageType
from eventhub.notifications.context import (
    build_post_event_reminder_context,
    get_event_with_highlight_and_organizer,
)
from eventhub.notifications.dispatcher import dispatch

logger = logging.getLogger(__name__)

EventLookup = Callable[[int], Awaitable[dict | None]]
Dispatch = Callable[[str, MessageType, dict], None]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(dt: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


# =============================================================================
# Scheduler initialization and shutdown
# =============================================================================


def init_scheduler() -> AsyncIOScheduler:
    """
    Create and start an in-memory APScheduler.

    Call this during app startup (in FastAPI lifespan), from a running loop.
    """
    scheduler = AsyncIOScheduler(
        timezone="UTC",
        job_defaults={
            "coalesce": True,  # Combine missed runs into one
            "max_instances": 1,
            "misfire_grace_time": None,  # Late reminders still run
        },
    )
    scheduler.start()
    logger.info("Notification scheduler started (memory-only)")
    return scheduler


def shutdown_scheduler(scheduler: AsyncIOScheduler | None) -> None:
    """Stop the scheduler without waiting for running jobs. Call on shutdown."""
    if scheduler is not None and scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Notification scheduler stopped")


# =============================================================================
# Post-event reminders
# =============================================================================


def _job_id(event_id: int, attempt: int) -> str:
    return f"post_event_reminder_{event_id}_{attempt}"


@dataclass
class ScheduledReminder:
    """One armed reminder attempt."""

    event_id: int
    attempt: int
    scheduled_for: datetime
    job: Job

    def snapshot(self) -> dict:
        return {
            "event_id": self.event_id,
            "attempt": self.attempt,
            "scheduled_for": self.scheduled_for,
        }


class PostEventReminderScheduler:
    """
    Owns the in-flight reminder table and the APScheduler jobs behind it.

    At most one reminder exists per (event_id, attempt); arming the same pair
    again replaces the previous job. Attempt n+1 is only ever armed from the
    firing of attempt n, so each event's attempts run strictly in sequence.

    All table mutations happen on the event loop thread (AsyncIOScheduler runs
    jobs there), so add/remove/cancel for one key never interleave.
    """

    def __init__(
        self,
        scheduler: AsyncIOScheduler,
        settings: ReminderSettings | None = None,
        *,
        get_event: EventLookup | None = None,
        dispatch_notification: Dispatch | None = None,
    ) -> None:
        self._scheduler = scheduler
        self.settings = settings or get_reminder_settings()
        self._get_event = get_event or get_event_with_highlight_and_organizer
        self._dispatch = dispatch_notification or dispatch
        self._reminders: dict[tuple[int, int], ScheduledReminder] = {}

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def start_reminder_process(self, event_id: int, event_date: datetime) -> None:
        """
        Arm the first reminder at event_date + initial_delay.

        Past-due events are skipped with a warning. Not deduplicated: the
        approval flow calls this once per event.
        """
        scheduled_for = _as_utc(event_date) + self.settings.initial_delay

        if scheduled_for <= _utcnow():
            logger.warning(
                f"Cannot schedule past-due reminder for event {event_id} "
                f"(event date {event_date.isoformat()})"
            )
            return

        self._arm_reminder(event_id, 1, scheduled_for)
        logger.info(
            f"Started post-event reminder process for event {event_id}, "
            f"first reminder at {scheduled_for.isoformat()}"
        )

    def cancel_reminder(self, event_id: int, attempt: int) -> None:
        """Cancel one attempt. No-op if it isn't pending."""
        reminder = self._reminders.pop((event_id, attempt), None)
        if reminder is None:
            return

        try:
            reminder.job.remove()
        except JobLookupError:
            pass  # Already fired

        logger.info(
            f"Cancelled post-event reminder for event {event_id} (attempt {attempt})"
        )

    def cancel_all_reminders(self, event_id: int) -> int:
        """
        Cancel every pending attempt for an event.

        Returns:
            Number of reminders cancelled
        """
        attempts = [attempt for (eid, attempt) in self._reminders if eid == event_id]
        for attempt in attempts:
            self.cancel_reminder(event_id, attempt)

        if attempts:
            logger.info(f"Cancelled {len(attempts)} reminder(s) for event {event_id}")
        return len(attempts)

    def list_active_reminders(self) -> list[dict]:
        """Snapshot of armed reminders, soonest first. Safe to mutate."""
        reminders = sorted(
            self._reminders.values(),
            key=lambda r: (r.scheduled_for, r.event_id, r.attempt),
        )
        return [reminder.snapshot() for reminder in reminders]

    # -------------------------------------------------------------------------
    # Arming and execution
    # -------------------------------------------------------------------------

    def _arm_reminder(self, event_id: int, attempt: int, scheduled_for: datetime) -> None:
        self.cancel_reminder(event_id, attempt)

        job_id = _job_id(event_id, attempt)
        kwargs = {"event_id": event_id, "attempt": attempt}

        if scheduled_for - _utcnow() <= timedelta(0):
            # Already due: run on the next loop iteration, nothing to track
            self._scheduler.add_job(
                self._execute_reminder,
                id=job_id,
                replace_existing=True,
                kwargs={**kwargs, "catch_up": True},
            )
            logger.info(
                f"Reminder for event {event_id} (attempt {attempt}) is already due, running now"
            )
            return

        job = self._scheduler.add_job(
            self._execute_reminder,
            trigger="date",
            run_date=scheduled_for,
            id=job_id,
            replace_existing=True,
            kwargs=kwargs,
        )
        self._reminders[(event_id, attempt)] = ScheduledReminder(
            event_id=event_id,
            attempt=attempt,
            scheduled_for=scheduled_for,
            job=job,
        )
        logger.info(
            f"Scheduled post-event reminder for event {event_id} "
            f"(attempt {attempt}) at {scheduled_for.isoformat()}"
        )

    async def _execute_reminder(
        self, event_id: int, attempt: int, catch_up: bool = False
    ) -> None:
        """
        Job function called by APScheduler when a reminder is due.

        A timed reminder whose entry is gone was cancelled after APScheduler
        had already submitted the job; it does nothing. Catch-up runs never
        have an entry.

        Never raises: every failure is logged and reported, and the
        escalation for that event simply stops.
        """
        # Before any await, so a racing cancel finds nothing to cancel
        reminder = self._reminders.pop((event_id, attempt), None)
        if reminder is None and not catch_up:
            logger.info(
                f"Post-event reminder for event {event_id} (attempt {attempt}) "
                "was cancelled, skipping"
            )
            return

        logger.info(f"Executing post-event reminder for event {event_id} (attempt {attempt})")

        try:
            await self._run_reminder(event_id, attempt)
        except Exception as e:
            logger.error(
                f"Error executing post-event reminder for event {event_id} "
                f"(attempt {attempt}): {e}"
            )
            sentry_sdk.capture_exception(e)

    async def _run_reminder(self, event_id: int, attempt: int) -> None:
        event = await self._get_event(event_id)
        if event is None:
            logger.warning(f"Event {event_id} not found, skipping post-event reminder")
            return

        if event["highlight_exists"]:
            logger.info(
                f"Event {event_id} already has a highlight, stopping reminders"
            )
            self.cancel_all_reminders(event_id)
            return

        email = event.get("organizer_email")
        if not email:
            logger.warning(
                f"Organizer email not found for event {event_id}, abandoning reminders"
            )
            return

        max_attempts = self.settings.max_attempts
        try:
            self._dispatch(
                email,
                MessageType.post_event_reminder,
                build_post_event_reminder_context(event, attempt, max_attempts),
            )
            logger.info(
                f"Post-event reminder queued for event {event_id} "
                f"(attempt {attempt}/{max_attempts})"
            )
        except Exception as e:
            # Delivery problems don't stop the escalation
            logger.error(f"Failed to send reminder email for event {event_id}: {e}")
            sentry_sdk.capture_exception(e)

        if attempt >= max_attempts:
            logger.info(
                f"Max reminder attempts ({max_attempts}) reached for event {event_id}, "
                "no further reminders"
            )
            return

        self._arm_reminder(
            event_id, attempt + 1, _utcnow() + self.settings.follow_up_interval
        )
