"""
Notification system for event organizers.

Public API:
    dispatch(recipient, message_type, context) - Queue an email, fire-and-forget
    init_scheduler() / shutdown_scheduler(scheduler) - APScheduler lifecycle
    PostEventReminderScheduler - Highlight reminder escalation for approved events
"""

from .dispatcher import dispatch, wait_for_pending_deliveries
from .scheduler import (
    PostEventReminderScheduler,
    ScheduledReminder,
    init_scheduler,
    shutdown_scheduler,
)

__all__ = [
    "dispatch",
    "wait_for_pending_deliveries",
    "PostEventReminderScheduler",
    "ScheduledReminder",
    "init_scheduler",
    "shutdown_scheduler",
]
