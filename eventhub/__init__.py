"""
Core business logic for the event platform - framework-agnostic.
Used by the web API and by maintenance scripts.
"""

# Database (SQLAlchemy)
from .database import get_connection, get_transaction, get_engine, close_engine, is_configured

# Configuration
from .config import ReminderSettings, get_reminder_settings

# Event review / post-event lifecycle (async functions - must be awaited)
from .lifecycle import (
    EventLifecycleError, EventNotFoundError, InvalidEventStateError, HighlightExistsError,
    approve_event, reject_event, bulk_approve_events, bulk_reject_events,
    on_event_approved, on_event_rejected, submit_event_highlight,
)

__all__ = [
    # Database
    'get_connection', 'get_transaction', 'get_engine', 'close_engine', 'is_configured',
    # Configuration
    'ReminderSettings', 'get_reminder_settings',
    # Lifecycle
    'EventLifecycleError', 'EventNotFoundError', 'InvalidEventStateError', 'HighlightExistsError',
    'approve_event', 'reject_event', 'bulk_approve_events', 'bulk_reject_events',
    'on_event_approved', 'on_event_rejected', 'submit_event_highlight',
]
