"""
Centralized configuration for the event platform backend.

All settings are read from environment variables (loaded from .env / .env.local
by the entry points) so deployments can tune them without code changes.
"""

import os
from dataclasses import dataclass
from datetime import timedelta


def is_dev_mode() -> bool:
    """Check if running in development mode (DEV_MODE env)."""
    return os.getenv("DEV_MODE", "").lower() in ("true", "1", "yes")


def get_api_port() -> int:
    """Get API server port from env or default."""
    return int(os.getenv("API_PORT", "8000"))


def get_log_level() -> str:
    """Get the root logging level name (e.g. "INFO", "DEBUG")."""
    return os.getenv("LOG_LEVEL", "INFO").upper()


def _get_int(name: str, default: int, minimum: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}")
    return value


# =============================================================================
# Post-event reminders
# =============================================================================


@dataclass(frozen=True)
class ReminderSettings:
    """Timing for the post-event highlight reminder escalation."""

    initial_delay: timedelta = timedelta(days=2)
    follow_up_interval: timedelta = timedelta(hours=24)
    max_attempts: int = 7


def get_reminder_settings() -> ReminderSettings:
    """
    Build ReminderSettings from the environment.

    Env vars:
        POST_EVENT_REMINDER_INITIAL_DELAY_DAYS: days after the event before the first reminder
        POST_EVENT_REMINDER_FOLLOW_UP_HOURS: hours between follow-up reminders
        POST_EVENT_REMINDER_MAX_ATTEMPTS: total number of reminders per event

    Raises:
        ValueError: If a variable is set to a non-integer or out-of-range value
    """
    return ReminderSettings(
        initial_delay=timedelta(
            days=_get_int("POST_EVENT_REMINDER_INITIAL_DELAY_DAYS", 2, minimum=0)
        ),
        follow_up_interval=timedelta(
            hours=_get_int("POST_EVENT_REMINDER_FOLLOW_UP_HOURS", 24, minimum=1)
        ),
        max_attempts=_get_int("POST_EVENT_REMINDER_MAX_ATTEMPTS", 7, minimum=1),
    )


# Required environment variables for production
# Format: (name, description, required_in_dev)
REQUIRED_ENV_VARS = [
    ("DATABASE_URL", "PostgreSQL connection string", True),
    ("SENDGRID_API_KEY", "SendGrid API key for notification emails", False),
]


def check_required_env_vars() -> list[str]:
    """
    Return the names of required environment variables that are missing.

    Variables marked as not required in dev are skipped when DEV_MODE is set.
    """
    dev = is_dev_mode()
    return [
        name
        for name, _description, required_in_dev in REQUIRED_ENV_VARS
        if not os.environ.get(name) and (required_in_dev or not dev)
    ]
