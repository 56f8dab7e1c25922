"""
Notification dispatcher - fire-and-forget hand-off to email delivery.

dispatch() only validates the request and queues a background task; rendering,
sending and logging happen later on the event loop. Callers never learn whether
a message was delivered: outcomes go to the log, Sentry and notification_log.
"""

import asyncio
import logging

import sentry_sdk

from eventhub.database import is_configured
from eventhub.enums import DeliveryChannel, DeliveryStatus, MessageType
from eventhub.notifications.channels.email import EmailMessage, send_email
from eventhub.notifications.templates import get_message, has_template

logger = logging.getLogger(__name__)

# Keep references so in-flight deliveries aren't garbage collected
_pending_deliveries: set[asyncio.Task] = set()


def dispatch(recipient: str, message_type: MessageType | str, context: dict) -> None:
    """
    Accept a notification for asynchronous delivery and return immediately.

    Must be called from a running event loop.

    Args:
        recipient: Email address
        message_type: MessageType (or its string value)
        context: Template variables

    Raises:
        ValueError: Unknown message type
        KeyError: No email template for the message type
    """
    message_type = MessageType(message_type)
    if not has_template(message_type.value):
        raise KeyError(f"No email template for {message_type.value}")

    task = asyncio.create_task(
        _deliver(recipient, message_type.value, dict(context)),
        name=f"notify-{message_type.value}-{recipient}",
    )
    _pending_deliveries.add(task)
    task.add_done_callback(_delivery_done)


def _delivery_done(task: asyncio.Task) -> None:
    """Drop the finished task and report unexpected delivery errors."""
    _pending_deliveries.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc:
        logger.error("Notification task %s failed: %s", task.get_name(), exc)
        sentry_sdk.capture_exception(exc)


async def _deliver(recipient: str, message_type: str, context: dict) -> bool:
    """Render and send one email, then record the outcome."""
    message = EmailMessage(
        to_email=recipient,
        subject=get_message(message_type, "email_subject", context),
        body=get_message(message_type, "email_body", context),
    )
    success = await asyncio.to_thread(send_email, message)

    if success:
        logger.info(f"Sent {message_type} email to {recipient}")
    else:
        logger.warning(f"Could not deliver {message_type} email to {recipient}")

    await log_notification(
        recipient=recipient,
        message_type=message_type,
        channel=DeliveryChannel.email,
        success=success,
        error_message=None if success else "email channel rejected the message",
    )
    return success


async def log_notification(
    recipient: str,
    message_type: str,
    channel: DeliveryChannel,
    success: bool,
    error_message: str | None = None,
) -> None:
    """
    Record a delivery attempt in notification_log.

    Skipped when no database is configured. Failures are logged and swallowed
    so bookkeeping never breaks delivery.
    """
    if not is_configured():
        return

    from sqlalchemy import insert
    from eventhub.database import get_connection
    from eventhub.tables import notification_log

    status = DeliveryStatus.sent if success else DeliveryStatus.failed
    try:
        async with get_connection() as conn:
            await conn.execute(
                insert(notification_log).values(
                    recipient=recipient,
                    message_type=message_type,
                    channel=channel.value,
                    status=status.value,
                    error_message=error_message,
                )
            )
            await conn.commit()
    except Exception as e:
        logger.warning(f"Failed to log notification: {e}")


async def wait_for_pending_deliveries() -> None:
    """Wait until every queued delivery has finished (used at shutdown)."""
    if _pending_deliveries:
        await asyncio.gather(*list(_pending_deliveries), return_exceptions=True)
