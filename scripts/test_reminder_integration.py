#!/usr/bin/env python3
"""
Manual integration test for post-event highlight reminders.

This script:
1. Creates a throwaway organizer and pending event that ends in a few seconds
2. Approves it through the real lifecycle, which arms the first reminder
3. Lets the reminders escalate (shortened delays) and shows each one firing
4. Optionally submits a highlight mid-way to show the chain stopping
5. Deletes the test data

Usage:
    python scripts/test_reminder_integration.py --email your@email.com
    python scripts/test_reminder_integration.py --email your@email.com --highlight-after 2

Requirements:
    - Local database running with DATABASE_URL set and migrations applied
    - SENDGRID_API_KEY set (or delivery is logged as failed instead of sent)
"""

import argparse
import asyncio
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path

from dotenv import load_dotenv

env_path = Path(__file__).parent.parent
load_dotenv(env_path / ".env")
load_dotenv(env_path / ".env.local", override=True)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    force=True,
)
logging.getLogger("apscheduler").setLevel(logging.DEBUG)


async def main(email: str, interval_seconds: int, attempts: int, highlight_after: int | None):
    from sqlalchemy import delete, insert

    from eventhub.config import ReminderSettings
    from eventhub.database import close_engine, get_transaction
    from eventhub.enums import EventStatus, UserRole
    from eventhub.lifecycle import approve_event, on_event_approved, submit_event_highlight
    from eventhub.notifications import (
        PostEventReminderScheduler,
        init_scheduler,
        shutdown_scheduler,
        wait_for_pending_deliveries,
    )
    from eventhub.tables import events, users

    print(f"\n{'='*60}")
    print("Post-event reminder integration test")
    print(f"{'='*60}\n")

    scheduler = init_scheduler()
    settings = ReminderSettings(
        initial_delay=timedelta(0),
        follow_up_interval=timedelta(seconds=interval_seconds),
        max_attempts=attempts,
    )
    reminders = PostEventReminderScheduler(scheduler, settings)

    print("1. Creating test organizer and event...")
    event_date = datetime.now(timezone.utc) + timedelta(seconds=interval_seconds)
    async with get_transaction() as conn:
        result = await conn.execute(
            insert(users)
            .values(name="Reminder Test Organizer", email=email, role=UserRole.organizer)
            .returning(users.c.user_id)
        )
        user_id = result.scalar_one()
        result = await conn.execute(
            insert(events)
            .values(
                title="Reminder Integration Test",
                event_date=event_date,
                status=EventStatus.pending,
                organizer_id=user_id,
            )
            .returning(events.c.event_id)
        )
        event_id = result.scalar_one()
    print(f"   user_id={user_id} event_id={event_id} event_date={event_date:%H:%M:%S}")

    try:
        print("\n2. Approving event (starts reminders)...")
        async with get_transaction() as conn:
            event = await approve_event(conn, event_id, user_id)
        on_event_approved(event, reminders)
        for reminder in reminders.list_active_reminders():
            print(f"   - attempt {reminder['attempt']} at {reminder['scheduled_for']:%H:%M:%S}")

        print("\n3. Waiting for reminders...")
        print("-" * 60)
        pending = [r["attempt"] for r in reminders.list_active_reminders()]
        while pending:
            await asyncio.sleep(1)
            now_pending = [r["attempt"] for r in reminders.list_active_reminders()]
            if now_pending != pending:
                ran = pending[0]
                pending = now_pending
                print(f"   attempt {ran}/{attempts} ran, next: {pending or 'none'}")

                if highlight_after is not None and ran == highlight_after:
                    print("   submitting highlight...")
                    async with get_transaction() as conn:
                        await submit_event_highlight(
                            conn, event_id, attendance=10, ticket_sales=8
                        )
        print("-" * 60)
        print("\n4. No reminders left; escalation finished.")
        await wait_for_pending_deliveries()
    finally:
        shutdown_scheduler(scheduler)
        print("\n5. Cleaning up test data...")
        async with get_transaction() as conn:
            await conn.execute(delete(events).where(events.c.event_id == event_id))
            await conn.execute(delete(users).where(users.c.user_id == user_id))
        await close_engine()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Post-event reminder integration test")
    parser.add_argument("--email", required=True, help="Organizer email to receive reminders")
    parser.add_argument(
        "--interval", type=int, default=10, help="Seconds between reminders (default: 10)"
    )
    parser.add_argument("--attempts", type=int, default=3, help="Max reminders (default: 3)")
    parser.add_argument(
        "--highlight-after",
        type=int,
        default=None,
        help="Submit a highlight after this many reminders",
    )
    args = parser.parse_args()

    asyncio.run(main(args.email, args.interval, args.attempts, args.highlight_after))
