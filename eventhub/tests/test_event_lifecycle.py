"""Tests for event review and highlight submission."""

import logging
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from eventhub.enums import EventStatus, MessageType
from eventhub.lifecycle import (
    DEFAULT_REJECTION_REASON,
    EventNotFoundError,
    HighlightExistsError,
    InvalidEventStateError,
    approve_event,
    bulk_approve_events,
    bulk_reject_events,
    on_event_approved,
    on_event_rejected,
    reject_event,
    submit_event_highlight,
)

EVENT_DATE = datetime(2026, 3, 14, 18, 0, tzinfo=timezone.utc)


def _event(event_id=42, status=EventStatus.pending, **overrides) -> dict:
    event = {
        "event_id": event_id,
        "title": "Spring Tech Meetup",
        "event_date": EVENT_DATE,
        "status": status,
        "organizer_id": 5,
        "organizer_email": "organizer@example.com",
    }
    event.update(overrides)
    return event


@pytest.fixture
def queries():
    """Patch the query layer as seen from eventhub.lifecycle."""
    with (
        patch("eventhub.lifecycle.get_event_with_organizer", new_callable=AsyncMock) as get_event,
        patch("eventhub.lifecycle.update_event_status", new_callable=AsyncMock) as update_status,
        patch("eventhub.lifecycle.get_event_highlight", new_callable=AsyncMock) as get_highlight,
        patch("eventhub.lifecycle.create_event_highlight", new_callable=AsyncMock) as create_highlight,
    ):
        get_event.return_value = _event()
        update_status.side_effect = lambda conn, event_id, status, **kwargs: _event(
            event_id, status=status
        )
        get_highlight.return_value = None
        yield MagicMock(
            get_event=get_event,
            update_status=update_status,
            get_highlight=get_highlight,
            create_highlight=create_highlight,
        )


@pytest.fixture
def mock_dispatch():
    with patch("eventhub.lifecycle.dispatch") as mock:
        yield mock


class TestApproveEvent:
    @pytest.mark.asyncio
    async def test_approves_without_side_effects(self, queries, mock_dispatch):
        """The database half neither arms reminders nor emails."""
        updated = await approve_event(AsyncMock(), 42, approver_id=1)

        assert updated["status"] == EventStatus.approved
        assert updated["organizer_email"] == "organizer@example.com"
        call_kwargs = queries.update_status.call_args[1]
        assert call_kwargs["approved_by"] == 1
        assert call_kwargs["approval_date"].tzinfo is not None
        mock_dispatch.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_event(self, queries, mock_dispatch):
        queries.get_event.return_value = None

        with pytest.raises(EventNotFoundError):
            await approve_event(AsyncMock(), 42, approver_id=1)

        queries.update_status.assert_not_called()

    @pytest.mark.asyncio
    async def test_already_reviewed(self, queries, mock_dispatch):
        queries.get_event.return_value = _event(status=EventStatus.rejected)

        with pytest.raises(InvalidEventStateError, match="already rejected"):
            await approve_event(AsyncMock(), 42, approver_id=1)

        queries.update_status.assert_not_called()


class TestOnEventApproved:
    def test_starts_reminders_once(self, mock_dispatch):
        reminders = MagicMock()

        on_event_approved(_event(status=EventStatus.approved), reminders)

        reminders.start_reminder_process.assert_called_once_with(42, EVENT_DATE)

    def test_notifies_organizer(self, mock_dispatch):
        on_event_approved(_event(status=EventStatus.approved), MagicMock())

        mock_dispatch.assert_called_once()
        recipient, message_type, context = mock_dispatch.call_args[0]
        assert recipient == "organizer@example.com"
        assert message_type == MessageType.event_approved
        assert context["event_title"] == "Spring Tech Meetup"

    def test_notification_failure_is_logged(self, mock_dispatch, caplog):
        mock_dispatch.side_effect = RuntimeError("no loop")
        reminders = MagicMock()

        with caplog.at_level(logging.ERROR):
            on_event_approved(_event(status=EventStatus.approved), reminders)

        reminders.start_reminder_process.assert_called_once()
        assert any("no loop" in record.message for record in caplog.records)

    def test_organizer_without_email_is_skipped(self, mock_dispatch):
        reminders = MagicMock()

        on_event_approved(_event(organizer_email=None), reminders)

        mock_dispatch.assert_not_called()
        reminders.start_reminder_process.assert_called_once()


class TestRejectEvent:
    @pytest.mark.asyncio
    async def test_rejects_without_notifying(self, queries, mock_dispatch):
        updated = await reject_event(AsyncMock(), 42)

        assert updated["status"] == EventStatus.rejected
        mock_dispatch.assert_not_called()

    @pytest.mark.asyncio
    async def test_already_approved(self, queries, mock_dispatch):
        queries.get_event.return_value = _event(status=EventStatus.approved)

        with pytest.raises(InvalidEventStateError):
            await reject_event(AsyncMock(), 42)

    def test_on_rejected_sends_reason(self, mock_dispatch):
        on_event_rejected(_event(status=EventStatus.rejected), "Venue not confirmed")

        _, message_type, context = mock_dispatch.call_args[0]
        assert message_type == MessageType.event_rejected
        assert context["reason"] == "Venue not confirmed"

    def test_on_rejected_default_reason(self, mock_dispatch):
        on_event_rejected(_event(status=EventStatus.rejected))

        assert mock_dispatch.call_args[0][2]["reason"] == DEFAULT_REJECTION_REASON


class TestBulkOperations:
    @pytest.mark.asyncio
    async def test_bulk_approve_reports_per_event_failures(self, queries, mock_dispatch):
        queries.get_event.side_effect = [_event(1), None, _event(3)]

        result, approved = await bulk_approve_events(AsyncMock(), [1, 2, 3], 7)

        assert result["succeeded"] == [1, 3]
        assert result["failed"] == [{"event_id": 2, "error": "Event 2 not found"}]
        assert [event["event_id"] for event in approved] == [1, 3]
        mock_dispatch.assert_not_called()

    @pytest.mark.asyncio
    async def test_bulk_reject(self, queries, mock_dispatch):
        queries.get_event.side_effect = [
            _event(1),
            _event(2, status=EventStatus.approved),
        ]

        result, rejected = await bulk_reject_events(AsyncMock(), [1, 2])

        assert result["succeeded"] == [1]
        assert result["failed"][0]["event_id"] == 2
        assert [event["event_id"] for event in rejected] == [1]


class TestSubmitEventHighlight:
    @pytest.mark.asyncio
    async def test_creates_highlight(self, queries):
        queries.create_highlight.return_value = {"highlight_id": 9, "event_id": 42}
        items = [{"title": "Keynote", "type": "video", "url": "https://example.com/v"}]

        highlight = await submit_event_highlight(
            AsyncMock(), 42, attendance=120, ticket_sales=95, highlights=items
        )

        assert highlight == {"highlight_id": 9, "event_id": 42}
        queries.create_highlight.assert_awaited_once()
        call_kwargs = queries.create_highlight.call_args[1]
        assert call_kwargs["attendance"] == 120
        assert call_kwargs["highlights"] == items

    @pytest.mark.asyncio
    async def test_defaults_to_no_media(self, queries):
        await submit_event_highlight(AsyncMock(), 42, attendance=0, ticket_sales=0)

        assert queries.create_highlight.call_args[1]["highlights"] == []

    @pytest.mark.asyncio
    async def test_negative_counts_rejected(self, queries):
        with pytest.raises(ValueError):
            await submit_event_highlight(AsyncMock(), 42, attendance=-1, ticket_sales=0)

        queries.create_highlight.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_event(self, queries):
        queries.get_event.return_value = None

        with pytest.raises(EventNotFoundError):
            await submit_event_highlight(AsyncMock(), 42, attendance=1, ticket_sales=1)

    @pytest.mark.asyncio
    async def test_duplicate_highlight(self, queries):
        queries.get_highlight.return_value = {"highlight_id": 9}

        with pytest.raises(HighlightExistsError):
            await submit_event_highlight(AsyncMock(), 42, attendance=1, ticket_sales=1)

        queries.create_highlight.assert_not_called()
