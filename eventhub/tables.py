"""SQLAlchemy Core table definitions for the database schema."""

from sqlalchemy import (
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Table,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP

from .enums import event_status_enum, user_role_enum

# Naming convention for constraints (helps Alembic generate better names)
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}
metadata = MetaData(naming_convention=convention)


# =====================================================
# 1. USERS
# =====================================================
users = Table(
    "users",
    metadata,
    Column("user_id", Integer, primary_key=True, autoincrement=True),
    Column("name", Text, nullable=False),
    Column("email", Text),  # Organizers without an email can't be reminded
    Column("role", user_role_enum, nullable=False, server_default="organizer"),
    Column("created_at", TIMESTAMP(timezone=True), server_default=func.now()),
    Column("updated_at", TIMESTAMP(timezone=True), server_default=func.now()),
    Index("idx_users_email", "email"),
)


# =====================================================
# 2. EVENTS
# =====================================================
events = Table(
    "events",
    metadata,
    Column("event_id", Integer, primary_key=True, autoincrement=True),
    Column("title", Text, nullable=False),
    Column("event_date", TIMESTAMP(timezone=True), nullable=False),
    Column("status", event_status_enum, nullable=False, server_default="pending"),
    Column(
        "organizer_id",
        Integer,
        ForeignKey("users.user_id", ondelete="SET NULL"),
    ),
    Column(
        "approved_by",
        Integer,
        ForeignKey("users.user_id", ondelete="SET NULL"),
    ),
    Column("approval_date", TIMESTAMP(timezone=True)),
    Column("created_at", TIMESTAMP(timezone=True), server_default=func.now()),
    Column("updated_at", TIMESTAMP(timezone=True), server_default=func.now()),
    Index("idx_events_status", "status"),
    Index("idx_events_event_date", "event_date"),
)


# =====================================================
# 3. EVENT_HIGHLIGHTS
# =====================================================
event_highlights = Table(
    "event_highlights",
    metadata,
    Column("highlight_id", Integer, primary_key=True, autoincrement=True),
    Column(
        "event_id",
        Integer,
        ForeignKey("events.event_id", ondelete="CASCADE"),
        nullable=False,
        unique=True,  # One highlight per event
    ),
    Column("attendance", Integer, nullable=False),
    Column("ticket_sales", Integer, nullable=False),
    Column("highlights", JSONB, nullable=False, server_default="[]"),
    Column("created_at", TIMESTAMP(timezone=True), server_default=func.now()),
    CheckConstraint("attendance >= 0", name="attendance_non_negative"),
    CheckConstraint("ticket_sales >= 0", name="ticket_sales_non_negative"),
)


# =====================================================
# 4. NOTIFICATION_LOG
# =====================================================
notification_log = Table(
    "notification_log",
    metadata,
    Column("log_id", Integer, primary_key=True, autoincrement=True),
    Column("recipient", Text, nullable=False),  # Email address
    Column(
        "message_type", Text, nullable=False
    ),  # e.g., "post_event_reminder", "event_approved"
    Column("channel", Text, nullable=False),  # "email"
    Column("status", Text, nullable=False),  # "sent", "failed"
    Column("error_message", Text),  # Why it failed (if applicable)
    Column("sent_at", TIMESTAMP(timezone=True), server_default=func.now()),
    Index("idx_notification_log_recipient", "recipient"),
    Index("idx_notification_log_sent_at", "sent_at"),
)
