"""Event review schema.

Revision ID: 001
Revises:
Create Date: 2026-03-01

Creates users, events, event_highlights and notification_log together with
the user_role and event_status enum types.
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

user_role = postgresql.ENUM(
    "admin", "community_manager", "organizer", name="user_role", create_type=False
)
event_status = postgresql.ENUM(
    "pending", "approved", "rejected", name="event_status", create_type=False
)


def upgrade() -> None:
    user_role.create(op.get_bind(), checkfirst=True)
    event_status.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "users",
        sa.Column("user_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("email", sa.Text(), nullable=True),
        sa.Column("role", user_role, server_default="organizer", nullable=False),
        sa.Column(
            "created_at",
            postgresql.TIMESTAMP(timezone=True),
            server_default=sa.text("now()"),
            nullable=True,
        ),
        sa.Column(
            "updated_at",
            postgresql.TIMESTAMP(timezone=True),
            server_default=sa.text("now()"),
            nullable=True,
        ),
        sa.PrimaryKeyConstraint("user_id", name=op.f("pk_users")),
    )
    op.create_index("idx_users_email", "users", ["email"], unique=False)

    op.create_table(
        "events",
        sa.Column("event_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("event_date", postgresql.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("status", event_status, server_default="pending", nullable=False),
        sa.Column("organizer_id", sa.Integer(), nullable=True),
        sa.Column("approved_by", sa.Integer(), nullable=True),
        sa.Column("approval_date", postgresql.TIMESTAMP(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            postgresql.TIMESTAMP(timezone=True),
            server_default=sa.text("now()"),
            nullable=True,
        ),
        sa.Column(
            "updated_at",
            postgresql.TIMESTAMP(timezone=True),
            server_default=sa.text("now()"),
            nullable=True,
        ),
        sa.ForeignKeyConstraint(
            ["organizer_id"],
            ["users.user_id"],
            name=op.f("fk_events_organizer_id_users"),
            ondelete="SET NULL",
        ),
        sa.ForeignKeyConstraint(
            ["approved_by"],
            ["users.user_id"],
            name=op.f("fk_events_approved_by_users"),
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("event_id", name=op.f("pk_events")),
    )
    op.create_index("idx_events_status", "events", ["status"], unique=False)
    op.create_index("idx_events_event_date", "events", ["event_date"], unique=False)

    op.create_table(
        "event_highlights",
        sa.Column("highlight_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("event_id", sa.Integer(), nullable=False),
        sa.Column("attendance", sa.Integer(), nullable=False),
        sa.Column("ticket_sales", sa.Integer(), nullable=False),
        sa.Column(
            "highlights",
            postgresql.JSONB(astext_type=sa.Text()),
            server_default="[]",
            nullable=False,
        ),
        sa.Column(
            "created_at",
            postgresql.TIMESTAMP(timezone=True),
            server_default=sa.text("now()"),
            nullable=True,
        ),
        sa.CheckConstraint(
            "attendance >= 0",
            name=op.f("ck_event_highlights_attendance_non_negative"),
        ),
        sa.CheckConstraint(
            "ticket_sales >= 0",
            name=op.f("ck_event_highlights_ticket_sales_non_negative"),
        ),
        sa.ForeignKeyConstraint(
            ["event_id"],
            ["events.event_id"],
            name=op.f("fk_event_highlights_event_id_events"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("highlight_id", name=op.f("pk_event_highlights")),
        sa.UniqueConstraint("event_id", name=op.f("uq_event_highlights_event_id")),
    )

    op.create_table(
        "notification_log",
        sa.Column("log_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("recipient", sa.Text(), nullable=False),
        sa.Column("message_type", sa.Text(), nullable=False),
        sa.Column("channel", sa.Text(), nullable=False),
        sa.Column("status", sa.Text(), nullable=False),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column(
            "sent_at",
            postgresql.TIMESTAMP(timezone=True),
            server_default=sa.text("now()"),
            nullable=True,
        ),
        sa.PrimaryKeyConstraint("log_id", name=op.f("pk_notification_log")),
    )
    op.create_index(
        "idx_notification_log_recipient", "notification_log", ["recipient"], unique=False
    )
    op.create_index(
        "idx_notification_log_sent_at", "notification_log", ["sent_at"], unique=False
    )


def downgrade() -> None:
    op.drop_index("idx_notification_log_sent_at", table_name="notification_log")
    op.drop_index("idx_notification_log_recipient", table_name="notification_log")
    op.drop_table("notification_log")
    op.drop_table("event_highlights")
    op.drop_index("idx_events_event_date", table_name="events")
    op.drop_index("idx_events_status", table_name="events")
    op.drop_table("events")
    op.drop_index("idx_users_email", table_name="users")
    op.drop_table("users")
    event_status.drop(op.get_bind(), checkfirst=True)
    user_role.drop(op.get_bind(), checkfirst=True)
