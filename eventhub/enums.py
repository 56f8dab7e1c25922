"""SQLAlchemy enum definitions for the database schema."""

import enum

from sqlalchemy import Enum as SQLEnum


# =====================================================
# Python Enum Classes
# =====================================================


class UserRole(str, enum.Enum):
    admin = "admin"
    community_manager = "community_manager"
    organizer = "organizer"


class EventStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class MessageType(str, enum.Enum):
    """Notification kinds; each value is a key in messages.yaml."""

    post_event_reminder = "post_event_reminder"
    event_approved = "event_approved"
    event_rejected = "event_rejected"


class DeliveryChannel(str, enum.Enum):
    email = "email"


class DeliveryStatus(str, enum.Enum):
    sent = "sent"
    failed = "failed"


# =====================================================
# SQLAlchemy Enum Types
# These reference existing PostgreSQL types (create_type=False)
# =====================================================

user_role_enum = SQLEnum(
    UserRole, name="user_role", create_type=False, native_enum=True
)
event_status_enum = SQLEnum(
    EventStatus, name="event_status", create_type=False, native_enum=True
)
