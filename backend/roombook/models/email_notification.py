# backend/roombook/models/email_notification.py
"""
Email notification audit log.

One row per terminal delivery outcome. The table exists for observability
and statistics; booking decisions never depend on it.
"""

from enum import Enum

from sqlalchemy import CheckConstraint, Column, ForeignKey, Index, String, Text
import ulid

from ..database import Base
from .types import UTCDateTime, utcnow


class EmailNotificationType(str, Enum):
    RESERVATION_CREATED = "reservation_created"
    RESERVATION_UPDATED = "reservation_updated"
    RESERVATION_CANCELLED = "reservation_cancelled"
    RESERVATION_REMINDER = "reservation_reminder"
    ADMIN_NOTIFICATION = "admin_notification"


class EmailNotificationStatus(str, Enum):
    SENT = "sent"
    FAILED = "failed"
    PENDING = "pending"


class EmailNotification(Base):
    __tablename__ = "email_notifications"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    reservation_id = Column(
        String(26), ForeignKey("reservations.id", ondelete="SET NULL"), nullable=True, index=True
    )
    type = Column(String(40), nullable=False)
    recipient = Column(String(255), nullable=False)
    status = Column(String(10), nullable=False, default=EmailNotificationStatus.PENDING.value)
    error_message = Column(Text, nullable=True)
    sent_at = Column(UTCDateTime(), nullable=True)
    created_at = Column(UTCDateTime(), nullable=False, default=utcnow)

    __table_args__ = (
        CheckConstraint("status IN ('sent', 'failed', 'pending')", name="ck_email_notifications_status"),
        Index("ix_email_notifications_reservation_type", "reservation_id", "type"),
    )

    def __repr__(self) -> str:
        return f"<EmailNotification {self.type} -> {self.recipient} ({self.status})>"
