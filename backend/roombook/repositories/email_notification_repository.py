# backend/roombook/repositories/email_notification_repository.py
"""Email notification audit log access."""

from datetime import datetime
import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.email_notification import EmailNotification, EmailNotificationStatus, EmailNotificationType
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class EmailNotificationRepository(BaseRepository[EmailNotification]):
    def __init__(self, db: Session):
        super().__init__(db, EmailNotification)

    def record(
        self,
        *,
        reservation_id: Optional[str],
        notification_type: str,
        recipient: str,
        status: str,
        error_message: Optional[str] = None,
        sent_at: Optional[datetime] = None,
    ) -> EmailNotification:
        """Append one audit row; the caller commits."""
        return self.create(
            reservation_id=reservation_id,
            type=notification_type,
            recipient=recipient,
            status=status,
            error_message=error_message,
            sent_at=sent_at,
        )

    def reminder_sent_since(self, reservation_id: str, since: datetime) -> bool:
        """True if a reminder for the reservation was delivered at or after `since`."""
        try:
            return (
                self.db.query(EmailNotification.id)
                .filter(
                    EmailNotification.reservation_id == reservation_id,
                    EmailNotification.type == EmailNotificationType.RESERVATION_REMINDER.value,
                    EmailNotification.status == EmailNotificationStatus.SENT.value,
                    EmailNotification.sent_at >= since,
                )
                .first()
                is not None
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error checking reminder history for {reservation_id}: {str(e)}")
            raise RepositoryException(f"Failed to check reminder history: {str(e)}")
