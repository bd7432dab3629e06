# backend/roombook/services/reminder_service.py
"""
Reservation reminders.

Run hourly by Celery beat. Looks at active reservations starting within
the next day and publishes a ReservationReminder event for those that sit
in a reminder window and have not had a reminder delivered recently.
"""

from datetime import datetime, timedelta
import logging
from typing import Callable, List, Optional, Tuple

from sqlalchemy.orm import Session

from ..core.constants import REMINDER_DEDUPE_HOURS, REMINDER_LOOKAHEAD_HOURS, REMINDER_WINDOWS
from ..events import EventPublisher, ReservationReminder
from ..models.reservation import Reservation
from ..models.types import utcnow
from ..repositories import RepositoryFactory
from ..repositories.email_notification_repository import EmailNotificationRepository
from ..repositories.reservation_repository import ReservationRepository
from .base import BaseService

logger = logging.getLogger(__name__)


def reminder_type_for(hours_until: float) -> Optional[str]:
    """Name of the window containing `hours_until`, bounds inclusive."""
    for reminder_type, (low, high) in REMINDER_WINDOWS.items():
        if low <= hours_until <= high:
            return reminder_type
    return None


class ReminderService(BaseService):
    def __init__(
        self,
        db: Session,
        reservation_repository: Optional[ReservationRepository] = None,
        notification_repository: Optional[EmailNotificationRepository] = None,
        event_publisher: Optional[EventPublisher] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        super().__init__(db)
        self.reservation_repository = (
            reservation_repository or RepositoryFactory.create_reservation_repository(db)
        )
        self.notification_repository = (
            notification_repository or RepositoryFactory.create_email_notification_repository(db)
        )
        self.event_publisher = event_publisher or EventPublisher()
        self._clock = clock

    def due_reminders(self, now: Optional[datetime] = None) -> List[Tuple[Reservation, str]]:
        """(reservation, reminder_type) pairs that should be sent now."""
        now = now or self._clock()
        upcoming = self.reservation_repository.get_active_starting_between(
            now, now + timedelta(hours=REMINDER_LOOKAHEAD_HOURS)
        )
        dedupe_since = now - timedelta(hours=REMINDER_DEDUPE_HOURS)

        due: List[Tuple[Reservation, str]] = []
        for reservation in upcoming:
            if reservation.start_time <= now:
                continue
            hours_until = (reservation.start_time - now).total_seconds() / 3600
            reminder_type = reminder_type_for(hours_until)
            if reminder_type is None:
                continue
            if self.notification_repository.reminder_sent_since(reservation.id, dedupe_since):
                self.logger.debug(f"Reminder already sent for reservation {reservation.id}")
                continue
            due.append((reservation, reminder_type))
        return due

    @BaseService.measure_operation("send_reminders")
    def send_due_reminders(self, now: Optional[datetime] = None) -> int:
        """
        Publish a reminder event for every due reservation.

        Returns:
            Number of reminder events published
        """
        published = 0
        for reservation, reminder_type in self.due_reminders(now):
            try:
                self.event_publisher.publish(
                    ReservationReminder(reservation_id=reservation.id, reminder_type=reminder_type)
                )
                published += 1
            except Exception as e:
                self.logger.error(f"Failed to enqueue reminder for reservation {reservation.id}: {str(e)}")
        if published:
            self.log_operation("reminders_published", count=published)
        return published
