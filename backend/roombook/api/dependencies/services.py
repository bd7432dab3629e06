# backend/roombook/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

This module provides factory functions that create service instances
with their required dependencies properly injected.
"""

import logging

from fastapi import Depends
from sqlalchemy.orm import Session

from ...events import EventPublisher
from ...services.booking_service import BookingService
from ...services.passed_reservation_sweeper import PassedReservationSweeper
from ...services.reminder_service import ReminderService
from ...services.resource_service import ResourceService
from ...services.statistics_service import StatisticsService
from .database import get_db

logger = logging.getLogger(__name__)


def get_event_publisher() -> EventPublisher:
    """Publisher that hands events to the Celery worker."""
    return EventPublisher()


def get_booking_service(
    db: Session = Depends(get_db),
    event_publisher: EventPublisher = Depends(get_event_publisher),
) -> BookingService:
    """
    Get booking service instance with all dependencies.

    Args:
        db: Database session
        event_publisher: Outbound event publisher for notifications

    Returns:
        BookingService instance
    """
    return BookingService(db, event_publisher=event_publisher)


def get_resource_service(db: Session = Depends(get_db)) -> ResourceService:
    return ResourceService(db)


def get_statistics_service(db: Session = Depends(get_db)) -> StatisticsService:
    return StatisticsService(db)


def get_sweeper(db: Session = Depends(get_db)) -> PassedReservationSweeper:
    return PassedReservationSweeper(db)


def get_reminder_service(
    db: Session = Depends(get_db),
    event_publisher: EventPublisher = Depends(get_event_publisher),
) -> ReminderService:
    return ReminderService(db, event_publisher=event_publisher)
