"""
Database models for the Roombook platform.

- User: account mirrored from the identity provider
- Resource: bookable room with availability rules
- Reservation: booked interval with lifecycle status
- EmailNotification: audit record of notification attempts
"""

from .email_notification import EmailNotification, EmailNotificationStatus, EmailNotificationType
from .reservation import OCCUPYING_STATUSES, TERMINAL_STATUSES, Reservation, ReservationStatus
from .resource import Resource, ResourceStatus
from .user import User, UserRole

__all__ = [
    "EmailNotification",
    "EmailNotificationStatus",
    "EmailNotificationType",
    "OCCUPYING_STATUSES",
    "Reservation",
    "ReservationStatus",
    "Resource",
    "ResourceStatus",
    "TERMINAL_STATUSES",
    "User",
    "UserRole",
]
