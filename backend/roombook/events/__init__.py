"""Reservation domain events and their publisher."""

from roombook.events.publisher import EventPublisher
from roombook.events.reservation_events import (
    ReservationCancelled,
    ReservationCreated,
    ReservationReminder,
    ReservationUpdated,
)

__all__ = [
    "EventPublisher",
    "ReservationCancelled",
    "ReservationCreated",
    "ReservationReminder",
    "ReservationUpdated",
]
