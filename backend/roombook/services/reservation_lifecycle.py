# backend/roombook/services/reservation_lifecycle.py
"""
Reservation lifecycle state machine.

    (new) ──create──▶ active ──cancel──▶ cancelled
                        │
                        └──sweep (end < now)──▶ passed

`modified` is an occupying status with the same outgoing transitions as
`active`. Updates keep the current status, so nothing produces `modified`
today; rows carrying it are still handled. Cancelled and passed are
terminal.
"""

import logging
from typing import Any, Dict, FrozenSet, Mapping

from ..core.exceptions import ReservationNotActiveException, ValidationException
from ..models.reservation import OCCUPYING_STATUSES, Reservation, ReservationStatus
from ..models.types import utcnow

logger = logging.getLogger(__name__)

_ACTIVE = ReservationStatus.ACTIVE.value
_MODIFIED = ReservationStatus.MODIFIED.value
_CANCELLED = ReservationStatus.CANCELLED.value
_PASSED = ReservationStatus.PASSED.value

TRANSITIONS: Dict[str, FrozenSet[str]] = {
    _ACTIVE: frozenset({_ACTIVE, _MODIFIED, _CANCELLED, _PASSED}),
    _MODIFIED: frozenset({_MODIFIED, _CANCELLED, _PASSED}),
    _CANCELLED: frozenset(),
    _PASSED: frozenset(),
}

MUTABLE_FIELDS = frozenset({"resource_id", "start_time", "end_time", "notes"})


class ReservationLifecycle:
    """Guards and applies status transitions on Reservation entities."""

    initial_status = _ACTIVE

    @staticmethod
    def can_transition(current: str, target: str) -> bool:
        return target in TRANSITIONS.get(current, frozenset())

    @staticmethod
    def is_mutable(reservation: Reservation) -> bool:
        return reservation.status in OCCUPYING_STATUSES

    @classmethod
    def ensure_mutable(cls, reservation: Reservation) -> None:
        """
        Raises:
            ReservationNotActiveException: If the reservation is cancelled or passed
        """
        if not cls.is_mutable(reservation):
            raise ReservationNotActiveException(reservation.id, reservation.status)

    @classmethod
    def apply_update(cls, reservation: Reservation, changes: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Apply a partial update in place and return the fields that changed.

        Status is left as-is. Keys outside MUTABLE_FIELDS are rejected.
        """
        cls.ensure_mutable(reservation)
        unknown = set(changes) - MUTABLE_FIELDS
        if unknown:
            raise ValidationException(
                f"Fields cannot be updated: {', '.join(sorted(unknown))}",
                code="INVALID_UPDATE_FIELDS",
            )
        changed: Dict[str, Any] = {}
        for key, value in changes.items():
            if getattr(reservation, key) != value:
                setattr(reservation, key, value)
                changed[key] = value
        if changed:
            reservation.updated_at = utcnow()
        return changed

    @classmethod
    def cancel(cls, reservation: Reservation) -> None:
        cls.ensure_mutable(reservation)
        reservation.status = _CANCELLED
        reservation.updated_at = utcnow()
        logger.info(f"Reservation {reservation.id} cancelled")
