# backend/roombook/services/conflict_checker.py
"""
Conflict Checker Service for the Roombook platform

Decides whether a candidate interval overlaps an existing occupying
reservation on the same resource. Intervals are half-open, so a
reservation ending at 11:00 and another starting at 11:00 do not conflict.

The answer is only authoritative when called inside the write transaction
after the resource row has been locked (see BookingService).
"""

from datetime import datetime
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..models.reservation import Reservation
from ..repositories import RepositoryFactory
from ..repositories.reservation_repository import ReservationRepository
from .base import BaseService

logger = logging.getLogger(__name__)


def intervals_overlap(start: datetime, end: datetime, other_start: datetime, other_end: datetime) -> bool:
    """Half-open overlap test for [start, end) and [other_start, other_end)."""
    return start < other_end and other_start < end


class ConflictChecker(BaseService):
    """
    Service for detecting reservation conflicts.

    Occupying statuses are active and modified; cancelled and passed
    reservations never block a slot.
    """

    def __init__(self, db: Session, repository: Optional[ReservationRepository] = None):
        """
        Initialize conflict checker service.

        Args:
            db: Database session
            repository: Optional ReservationRepository instance
        """
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_reservation_repository(db)

    @BaseService.measure_operation("find_conflicts")
    def find_conflicts(
        self,
        resource_id: str,
        start: datetime,
        end: datetime,
        exclude_reservation_id: Optional[str] = None,
    ) -> List[Reservation]:
        """
        Return occupying reservations on the resource that overlap [start, end).

        Args:
            resource_id: Resource to check
            start: Candidate start (inclusive)
            end: Candidate end (exclusive)
            exclude_reservation_id: Reservation to ignore, used when re-validating
                an update against itself

        Returns:
            Overlapping reservations ordered by start time
        """
        candidates = self.repository.find_overlapping(resource_id, start, end, exclude_reservation_id)
        return [r for r in candidates if intervals_overlap(start, end, r.start_time, r.end_time)]

    def has_conflict(
        self,
        resource_id: str,
        start: datetime,
        end: datetime,
        exclude_reservation_id: Optional[str] = None,
    ) -> bool:
        return bool(self.find_conflicts(resource_id, start, end, exclude_reservation_id))

    @staticmethod
    def describe_conflicts(conflicts: List[Reservation]) -> List[Dict[str, Any]]:
        """Format conflicts for error details without exposing who booked them."""
        return [
            {
                "reservation_id": reservation.id,
                "start_time": reservation.start_time.isoformat(),
                "end_time": reservation.end_time.isoformat(),
            }
            for reservation in conflicts
        ]
