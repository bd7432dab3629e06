# backend/roombook/repositories/reservation_repository.py
"""
Reservation Repository for the Roombook platform.

Implements the persistence operations the booking core depends on:
ownership-scoped loads, overlap detection, filtered listing, and the bulk
transition used by the passed-reservation sweep.
"""

from dataclasses import dataclass
from datetime import datetime
import logging
from typing import Iterable, List, Optional, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from ..core.exceptions import RepositoryException
from ..models.reservation import OCCUPYING_STATUSES, Reservation, ReservationStatus
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReservationFilters:
    """Optional filters for reservation listings."""

    user_id: Optional[str] = None
    resource_id: Optional[str] = None
    status: Optional[str] = None
    start_date: Optional[datetime] = None  # reservations ending on/after this instant
    end_date: Optional[datetime] = None  # reservations starting on/before this instant
    limit: int = 50
    offset: int = 0


class ReservationRepository(BaseRepository[Reservation]):
    """Repository for reservation data access."""

    def __init__(self, db: Session):
        super().__init__(db, Reservation)

    def get_for_actor(self, reservation_id: str, user_id: Optional[str]) -> Optional[Reservation]:
        """
        Load a reservation, restricted to one owner unless user_id is None.

        A reservation owned by someone else returns None, the same as a
        missing one.
        """
        try:
            query = self.db.query(Reservation).filter(Reservation.id == reservation_id)
            if user_id is not None:
                query = query.filter(Reservation.user_id == user_id)
            return cast(Optional[Reservation], query.first())
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading reservation {reservation_id}: {str(e)}")
            raise RepositoryException(f"Failed to load reservation: {str(e)}")

    def get_with_details(self, reservation_id: str) -> Optional[Reservation]:
        """Load a reservation with its resource and user for notification rendering."""
        try:
            return cast(
                Optional[Reservation],
                self.db.query(Reservation)
                .options(joinedload(Reservation.resource), joinedload(Reservation.user))
                .filter(Reservation.id == reservation_id)
                .first(),
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading reservation details {reservation_id}: {str(e)}")
            raise RepositoryException(f"Failed to load reservation: {str(e)}")

    def find_overlapping(
        self,
        resource_id: str,
        start: datetime,
        end: datetime,
        exclude_reservation_id: Optional[str] = None,
        statuses: Iterable[str] = OCCUPYING_STATUSES,
    ) -> List[Reservation]:
        """
        Reservations on a resource whose [start_time, end_time) overlaps [start, end).

        Half-open overlap: start < existing.end_time AND existing.start_time < end.
        Back-to-back reservations do not overlap.
        """
        try:
            query = self.db.query(Reservation).filter(
                Reservation.resource_id == resource_id,
                Reservation.status.in_(list(statuses)),
                Reservation.start_time < end,
                Reservation.end_time > start,
            )
            if exclude_reservation_id:
                query = query.filter(Reservation.id != exclude_reservation_id)
            return cast(List[Reservation], query.order_by(Reservation.start_time).all())
        except SQLAlchemyError as e:
            self.logger.error(f"Error finding overlapping reservations: {str(e)}")
            raise RepositoryException(f"Failed to find overlapping reservations: {str(e)}")

    def list_reservations(self, filters: ReservationFilters) -> List[Reservation]:
        """List reservations newest-first with optional filters and pagination."""
        query = self._build_query()
        if filters.user_id:
            query = query.filter(Reservation.user_id == filters.user_id)
        if filters.resource_id:
            query = query.filter(Reservation.resource_id == filters.resource_id)
        if filters.status:
            query = query.filter(Reservation.status == filters.status)
        if filters.start_date:
            query = query.filter(Reservation.end_time >= filters.start_date)
        if filters.end_date:
            query = query.filter(Reservation.start_time <= filters.end_date)
        query = (
            query.order_by(Reservation.start_time.desc(), Reservation.id.desc())
            .offset(filters.offset)
            .limit(filters.limit)
        )
        return self._execute_query(query)

    def get_user_history(self, user_id: str, include_active: bool = True) -> List[Reservation]:
        query = self._build_query().filter(Reservation.user_id == user_id)
        if not include_active:
            query = query.filter(Reservation.status.notin_(list(OCCUPYING_STATUSES)))
        return self._execute_query(query.order_by(Reservation.start_time.desc()))

    def bulk_mark_passed(self, now: datetime) -> int:
        """
        Transition every occupying reservation that ended before `now` to passed.

        Single UPDATE statement; returns the number of rows changed.
        """
        try:
            count = (
                self.db.query(Reservation)
                .filter(
                    Reservation.status.in_(list(OCCUPYING_STATUSES)),
                    Reservation.end_time < now,
                )
                .update(
                    {
                        Reservation.status: ReservationStatus.PASSED.value,
                        Reservation.updated_at: now,
                    },
                    synchronize_session=False,
                )
            )
            return int(count or 0)
        except SQLAlchemyError as e:
            self.logger.error(f"Error marking passed reservations: {str(e)}")
            raise RepositoryException(f"Failed to mark passed reservations: {str(e)}") from e

    def get_active_starting_between(self, window_start: datetime, window_end: datetime) -> List[Reservation]:
        """Active reservations whose start falls in [window_start, window_end]."""
        query = (
            self.db.query(Reservation)
            .options(joinedload(Reservation.resource), joinedload(Reservation.user))
            .filter(
                Reservation.status == ReservationStatus.ACTIVE.value,
                Reservation.start_time >= window_start,
                Reservation.start_time <= window_end,
            )
            .order_by(Reservation.start_time)
        )
        return self._execute_query(query)
