# backend/roombook/services/booking_service.py
"""
Booking Service for the Roombook platform

The reservation write path. Every create or time-changing update runs
"lock resource -> re-check availability -> write" inside one transaction,
so two overlapping writers on the same resource cannot both commit.
Notification events are published after commit and never affect the
outcome of the booking.
"""

from datetime import datetime
import logging
from typing import Any, Callable, List, Mapping, Optional

from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import (
    BookingConflictException,
    BusinessRuleException,
    NotFoundException,
    RepositoryException,
    ServiceException,
    ValidationException,
)
from ..events import EventPublisher, ReservationCancelled, ReservationCreated, ReservationUpdated
from ..models.reservation import NO_OVERLAP_CONSTRAINT, Reservation
from ..models.resource import Resource
from ..models.types import utcnow
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories import RepositoryFactory
from ..repositories.reservation_repository import ReservationFilters, ReservationRepository
from ..repositories.resource_repository import ResourceRepository
from .availability_service import AvailabilityService
from .base import BaseService
from .passed_reservation_sweeper import PassedReservationSweeper
from .reservation_lifecycle import ReservationLifecycle

logger = logging.getLogger(__name__)

GENERIC_CONFLICT_MESSAGE = "This time slot conflicts with an existing reservation"

# SQLSTATEs that mean "another writer got there first"
_EXCLUSION_VIOLATION = "23P01"
_SERIALIZATION_FAILURE = "40001"
_DEADLOCK_DETECTED = "40P01"
_LOCK_FAILURE_MESSAGES = ("deadlock detected", "could not serialize access", "database is locked")


def _iter_causes(exc: BaseException):
    seen = set()
    current: Optional[BaseException] = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or current.__context__


def _pgcode(exc: DBAPIError) -> Optional[str]:
    orig = getattr(exc, "orig", None)
    return getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)


class BookingService(BaseService):
    """
    Service layer for reservation operations.

    Owns the transaction boundary for reservation writes and the lazy
    passed-reservation sweep that runs before reads.
    """

    def __init__(
        self,
        db: Session,
        availability_service: Optional[AvailabilityService] = None,
        reservation_repository: Optional[ReservationRepository] = None,
        resource_repository: Optional[ResourceRepository] = None,
        sweeper: Optional[PassedReservationSweeper] = None,
        event_publisher: Optional[EventPublisher] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        super().__init__(db)
        self.reservation_repository = (
            reservation_repository or RepositoryFactory.create_reservation_repository(db)
        )
        self.resource_repository = resource_repository or RepositoryFactory.create_resource_repository(db)
        self.availability_service = availability_service or AvailabilityService(
            db, resource_repository=self.resource_repository
        )
        self.sweeper = sweeper or PassedReservationSweeper(db, repository=self.reservation_repository)
        self.event_publisher = event_publisher or EventPublisher()
        self.lifecycle = ReservationLifecycle
        self._clock = clock

    # Validation helpers

    def _validate_interval(self, start: datetime, end: datetime) -> None:
        """
        Raises:
            ValidationException: Naive datetimes
            BusinessRuleException: start >= end, or start in the past
        """
        if start.tzinfo is None or end.tzinfo is None:
            raise ValidationException(
                "start_time and end_time must include a timezone offset",
                code="NAIVE_DATETIME",
            )
        if start >= end:
            raise BusinessRuleException(
                "End time must be after start time",
                code="INVALID_INTERVAL",
                details={"start_time": start.isoformat(), "end_time": end.isoformat()},
            )
        if start < self._clock():
            raise BusinessRuleException(
                "Cannot book a time slot in the past",
                code="BOOKING_IN_PAST",
                details={"start_time": start.isoformat()},
            )

    def _lock_resource(self, resource_id: str) -> Resource:
        resource = self.resource_repository.lock_for_update(resource_id)
        if not resource:
            raise NotFoundException("Resource not found", code="RESOURCE_NOT_FOUND")
        return resource

    def _load_for_actor(self, reservation_id: str, actor_id: str, is_admin: bool) -> Reservation:
        """Someone else's reservation is reported exactly like a missing one."""
        reservation = self.reservation_repository.get_for_actor(
            reservation_id, None if is_admin else actor_id
        )
        if not reservation:
            raise NotFoundException("Reservation not found", code="RESERVATION_NOT_FOUND")
        return reservation

    # Concurrency error translation

    @staticmethod
    def _is_deadlock_error(exc: DBAPIError) -> bool:
        if _pgcode(exc) in (_DEADLOCK_DETECTED, _SERIALIZATION_FAILURE):
            return True
        message = str(exc).lower()
        return any(marker in message for marker in _LOCK_FAILURE_MESSAGES)

    @staticmethod
    def _is_overlap_violation(exc: IntegrityError) -> bool:
        if _pgcode(exc) == _EXCLUSION_VIOLATION:
            return True
        orig = getattr(exc, "orig", None)
        diag = getattr(orig, "diag", None)
        constraint_name = getattr(diag, "constraint_name", "") if diag is not None else ""
        if not constraint_name and orig is not None:
            constraint_name = str(orig)
        return NO_OVERLAP_CONSTRAINT in (constraint_name or "")

    def _raise_conflict_from_write_error(
        self,
        exc: Exception,
        resource_id: str,
        start: datetime,
        end: datetime,
    ) -> None:
        """
        Re-raise storage-level race losses as BookingConflictException.

        Anything that is not a lost race propagates unchanged.
        """
        for cause in _iter_causes(exc):
            lost_race = (isinstance(cause, IntegrityError) and self._is_overlap_violation(cause)) or (
                isinstance(cause, DBAPIError) and self._is_deadlock_error(cause)
            )
            if lost_race:
                prometheus_metrics.inc_booking_conflict("constraint")
                self.logger.warning(
                    f"Concurrent write on resource {resource_id} rejected by the database: {cause}"
                )
                raise BookingConflictException(
                    GENERIC_CONFLICT_MESSAGE,
                    details={
                        "resource_id": resource_id,
                        "requested": {"start_time": start.isoformat(), "end_time": end.isoformat()},
                        "conflicts": [],
                    },
                ) from exc
        raise exc

    # Post-commit side effects

    def _publish(self, event: Any) -> None:
        """Hand an event to the background worker; enqueue failures are logged only."""
        try:
            self.event_publisher.publish(event)
        except Exception as e:
            self.logger.error(f"Failed to enqueue {type(event).__name__}: {str(e)}")

    # Write path

    @BaseService.measure_operation("create_reservation")
    def create_reservation(
        self,
        user_id: str,
        resource_id: str,
        start_time: datetime,
        end_time: datetime,
        notes: Optional[str] = None,
    ) -> Reservation:
        """
        Create a reservation after an authoritative availability check.

        Args:
            user_id: Owner of the new reservation
            resource_id: Resource to book
            start_time: Inclusive start (timezone-aware)
            end_time: Exclusive end (timezone-aware)
            notes: Optional free text

        Returns:
            The committed reservation, status active

        Raises:
            ValidationException: Naive datetimes
            BusinessRuleException: Invalid interval, past start, resource
                not bookable, or availability rules violated
            NotFoundException: Resource does not exist
            BookingConflictException: Slot already taken
        """
        self._validate_interval(start_time, end_time)

        try:
            with self.transaction():
                resource = self._lock_resource(resource_id)
                self.availability_service.assert_available(
                    resource_id, start_time, end_time, resource=resource
                )
                reservation = self.reservation_repository.create(
                    resource_id=resource_id,
                    user_id=user_id,
                    start_time=start_time,
                    end_time=end_time,
                    status=self.lifecycle.initial_status,
                    notes=notes,
                )
        except (RepositoryException, ServiceException) as exc:
            self._raise_conflict_from_write_error(exc, resource_id, start_time, end_time)

        self.log_operation(
            "reservation_created",
            reservation_id=reservation.id,
            resource_id=resource_id,
            user_id=user_id,
        )
        self._publish(
            ReservationCreated(
                reservation_id=reservation.id,
                user_id=user_id,
                resource_id=resource_id,
                created_at=reservation.created_at or utcnow(),
            )
        )
        return reservation

    @BaseService.measure_operation("update_reservation")
    def update_reservation(
        self,
        reservation_id: str,
        actor_id: str,
        is_admin: bool,
        patch: Mapping[str, Any],
    ) -> Reservation:
        """
        Partially update a reservation owned by the actor (or any, for admins).

        Only keys present in `patch` are applied. Moving the reservation in
        time or to another resource re-validates the new interval against
        the target resource, ignoring the reservation itself. Status is
        left unchanged.

        Raises:
            NotFoundException: Missing or not visible to the actor
            BusinessRuleException: Reservation cancelled/passed, or the new
                interval is invalid or violates the target's rules
            BookingConflictException: New interval overlaps another reservation
        """
        changes = dict(patch)
        self.sweeper.sweep(self._clock())
        reservation = self._load_for_actor(reservation_id, actor_id, is_admin)
        self.lifecycle.ensure_mutable(reservation)

        new_resource_id = changes.get("resource_id", reservation.resource_id)
        new_start = changes.get("start_time", reservation.start_time)
        new_end = changes.get("end_time", reservation.end_time)
        moves = (
            new_resource_id != reservation.resource_id
            or new_start != reservation.start_time
            or new_end != reservation.end_time
        )
        if moves:
            self._validate_interval(new_start, new_end)

        try:
            with self.transaction():
                if moves:
                    resource = self._lock_resource(new_resource_id)
                    self.availability_service.assert_available(
                        new_resource_id,
                        new_start,
                        new_end,
                        exclude_reservation_id=reservation.id,
                        resource=resource,
                    )
                changed = self.lifecycle.apply_update(reservation, changes)
                if changed:
                    self.reservation_repository.flush()
        except (RepositoryException, ServiceException) as exc:
            self._raise_conflict_from_write_error(exc, new_resource_id, new_start, new_end)

        if not changed:
            return reservation

        self.log_operation(
            "reservation_updated",
            reservation_id=reservation.id,
            actor_id=actor_id,
            fields=sorted(changed),
        )
        self._publish(
            ReservationUpdated(
                reservation_id=reservation.id,
                updated_by=actor_id,
                updated_at=reservation.updated_at or utcnow(),
                changed_fields=sorted(changed),
            )
        )
        return reservation

    @BaseService.measure_operation("cancel_reservation")
    def cancel_reservation(self, reservation_id: str, actor_id: str, is_admin: bool) -> Reservation:
        """
        Raises:
            NotFoundException: Missing or not visible to the actor
            ReservationNotActiveException: Already cancelled or passed
        """
        self.sweeper.sweep(self._clock())
        reservation = self._load_for_actor(reservation_id, actor_id, is_admin)

        with self.transaction():
            self.lifecycle.cancel(reservation)

        self.log_operation("reservation_cancelled", reservation_id=reservation.id, actor_id=actor_id)
        self._publish(
            ReservationCancelled(
                reservation_id=reservation.id,
                cancelled_by=actor_id,
                cancelled_at=reservation.updated_at or utcnow(),
            )
        )
        return reservation

    @BaseService.measure_operation("delete_reservation")
    def delete_reservation(self, reservation_id: str) -> None:
        """Hard delete (admin only). Raises NotFoundException if absent."""
        with self.transaction():
            deleted = self.reservation_repository.delete(reservation_id)
            if not deleted:
                raise NotFoundException("Reservation not found", code="RESERVATION_NOT_FOUND")
        self.log_operation("reservation_deleted", reservation_id=reservation_id)

    # Read path

    @BaseService.measure_operation("get_reservation")
    def get_reservation(self, reservation_id: str, actor_id: str, is_admin: bool) -> Reservation:
        self.sweeper.sweep(self._clock())
        return self._load_for_actor(reservation_id, actor_id, is_admin)

    @BaseService.measure_operation("list_reservations")
    def list_reservations(self, filters: ReservationFilters) -> List[Reservation]:
        """List reservations after sweeping; the limit is clamped to the configured maximum."""
        self.sweeper.sweep(self._clock())
        limit = min(max(filters.limit, 1), settings.reservation_list_max_limit)
        offset = max(filters.offset, 0)
        if (limit, offset) != (filters.limit, filters.offset):
            filters = ReservationFilters(
                user_id=filters.user_id,
                resource_id=filters.resource_id,
                status=filters.status,
                start_date=filters.start_date,
                end_date=filters.end_date,
                limit=limit,
                offset=offset,
            )
        return self.reservation_repository.list_reservations(filters)

    @BaseService.measure_operation("get_user_history")
    def get_user_history(self, user_id: str, include_active: bool = True) -> List[Reservation]:
        self.sweeper.sweep(self._clock())
        return self.reservation_repository.get_user_history(user_id, include_active=include_active)

