"""
Storage-level race handling in BookingService.

Two writers that both pass the pre-check are serialized by the resource
row lock; when the database still rejects the loser (exclusion constraint,
deadlock, serialization failure) the caller gets the same conflict error
the pre-check would have raised.
"""

from types import SimpleNamespace
from unittest.mock import Mock

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from roombook.core.exceptions import BookingConflictException, RepositoryException, ServiceException
from roombook.models.reservation import NO_OVERLAP_CONSTRAINT
from roombook.services.availability_service import AvailabilityService
from roombook.services.booking_service import GENERIC_CONFLICT_MESSAGE, BookingService

from _utils import FIXED_NOW, utc


class FakePgError(Exception):
    def __init__(self, message, pgcode=None):
        super().__init__(message)
        self.pgcode = pgcode


def _repository_error(orig):
    try:
        raise IntegrityError("INSERT INTO reservations", {}, orig)
    except IntegrityError as exc:
        try:
            raise RepositoryException(f"Integrity constraint violated: {exc}") from exc
        except RepositoryException as wrapped:
            return wrapped


@pytest.fixture
def reservation_repository():
    return Mock()


@pytest.fixture
def service(reservation_repository):
    resource_repository = Mock()
    resource_repository.lock_for_update.return_value = SimpleNamespace(id="room-1", is_bookable=True)
    return BookingService(
        Mock(),
        availability_service=Mock(spec=AvailabilityService),
        reservation_repository=reservation_repository,
        resource_repository=resource_repository,
        sweeper=Mock(),
        event_publisher=Mock(),
        clock=lambda: FIXED_NOW,
    )


def _create(service):
    return service.create_reservation("user-1", "room-1", utc(2030, 1, 7, 9), utc(2030, 1, 7, 10))


def test_exclusion_violation_becomes_conflict(service, reservation_repository):
    reservation_repository.create.side_effect = _repository_error(
        FakePgError("conflicting key value violates exclusion constraint", "23P01")
    )

    with pytest.raises(BookingConflictException) as exc_info:
        _create(service)

    assert exc_info.value.message == GENERIC_CONFLICT_MESSAGE
    assert exc_info.value.details["resource_id"] == "room-1"
    service.db.rollback.assert_called_once()


def test_constraint_name_match_becomes_conflict(service, reservation_repository):
    reservation_repository.create.side_effect = _repository_error(
        FakePgError(f'violates exclusion constraint "{NO_OVERLAP_CONSTRAINT}"')
    )

    with pytest.raises(BookingConflictException):
        _create(service)


@pytest.mark.parametrize(
    "orig",
    [
        FakePgError("deadlock detected", "40P01"),
        FakePgError("could not serialize access due to concurrent update", "40001"),
        FakePgError("deadlock detected"),
        FakePgError("database is locked"),
    ],
)
def test_lost_race_at_commit_becomes_conflict(service, reservation_repository, orig):
    reservation_repository.create.return_value = SimpleNamespace(id="r1", created_at=FIXED_NOW)
    service.db.commit.side_effect = OperationalError("COMMIT", {}, orig)

    with pytest.raises(BookingConflictException):
        _create(service)


def test_unrelated_integrity_error_propagates(service, reservation_repository):
    error = _repository_error(FakePgError("violates foreign key constraint", "23503"))
    reservation_repository.create.side_effect = error

    with pytest.raises(RepositoryException) as exc_info:
        _create(service)
    assert exc_info.value is error


def test_other_commit_failures_stay_internal(service, reservation_repository):
    reservation_repository.create.return_value = SimpleNamespace(id="r1", created_at=FIXED_NOW)
    service.db.commit.side_effect = OperationalError("COMMIT", {}, FakePgError("server closed the connection"))

    with pytest.raises(ServiceException):
        _create(service)


def test_lock_is_taken_before_the_availability_check(service, reservation_repository):
    calls = []
    service.resource_repository.lock_for_update.side_effect = lambda rid: calls.append("lock") or SimpleNamespace(
        id=rid, is_bookable=True
    )
    service.availability_service.assert_available.side_effect = lambda *a, **kw: calls.append("check")
    reservation_repository.create.side_effect = lambda **kw: calls.append("write") or SimpleNamespace(
        id="r1", created_at=FIXED_NOW
    )

    _create(service)

    assert calls == ["lock", "check", "write"]
    service.db.commit.assert_called_once()
