import pytest

from roombook.core.exceptions import (
    ERROR_KIND_STATUS,
    BookingConflictException,
    BusinessRuleException,
    DomainException,
    ErrorKind,
    ForbiddenException,
    NotFoundException,
    ReservationNotActiveException,
    ServiceException,
    UnauthorizedException,
    ValidationException,
    status_for_kind,
)


def test_every_kind_has_a_status():
    assert set(ERROR_KIND_STATUS) == set(ErrorKind)


@pytest.mark.parametrize(
    "exc,kind,status_code",
    [
        (ValidationException("bad"), ErrorKind.VALIDATION, 400),
        (UnauthorizedException("who"), ErrorKind.UNAUTHORIZED, 401),
        (ForbiddenException("no"), ErrorKind.FORBIDDEN, 403),
        (NotFoundException("gone"), ErrorKind.NOT_FOUND, 404),
        (BookingConflictException(), ErrorKind.CONFLICT, 409),
        (BusinessRuleException("rule"), ErrorKind.BUSINESS, 422),
        (ReservationNotActiveException("r1", "cancelled"), ErrorKind.BUSINESS, 422),
        (ServiceException("boom"), ErrorKind.INTERNAL, 500),
    ],
)
def test_status_follows_kind(exc, kind, status_code):
    assert exc.kind == kind
    assert exc.status_code == status_code == status_for_kind(kind)


def test_to_http_exception_carries_kind_and_code():
    http_exc = ReservationNotActiveException("r1", "passed").to_http_exception()
    assert http_exc.status_code == 422
    assert http_exc.detail["code"] == "RESERVATION_NOT_ACTIVE"
    assert http_exc.detail["kind"] == "business"
    assert http_exc.detail["details"] == {"reservation_id": "r1", "status": "passed"}


def test_default_code_is_class_name():
    assert DomainException("x").code == "DomainException"
