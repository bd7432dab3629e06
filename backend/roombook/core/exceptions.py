# backend/roombook/core/exceptions.py
"""
Domain-specific exceptions for the Roombook platform.

Every domain error belongs to exactly one ErrorKind. The API layer maps the
kind (never the class name) to an HTTP status, so adding a kind without a
status mapping fails at import time.
"""

from enum import Enum
from typing import Any, Dict, Optional

from fastapi import HTTPException, status

HTTP_422_UNPROCESSABLE: int = getattr(status, "HTTP_422_UNPROCESSABLE_CONTENT", 422)


class ErrorKind(str, Enum):
    """Closed set of error categories surfaced to callers."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    BUSINESS = "business"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    INTERNAL = "internal"


ERROR_KIND_STATUS: Dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.BUSINESS: HTTP_422_UNPROCESSABLE,
    ErrorKind.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

_missing_kinds = set(ErrorKind) - set(ERROR_KIND_STATUS)
if _missing_kinds:  # pragma: no cover - guards future edits
    raise RuntimeError(f"ErrorKind without HTTP status: {sorted(k.value for k in _missing_kinds)}")


def status_for_kind(kind: ErrorKind) -> int:
    """Return the HTTP status code for an error kind."""
    return ERROR_KIND_STATUS[kind]


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return status_for_kind(self.kind)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "code": self.code,
            "kind": self.kind.value,
            "details": self.details,
        }

    def to_http_exception(self) -> HTTPException:
        """Convert to an HTTPException using the kind's status code."""
        return HTTPException(status_code=self.status_code, detail=self.to_dict())


class ValidationException(DomainException):
    """Raised when input is malformed or rules data is inconsistent."""

    kind = ErrorKind.VALIDATION


class NotFoundException(DomainException):
    """Raised when a requested entity is not found or not visible to the caller."""

    kind = ErrorKind.NOT_FOUND


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    kind = ErrorKind.CONFLICT


class BusinessRuleException(DomainException):
    """Raised when a business rule is violated."""

    kind = ErrorKind.BUSINESS


class UnauthorizedException(DomainException):
    """Raised when the caller is not authenticated."""

    kind = ErrorKind.UNAUTHORIZED


class ForbiddenException(DomainException):
    """Raised when the caller lacks permission for an action."""

    kind = ErrorKind.FORBIDDEN


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    kind = ErrorKind.INTERNAL


# Specific business exceptions


class BookingConflictException(ConflictException):
    """Raised when a reservation overlaps an existing occupying reservation."""

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message or "This time slot conflicts with an existing reservation",
            code="BOOKING_CONFLICT",
            details=details or {},
        )


class ReservationNotActiveException(BusinessRuleException):
    """Raised when mutating a reservation that is cancelled or passed."""

    def __init__(self, reservation_id: str, current_status: str):
        super().__init__(
            message=f"Reservation is not active (current status: {current_status})",
            code="RESERVATION_NOT_ACTIVE",
            details={"reservation_id": reservation_id, "status": current_status},
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    Used when data access operations fail, such as connection issues,
    query failures, or constraint violations.
    """
