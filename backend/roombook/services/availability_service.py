# backend/roombook/services/availability_service.py
"""
Availability Service for the Roombook platform

Composes the three checks that decide whether an interval can be booked:

1. the resource is in the `available` status
2. the interval satisfies the resource's availability rules
3. no occupying reservation overlaps the interval

The first failure short-circuits. Called standalone (UI availability
queries) the answer is advisory; BookingService re-runs it inside the
write transaction with the resource row locked.
"""

from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from enum import Enum
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import BookingConflictException, BusinessRuleException, NotFoundException
from ..models.reservation import Reservation
from ..models.resource import Resource
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories import RepositoryFactory
from ..repositories.resource_repository import ResourceRepository
from .availability_rules import AvailabilityRules, RuleViolation
from .base import BaseService
from .conflict_checker import ConflictChecker

logger = logging.getLogger(__name__)


class UnavailabilityReason(str, Enum):
    RESOURCE_UNAVAILABLE = "resource_unavailable"
    RULES_VIOLATED = "rules_violated"
    CONFLICT = "conflict"


@dataclass
class AvailabilityDecision:
    available: bool
    reason: Optional[UnavailabilityReason] = None
    message: Optional[str] = None
    violation: Optional[RuleViolation] = None
    conflicts: List[Reservation] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "available": self.available,
            "reason": self.reason.value if self.reason else None,
            "message": self.message,
            "rule": self.violation.kind.value if self.violation else None,
            "conflicts": ConflictChecker.describe_conflicts(self.conflicts),
        }


class AvailabilityService(BaseService):
    """Single availability decision used by reads and by the booking write path."""

    def __init__(
        self,
        db: Session,
        conflict_checker: Optional[ConflictChecker] = None,
        resource_repository: Optional[ResourceRepository] = None,
        tz: Optional[tzinfo] = None,
    ):
        super().__init__(db)
        self.conflict_checker = conflict_checker or ConflictChecker(db)
        self.resource_repository = resource_repository or RepositoryFactory.create_resource_repository(db)
        self.tz = tz or settings.booking_tz

    def _load_resource(self, resource_id: str) -> Resource:
        resource = self.resource_repository.get_by_id(resource_id)
        if not resource:
            raise NotFoundException("Resource not found", code="RESOURCE_NOT_FOUND")
        return resource

    @BaseService.measure_operation("check_availability")
    def check(
        self,
        resource_id: str,
        start: datetime,
        end: datetime,
        exclude_reservation_id: Optional[str] = None,
        resource: Optional[Resource] = None,
    ) -> AvailabilityDecision:
        """
        Evaluate availability and explain the first failing check.

        Args:
            resource_id: Resource to book
            start: Candidate start (inclusive)
            end: Candidate end (exclusive)
            exclude_reservation_id: Reservation ignored by the conflict check
            resource: Already-loaded (possibly locked) resource row

        Raises:
            NotFoundException: If the resource does not exist
        """
        resource = resource or self._load_resource(resource_id)

        if not resource.is_bookable:
            return AvailabilityDecision(
                available=False,
                reason=UnavailabilityReason.RESOURCE_UNAVAILABLE,
                message=f"Resource is not available for booking (status: {resource.status})",
            )

        violation = AvailabilityRules.from_dict(resource.availability_rules).first_violation(
            start, end, self.tz
        )
        if violation:
            return AvailabilityDecision(
                available=False,
                reason=UnavailabilityReason.RULES_VIOLATED,
                message=violation.message,
                violation=violation,
            )

        conflicts = self.conflict_checker.find_conflicts(resource.id, start, end, exclude_reservation_id)
        if conflicts:
            return AvailabilityDecision(
                available=False,
                reason=UnavailabilityReason.CONFLICT,
                message="This time slot is already reserved",
                conflicts=conflicts,
            )

        return AvailabilityDecision(available=True)

    def is_available(
        self,
        resource_id: str,
        start: datetime,
        end: datetime,
        exclude_reservation_id: Optional[str] = None,
    ) -> bool:
        return self.check(resource_id, start, end, exclude_reservation_id).available

    def assert_available(
        self,
        resource_id: str,
        start: datetime,
        end: datetime,
        exclude_reservation_id: Optional[str] = None,
        resource: Optional[Resource] = None,
    ) -> None:
        """
        Raise the typed error matching the first failing check.

        Raises:
            NotFoundException: Resource does not exist
            BusinessRuleException: Resource not bookable or rules violated
            BookingConflictException: Slot overlaps an occupying reservation
        """
        decision = self.check(resource_id, start, end, exclude_reservation_id, resource=resource)
        if decision.available:
            return

        if decision.reason == UnavailabilityReason.RESOURCE_UNAVAILABLE:
            raise BusinessRuleException(
                decision.message or "Resource is not available",
                code="RESOURCE_UNAVAILABLE",
                details={"resource_id": resource_id},
            )
        if decision.reason == UnavailabilityReason.RULES_VIOLATED:
            raise BusinessRuleException(
                decision.message or "Reservation violates availability rules",
                code="RULES_VIOLATED",
                details={
                    "resource_id": resource_id,
                    "rule": decision.violation.kind.value if decision.violation else None,
                },
            )

        prometheus_metrics.inc_booking_conflict("precheck")
        raise BookingConflictException(
            details={
                "resource_id": resource_id,
                "requested": {"start_time": start.isoformat(), "end_time": end.isoformat()},
                "conflicts": ConflictChecker.describe_conflicts(decision.conflicts),
            }
        )
