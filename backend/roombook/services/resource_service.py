# backend/roombook/services/resource_service.py
"""
Resource Service for the Roombook platform

Administrative management of bookable resources plus the read-only
availability query used by the UI.
"""

from datetime import datetime
import logging
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy.orm import Session

from ..core.constants import MAX_RESOURCE_NAME_LENGTH
from ..core.exceptions import (
    BusinessRuleException,
    ConflictException,
    NotFoundException,
    ValidationException,
)
from ..models.resource import Resource, ResourceStatus
from ..models.types import utcnow
from ..repositories import RepositoryFactory
from ..repositories.resource_repository import ResourceRepository
from .availability_rules import AvailabilityRules
from .availability_service import AvailabilityDecision, AvailabilityService
from .base import BaseService

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = frozenset(
    {"name", "description", "capacity", "location", "image_url", "status", "availability_rules"}
)


class ResourceService(BaseService):
    """Create, update, delete and query resources."""

    def __init__(
        self,
        db: Session,
        repository: Optional[ResourceRepository] = None,
        availability_service: Optional[AvailabilityService] = None,
    ):
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_resource_repository(db)
        self.availability_service = availability_service or AvailabilityService(
            db, resource_repository=self.repository
        )

    @staticmethod
    def _clean_name(name: Optional[str]) -> str:
        cleaned = (name or "").strip()
        if not cleaned:
            raise ValidationException("Resource name must not be empty", code="INVALID_RESOURCE_NAME")
        if len(cleaned) > MAX_RESOURCE_NAME_LENGTH:
            raise ValidationException(
                f"Resource name must be at most {MAX_RESOURCE_NAME_LENGTH} characters",
                code="INVALID_RESOURCE_NAME",
            )
        return cleaned

    @staticmethod
    def _check_status(value: Optional[str]) -> str:
        allowed = [s.value for s in ResourceStatus]
        if value not in allowed:
            raise ValidationException(
                f"Invalid resource status: {value}",
                code="INVALID_RESOURCE_STATUS",
                details={"allowed": allowed},
            )
        return value

    def _ensure_name_free(self, name: str, exclude_id: Optional[str] = None) -> None:
        if self.repository.name_taken(name, exclude_id=exclude_id):
            raise ConflictException(
                "A resource with this name already exists",
                code="RESOURCE_NAME_TAKEN",
                details={"name": name},
            )

    def get_resource(self, resource_id: str) -> Resource:
        resource = self.repository.get_by_id(resource_id)
        if not resource:
            raise NotFoundException("Resource not found", code="RESOURCE_NOT_FOUND")
        return resource

    @BaseService.measure_operation("list_resources")
    def list_resources(
        self,
        status: Optional[str] = None,
        location: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Resource]:
        if status is not None:
            self._check_status(status)
        return self.repository.list_resources(status=status, location=location, skip=skip, limit=limit)

    @BaseService.measure_operation("create_resource")
    def create_resource(self, data: Mapping[str, Any]) -> Resource:
        """
        Create a resource.

        Raises:
            ValidationException: Empty/oversized name, bad status, or invalid rules
            ConflictException: Name already used (case-insensitive)
        """
        name = self._clean_name(data.get("name"))
        status = self._check_status(data.get("status") or ResourceStatus.AVAILABLE.value)
        rules = AvailabilityRules.from_dict(data.get("availability_rules")).validate()

        with self.transaction():
            self._ensure_name_free(name)
            resource = self.repository.create(
                name=name,
                description=data.get("description"),
                capacity=data.get("capacity"),
                location=data.get("location"),
                image_url=data.get("image_url"),
                status=status,
                availability_rules=rules.to_dict(),
            )

        self.log_operation("resource_created", resource_id=resource.id, resource_name=name)
        return resource

    @BaseService.measure_operation("update_resource")
    def update_resource(self, resource_id: str, patch: Mapping[str, Any]) -> Resource:
        """
        Partially update a resource.

        availability_rules in the patch are merged key by key into the stored
        rules; a key set to null is removed.
        """
        unknown = set(patch) - _UPDATABLE_FIELDS
        if unknown:
            raise ValidationException(
                f"Fields cannot be updated: {', '.join(sorted(unknown))}",
                code="INVALID_UPDATE_FIELDS",
            )

        resource = self.get_resource(resource_id)
        if not patch:
            return resource

        changes: Dict[str, Any] = {}
        for key, value in patch.items():
            if key == "name":
                changes["name"] = self._clean_name(value)
            elif key == "status":
                changes["status"] = self._check_status(value)
            elif key == "availability_rules":
                merged = AvailabilityRules.from_dict(resource.availability_rules).merge(value).validate()
                changes["availability_rules"] = merged.to_dict()
            else:
                changes[key] = value

        with self.transaction():
            if "name" in changes:
                self._ensure_name_free(changes["name"], exclude_id=resource.id)
            for key, value in changes.items():
                setattr(resource, key, value)
            resource.updated_at = utcnow()
            self.repository.flush()

        self.log_operation("resource_updated", resource_id=resource.id, fields=sorted(changes))
        return resource

    @BaseService.measure_operation("delete_resource")
    def delete_resource(self, resource_id: str) -> None:
        """
        Raises:
            NotFoundException: Resource does not exist
            BusinessRuleException: Resource still has upcoming active reservations
        """
        with self.transaction():
            resource = self.get_resource(resource_id)
            if self.repository.has_future_occupying_reservations(resource.id, utcnow()):
                raise BusinessRuleException(
                    "Cannot delete a resource with active reservations",
                    code="RESOURCE_HAS_RESERVATIONS",
                    details={"resource_id": resource.id},
                )
            self.repository.delete(resource.id)

        self.log_operation("resource_deleted", resource_id=resource_id)

    @BaseService.measure_operation("get_availability")
    def get_availability(self, resource_id: str, start: datetime, end: datetime) -> AvailabilityDecision:
        """
        Advisory availability answer for the UI.

        The booking write path repeats the check under a lock, so a True
        here is not a reservation.
        """
        if start.tzinfo is None or end.tzinfo is None:
            raise ValidationException(
                "start and end must include a timezone offset", code="NAIVE_DATETIME"
            )
        if start >= end:
            raise BusinessRuleException("End time must be after start time", code="INVALID_INTERVAL")
        return self.availability_service.check(resource_id, start, end)
