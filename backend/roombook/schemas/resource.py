# backend/roombook/schemas/resource.py
"""
Resource schemas for the Roombook platform.

Availability rules are validated structurally here (types, ranges); the
cross-field invariants live in AvailabilityRules.validate so they also
apply to rules merged by partial updates.
"""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field, field_validator

from ..core.constants import HOURS_PER_DAY, MAX_DAY_OF_WEEK, MAX_RESOURCE_NAME_LENGTH, MIN_DAY_OF_WEEK
from ._strict_base import StrictModel, StrictRequestModel

ResourceStatusLiteral = Literal["available", "maintenance", "unavailable"]


class TimeRangeSchema(StrictRequestModel):
    start: float = Field(..., ge=0, le=HOURS_PER_DAY, description="Opening hour, e.g. 9.5 for 09:30")
    end: float = Field(..., ge=0, le=HOURS_PER_DAY, description="Closing hour")


class AvailabilityRulesSchema(StrictRequestModel):
    """Weekly schedule; every field is optional and absent means unrestricted."""

    days_of_week: Optional[List[int]] = Field(None, description="0 = Sunday ... 6 = Saturday")
    time_ranges: Optional[List[TimeRangeSchema]] = None
    min_duration_minutes: Optional[int] = Field(None, ge=0)
    max_duration_minutes: Optional[int] = Field(None, ge=0)

    @field_validator("days_of_week")
    @classmethod
    def _check_days(cls, v: Optional[List[int]]) -> Optional[List[int]]:
        if v is None:
            return v
        for day in v:
            if day < MIN_DAY_OF_WEEK or day > MAX_DAY_OF_WEEK:
                raise ValueError("days_of_week values must be between 0 and 6")
        return sorted(set(v))


class ResourceCreate(StrictRequestModel):
    name: str = Field(..., min_length=1, max_length=MAX_RESOURCE_NAME_LENGTH)
    description: Optional[str] = None
    capacity: Optional[int] = Field(None, gt=0)
    location: Optional[str] = Field(None, max_length=255)
    image_url: Optional[str] = Field(None, max_length=500)
    status: ResourceStatusLiteral = "available"
    availability_rules: AvailabilityRulesSchema = Field(default_factory=AvailabilityRulesSchema)


class ResourceUpdate(StrictRequestModel):
    """Partial update; only fields present in the request body are applied."""

    name: Optional[str] = Field(None, min_length=1, max_length=MAX_RESOURCE_NAME_LENGTH)
    description: Optional[str] = None
    capacity: Optional[int] = Field(None, gt=0)
    location: Optional[str] = Field(None, max_length=255)
    image_url: Optional[str] = Field(None, max_length=500)
    status: Optional[ResourceStatusLiteral] = None
    availability_rules: Optional[AvailabilityRulesSchema] = None

    def to_patch(self) -> Dict[str, Any]:
        patch = self.model_dump(exclude_unset=True)
        if "availability_rules" in patch and self.availability_rules is not None:
            # Only keys the client sent take part in the merge
            patch["availability_rules"] = self.availability_rules.model_dump(exclude_unset=True)
        return patch


class ResourceResponse(StrictModel):
    id: str
    name: str
    description: Optional[str] = None
    capacity: Optional[int] = None
    location: Optional[str] = None
    image_url: Optional[str] = None
    status: str
    availability_rules: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
    updated_at: datetime


class ConflictInterval(StrictModel):
    reservation_id: str
    start_time: str
    end_time: str


class AvailabilityResponse(StrictModel):
    resource_id: str
    start: datetime
    end: datetime
    available: bool
    reason: Optional[str] = None
    message: Optional[str] = None
    rule: Optional[str] = None
    conflicts: List[ConflictInterval] = Field(default_factory=list)
