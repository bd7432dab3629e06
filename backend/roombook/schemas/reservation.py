# backend/roombook/schemas/reservation.py
"""Reservation request and response schemas."""

from datetime import datetime
from typing import Any, Dict, Literal, Optional

from pydantic import AwareDatetime, Field, model_validator

from ._strict_base import StrictModel, StrictRequestModel

ReservationStatusLiteral = Literal["active", "modified", "cancelled", "passed"]

MAX_NOTES_LENGTH = 2000


class ReservationCreate(StrictRequestModel):
    resource_id: str = Field(..., min_length=1)
    start_time: AwareDatetime
    end_time: AwareDatetime
    notes: Optional[str] = Field(None, max_length=MAX_NOTES_LENGTH)


class ReservationUpdate(StrictRequestModel):
    """Partial update; fields left out of the body keep their stored values."""

    resource_id: Optional[str] = Field(None, min_length=1)
    start_time: Optional[AwareDatetime] = None
    end_time: Optional[AwareDatetime] = None
    notes: Optional[str] = Field(None, max_length=MAX_NOTES_LENGTH)

    @model_validator(mode="after")
    def _no_null_times(self) -> "ReservationUpdate":
        for key in ("resource_id", "start_time", "end_time"):
            if key in self.model_fields_set and getattr(self, key) is None:
                raise ValueError(f"{key} cannot be null")
        return self

    def to_patch(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class ReservationResponse(StrictModel):
    id: str
    resource_id: str
    user_id: str
    start_time: datetime
    end_time: datetime
    status: ReservationStatusLiteral
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
