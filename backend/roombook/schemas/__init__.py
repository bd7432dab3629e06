# backend/roombook/schemas/__init__.py
from .admin import StatisticsResponse, SweepResponse
from .reservation import ReservationCreate, ReservationResponse, ReservationUpdate
from .resource import (
    AvailabilityResponse,
    AvailabilityRulesSchema,
    ResourceCreate,
    ResourceResponse,
    ResourceUpdate,
)

__all__ = [
    "AvailabilityResponse",
    "AvailabilityRulesSchema",
    "ReservationCreate",
    "ReservationResponse",
    "ReservationUpdate",
    "ResourceCreate",
    "ResourceResponse",
    "ResourceUpdate",
    "StatisticsResponse",
    "SweepResponse",
]
