# backend/roombook/schemas/admin.py
"""Admin dashboard response schemas."""

from typing import Dict, List, Optional

from pydantic import Field

from ._strict_base import StrictModel


class TopResource(StrictModel):
    id: str
    name: str
    reservation_count: int


class TopUser(StrictModel):
    id: str
    email: str
    full_name: Optional[str] = None
    reservation_count: int


class StatisticsResponse(StrictModel):
    resources: Dict[str, int]
    reservations: Dict[str, int]
    users: Dict[str, int]
    emails: Dict[str, int]
    top_resources: List[TopResource] = Field(default_factory=list)
    top_users: List[TopUser] = Field(default_factory=list)


class SweepResponse(StrictModel):
    passed: int
