# backend/roombook/models/resource.py
"""
Resource model for the Roombook platform.

A resource is a bookable entity (typically a room). Its availability rules
are stored as a JSON document and interpreted by
services.availability_rules.AvailabilityRules.
"""

from enum import Enum
import logging
from typing import Any

from sqlalchemy import JSON, CheckConstraint, Column, Integer, String, Text
from sqlalchemy.orm import relationship
import ulid

from ..database import Base
from .types import UTCDateTime, utcnow

logger = logging.getLogger(__name__)


class ResourceStatus(str, Enum):
    """Operational status of a resource."""

    AVAILABLE = "available"
    MAINTENANCE = "maintenance"
    UNAVAILABLE = "unavailable"


class Resource(Base):
    """Bookable room or equipment with recurring availability rules."""

    __tablename__ = "resources"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    name = Column(String(255), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)
    capacity = Column(Integer, nullable=True)
    location = Column(String(255), nullable=True, index=True)
    image_url = Column(String(500), nullable=True)
    status = Column(String(20), nullable=False, default=ResourceStatus.AVAILABLE.value, index=True)
    availability_rules = Column(JSON, nullable=False, default=dict)

    created_at = Column(UTCDateTime(), nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime(), nullable=False, default=utcnow, onupdate=utcnow)

    reservations = relationship("Reservation", back_populates="resource", passive_deletes=True)

    __table_args__ = (
        CheckConstraint(
            "status IN ('available', 'maintenance', 'unavailable')",
            name="ck_resources_status",
        ),
        CheckConstraint("capacity IS NULL OR capacity > 0", name="ck_resources_capacity_positive"),
    )

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        if self.status is None:
            self.status = ResourceStatus.AVAILABLE.value
        if self.availability_rules is None:
            self.availability_rules = {}

    @property
    def is_bookable(self) -> bool:
        return self.status == ResourceStatus.AVAILABLE.value

    def __repr__(self) -> str:
        return f"<Resource {self.name} ({self.status})>"
