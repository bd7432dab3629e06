# backend/roombook/models/reservation.py
"""
Reservation model for the Roombook platform.

A reservation books a half-open interval [start_time, end_time) on one
resource for one user. Status changes are governed by
services.reservation_lifecycle; the helpers here only answer questions
about the current state.
"""

from enum import Enum
import logging
from typing import Any, Tuple

from sqlalchemy import DDL, CheckConstraint, Column, ForeignKey, Index, String, Text, event
from sqlalchemy.orm import relationship
import ulid

from ..database import Base
from .types import UTCDateTime, utcnow

logger = logging.getLogger(__name__)


class ReservationStatus(str, Enum):
    """Reservation lifecycle statuses."""

    ACTIVE = "active"
    MODIFIED = "modified"  # Defined for the schema; updates keep the current status
    CANCELLED = "cancelled"
    PASSED = "passed"


OCCUPYING_STATUSES: Tuple[str, ...] = (
    ReservationStatus.ACTIVE.value,
    ReservationStatus.MODIFIED.value,
)
TERMINAL_STATUSES: Tuple[str, ...] = (
    ReservationStatus.CANCELLED.value,
    ReservationStatus.PASSED.value,
)


class Reservation(Base):
    """Booked interval on a resource."""

    __tablename__ = "reservations"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    resource_id = Column(
        String(26), ForeignKey("resources.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    start_time = Column(UTCDateTime(), nullable=False)
    end_time = Column(UTCDateTime(), nullable=False)
    status = Column(String(20), nullable=False, default=ReservationStatus.ACTIVE.value)
    notes = Column(Text, nullable=True)

    created_at = Column(UTCDateTime(), nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime(), nullable=False, default=utcnow, onupdate=utcnow)

    resource = relationship("Resource", back_populates="reservations")
    user = relationship("User", back_populates="reservations")

    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_reservations_time_order"),
        CheckConstraint(
            "status IN ('active', 'modified', 'cancelled', 'passed')",
            name="ck_reservations_status",
        ),
        Index("ix_reservations_resource_status", "resource_id", "status"),
        Index("ix_reservations_resource_window", "resource_id", "start_time", "end_time"),
        Index("ix_reservations_status_end", "status", "end_time"),
    )

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        if self.status is None:
            self.status = ReservationStatus.ACTIVE.value

    def __repr__(self) -> str:
        return f"<Reservation {self.id} {self.resource_id} {self.start_time}-{self.end_time} ({self.status})>"


NO_OVERLAP_CONSTRAINT = "reservations_no_overlap_per_resource"

# PostgreSQL backstop for the row-lock protocol: overlapping occupying
# reservations on one resource cannot be committed by any writer.
event.listen(
    Reservation.__table__,
    "before_create",
    DDL("CREATE EXTENSION IF NOT EXISTS btree_gist").execute_if(dialect="postgresql"),
)
event.listen(
    Reservation.__table__,
    "after_create",
    DDL(
        f"""
        ALTER TABLE reservations
          ADD CONSTRAINT {NO_OVERLAP_CONSTRAINT}
          EXCLUDE USING gist (
            resource_id WITH =,
            tstzrange(start_time, end_time, '[)') WITH &&
          )
          WHERE (status IN ('active', 'modified'))
        """
    ).execute_if(dialect="postgresql"),
)
