"""Reservation domain events."""
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, List


@dataclass
class ReservationCreated:
    """Fired after a reservation is committed."""

    reservation_id: str
    user_id: str
    resource_id: str
    created_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ReservationUpdated:
    """Fired after a reservation's time, resource, or notes change."""

    reservation_id: str
    updated_by: str
    updated_at: datetime
    changed_fields: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ReservationCancelled:
    """Fired after a reservation is cancelled."""

    reservation_id: str
    cancelled_by: str
    cancelled_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ReservationReminder:
    """Fired when a reminder should be sent ('1hour' or '24hours')."""

    reservation_id: str
    reminder_type: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
