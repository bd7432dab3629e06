# backend/roombook/api/dependencies/__init__.py
"""
Central export point for all dependencies.
"""

from .auth import Principal, get_current_user, get_principal, require_admin
from .database import get_db
from .services import (
    get_booking_service,
    get_event_publisher,
    get_reminder_service,
    get_resource_service,
    get_statistics_service,
    get_sweeper,
)

__all__ = [
    # Auth
    "Principal",
    "get_current_user",
    "get_principal",
    "require_admin",
    # Database
    "get_db",
    # Services
    "get_booking_service",
    "get_event_publisher",
    "get_reminder_service",
    "get_resource_service",
    "get_statistics_service",
    "get_sweeper",
]
