# backend/roombook/repositories/__init__.py
"""
Repository Pattern Implementation for the Roombook platform.

This package provides the repository layer for data access,
separating business logic from database queries.

Key Components:
- BaseRepository: Foundation for all repositories with generic CRUD operations
- IRepository: Interface defining required methods for all repositories
- RepositoryFactory: Factory for creating repository instances
- ResourceRepository: Resources, name uniqueness, and the per-resource write lock
- ReservationRepository: Overlap queries, listings, and the passed-reservation sweep
- EmailNotificationRepository: Notification audit log
- StatisticsRepository: Admin aggregates

Usage:
    from roombook.repositories import RepositoryFactory

    repository = RepositoryFactory.create_reservation_repository(db)
    overlapping = repository.find_overlapping(resource_id, start, end)
"""

from .base_repository import BaseRepository, IRepository
from .email_notification_repository import EmailNotificationRepository
from .factory import RepositoryFactory
from .reservation_repository import ReservationFilters, ReservationRepository
from .resource_repository import ResourceRepository
from .statistics_repository import StatisticsRepository
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "EmailNotificationRepository",
    "IRepository",
    "RepositoryFactory",
    "ReservationFilters",
    "ReservationRepository",
    "ResourceRepository",
    "StatisticsRepository",
    "UserRepository",
]
