# backend/roombook/repositories/factory.py
"""
Repository Factory for the Roombook platform.

Provides centralized creation of repository instances,
ensuring consistent initialization and dependency injection.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

# Avoid circular imports
if TYPE_CHECKING:
    from .email_notification_repository import EmailNotificationRepository
    from .reservation_repository import ReservationRepository
    from .resource_repository import ResourceRepository
    from .statistics_repository import StatisticsRepository
    from .user_repository import UserRepository


class RepositoryFactory:
    """
    Factory class for creating repository instances.

    Centralizes repository creation so services and tests can swap
    implementations in one place.
    """

    @staticmethod
    def create_resource_repository(db: Session) -> "ResourceRepository":
        from .resource_repository import ResourceRepository

        return ResourceRepository(db)

    @staticmethod
    def create_reservation_repository(db: Session) -> "ReservationRepository":
        from .reservation_repository import ReservationRepository

        return ReservationRepository(db)

    @staticmethod
    def create_user_repository(db: Session) -> "UserRepository":
        from .user_repository import UserRepository

        return UserRepository(db)

    @staticmethod
    def create_email_notification_repository(db: Session) -> "EmailNotificationRepository":
        from .email_notification_repository import EmailNotificationRepository

        return EmailNotificationRepository(db)

    @staticmethod
    def create_statistics_repository(db: Session) -> "StatisticsRepository":
        from .statistics_repository import StatisticsRepository

        return StatisticsRepository(db)
