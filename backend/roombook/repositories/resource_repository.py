# backend/roombook/repositories/resource_repository.py
"""
Resource Repository for the Roombook platform.

Data access for bookable resources, including the row lock that
serializes concurrent reservation writes on the same resource.
"""

from datetime import datetime
import logging
from typing import List, Optional, cast

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.reservation import OCCUPYING_STATUSES, Reservation
from ..models.resource import Resource
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ResourceRepository(BaseRepository[Resource]):
    """Repository for resource data access."""

    def __init__(self, db: Session):
        super().__init__(db, Resource)

    def get_by_name(self, name: str) -> Optional[Resource]:
        """Case-insensitive lookup by name."""
        try:
            return cast(
                Optional[Resource],
                self.db.query(Resource).filter(func.lower(Resource.name) == name.strip().lower()).first(),
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting resource by name {name}: {str(e)}")
            raise RepositoryException(f"Failed to get resource by name: {str(e)}")

    def name_taken(self, name: str, exclude_id: Optional[str] = None) -> bool:
        existing = self.get_by_name(name)
        if existing is None:
            return False
        return existing.id != exclude_id

    def list_resources(
        self,
        status: Optional[str] = None,
        location: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Resource]:
        """List resources ordered by name, optionally filtered."""
        query = self._build_query()
        if status:
            query = query.filter(Resource.status == status)
        if location:
            query = query.filter(Resource.location.ilike(f"%{location}%"))
        query = query.order_by(Resource.name).offset(skip).limit(limit)
        return self._execute_query(query)

    def lock_for_update(self, resource_id: str) -> Optional[Resource]:
        """
        Load a resource holding a row lock until the transaction ends.

        Every reservation write on the resource takes this lock before its
        conflict check, so overlapping writers are serialized by the database.
        SQLite ignores FOR UPDATE. Engines from build_engine open every
        SQLite transaction with BEGIN IMMEDIATE, so the database write lock
        is already held when this runs.
        """
        try:
            return cast(
                Optional[Resource],
                self.db.query(Resource)
                .filter(Resource.id == resource_id)
                .with_for_update()
                .populate_existing()
                .first(),
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error locking resource {resource_id}: {str(e)}")
            raise RepositoryException(f"Failed to lock resource: {str(e)}") from e

    def has_future_occupying_reservations(self, resource_id: str, now: datetime) -> bool:
        try:
            return (
                self.db.query(Reservation.id)
                .filter(
                    Reservation.resource_id == resource_id,
                    Reservation.status.in_(OCCUPYING_STATUSES),
                    Reservation.end_time > now,
                )
                .first()
                is not None
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error checking reservations for resource {resource_id}: {str(e)}")
            raise RepositoryException(f"Failed to check resource reservations: {str(e)}")
