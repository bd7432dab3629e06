# backend/roombook/repositories/statistics_repository.py
"""
Aggregate queries for the admin dashboard.

Read-only; every method returns plain Python structures.
"""

import logging
from typing import Any, Dict, List

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.email_notification import EmailNotification
from ..models.reservation import Reservation
from ..models.resource import Resource
from ..models.user import User

logger = logging.getLogger(__name__)


class StatisticsRepository:
    """Counts grouped by status plus top-N rankings."""

    def __init__(self, db: Session):
        self.db = db
        self.logger = logging.getLogger(__name__)

    def _counts_by(self, column: Any) -> Dict[str, int]:
        try:
            rows = self.db.query(column, func.count()).group_by(column).all()
            return {str(key): int(count) for key, count in rows}
        except SQLAlchemyError as e:
            self.logger.error(f"Error counting by {column}: {str(e)}")
            raise RepositoryException(f"Failed to aggregate statistics: {str(e)}")

    def resource_counts_by_status(self) -> Dict[str, int]:
        return self._counts_by(Resource.status)

    def reservation_counts_by_status(self) -> Dict[str, int]:
        return self._counts_by(Reservation.status)

    def email_counts_by_status(self) -> Dict[str, int]:
        return self._counts_by(EmailNotification.status)

    def user_total(self) -> int:
        return int(self.db.query(func.count(User.id)).scalar() or 0)

    def top_resources(self, limit: int) -> List[Dict[str, Any]]:
        try:
            rows = (
                self.db.query(Resource.id, Resource.name, func.count(Reservation.id).label("total"))
                .join(Reservation, Reservation.resource_id == Resource.id)
                .group_by(Resource.id, Resource.name)
                .order_by(func.count(Reservation.id).desc(), Resource.name)
                .limit(limit)
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error ranking resources: {str(e)}")
            raise RepositoryException(f"Failed to rank resources: {str(e)}")
        return [{"id": r.id, "name": r.name, "reservation_count": int(r.total)} for r in rows]

    def top_users(self, limit: int) -> List[Dict[str, Any]]:
        try:
            rows = (
                self.db.query(
                    User.id, User.email, User.full_name, func.count(Reservation.id).label("total")
                )
                .join(Reservation, Reservation.user_id == User.id)
                .group_by(User.id, User.email, User.full_name)
                .order_by(func.count(Reservation.id).desc(), User.email)
                .limit(limit)
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error ranking users: {str(e)}")
            raise RepositoryException(f"Failed to rank users: {str(e)}")
        return [
            {"id": r.id, "email": r.email, "full_name": r.full_name, "reservation_count": int(r.total)}
            for r in rows
        ]
