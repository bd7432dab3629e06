# backend/roombook/services/statistics_service.py
"""Admin dashboard statistics."""

import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from ..core.constants import TOP_STATS_LIMIT
from ..models.email_notification import EmailNotificationStatus
from ..models.reservation import ReservationStatus
from ..models.resource import ResourceStatus
from ..repositories import RepositoryFactory
from ..repositories.statistics_repository import StatisticsRepository
from .base import BaseService

logger = logging.getLogger(__name__)


def _with_zero_counts(counts: Dict[str, int], statuses: Any) -> Dict[str, int]:
    result = {status.value: 0 for status in statuses}
    result.update(counts)
    result["total"] = sum(counts.values())
    return result


class StatisticsService(BaseService):
    def __init__(self, db: Session, repository: Optional[StatisticsRepository] = None):
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_statistics_repository(db)

    @BaseService.measure_operation("get_statistics")
    def get_statistics(self, top_limit: int = TOP_STATS_LIMIT) -> Dict[str, Any]:
        """
        Counts by status for resources, reservations and emails, the user
        total, and the most-booked resources and most active users.
        """
        return {
            "resources": _with_zero_counts(self.repository.resource_counts_by_status(), ResourceStatus),
            "reservations": _with_zero_counts(
                self.repository.reservation_counts_by_status(), ReservationStatus
            ),
            "users": {"total": self.repository.user_total()},
            "emails": _with_zero_counts(
                self.repository.email_counts_by_status(), EmailNotificationStatus
            ),
            "top_resources": self.repository.top_resources(top_limit),
            "top_users": self.repository.top_users(top_limit),
        }
