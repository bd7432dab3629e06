# backend/roombook/services/passed_reservation_sweeper.py
"""
Passed Reservation Sweeper

Moves every occupying reservation whose end time has elapsed to the
terminal `passed` status in one UPDATE. Invoked before reservation reads
and by the periodic maintenance job; running it twice in a row changes
nothing the second time.
"""

from datetime import datetime
import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..models.types import utcnow
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories import RepositoryFactory
from ..repositories.reservation_repository import ReservationRepository
from .base import BaseService

logger = logging.getLogger(__name__)


class PassedReservationSweeper(BaseService):
    def __init__(self, db: Session, repository: Optional[ReservationRepository] = None):
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_reservation_repository(db)

    @BaseService.measure_operation("sweep_passed_reservations")
    def sweep(self, now: Optional[datetime] = None) -> int:
        """
        Mark elapsed active/modified reservations as passed and commit.

        Args:
            now: Reference instant (defaults to the current UTC time)

        Returns:
            Number of reservations transitioned
        """
        now = now or utcnow()
        with self.transaction():
            count = self.repository.bulk_mark_passed(now)
        if count:
            self.log_operation("sweep_passed_reservations", count=count)
            prometheus_metrics.inc_reservations_swept(count)
        return count
