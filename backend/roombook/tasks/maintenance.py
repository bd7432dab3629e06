# backend/roombook/tasks/maintenance.py
"""Periodic reservation maintenance run by Celery beat."""

from typing import Any, Dict

from celery.utils.log import get_task_logger

from roombook.database import SessionLocal
from roombook.services.passed_reservation_sweeper import PassedReservationSweeper
from roombook.services.reminder_service import ReminderService
from roombook.tasks.celery_app import BaseTask, celery_app

logger = get_task_logger(__name__)


@celery_app.task(
    base=BaseTask,
    name="roombook.tasks.maintenance.sweep_passed_reservations",
    bind=True,
    max_retries=3,
)
def sweep_passed_reservations(self: Any) -> Dict[str, int]:
    """Mark elapsed reservations as passed."""
    db = SessionLocal()
    try:
        count = PassedReservationSweeper(db).sweep()
        return {"passed": count}
    except Exception as exc:
        logger.error(f"Passed-reservation sweep failed: {exc}")
        raise self.retry(exc=exc, countdown=60 * (2**self.request.retries))
    finally:
        db.close()


@celery_app.task(
    base=BaseTask,
    name="roombook.tasks.maintenance.send_reminders",
    bind=True,
    max_retries=3,
)
def send_reminders(self: Any) -> Dict[str, int]:
    """Publish reminder events for reservations starting in about 1h or 24h."""
    db = SessionLocal()
    try:
        published = ReminderService(db).send_due_reminders()
        return {"published": published}
    except Exception as exc:
        logger.error(f"Reminder run failed: {exc}")
        raise self.retry(exc=exc, countdown=60 * (2**self.request.retries))
    finally:
        db.close()
