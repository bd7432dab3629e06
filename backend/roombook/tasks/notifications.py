# backend/roombook/tasks/notifications.py
"""
Celery task that runs reservation event handlers.

Handlers send email and write the EmailNotification audit row. A handler
crash (e.g. database unavailable) is retried with exponential backoff;
delivery failures are already recorded by the handler and do not retry.
"""

from contextlib import contextmanager
from typing import Any, Iterator

from celery.utils.log import get_task_logger
from sqlalchemy.orm import Session

from roombook.database import SessionLocal
from roombook.events.handlers import process_event
from roombook.tasks.celery_app import BaseTask, celery_app

logger = get_task_logger(__name__)


@contextmanager
def _session_scope() -> Iterator[Session]:
    """Provide transactional scope for use in tasks."""
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@celery_app.task(
    base=BaseTask,
    name="roombook.tasks.notifications.process_event",
    bind=True,
    max_retries=3,
)
def process_event_task(self: Any, event_type: str, payload: str) -> bool:
    """
    Route one published event to its handler.

    Returns True if the event type was recognised.
    """
    try:
        with _session_scope() as db:
            return process_event(event_type, payload, db)
    except Exception as exc:
        logger.error(f"Error processing {event_type}: {exc}")
        raise self.retry(exc=exc, countdown=60 * (2**self.request.retries))
