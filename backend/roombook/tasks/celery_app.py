# backend/roombook/tasks/celery_app.py
"""
Celery application configuration for Roombook.

Redis is the broker. The worker runs notification delivery (detached from
the booking request) and the periodic maintenance jobs.
"""

import logging
import os
from typing import Any, Type, cast

from celery import Celery, Task
from celery.signals import setup_logging

from roombook.core.config import settings

TASK_MODULES = (
    "roombook.tasks.notifications",
    "roombook.tasks.maintenance",
)


def create_celery_app() -> Celery:
    """
    Create and configure the Celery application.

    Returns:
        Celery: Configured Celery application instance
    """
    # Priority: CELERY_BROKER_URL -> settings.redis_url
    broker_url = os.getenv("CELERY_BROKER_URL") or settings.redis_url
    result_backend = os.getenv("CELERY_RESULT_BACKEND") or broker_url

    celery_app = Celery("roombook", broker=broker_url, backend=result_backend)

    celery_app.conf.update(
        {
            "task_serializer": "json",
            "accept_content": ["json"],
            "result_serializer": "json",
            "timezone": settings.booking_timezone,
            "enable_utc": True,
            "task_ignore_result": True,
            "worker_prefetch_multiplier": 4,
            "worker_max_tasks_per_child": 1000,
            "task_soft_time_limit": 120,
            "task_time_limit": 300,
            "task_acks_late": True,
            "task_reject_on_worker_lost": True,
            "task_default_retry_delay": 60,
            "task_max_retries": 3,
            "worker_hijack_root_logger": False,
            "broker_transport_options": {"visibility_timeout": 3600},
        }
    )
    celery_app.conf.imports = TASK_MODULES

    celery_app.conf.task_routes = {
        "roombook.tasks.notifications.*": {"queue": "notifications"},
        "roombook.tasks.maintenance.*": {"queue": "maintenance"},
    }

    from roombook.tasks.beat_schedule import get_beat_schedule

    celery_app.conf.beat_schedule = get_beat_schedule(reminders_enabled=settings.reminders_enabled)

    return celery_app


# Disable Celery's default logging configuration
@setup_logging.connect  # type: ignore[misc]
def config_loggers(*args: Any, **kwargs: Any) -> None:
    """Configure logging to integrate with the application's logging setup."""
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


celery_app = create_celery_app()


class BaseTask(Task):  # type: ignore[misc]
    """Base task with failure, retry and success logging."""

    def on_failure(self, exc: Exception, task_id: str, args: Any, kwargs: Any, einfo: Any) -> None:
        logger = logging.getLogger(__name__)
        logger.error(
            f"Task {self.name}[{task_id}] failed with exception: {exc}",
            exc_info=True,
            extra={"task_id": task_id, "task_name": self.name, "task_args": str(args)},
        )
        super().on_failure(exc, task_id, args, kwargs, einfo)

    def on_retry(self, exc: Exception, task_id: str, args: Any, kwargs: Any, einfo: Any) -> None:
        logger = logging.getLogger(__name__)
        logger.warning(
            f"Task {self.name}[{task_id}] retry {self.request.retries} due to: {exc}",
            extra={"task_id": task_id, "task_name": self.name, "retry_count": self.request.retries},
        )
        super().on_retry(exc, task_id, args, kwargs, einfo)

    def on_success(self, retval: Any, task_id: str, args: Any, kwargs: Any) -> None:
        logger = logging.getLogger(__name__)
        logger.info(
            f"Task {self.name}[{task_id}] completed successfully",
            extra={"task_id": task_id, "task_name": self.name},
        )
        super().on_success(retval, task_id, args, kwargs)


celery_app.Task = cast(Type[Task], BaseTask)
