"""
Centralized task enqueue helper.

Always use enqueue_task() instead of task.delay() so callers depend on a
task name, not on importing the worker module.
"""

import logging
from typing import Any, Dict, Optional, Tuple

from celery import current_app

logger = logging.getLogger(__name__)


def enqueue_task(
    task_name: str,
    args: Optional[Tuple[Any, ...]] = None,
    kwargs: Optional[Dict[str, Any]] = None,
    **options: Any,
) -> Any:
    """
    Enqueue a Celery task by name.

    Args:
        task_name: Fully qualified task name (e.g., "roombook.tasks.notifications.process_event")
        args: Positional arguments for the task
        kwargs: Keyword arguments for the task
        **options: Additional Celery apply_async options (countdown, eta, etc.)

    Returns:
        AsyncResult from Celery
    """
    # Registers the tasks with current_app when called outside the worker
    import roombook.tasks  # noqa: F401

    task = current_app.tasks[task_name]
    result = task.apply_async(args=args or (), kwargs=kwargs or {}, **options)
    logger.debug("Enqueued %s", task_name)
    return result
