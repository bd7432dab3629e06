# backend/roombook/tasks/__init__.py
"""
Celery tasks package for Roombook.

- notifications: reservation event handling (emails + audit)
- maintenance: passed-reservation sweep and reminders

Run the worker with: celery -A roombook.tasks worker -B
"""

from roombook.tasks.celery_app import BaseTask, celery_app
from roombook.tasks.maintenance import send_reminders, sweep_passed_reservations
from roombook.tasks.notifications import process_event_task

__all__ = [
    "BaseTask",
    "celery_app",
    "process_event_task",
    "send_reminders",
    "sweep_passed_reservations",
]
