# backend/roombook/tasks/beat_schedule.py
"""
Celery Beat schedule for Roombook.

Both jobs are hourly and idempotent, so a missed or doubled run is harmless.
"""

from typing import Any, Dict

from celery.schedules import crontab

SWEEP_TASK = "roombook.tasks.maintenance.sweep_passed_reservations"
REMINDER_TASK = "roombook.tasks.maintenance.send_reminders"

CELERYBEAT_SCHEDULE: Dict[str, Dict[str, Any]] = {
    "sweep-passed-reservations": {
        "task": SWEEP_TASK,
        "schedule": crontab(minute=5),  # Every hour at :05
        "options": {"queue": "maintenance"},
    },
    "send-reservation-reminders": {
        "task": REMINDER_TASK,
        "schedule": crontab(minute=0),  # Every hour at :00
        "options": {"queue": "maintenance"},
    },
}


def get_beat_schedule(reminders_enabled: bool = True) -> Dict[str, Dict[str, Any]]:
    schedule = dict(CELERYBEAT_SCHEDULE)
    if not reminders_enabled:
        schedule.pop("send-reservation-reminders")
    return schedule
