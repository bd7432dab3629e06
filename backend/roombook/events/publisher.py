"""Event publisher - hands domain events to the background worker."""
from datetime import datetime
import json
import logging
from typing import Any, Callable, Dict, Optional, Protocol

logger = logging.getLogger(__name__)

PROCESS_EVENT_TASK = "roombook.tasks.notifications.process_event"


class Event(Protocol):
    """Protocol for event types."""

    def to_dict(self) -> Dict[str, Any]:
        ...


def _celery_dispatch(event_type: str, payload: str) -> None:
    from roombook.tasks.enqueue import enqueue_task

    enqueue_task(PROCESS_EVENT_TASK, args=(event_type, payload))


class EventPublisher:
    """
    Publishes domain events for asynchronous processing.

    publish() returns as soon as the event is enqueued; the caller never
    waits for handlers (emails) to run.
    """

    def __init__(self, dispatch: Optional[Callable[[str, str], None]] = None):
        self._dispatch = dispatch or _celery_dispatch

    def publish(self, event: Event) -> None:
        """
        Queue an event for background processing.

        Raises whatever the dispatcher raises (e.g. broker unreachable);
        callers on the booking path catch and log.
        """
        event_type = f"event:{type(event).__name__}"
        payload = event.to_dict()

        # Convert datetime objects to ISO strings for JSON serialization
        for key, value in payload.items():
            if isinstance(value, datetime):
                payload[key] = value.isoformat()

        self._dispatch(event_type, json.dumps(payload))
        logger.debug("Published %s", event_type)
