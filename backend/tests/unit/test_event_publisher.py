import json
from unittest.mock import Mock, patch

import pytest

from roombook.events import EventPublisher, ReservationCancelled, ReservationCreated, ReservationUpdated
from roombook.events.publisher import PROCESS_EVENT_TASK

from _utils import utc


def test_publish_serializes_datetimes_to_iso():
    dispatch = Mock()
    publisher = EventPublisher(dispatch=dispatch)

    publisher.publish(
        ReservationCreated(
            reservation_id="r1", user_id="u1", resource_id="room-1", created_at=utc(2030, 1, 6, 8)
        )
    )

    event_type, payload = dispatch.call_args.args
    assert event_type == "event:ReservationCreated"
    assert json.loads(payload) == {
        "reservation_id": "r1",
        "user_id": "u1",
        "resource_id": "room-1",
        "created_at": "2030-01-06T08:00:00+00:00",
    }


def test_updated_event_keeps_changed_fields():
    dispatch = Mock()
    EventPublisher(dispatch=dispatch).publish(
        ReservationUpdated(
            reservation_id="r1",
            updated_by="u1",
            updated_at=utc(2030, 1, 6, 8),
            changed_fields=["end_time", "start_time"],
        )
    )
    assert json.loads(dispatch.call_args.args[1])["changed_fields"] == ["end_time", "start_time"]


def test_dispatch_errors_propagate_to_caller():
    publisher = EventPublisher(dispatch=Mock(side_effect=ConnectionError("broker down")))
    with pytest.raises(ConnectionError):
        publisher.publish(ReservationCancelled(reservation_id="r1", cancelled_by="u1", cancelled_at=utc(2030, 1, 6)))


def test_default_dispatch_enqueues_celery_task():
    with patch("roombook.tasks.enqueue.enqueue_task") as enqueue:
        EventPublisher().publish(
            ReservationCancelled(reservation_id="r1", cancelled_by="u1", cancelled_at=utc(2030, 1, 6))
        )

    task_name = enqueue.call_args.args[0]
    event_type, payload = enqueue.call_args.kwargs["args"]
    assert task_name == PROCESS_EVENT_TASK
    assert event_type == "event:ReservationCancelled"
    assert json.loads(payload)["reservation_id"] == "r1"
