from datetime import timedelta
from unittest.mock import Mock

import pytest

from roombook.events import ReservationReminder
from roombook.models.email_notification import EmailNotification
from roombook.services.reminder_service import ReminderService, reminder_type_for
from roombook.services.statistics_service import StatisticsService

from _utils import FIXED_NOW, utc


class TestStatistics:
    def test_counts_include_zero_statuses(self, db):
        stats = StatisticsService(db).get_statistics()

        assert stats["reservations"] == {"active": 0, "modified": 0, "cancelled": 0, "passed": 0, "total": 0}
        assert stats["resources"]["total"] == 0
        assert stats["users"] == {"total": 0}
        assert stats["top_resources"] == []

    def test_counts_and_rankings(self, db, user, other_user, resource, make_resource, make_reservation):
        focus = make_resource(name="Focus Room")
        make_reservation(resource, user, utc(2030, 1, 7, 9), utc(2030, 1, 7, 10))
        make_reservation(resource, user, utc(2030, 1, 7, 11), utc(2030, 1, 7, 12), status="cancelled")
        make_reservation(resource, other_user, utc(2030, 1, 8, 9), utc(2030, 1, 8, 10))
        make_reservation(focus, user, utc(2030, 1, 7, 9), utc(2030, 1, 7, 10), status="passed")

        stats = StatisticsService(db).get_statistics(top_limit=1)

        assert stats["reservations"]["active"] == 2
        assert stats["reservations"]["cancelled"] == 1
        assert stats["reservations"]["passed"] == 1
        assert stats["reservations"]["total"] == 4
        assert stats["resources"]["available"] == 2
        assert stats["users"]["total"] == 2
        assert stats["top_resources"] == [{"id": resource.id, "name": "Boardroom", "reservation_count": 3}]
        assert stats["top_users"][0]["email"] == "sarah@example.com"
        assert stats["top_users"][0]["reservation_count"] == 3


@pytest.mark.parametrize(
    "hours,expected",
    [(0.5, "1hour"), (1.0, "1hour"), (1.5, "1hour"), (2.0, None), (23.0, "24hours"), (25.0, "24hours"), (12, None)],
)
def test_reminder_windows(hours, expected):
    assert reminder_type_for(hours) == expected


class TestReminders:
    @pytest.fixture
    def reminder_service(self, db, publisher, clock):
        return ReminderService(db, event_publisher=publisher, clock=clock)

    def test_due_reminders_pick_windows(self, reminder_service, user, resource, make_reservation):
        soon = make_reservation(resource, user, FIXED_NOW + timedelta(hours=1), FIXED_NOW + timedelta(hours=2))
        tomorrow = make_reservation(
            resource, user, FIXED_NOW + timedelta(hours=24), FIXED_NOW + timedelta(hours=25)
        )
        make_reservation(resource, user, FIXED_NOW + timedelta(hours=6), FIXED_NOW + timedelta(hours=7))
        make_reservation(
            resource,
            user,
            FIXED_NOW + timedelta(hours=1, minutes=10),
            FIXED_NOW + timedelta(hours=2),
            status="cancelled",
        )

        due = {reservation.id: reminder_type for reservation, reminder_type in reminder_service.due_reminders()}

        assert due == {soon.id: "1hour", tomorrow.id: "24hours"}

    def test_send_publishes_reminder_events(self, reminder_service, publisher, user, resource, make_reservation):
        soon = make_reservation(resource, user, FIXED_NOW + timedelta(hours=1), FIXED_NOW + timedelta(hours=2))

        assert reminder_service.send_due_reminders() == 1

        event = publisher.publish.call_args.args[0]
        assert event == ReservationReminder(reservation_id=soon.id, reminder_type="1hour")

    def test_recent_reminder_is_not_repeated(self, reminder_service, db, user, resource, make_reservation):
        soon = make_reservation(resource, user, FIXED_NOW + timedelta(hours=1), FIXED_NOW + timedelta(hours=2))
        db.add(
            EmailNotification(
                reservation_id=soon.id,
                type="reservation_reminder",
                recipient=user.email,
                status="sent",
                sent_at=FIXED_NOW - timedelta(minutes=30),
            )
        )
        db.commit()

        assert reminder_service.due_reminders() == []

    def test_publish_failure_is_logged_and_skipped(self, db, clock, user, resource, make_reservation):
        make_reservation(resource, user, FIXED_NOW + timedelta(hours=1), FIXED_NOW + timedelta(hours=2))
        publisher = Mock()
        publisher.publish.side_effect = ConnectionError("broker down")

        assert ReminderService(db, event_publisher=publisher, clock=clock).send_due_reminders() == 0
