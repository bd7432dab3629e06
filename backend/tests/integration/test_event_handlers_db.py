import json

from roombook.events.handlers import process_event
from roombook.models.email_notification import EmailNotification

from _utils import utc


def _payload(reservation_id, **extra):
    return json.dumps({"reservation_id": reservation_id, **extra})


def test_created_event_notifies_user_and_admin(db, user, resource, make_reservation):
    reservation = make_reservation(resource, user, utc(2030, 1, 7, 9), utc(2030, 1, 7, 11))

    assert process_event("event:ReservationCreated", _payload(reservation.id), db) is True

    audits = db.query(EmailNotification).order_by(EmailNotification.type).all()
    assert [(a.type, a.status) for a in audits] == [
        ("admin_notification", "sent"),
        ("reservation_created", "sent"),
    ]
    assert audits[1].recipient == "sarah@example.com"


def test_cancelled_event_notifies_owner_only(db, user, resource, make_reservation):
    reservation = make_reservation(resource, user, utc(2030, 1, 7, 9), utc(2030, 1, 7, 11), status="cancelled")

    process_event("event:ReservationCancelled", _payload(reservation.id, cancelled_by=user.id), db)

    audit = db.query(EmailNotification).one()
    assert audit.type == "reservation_cancelled"


def test_reminder_event_passes_window(db, user, resource, make_reservation):
    reservation = make_reservation(resource, user, utc(2030, 1, 7, 9), utc(2030, 1, 7, 11))

    process_event("event:ReservationReminder", _payload(reservation.id, reminder_type="24hours"), db)

    assert db.query(EmailNotification).one().type == "reservation_reminder"


def test_missing_reservation_is_skipped(db):
    assert process_event("event:ReservationUpdated", _payload("01HZZNOSUCHRESERVATION0000"), db) is True
    assert db.query(EmailNotification).count() == 0


def test_unknown_and_foreign_event_types(db):
    assert process_event("event:SomethingElse", "{}", db) is True
    assert process_event("job:cleanup", "{}", db) is False
