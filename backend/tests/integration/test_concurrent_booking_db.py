"""
Two writers racing for the same slot on a file-backed SQLite database.

Each writer has its own session and connection, as two API workers would.
The first writer is held between its availability check and its insert
while the second one starts; exactly one reservation may survive.
"""

import threading
from unittest.mock import Mock

import pytest
from sqlalchemy import select
from sqlalchemy.orm import sessionmaker

from roombook.core.exceptions import BookingConflictException
from roombook.database import Base, build_engine, init_db
from roombook.events import EventPublisher
from roombook.models.reservation import OCCUPYING_STATUSES, Reservation
from roombook.models.resource import Resource
from roombook.models.user import User
from roombook.services.booking_service import BookingService

from _utils import FIXED_NOW, OFFICE_RULES, utc

START = utc(2030, 1, 7, 9)
END = utc(2030, 1, 7, 11)


@pytest.fixture
def file_engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'roombook.db'}")
    init_db(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def file_sessions(file_engine):
    return sessionmaker(bind=file_engine, autoflush=False)


@pytest.fixture
def seeded(file_sessions):
    with file_sessions() as session:
        sarah = User(email="sarah@example.com", full_name="Sarah Chen", role="user")
        mike = User(email="mike@example.com", full_name="Mike Brown", role="user")
        room = Resource(name="Boardroom", availability_rules=OFFICE_RULES)
        session.add_all([sarah, mike, room])
        session.commit()
        return sarah.id, mike.id, room.id


def _booking_service(session):
    return BookingService(session, event_publisher=Mock(spec=EventPublisher), clock=lambda: FIXED_NOW)


def test_second_writer_waits_for_first_and_gets_conflict(file_sessions, seeded):
    sarah_id, mike_id, room_id = seeded
    first_session, second_session = file_sessions(), file_sessions()
    first, second = _booking_service(first_session), _booking_service(second_session)

    first_checked = threading.Event()
    release_first = threading.Event()
    check = first.availability_service.assert_available

    def check_then_hold(*args, **kwargs):
        check(*args, **kwargs)
        first_checked.set()
        release_first.wait(timeout=10)

    first.availability_service.assert_available = check_then_hold

    outcomes = {}

    def book(label, service, user_id):
        try:
            reservation = service.create_reservation(user_id, room_id, START, END)
            outcomes[label] = reservation.id
        except BookingConflictException as exc:
            outcomes[label] = exc

    first_thread = threading.Thread(target=book, args=("first", first, sarah_id))
    second_thread = threading.Thread(target=book, args=("second", second, mike_id))
    try:
        first_thread.start()
        assert first_checked.wait(timeout=5)

        second_thread.start()
        # the second writer cannot finish while the first holds the write lock
        second_thread.join(timeout=1.0)
        assert "second" not in outcomes
    finally:
        release_first.set()
        first_thread.join(timeout=10)
        second_thread.join(timeout=10)
        first_session.close()
        second_session.close()

    assert isinstance(outcomes["first"], str)
    assert isinstance(outcomes["second"], BookingConflictException)

    with file_sessions() as session:
        rows = session.execute(
            select(Reservation.id).where(
                Reservation.resource_id == room_id,
                Reservation.status.in_(OCCUPYING_STATUSES),
            )
        ).all()
    assert [row.id for row in rows] == [outcomes["first"]]


def test_sequential_writers_on_file_database(file_sessions, seeded):
    sarah_id, mike_id, room_id = seeded

    with file_sessions() as session:
        created = _booking_service(session).create_reservation(sarah_id, room_id, START, END)
        assert created.status == "active"

    with file_sessions() as session:
        with pytest.raises(BookingConflictException) as exc_info:
            _booking_service(session).create_reservation(mike_id, room_id, utc(2030, 1, 7, 10), END)
        assert exc_info.value.details["conflicts"]
