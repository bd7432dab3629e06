# backend/tests/conftest.py
"""
Shared pytest fixtures.

Each test gets its own in-memory SQLite database. The environment is
pinned BEFORE any roombook import so settings never pick up a developer
.env, never start the in-process scheduler and never reach a real email
provider.
"""

import os

os.environ["CI"] = "1"
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["EMAIL_PROVIDER"] = "console"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["BOOKING_TIMEZONE"] = "UTC"

from datetime import datetime
from typing import Any, Callable, Dict, Optional
from unittest.mock import Mock

from fastapi.testclient import TestClient
import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool
import ulid

from roombook.api.dependencies.database import get_db
from roombook.api.dependencies.services import get_event_publisher
from roombook.database import Base, _enable_sqlite_foreign_keys, init_db
from roombook.events import EventPublisher
from roombook.main import app
from roombook.models.reservation import Reservation, ReservationStatus
from roombook.models.resource import Resource, ResourceStatus
from roombook.models.user import User, UserRole

from _utils import FIXED_NOW, OFFICE_RULES


@pytest.fixture
def engine():
    test_engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    event.listen(test_engine, "connect", _enable_sqlite_foreign_keys)
    init_db(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory) -> Session:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock() -> Callable[[], datetime]:
    return lambda: FIXED_NOW


@pytest.fixture
def publisher() -> Mock:
    return Mock(spec=EventPublisher)


@pytest.fixture
def make_user(db):
    def _make(role: str = UserRole.USER.value, email: Optional[str] = None, full_name: str = "Test User") -> User:
        user = User(
            email=email or f"user-{str(ulid.ULID()).lower()}@example.com",
            full_name=full_name,
            role=role,
        )
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture
def user(make_user) -> User:
    return make_user(email="sarah@example.com", full_name="Sarah Chen")


@pytest.fixture
def other_user(make_user) -> User:
    return make_user(email="mike@example.com", full_name="Mike Brown")


@pytest.fixture
def admin_user(make_user) -> User:
    return make_user(role=UserRole.ADMIN.value, email="admin@example.com", full_name="Admin")


@pytest.fixture
def make_resource(db):
    def _make(
        name: Optional[str] = None,
        status: str = ResourceStatus.AVAILABLE.value,
        availability_rules: Optional[Dict[str, Any]] = None,
        location: Optional[str] = "Building A",
    ) -> Resource:
        resource = Resource(
            name=name or f"Room {str(ulid.ULID())[-6:]}",
            status=status,
            availability_rules=dict(OFFICE_RULES) if availability_rules is None else availability_rules,
            location=location,
            capacity=8,
        )
        db.add(resource)
        db.commit()
        return resource

    return _make


@pytest.fixture
def resource(make_resource) -> Resource:
    return make_resource(name="Boardroom")


@pytest.fixture
def make_reservation(db):
    """Insert a reservation row directly, bypassing the booking checks."""

    def _make(
        resource: Resource,
        user: User,
        start: datetime,
        end: datetime,
        status: str = ReservationStatus.ACTIVE.value,
    ) -> Reservation:
        reservation = Reservation(
            resource_id=resource.id,
            user_id=user.id,
            start_time=start,
            end_time=end,
            status=status,
        )
        db.add(reservation)
        db.commit()
        return reservation

    return _make


@pytest.fixture
def client(db, publisher):
    """TestClient bound to the test database with the event publisher mocked out."""

    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_event_publisher] = lambda: publisher
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()

