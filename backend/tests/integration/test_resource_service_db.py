import logging

import pytest

from roombook.core.exceptions import (
    BusinessRuleException,
    ConflictException,
    NotFoundException,
    ValidationException,
)
from roombook.models.reservation import Reservation
from roombook.models.resource import Resource
from roombook.services.availability_service import UnavailabilityReason
from roombook.services.resource_service import ResourceService

from _utils import OFFICE_RULES, utc


@pytest.fixture
def resource_service(db) -> ResourceService:
    return ResourceService(db)


class TestCreateResource:
    def test_create_with_rules(self, resource_service):
        resource = resource_service.create_resource(
            {"name": "  Lab 3  ", "capacity": 12, "availability_rules": OFFICE_RULES}
        )
        assert resource.name == "Lab 3"
        assert resource.status == "available"
        assert resource.availability_rules == OFFICE_RULES

    def test_create_logs_with_info_enabled(self, resource_service, caplog):
        caplog.set_level(logging.INFO)

        resource = resource_service.create_resource({"name": "Quiet Room"})

        record = next(r for r in caplog.records if getattr(r, "operation", None) == "resource_created")
        assert record.resource_id == resource.id
        assert record.resource_name == "Quiet Room"

    def test_name_is_unique_ignoring_case(self, resource_service, resource):
        with pytest.raises(ConflictException) as exc_info:
            resource_service.create_resource({"name": "boardroom"})
        assert exc_info.value.code == "RESOURCE_NAME_TAKEN"

    def test_blank_name(self, resource_service):
        with pytest.raises(ValidationException):
            resource_service.create_resource({"name": "   "})

    def test_invalid_rules(self, resource_service):
        with pytest.raises(ValidationException) as exc_info:
            resource_service.create_resource(
                {"name": "Lab 4", "availability_rules": {"min_duration_minutes": 90, "max_duration_minutes": 30}}
            )
        assert exc_info.value.code == "INVALID_AVAILABILITY_RULES"

    def test_invalid_status(self, resource_service):
        with pytest.raises(ValidationException):
            resource_service.create_resource({"name": "Lab 5", "status": "closed"})


class TestUpdateResource:
    def test_rules_are_merged(self, resource_service, resource):
        updated = resource_service.update_resource(
            resource.id, {"availability_rules": {"max_duration_minutes": 120}}
        )
        assert updated.availability_rules["max_duration_minutes"] == 120
        assert updated.availability_rules["days_of_week"] == [1, 2, 3, 4, 5]
        assert updated.availability_rules["min_duration_minutes"] == 30

    def test_merge_that_breaks_invariants_is_rejected(self, resource_service, resource, db):
        with pytest.raises(ValidationException):
            resource_service.update_resource(resource.id, {"availability_rules": {"max_duration_minutes": 10}})
        db.refresh(resource)
        assert resource.availability_rules["max_duration_minutes"] == 480

    def test_status_change(self, resource_service, resource):
        assert resource_service.update_resource(resource.id, {"status": "maintenance"}).status == "maintenance"

    def test_rename_to_taken_name(self, resource_service, resource, make_resource):
        make_resource(name="Focus Room")
        with pytest.raises(ConflictException):
            resource_service.update_resource(resource.id, {"name": "Focus Room"})

    def test_rename_to_own_name_in_other_case(self, resource_service, resource):
        assert resource_service.update_resource(resource.id, {"name": "BOARDROOM"}).name == "BOARDROOM"

    def test_unknown_field(self, resource_service, resource):
        with pytest.raises(ValidationException):
            resource_service.update_resource(resource.id, {"id": "other"})

    def test_missing_resource(self, resource_service):
        with pytest.raises(NotFoundException):
            resource_service.update_resource("01HZZNOSUCHRESOURCE0000000", {"capacity": 4})


class TestDeleteResource:
    def test_delete_with_upcoming_reservation_is_refused(
        self, resource_service, resource, user, make_reservation
    ):
        make_reservation(resource, user, utc(2099, 1, 5, 9), utc(2099, 1, 5, 10))
        with pytest.raises(BusinessRuleException) as exc_info:
            resource_service.delete_resource(resource.id)
        assert exc_info.value.code == "RESOURCE_HAS_RESERVATIONS"

    def test_delete_with_only_past_or_cancelled_reservations(
        self, resource_service, resource, user, make_reservation, db
    ):
        make_reservation(resource, user, utc(2020, 1, 6, 9), utc(2020, 1, 6, 10), status="passed")
        make_reservation(resource, user, utc(2099, 1, 5, 9), utc(2099, 1, 5, 10), status="cancelled")

        resource_service.delete_resource(resource.id)

        assert db.query(Resource).count() == 0
        assert db.query(Reservation).count() == 0

    def test_delete_missing(self, resource_service):
        with pytest.raises(NotFoundException):
            resource_service.delete_resource("01HZZNOSUCHRESOURCE0000000")


class TestListAndAvailability:
    def test_list_filters(self, resource_service, make_resource):
        make_resource(name="Alpha", location="Building A")
        make_resource(name="Beta", location="Building B", status="maintenance")

        assert [r.name for r in resource_service.list_resources()] == ["Alpha", "Beta"]
        assert [r.name for r in resource_service.list_resources(status="maintenance")] == ["Beta"]
        assert [r.name for r in resource_service.list_resources(location="building b")] == ["Beta"]

    def test_availability_explains_conflict(self, resource_service, resource, user, make_reservation):
        existing = make_reservation(resource, user, utc(2099, 1, 5, 9), utc(2099, 1, 5, 11))

        decision = resource_service.get_availability(resource.id, utc(2099, 1, 5, 10), utc(2099, 1, 5, 12))

        assert decision.available is False
        assert decision.reason == UnavailabilityReason.CONFLICT
        assert decision.to_dict()["conflicts"][0]["reservation_id"] == existing.id

    def test_availability_explains_rule(self, resource_service, resource):
        decision = resource_service.get_availability(resource.id, utc(2099, 1, 10, 9), utc(2099, 1, 10, 10))
        assert decision.reason == UnavailabilityReason.RULES_VIOLATED
        assert decision.to_dict()["rule"] == "day_not_allowed"

    def test_availability_free_slot(self, resource_service, resource):
        assert resource_service.get_availability(resource.id, utc(2099, 1, 5, 9), utc(2099, 1, 5, 10)).available

    def test_availability_requires_ordered_interval(self, resource_service, resource):
        with pytest.raises(BusinessRuleException):
            resource_service.get_availability(resource.id, utc(2099, 1, 5, 10), utc(2099, 1, 5, 9))
