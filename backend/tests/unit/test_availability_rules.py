from datetime import datetime, timedelta, timezone

import pytest
import pytz

from roombook.core.exceptions import ValidationException
from roombook.services.availability_rules import (
    AvailabilityRules,
    RuleViolationKind,
    TimeRange,
    fits,
    format_hour,
    sunday_based_weekday,
)

from _utils import OFFICE_RULES, utc

# Monday 7 January 2030
MONDAY = (2030, 1, 7)
SATURDAY = (2030, 1, 12)


@pytest.fixture
def office() -> AvailabilityRules:
    return AvailabilityRules.from_dict(OFFICE_RULES)


def test_weekday_numbering_starts_on_sunday():
    assert sunday_based_weekday(utc(2030, 1, 6)) == 0
    assert sunday_based_weekday(utc(*MONDAY)) == 1
    assert sunday_based_weekday(utc(*SATURDAY)) == 6


def test_monday_morning_fits(office):
    assert office.first_violation(utc(*MONDAY, 9), utc(*MONDAY, 11)) is None
    assert fits(OFFICE_RULES, utc(*MONDAY, 9), utc(*MONDAY, 11))


def test_saturday_is_not_allowed(office):
    violation = office.first_violation(utc(*SATURDAY, 9), utc(*SATURDAY, 11))
    assert violation is not None
    assert violation.kind == RuleViolationKind.DAY_NOT_ALLOWED
    assert "Saturday" in violation.message


def test_must_fit_inside_a_single_window(office):
    violation = office.first_violation(utc(*MONDAY, 17, 30), utc(*MONDAY, 18, 30))
    assert violation is not None
    assert violation.kind == RuleViolationKind.OUTSIDE_TIME_RANGES


def test_window_end_is_inclusive(office):
    assert office.fits(utc(*MONDAY, 17), utc(*MONDAY, 18))


def test_below_minimum_duration(office):
    violation = office.first_violation(utc(*MONDAY, 9), utc(*MONDAY, 9, 15))
    assert violation is not None
    assert violation.kind == RuleViolationKind.TOO_SHORT


def test_above_maximum_duration():
    rules = AvailabilityRules.from_dict({"max_duration_minutes": 60})
    violation = rules.first_violation(utc(*MONDAY, 9), utc(*MONDAY, 10, 30))
    assert violation.kind == RuleViolationKind.TOO_LONG


def test_duration_is_checked_before_day_and_window(office):
    # Too short AND on a Saturday: the duration rule wins
    violation = office.first_violation(utc(*SATURDAY, 9), utc(*SATURDAY, 9, 10))
    assert violation.kind == RuleViolationKind.TOO_SHORT


def test_bounds_are_inclusive(office):
    assert office.fits(utc(*MONDAY, 9), utc(*MONDAY, 9, 30))
    assert office.fits(utc(*MONDAY, 9), utc(*MONDAY, 17))


def test_zero_duration_bounds_are_unset():
    rules = AvailabilityRules.from_dict({"min_duration_minutes": 0, "max_duration_minutes": 0})
    assert rules.fits(utc(*MONDAY, 9), utc(*MONDAY, 9, 1))
    assert rules.fits(utc(*MONDAY, 0), utc(*MONDAY, 23))


def test_empty_rules_allow_everything():
    rules = AvailabilityRules.from_dict(None)
    assert rules.fits(utc(*SATURDAY, 2), utc(*SATURDAY, 23))


def test_any_window_may_contain_the_interval():
    rules = AvailabilityRules.from_dict(
        {"time_ranges": [{"start": 8, "end": 12}, {"start": 13.5, "end": 17}]}
    )
    assert rules.fits(utc(*MONDAY, 14), utc(*MONDAY, 16))
    # Straddles the lunch gap, so no single window holds it
    assert not rules.fits(utc(*MONDAY, 11), utc(*MONDAY, 14))


def test_only_start_day_is_checked_across_midnight():
    rules = AvailabilityRules.from_dict({"days_of_week": [5]})  # Friday
    friday_night = utc(2030, 1, 11, 22)
    assert rules.fits(friday_night, friday_night + timedelta(hours=4))


def test_window_compares_clock_hours_so_end_after_midnight_wraps(office):
    # The end is read as its wall-clock hour (00:30), which sits below the window end
    assert office.fits(utc(*MONDAY, 17), utc(2030, 1, 8, 0, 30))
    violation = office.first_violation(utc(*MONDAY, 17), utc(*MONDAY, 18, 30))
    assert violation.kind == RuleViolationKind.OUTSIDE_TIME_RANGES


def test_rules_evaluated_in_booking_timezone():
    rules = AvailabilityRules.from_dict(
        {"days_of_week": [1], "time_ranges": [{"start": 9, "end": 12}]}
    )
    new_york = pytz.timezone("America/New_York")
    # 14:00 UTC is 09:00 in New York in January
    start = datetime(2030, 1, 7, 14, 0, tzinfo=timezone.utc)
    assert rules.fits(start, start + timedelta(hours=1), new_york)
    assert not rules.fits(start, start + timedelta(hours=1))


def test_validate_rejects_inconsistent_rules():
    rules = AvailabilityRules.from_dict(
        {
            "days_of_week": [7],
            "time_ranges": [{"start": 18, "end": 9}],
            "min_duration_minutes": 120,
            "max_duration_minutes": 60,
        }
    )
    with pytest.raises(ValidationException) as exc_info:
        rules.validate()
    assert exc_info.value.code == "INVALID_AVAILABILITY_RULES"
    assert len(exc_info.value.details["errors"]) == 3


def test_malformed_document_raises_validation_error():
    with pytest.raises(ValidationException):
        AvailabilityRules.from_dict({"time_ranges": [{"start": 9}]})


def test_merge_replaces_present_keys_and_keeps_the_rest(office):
    merged = office.merge({"max_duration_minutes": 120, "days_of_week": [1, 3]})
    assert merged.max_duration_minutes == 120
    assert merged.days_of_week == (1, 3)
    assert merged.min_duration_minutes == 30
    assert merged.time_ranges == (TimeRange(9.0, 18.0),)


def test_merge_null_clears_a_key(office):
    merged = office.merge({"min_duration_minutes": None})
    assert merged.min_duration_minutes is None
    assert "min_duration_minutes" not in merged.to_dict()


def test_unknown_keys_survive_round_trip():
    rules = AvailabilityRules.from_dict({"days_of_week": [1], "buffer_minutes": 15})
    assert rules.to_dict() == {"buffer_minutes": 15, "days_of_week": [1]}


def test_format_hour():
    assert format_hour(9.5) == "09:30"
    assert format_hour(18) == "18:00"
