# backend/roombook/services/availability_rules.py
"""
Availability rules for resources.

A resource's rules describe when it can be booked at all, independent of
other reservations:

- days_of_week: allowed weekdays for the reservation start (0 = Sunday)
- time_ranges: open windows in fractional hours (9.5 = 09:30); a
  reservation must fit entirely inside a single window
- min_duration_minutes / max_duration_minutes: inclusive duration bounds

Everything here is pure: no session, no clock.
"""

from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..core.constants import HOURS_PER_DAY, MAX_DAY_OF_WEEK, MIN_DAY_OF_WEEK
from ..core.exceptions import ValidationException

RULE_KEYS = ("days_of_week", "time_ranges", "min_duration_minutes", "max_duration_minutes")

DAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")


class RuleViolationKind(str, Enum):
    TOO_SHORT = "too_short"
    TOO_LONG = "too_long"
    DAY_NOT_ALLOWED = "day_not_allowed"
    OUTSIDE_TIME_RANGES = "outside_time_ranges"


@dataclass(frozen=True)
class RuleViolation:
    kind: RuleViolationKind
    message: str


@dataclass(frozen=True)
class TimeRange:
    start: float
    end: float

    def contains(self, start_hour: float, end_hour: float) -> bool:
        return start_hour >= self.start and end_hour <= self.end

    def label(self) -> str:
        return f"{format_hour(self.start)}-{format_hour(self.end)}"


@dataclass(frozen=True)
class AvailabilityRules:
    """Immutable view over a resource's availability_rules JSON."""

    days_of_week: Tuple[int, ...] = ()
    time_ranges: Tuple[TimeRange, ...] = ()
    min_duration_minutes: Optional[int] = None
    max_duration_minutes: Optional[int] = None
    extra: Dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "AvailabilityRules":
        """
        Build rules from stored JSON.

        Raises:
            ValidationException: If the document is structurally malformed
        """
        data = dict(data or {})
        try:
            days = tuple(int(d) for d in (data.get("days_of_week") or ()))
            ranges = tuple(
                TimeRange(start=float(r["start"]), end=float(r["end"]))
                for r in (data.get("time_ranges") or ())
            )
            min_minutes = data.get("min_duration_minutes")
            max_minutes = data.get("max_duration_minutes")
            min_minutes = int(min_minutes) if min_minutes is not None else None
            max_minutes = int(max_minutes) if max_minutes is not None else None
        except (TypeError, ValueError, KeyError) as exc:
            raise ValidationException(
                f"Malformed availability rules: {exc}", code="INVALID_AVAILABILITY_RULES"
            ) from exc
        extra = {k: v for k, v in data.items() if k not in RULE_KEYS}
        return cls(
            days_of_week=days,
            time_ranges=ranges,
            min_duration_minutes=min_minutes,
            max_duration_minutes=max_minutes,
            extra=extra,
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = dict(self.extra)
        if self.days_of_week:
            result["days_of_week"] = list(self.days_of_week)
        if self.time_ranges:
            result["time_ranges"] = [{"start": r.start, "end": r.end} for r in self.time_ranges]
        if self.min_duration_minutes is not None:
            result["min_duration_minutes"] = self.min_duration_minutes
        if self.max_duration_minutes is not None:
            result["max_duration_minutes"] = self.max_duration_minutes
        return result

    def validation_errors(self) -> List[str]:
        """Return every structural problem with these rules (empty if valid)."""
        errors: List[str] = []
        if self.min_duration_minutes is not None and self.min_duration_minutes < 0:
            errors.append("min_duration_minutes must not be negative")
        if self.max_duration_minutes is not None and self.max_duration_minutes < 0:
            errors.append("max_duration_minutes must not be negative")
        if (
            self.min_duration_minutes
            and self.max_duration_minutes
            and self.min_duration_minutes > self.max_duration_minutes
        ):
            errors.append("min_duration_minutes must be less than or equal to max_duration_minutes")
        for day in self.days_of_week:
            if day < MIN_DAY_OF_WEEK or day > MAX_DAY_OF_WEEK:
                errors.append(f"days_of_week values must be between 0 and 6 (got {day})")
        for time_range in self.time_ranges:
            if time_range.start < 0 or time_range.end > HOURS_PER_DAY:
                errors.append(f"time range {time_range.label()} must lie within 0-24 hours")
            if time_range.start >= time_range.end:
                errors.append(f"time range {time_range.label()} must start before it ends")
        return errors

    def validate(self) -> "AvailabilityRules":
        errors = self.validation_errors()
        if errors:
            raise ValidationException(
                "Invalid availability rules",
                code="INVALID_AVAILABILITY_RULES",
                details={"errors": errors},
            )
        return self

    def merge(self, patch: Optional[Mapping[str, Any]]) -> "AvailabilityRules":
        """Keys present in the patch replace stored keys; absent keys are kept."""
        merged = self.to_dict()
        merged.update(dict(patch or {}))
        # An explicit null clears the key rather than storing None
        merged = {k: v for k, v in merged.items() if v is not None}
        return AvailabilityRules.from_dict(merged)

    def first_violation(
        self, start: datetime, end: datetime, tz: Optional[tzinfo] = None
    ) -> Optional[RuleViolation]:
        """
        Return the first rule the interval breaks, or None if it is legal.

        Checks run in order: minimum duration, maximum duration, weekday of
        the start, then single-window containment. Only the start day is
        checked, so an interval crossing midnight into a disallowed day is
        accepted. Containment compares wall-clock hours of start and end,
        so an end past midnight reads as an early hour and can fall inside
        a window. Zero or missing duration bounds are treated as unset.
        """
        if tz is not None:
            start = start.astimezone(tz)
            end = end.astimezone(tz)

        duration_minutes = (end - start).total_seconds() / 60

        if self.min_duration_minutes and duration_minutes < self.min_duration_minutes:
            return RuleViolation(
                RuleViolationKind.TOO_SHORT,
                f"Minimum duration is {self.min_duration_minutes} minutes",
            )
        if self.max_duration_minutes and duration_minutes > self.max_duration_minutes:
            return RuleViolation(
                RuleViolationKind.TOO_LONG,
                f"Maximum duration is {self.max_duration_minutes} minutes",
            )

        if self.days_of_week:
            day = sunday_based_weekday(start)
            if day not in self.days_of_week:
                return RuleViolation(
                    RuleViolationKind.DAY_NOT_ALLOWED,
                    f"Resource is not available on {DAY_NAMES[day]}",
                )

        if self.time_ranges:
            start_hour = start.hour + start.minute / 60
            end_hour = end.hour + end.minute / 60
            if not any(r.contains(start_hour, end_hour) for r in self.time_ranges):
                windows = ", ".join(r.label() for r in self.time_ranges)
                return RuleViolation(
                    RuleViolationKind.OUTSIDE_TIME_RANGES,
                    f"Reservation must fit within one opening window ({windows})",
                )

        return None

    def fits(self, start: datetime, end: datetime, tz: Optional[tzinfo] = None) -> bool:
        return self.first_violation(start, end, tz) is None


def fits(
    rules: AvailabilityRules | Mapping[str, Any] | None,
    start: datetime,
    end: datetime,
    tz: Optional[tzinfo] = None,
) -> bool:
    """Structural legality of [start, end) for a resource, ignoring other reservations."""
    if not isinstance(rules, AvailabilityRules):
        rules = AvailabilityRules.from_dict(rules)
    return rules.fits(start, end, tz)


def sunday_based_weekday(moment: datetime) -> int:
    """Weekday with 0 = Sunday ... 6 = Saturday."""
    return (moment.weekday() + 1) % 7


def format_hour(value: float) -> str:
    hours = int(value)
    minutes = int(round((value - hours) * 60))
    return f"{hours:02d}:{minutes:02d}"

