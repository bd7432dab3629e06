"""Dates, rules and headers used across the booking tests."""

from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict

# Business hours Monday-Friday, 30 minutes to 8 hours
OFFICE_RULES: Dict[str, Any] = {
    "days_of_week": [1, 2, 3, 4, 5],
    "time_ranges": [{"start": 9.0, "end": 18.0}],
    "min_duration_minutes": 30,
    "max_duration_minutes": 480,
}

# Sunday 6 January 2030, 08:00 UTC; the next day is a Monday
FIXED_NOW = datetime(2030, 1, 6, 8, 0, tzinfo=timezone.utc)


def utc(year: int, month: int, day: int, hour: int = 0, minute: int = 0) -> datetime:
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


def next_monday(day: date | None = None) -> date:
    """Return the next Monday strictly after *day* (or today if None)."""
    today = day or datetime.now(timezone.utc).date()
    days_until_monday = (7 - today.weekday()) % 7
    if days_until_monday == 0:
        days_until_monday = 7  # If today is Monday, get next Monday
    return today + timedelta(days=days_until_monday)


def at(day: date, hour: int, minute: int = 0) -> datetime:
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=timezone.utc)


def auth_headers(user: Any) -> Dict[str, str]:
    return {"X-User-Id": user.id}
