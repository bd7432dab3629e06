"""Application-wide constants for the Roombook platform."""

from __future__ import annotations

BRAND_NAME = "Roombook"
API_TITLE = f"{BRAND_NAME} API"
API_VERSION = "0.1.0"

# Resource constraints
MAX_RESOURCE_NAME_LENGTH = 255

# Availability rules bounds
MIN_DAY_OF_WEEK = 0  # Sunday
MAX_DAY_OF_WEEK = 6  # Saturday
HOURS_PER_DAY = 24

# Query limits
DEFAULT_RESERVATION_LIMIT = 50
MAX_RESERVATION_LIMIT = 100
TOP_STATS_LIMIT = 5

# Reminder windows, in hours before start
REMINDER_LOOKAHEAD_HOURS = 24
REMINDER_WINDOWS = {
    "1hour": (0.5, 1.5),
    "24hours": (23.0, 25.0),
}
REMINDER_DEDUPE_HOURS = 2
