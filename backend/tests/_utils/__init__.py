"""Shared helpers for backend test suites."""

from .booking import FIXED_NOW, OFFICE_RULES, at, auth_headers, next_monday, utc

__all__ = ["FIXED_NOW", "OFFICE_RULES", "at", "auth_headers", "next_monday", "utc"]
