# backend/roombook/routes/v1/__init__.py
"""
API v1 Routes

Versioned API endpoints under /api/v1.
"""

from . import admin, reservations, resources

__all__ = ["admin", "reservations", "resources"]
