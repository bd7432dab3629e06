# backend/roombook/models/user.py
"""
User model for the Roombook platform.

Users are owned by the external identity provider; this table mirrors the
fields the booking core needs: a stable id, an email address for
notifications, a display name, and the role that grants admin rights.
"""

from enum import Enum
import logging
from typing import Any

from sqlalchemy import CheckConstraint, Column, String
from sqlalchemy.orm import relationship
import ulid

from ..database import Base
from .types import UTCDateTime, utcnow

logger = logging.getLogger(__name__)


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


class User(Base):
    """Account that can own reservations."""

    __tablename__ = "users"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    email = Column(String(255), unique=True, nullable=False, index=True)
    full_name = Column(String(255), nullable=False)
    role = Column(String(10), nullable=False, default=UserRole.USER.value)
    created_at = Column(UTCDateTime(), nullable=False, default=utcnow)

    reservations = relationship("Reservation", back_populates="user", passive_deletes=True)

    __table_args__ = (CheckConstraint("role IN ('user', 'admin')", name="ck_users_role"),)

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        if self.role is None:
            self.role = UserRole.USER.value

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.role})>"
