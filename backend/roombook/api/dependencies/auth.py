# backend/roombook/api/dependencies/auth.py
"""
Caller identity.

Authentication happens upstream; requests arrive with the authenticated
user id in the X-User-Id header. Admin rights come from the local user
row, never from the request.
"""

import asyncio
from dataclasses import dataclass
import logging
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from ...core.exceptions import ForbiddenException, UnauthorizedException
from ...models.user import User
from ...repositories import RepositoryFactory
from .database import get_db

logger = logging.getLogger(__name__)

USER_ID_HEADER = "X-User-Id"


@dataclass(frozen=True)
class Principal:
    """The two facts the booking core needs about a caller."""

    user_id: str
    is_admin: bool = False


def _load_user(db: Session, user_id: str) -> Optional[User]:
    return RepositoryFactory.create_user_repository(db).get_by_id(user_id)


async def get_current_user(
    x_user_id: Optional[str] = Header(default=None, alias=USER_ID_HEADER),
    db: Session = Depends(get_db),
) -> User:
    """
    Raises:
        UnauthorizedException: Header missing or user unknown
    """
    user_id = (x_user_id or "").strip()
    if not user_id:
        raise UnauthorizedException("Authentication required", code="NOT_AUTHENTICATED")
    user = await asyncio.to_thread(_load_user, db, user_id)
    if user is None:
        logger.warning("Unknown user id in %s header: %s", USER_ID_HEADER, user_id)
        raise UnauthorizedException("Authentication required", code="UNKNOWN_USER")
    return user


async def get_principal(user: User = Depends(get_current_user)) -> Principal:
    return Principal(user_id=user.id, is_admin=user.is_admin)


async def require_admin(principal: Principal = Depends(get_principal)) -> Principal:
    """Dependency that ensures the caller has administrator privileges."""
    if not principal.is_admin:
        raise ForbiddenException("Admin access required", code="ADMIN_REQUIRED")
    return principal
