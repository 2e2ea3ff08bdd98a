"""Identity store: username registration and lookup.

Usernames are unique case-insensitively; they are stored lowercase.
There are no passwords, login is a plain lookup.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from lockedin.config import get_settings
from lockedin.db.models import User
from lockedin.exceptions import ConflictError, NotFoundError, ValidationError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


def normalize_username(username: str | None) -> str:
    return (username or "").strip().lower()


async def register_user(db: AsyncSession, username: str | None) -> User:
    """
    Create a user.

    Raises:
        ValidationError: If the username is missing, too short or too long.
        ConflictError: If the username is already taken.
    """
    settings = get_settings()
    normalized = normalize_username(username)
    if len(normalized) < settings.username_min_length:
        msg = "username too short"
        raise ValidationError(msg)
    if len(normalized) > settings.username_max_length:
        msg = "username too long"
        raise ValidationError(msg)

    user = User(username=normalized)
    db.add(user)
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        msg = "username taken"
        raise ConflictError(msg) from e

    logger.info("user_registered", user_id=user.id, username=normalized)
    return user


async def get_user(db: AsyncSession, user_id: str) -> User | None:
    """Get a user by ID."""
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_username(db: AsyncSession, username: str | None) -> User:
    """
    Look a user up by username (case-insensitive).

    Raises:
        NotFoundError: If no such user exists.
    """
    result = await db.execute(select(User).where(User.username == normalize_username(username)))
    user = result.scalar_one_or_none()
    if user is None:
        msg = "user not found"
        raise NotFoundError(msg)
    return user
