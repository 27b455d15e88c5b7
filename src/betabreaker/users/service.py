"""User management business logic."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import func, select

from betabreaker.db.models import User

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


async def get_user(db: AsyncSession, user_id: int) -> User | None:
    return await db.get(User, user_id)


async def create_user(db: AsyncSession, username: str, display_name: str | None = None) -> User:
    """
    Create a user.

    Raises:
        ValueError: If the username is already taken (case-insensitive).
    """
    existing = await db.execute(select(User.id).where(func.lower(User.username) == username.lower()))
    if existing.scalar_one_or_none() is not None:
        msg = "Username already taken"
        raise ValueError(msg)

    user = User(username=username, display_name=display_name, created_at=datetime.now(timezone.utc))
    db.add(user)
    await db.flush()
    logger.info("user_created", user_id=user.id, username=username)
    return user
