"""Badge award service with duplicate prevention and notification."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from betabreaker.db.models import BadgeDefinition, UserBadge
from betabreaker.db.upsert import conflict_insert

logger = logging.getLogger(__name__)

BADGE_EARNED_CHANNEL = "pubsub:badge_earned"


class AwardOutcome(str, Enum):
    INSERTED = "inserted"
    ALREADY_EARNED = "already_earned"


async def get_badge_by_slug(db: AsyncSession, slug: str) -> BadgeDefinition | None:
    """Fetch a badge definition by slug."""
    result = await db.execute(select(BadgeDefinition).where(BadgeDefinition.slug == slug))
    return result.scalar_one_or_none()


async def load_badge_catalog(db: AsyncSession) -> list[BadgeDefinition]:
    """All active badge definitions in display order."""
    result = await db.execute(
        select(BadgeDefinition)
        .where(BadgeDefinition.is_active.is_(True))
        .order_by(BadgeDefinition.sort_order, BadgeDefinition.id)
    )
    return list(result.scalars().all())


async def get_earned_badge_ids(db: AsyncSession, user_id: int) -> set[int]:
    result = await db.execute(select(UserBadge.badge_id).where(UserBadge.user_id == user_id))
    return set(result.scalars().all())


async def award_badge(db: AsyncSession, user_id: int, badge_id: int) -> AwardOutcome:
    """Insert a user_badges row unless one already exists for the pair.

    The UNIQUE(user_id, badge_id) constraint decides: when two evaluations race,
    exactly one sees INSERTED and the other ALREADY_EARNED.
    """
    stmt = (
        conflict_insert(db, UserBadge)
        .values(user_id=user_id, badge_id=badge_id, earned_at=datetime.now(timezone.utc))
        .on_conflict_do_nothing(index_elements=["user_id", "badge_id"])
        .returning(UserBadge.id)
    )
    result = await db.execute(stmt)
    if result.scalar_one_or_none() is None:
        return AwardOutcome.ALREADY_EARNED
    return AwardOutcome.INSERTED


async def list_user_badges(db: AsyncSession, user_id: int) -> list[UserBadge]:
    """Earned badges for a user, newest first."""
    result = await db.execute(
        select(UserBadge)
        .where(UserBadge.user_id == user_id)
        .order_by(UserBadge.earned_at.desc(), UserBadge.id.desc())
    )
    return list(result.scalars().all())


async def get_earned_counts(db: AsyncSession) -> dict[int, int]:
    """Number of users holding each badge."""
    result = await db.execute(select(UserBadge.badge_id, func.count()).group_by(UserBadge.badge_id))
    return {badge_id: count for badge_id, count in result.all()}


async def upsert_badge(
    db: AsyncSession,
    slug: str,
    name: str,
    criteria: dict[str, Any],
    description: str | None = None,
    icon: str | None = None,
    sort_order: int = 0,
    is_active: bool | None = None,
) -> BadgeDefinition:
    """Create or replace a badge definition keyed by slug.

    ``is_active=None`` keeps an existing badge's active flag, so re-seeding
    does not bring back a badge an admin retired.
    """
    stmt = conflict_insert(db, BadgeDefinition).values(
        slug=slug,
        name=name,
        description=description,
        icon=icon,
        criteria=criteria,
        sort_order=sort_order,
        is_active=True if is_active is None else is_active,
        created_at=datetime.now(timezone.utc),
    )
    updates = {
        "name": stmt.excluded.name,
        "description": stmt.excluded.description,
        "icon": stmt.excluded.icon,
        "criteria": stmt.excluded.criteria,
        "sort_order": stmt.excluded.sort_order,
    }
    if is_active is not None:
        updates["is_active"] = stmt.excluded.is_active
    stmt = stmt.on_conflict_do_update(index_elements=["slug"], set_=updates)
    await db.execute(stmt)

    badge = await get_badge_by_slug(db, slug)
    if badge is None:  # pragma: no cover
        msg = f"Badge upsert did not persist: {slug}"
        raise RuntimeError(msg)
    await db.refresh(badge)
    return badge


async def delete_badge(db: AsyncSession, slug: str) -> bool:
    """Delete a badge and every award of it. Returns False if it did not exist."""
    badge = await get_badge_by_slug(db, slug)
    if badge is None:
        return False
    await db.execute(delete(UserBadge).where(UserBadge.badge_id == badge.id))
    await db.delete(badge)
    await db.flush()
    logger.info("Deleted badge %s", slug)
    return True


async def publish_badge_earned(redis: object, user_id: int, badge: BadgeDefinition) -> None:
    """Push a badge_earned event to Redis pub/sub. Failures are logged only."""
    if redis is None:
        return
    try:
        await redis.publish(  # type: ignore[attr-defined]
            BADGE_EARNED_CHANNEL,
            json.dumps({
                "user_id": user_id,
                "badge_id": badge.id,
                "badge_slug": badge.slug,
                "badge_name": badge.name,
                "icon": badge.icon,
            }),
        )
    except Exception:
        logger.warning("Failed to publish badge_earned notification", exc_info=True)
