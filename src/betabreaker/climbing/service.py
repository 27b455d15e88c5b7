"""Gym, climb and climb-log persistence."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from betabreaker.db.models import Climb, ClimbLog, Gym
from betabreaker.gamification.scoring import QUALIFYING_ATTEMPTS
from betabreaker.gamification.stats import ClimbRecord

logger = logging.getLogger(__name__)


async def list_gyms(db: AsyncSession) -> list[Gym]:
    result = await db.execute(select(Gym).order_by(Gym.name))
    return list(result.scalars().all())


async def get_gym(db: AsyncSession, gym_id: int) -> Gym | None:
    return await db.get(Gym, gym_id)


async def create_gym(db: AsyncSession, name: str, location: str | None = None) -> Gym:
    gym = Gym(name=name, location=location, created_at=datetime.now(timezone.utc))
    db.add(gym)
    await db.flush()
    return gym


async def list_climbs(db: AsyncSession, gym_id: int) -> list[Climb]:
    result = await db.execute(select(Climb).where(Climb.gym_id == gym_id).order_by(Climb.name))
    return list(result.scalars().all())


async def get_climb(db: AsyncSession, climb_id: int) -> Climb | None:
    return await db.get(Climb, climb_id)


async def create_climb(db: AsyncSession, gym_id: int, name: str, grade: int, climb_type: str) -> Climb:
    climb = Climb(
        gym_id=gym_id,
        name=name,
        grade=grade,
        type=climb_type,
        created_at=datetime.now(timezone.utc),
    )
    db.add(climb)
    await db.flush()
    return climb


async def create_climb_log(
    db: AsyncSession,
    user_id: int,
    climb_id: int,
    attempt_type: str,
    attempts: int | None = None,
    personal_rating: int | None = None,
    notes: str | None = None,
    logged_at: datetime | None = None,
) -> ClimbLog:
    """Insert a climb log. ``attempts`` is only kept for sends."""
    now = datetime.now(timezone.utc)
    log = ClimbLog(
        user_id=user_id,
        climb_id=climb_id,
        attempt_type=attempt_type,
        attempts=attempts if attempt_type == "sent" else None,
        personal_rating=personal_rating,
        notes=notes or None,
        logged_at=logged_at or now,
        created_at=now,
    )
    db.add(log)
    await db.flush()
    logger.info("Climb logged: user=%s climb=%s attempt=%s", user_id, climb_id, attempt_type)
    return log


async def list_user_climb_logs(db: AsyncSession, user_id: int, limit: int = 50) -> list[ClimbLog]:
    """A user's climb logs, newest first."""
    result = await db.execute(
        select(ClimbLog)
        .where(ClimbLog.user_id == user_id)
        .order_by(ClimbLog.logged_at.desc(), ClimbLog.id.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def get_qualifying_records(db: AsyncSession, user_id: int) -> list[ClimbRecord]:
    """Sends and flashes joined with climb attributes, oldest first."""
    result = await db.execute(
        select(
            ClimbLog.id,
            ClimbLog.user_id,
            ClimbLog.climb_id,
            ClimbLog.attempt_type,
            ClimbLog.logged_at,
            Climb.grade,
            Climb.type,
            Climb.gym_id,
        )
        .join(Climb, ClimbLog.climb_id == Climb.id)
        .where(
            ClimbLog.user_id == user_id,
            ClimbLog.attempt_type.in_(sorted(QUALIFYING_ATTEMPTS)),
        )
        .order_by(ClimbLog.logged_at, ClimbLog.id)
    )
    return [
        ClimbRecord(
            log_id=row.id,
            user_id=row.user_id,
            climb_id=row.climb_id,
            attempt_type=row.attempt_type,
            logged_at=row.logged_at,
            grade=row.grade or 0,
            climb_type=row.type,
            gym_id=row.gym_id,
        )
        for row in result
    ]
