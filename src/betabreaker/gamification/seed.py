"""Default badge catalog, upserted by slug on startup."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from betabreaker.gamification.badge_service import upsert_badge
from betabreaker.gamification.triggers import CLIMB_MILESTONES, POINTS_MILESTONES

logger = logging.getLogger(__name__)

_GRADE_NAMES = {
    3: "Getting Vertical",
    4: "Crimp Curious",
    5: "Solid Sender",
    6: "Crux Cracker",
    7: "Beta Breaker",
    8: "Crag Legend",
    9: "Stone Master",
    10: "Summit Sage",
}

BADGE_SEED_DATA: list[dict] = [
    {
        "slug": "first_send",
        "name": "First Send",
        "description": "Log your very first send or flash",
        "icon": "🧗",
        "criteria": {"type": "first_send"},
    },
    *[
        {
            "slug": f"grade_{grade}",
            "name": name,
            "description": f"Send a grade {grade} climb for the first time",
            "icon": "⛰️",
            "criteria": {"type": "level", "level": grade},
        }
        for grade, name in _GRADE_NAMES.items()
    ],
    *[
        {
            "slug": f"climbs_{count}",
            "name": f"{count} Sends",
            "description": f"Log {count} sends or flashes",
            "icon": "📈",
            "criteria": {"climbCount": count},
        }
        for count in CLIMB_MILESTONES
    ],
    {
        "slug": "flash_1",
        "name": "Flash!",
        "description": "Flash a climb on your first attempt",
        "icon": "⚡",
        "criteria": {"flashCount": 1},
    },
    {
        "slug": "flash_10",
        "name": "Flash Flood",
        "description": "Flash 10 climbs",
        "icon": "⚡",
        "criteria": {"flashCount": 10},
    },
    {
        "slug": "flash_50",
        "name": "Lightning Hands",
        "description": "Flash 50 climbs",
        "icon": "⚡",
        "criteria": {"flashCount": 50},
    },
    *[
        {
            "slug": f"points_{points}",
            "name": f"{points:,} Points",
            "description": f"Reach {points:,} climbing points",
            "icon": "🏆",
            "criteria": {"totalPoints": points},
        }
        for points in POINTS_MILESTONES
    ],
    {
        "slug": "streak_7",
        "name": "Week Warrior",
        "description": "Climb seven days in a row",
        "icon": "🔥",
        "criteria": {"consecutiveDays": 7},
    },
    {
        "slug": "gym_explorer",
        "name": "Gym Explorer",
        "description": "Send climbs at five different gyms",
        "icon": "🗺️",
        "criteria": {"uniqueGyms": 5},
    },
]


async def seed_badges(db: AsyncSession) -> int:
    """Upsert the default badge catalog. Returns number of badges seeded."""
    seeded = 0
    for sort_order, badge_data in enumerate(BADGE_SEED_DATA, start=1):
        await upsert_badge(db, sort_order=sort_order, **badge_data)
        seeded += 1

    await db.commit()
    logger.info("Seeded %d badge definitions", seeded)
    return seeded
