"""Badge criteria: parsing the catalog's raw JSON into typed variants.

The catalog stores criteria as free-form JSON authored by admins. Three
shapes are understood:

* ``{"type": "first_send"}``
* ``{"type": "level", "level": 6}``
* legacy flat thresholds, e.g. ``{"climbCount": 10, "flashCount": 5}``

Anything else parses to :class:`NoCriteria`, which is vacuously satisfied
but never relevant to a trigger, so it can not be awarded by the engine.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from typing import Any, Union

from betabreaker.gamification.stats import UserStats

logger = logging.getLogger(__name__)

# External camelCase key -> UserStats attribute
LEGACY_FIELDS: dict[str, str] = {
    "climbCount": "climb_count",
    "highestGrade": "highest_grade",
    "flashCount": "flash_count",
    "uniqueGyms": "unique_gyms",
    "consecutiveDays": "consecutive_days",
    "totalPoints": "total_points",
}


@dataclass(frozen=True)
class FirstSend:
    pass


@dataclass(frozen=True)
class LevelAtLeast:
    level: int


@dataclass(frozen=True)
class LegacyThresholds:
    climb_count: int | None = None
    highest_grade: int | None = None
    flash_count: int | None = None
    unique_gyms: int | None = None
    consecutive_days: int | None = None
    total_points: int | None = None

    def present(self) -> dict[str, int]:
        """Thresholds that were actually set, keyed by UserStats attribute."""
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name) is not None}


@dataclass(frozen=True)
class NoCriteria:
    raw: Any = None


Criteria = Union[FirstSend, LevelAtLeast, LegacyThresholds, NoCriteria]


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def parse_criteria(raw: Any) -> Criteria:
    """Parse a catalog criteria payload. Never raises."""
    if not isinstance(raw, dict):
        if raw is not None:
            logger.warning("Unrecognized badge criteria (not an object): %r", raw)
        return NoCriteria(raw)

    kind = raw.get("type")
    if kind == "first_send":
        return FirstSend()
    if kind == "level":
        level = _as_int(raw.get("level"))
        if level is None:
            logger.warning("Level badge criteria without an integer level: %r", raw)
            return NoCriteria(raw)
        return LevelAtLeast(level)
    if kind is not None:
        logger.warning("Unrecognized badge criteria type %r", kind)
        return NoCriteria(raw)

    thresholds: dict[str, int] = {}
    for key, attr in LEGACY_FIELDS.items():
        if key not in raw:
            continue
        value = _as_int(raw[key])
        if value is None:
            logger.warning("Ignoring non-integer badge threshold %s=%r", key, raw[key])
            continue
        thresholds[attr] = value

    if not thresholds:
        if raw:
            logger.warning("Unrecognized badge criteria fields: %s", sorted(raw))
        return NoCriteria(raw)
    return LegacyThresholds(**thresholds)


def is_satisfied(criteria: Criteria, stats: UserStats) -> bool:
    """Whether cumulative stats meet the criteria."""
    if isinstance(criteria, FirstSend):
        return stats.climb_count >= 1
    if isinstance(criteria, LevelAtLeast):
        return stats.highest_grade >= criteria.level
    if isinstance(criteria, LegacyThresholds):
        return all(getattr(stats, attr) >= threshold for attr, threshold in criteria.present().items())
    return True
