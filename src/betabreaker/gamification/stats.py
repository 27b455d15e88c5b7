"""Stats aggregation: folds a climb-log snapshot into a summary."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from betabreaker.gamification.scoring import AttemptType, is_qualifying, points_for


@dataclass(frozen=True)
class ClimbRecord:
    """A climb log joined with the climb attributes badges care about."""

    log_id: int
    user_id: int
    climb_id: int
    attempt_type: str
    logged_at: datetime | date | str
    grade: int
    climb_type: str
    gym_id: int

    @property
    def is_flash(self) -> bool:
        return self.attempt_type == AttemptType.FLASHED.value

    @property
    def points(self) -> int:
        return points_for(self.grade, self.climb_type)


@dataclass(frozen=True)
class UserStats:
    climb_count: int = 0
    highest_grade: int = 0
    flash_count: int = 0
    unique_gyms: int = 0
    consecutive_days: int = 0
    total_points: int = 0

    def as_dict(self) -> dict[str, int]:
        return {
            "climb_count": self.climb_count,
            "highest_grade": self.highest_grade,
            "flash_count": self.flash_count,
            "unique_gyms": self.unique_gyms,
            "consecutive_days": self.consecutive_days,
            "total_points": self.total_points,
        }


def day_key(value: datetime | date | str) -> date:
    """Truncate a timestamp to its calendar day.

    Strings are read as ISO-8601; only the leading ``YYYY-MM-DD`` is used.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value[:10])


def longest_day_streak(days: Iterable[date]) -> int:
    """Length of the longest run of calendar-adjacent days."""
    ordered = sorted(set(days))
    if not ordered:
        return 0

    longest = current = 1
    for prev, curr in zip(ordered, ordered[1:]):
        if curr - prev == timedelta(days=1):
            current += 1
            longest = max(longest, current)
        else:
            current = 1
    return longest


def aggregate(records: Iterable[ClimbRecord]) -> UserStats:
    """Compute a UserStats summary. Non-qualifying attempts are ignored."""
    qualifying = [r for r in records if is_qualifying(r.attempt_type)]
    if not qualifying:
        return UserStats()

    return UserStats(
        climb_count=len(qualifying),
        highest_grade=max(0, *(r.grade or 0 for r in qualifying)),
        flash_count=sum(1 for r in qualifying if r.is_flash),
        unique_gyms=len({r.gym_id for r in qualifying}),
        consecutive_days=longest_day_streak(day_key(r.logged_at) for r in qualifying),
        total_points=sum(r.points for r in qualifying),
    )
