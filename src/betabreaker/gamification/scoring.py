"""Per-climb point weighting used for stats and points milestones."""

from __future__ import annotations

from enum import Enum


class ClimbType(str, Enum):
    BOULDER = "boulder"
    TOP_ROPE = "top_rope"
    LEAD = "lead"


class AttemptType(str, Enum):
    FLASHED = "flashed"
    SENT = "sent"
    PROJECTED = "projected"


QUALIFYING_ATTEMPTS: frozenset[str] = frozenset({AttemptType.FLASHED.value, AttemptType.SENT.value})

POINTS_PER_GRADE: dict[str, int] = {
    ClimbType.BOULDER.value: 10,
    ClimbType.TOP_ROPE.value: 5,
    ClimbType.LEAD.value: 15,
}
DEFAULT_POINTS_PER_GRADE = 10


def points_for(grade: int | None, climb_type: str | None) -> int:
    """Weighted score of one climb. Unknown types score like a boulder."""
    multiplier = POINTS_PER_GRADE.get(_value(climb_type), DEFAULT_POINTS_PER_GRADE)
    return (grade or 0) * multiplier


def is_qualifying(attempt_type: str | None) -> bool:
    """Only flashes and sends count toward achievements."""
    return _value(attempt_type) in QUALIFYING_ATTEMPTS


def _value(raw: str | Enum | None) -> str:
    if isinstance(raw, Enum):
        return str(raw.value)
    return raw or ""
