"""Trigger derivation and badge matching for a single evaluation.

Triggers are derived from the newest qualifying climb only, so each award is
attached to the action that caused it, while eligibility itself is checked
against cumulative stats.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

from betabreaker.gamification.criteria import (
    Criteria,
    FirstSend,
    LegacyThresholds,
    LevelAtLeast,
    is_satisfied,
    parse_criteria,
)
from betabreaker.gamification.scoring import is_qualifying
from betabreaker.gamification.stats import ClimbRecord, UserStats, aggregate

MIN_MILESTONE_GRADE = 3
CLIMB_MILESTONES: tuple[int, ...] = (5, 10, 25, 50, 100, 250, 500)
POINTS_MILESTONES: tuple[int, ...] = (100, 500, 1000, 2500, 5000, 10000)


class TriggerKind(str, Enum):
    FIRST_SEND = "first_send"
    GRADE_MILESTONE = "grade_milestone"
    FLASH_ACHIEVEMENT = "flash_achievement"
    CLIMB_MILESTONE = "climb_milestone"
    POINTS_MILESTONE = "points_milestone"


@dataclass(frozen=True)
class Trigger:
    kind: TriggerKind
    value: int | None = None


@dataclass(frozen=True)
class EvaluationContext:
    stats: UserStats
    recent: ClimbRecord
    previous_highest_grade: int
    triggers: tuple[Trigger, ...]


class BadgeLike(Protocol):
    id: Any
    criteria: Any


def crossed_points_milestone(total_points: int, recent_points: int) -> int | None:
    """The lowest milestone that the newest climb pushed the total across.

    Only one milestone is reported even when a single climb crosses several.
    """
    before = total_points - recent_points
    for milestone in POINTS_MILESTONES:
        if total_points >= milestone and before < milestone:
            return milestone
    return None


def build_context(records: Sequence[ClimbRecord]) -> EvaluationContext | None:
    """Derive stats and triggers from records ordered oldest to newest.

    Returns None when the user has no qualifying climbs.
    """
    qualifying = [r for r in records if is_qualifying(r.attempt_type)]
    if not qualifying:
        return None

    stats = aggregate(qualifying)
    recent = qualifying[-1]
    previous_highest = max((r.grade or 0 for r in qualifying[:-1]), default=0)
    recent_grade = recent.grade or 0

    triggers: list[Trigger] = []
    if stats.climb_count == 1:
        triggers.append(Trigger(TriggerKind.FIRST_SEND))
    if recent_grade > previous_highest and recent_grade >= MIN_MILESTONE_GRADE:
        triggers.append(Trigger(TriggerKind.GRADE_MILESTONE, recent_grade))
    if recent.is_flash:
        triggers.append(Trigger(TriggerKind.FLASH_ACHIEVEMENT, stats.flash_count))
    if stats.climb_count in CLIMB_MILESTONES:
        triggers.append(Trigger(TriggerKind.CLIMB_MILESTONE, stats.climb_count))
    milestone = crossed_points_milestone(stats.total_points, recent.points)
    if milestone is not None:
        triggers.append(Trigger(TriggerKind.POINTS_MILESTONE, milestone))

    return EvaluationContext(
        stats=stats,
        recent=recent,
        previous_highest_grade=previous_highest,
        triggers=tuple(triggers),
    )


def matches_trigger(criteria: Criteria, trigger: Trigger, stats: UserStats) -> bool:
    """Whether a badge's criteria is the kind this trigger can award."""
    if trigger.kind is TriggerKind.FIRST_SEND:
        return isinstance(criteria, FirstSend)
    if trigger.kind is TriggerKind.GRADE_MILESTONE:
        # Exact grade only: reaching 6 does not award a level-5 badge.
        if isinstance(criteria, LevelAtLeast):
            return criteria.level == trigger.value
        return isinstance(criteria, LegacyThresholds) and criteria.highest_grade == trigger.value
    if not isinstance(criteria, LegacyThresholds):
        return False
    if trigger.kind is TriggerKind.FLASH_ACHIEVEMENT:
        return criteria.flash_count is not None
    if trigger.kind is TriggerKind.CLIMB_MILESTONE:
        return criteria.climb_count == stats.climb_count
    if trigger.kind is TriggerKind.POINTS_MILESTONE:
        return criteria.total_points == trigger.value
    return False


def is_relevant(criteria: Criteria, context: EvaluationContext) -> bool:
    return any(matches_trigger(criteria, t, context.stats) for t in context.triggers)


def select_new_badges(
    context: EvaluationContext,
    catalog: Iterable[BadgeLike],
    earned_badge_ids: set[Any],
) -> list[BadgeLike]:
    """Catalog badges not yet earned that this evaluation should award."""
    selected = []
    for badge in catalog:
        if badge.id in earned_badge_ids:
            continue
        criteria = parse_criteria(badge.criteria)
        if is_relevant(criteria, context) and is_satisfied(criteria, context.stats):
            selected.append(badge)
    return selected
