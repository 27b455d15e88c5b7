"""Badge evaluation engine — awards badges after a qualifying climb."""

from __future__ import annotations

from typing import Any

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from betabreaker.climbing.service import get_qualifying_records
from betabreaker.db.models import BadgeDefinition
from betabreaker.gamification.badge_service import (
    AwardOutcome,
    award_badge,
    get_earned_badge_ids,
    load_badge_catalog,
    publish_badge_earned,
)
from betabreaker.gamification.triggers import build_context, select_new_badges

# asyncpg surfaces dropped or refused connections and timeouts without
# wrapping them in SQLAlchemyError.
STORE_ERRORS: tuple[type[BaseException], ...] = (SQLAlchemyError, OSError, TimeoutError)


class BadgeEvaluationEngine:
    """Evaluates a user's climb history against the badge catalog.

    Each call recomputes from scratch, so a skipped or failed evaluation is
    picked up by the next one. Errors never propagate to the caller; they
    degrade to "no new badges this time".
    """

    def __init__(self, db: AsyncSession, redis: object = None, logger: Any = None) -> None:
        self.db = db
        self.redis = redis
        self.log = logger if logger is not None else structlog.get_logger(__name__)

    async def evaluate(self, user_id: int) -> list[BadgeDefinition]:
        """Award and return every badge newly earned by the user's latest climb."""
        log = self.log.bind(user_id=user_id)

        try:
            records = await get_qualifying_records(self.db, user_id)
            earned_ids = await get_earned_badge_ids(self.db, user_id)
            catalog = await load_badge_catalog(self.db)
        except STORE_ERRORS:
            log.warning("badge_evaluation_read_failed", exc_info=True)
            await self._rollback(log)
            return []

        context = build_context(records)
        if context is None:
            log.debug("badge_evaluation_no_qualifying_climbs")
            return []

        candidates = select_new_badges(context, catalog, earned_ids)
        if not candidates:
            log.debug(
                "badge_evaluation_no_new_badges",
                triggers=[t.kind.value for t in context.triggers],
            )
            return []

        awarded: list[BadgeDefinition] = []
        for badge in candidates:
            outcome = await self._award(user_id, badge, log)
            if outcome is AwardOutcome.INSERTED:
                awarded.append(badge)
            elif outcome is AwardOutcome.ALREADY_EARNED:
                log.info("badge_already_earned", badge=badge.slug)

        if not awarded:
            return []

        try:
            await self.db.commit()
        except STORE_ERRORS:
            log.warning("badge_evaluation_commit_failed", exc_info=True)
            await self._rollback(log)
            return []

        for badge in awarded:
            await publish_badge_earned(self.redis, user_id, badge)

        log.info(
            "badge_evaluation_awarded",
            badges=[b.slug for b in awarded],
            triggers=[t.kind.value for t in context.triggers],
            climb_log_id=context.recent.log_id,
        )
        return awarded

    async def _award(self, user_id: int, badge: BadgeDefinition, log: Any) -> AwardOutcome | None:
        """Insert one award inside a savepoint so a failure only loses this badge."""
        try:
            async with self.db.begin_nested():
                return await award_badge(self.db, user_id, badge.id)
        except STORE_ERRORS:
            log.warning("badge_award_failed", badge=badge.slug, exc_info=True)
            return None

    async def _rollback(self, log: Any) -> None:
        try:
            await self.db.rollback()
        except STORE_ERRORS:
            log.warning("badge_evaluation_rollback_failed", exc_info=True)


async def trigger_badge_check(db: AsyncSession, user_id: int, redis: object = None) -> list[BadgeDefinition]:
    """Run a badge evaluation for ``user_id`` after a qualifying action."""
    return await BadgeEvaluationEngine(db, redis).evaluate(user_id)
