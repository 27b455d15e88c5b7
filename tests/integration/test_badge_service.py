"""Badge catalog persistence: awards, admin upserts and seeding."""

from __future__ import annotations

import pytest
from sqlalchemy import func, select

from betabreaker.db.models import BadgeDefinition, UserBadge
from betabreaker.gamification.badge_service import (
    AwardOutcome,
    award_badge,
    delete_badge,
    get_badge_by_slug,
    get_earned_badge_ids,
    get_earned_counts,
    list_user_badges,
    load_badge_catalog,
    upsert_badge,
)
from betabreaker.gamification.seed import BADGE_SEED_DATA, seed_badges
from conftest import make_badge, make_user


class TestAwardBadge:
    @pytest.mark.asyncio
    async def test_insert_then_already_earned(self, db_session):
        user = await make_user(db_session)
        badge = await make_badge(db_session, "first_send", {"type": "first_send"})

        assert await get_earned_badge_ids(db_session, user.id) == set()
        assert await award_badge(db_session, user.id, badge.id) is AwardOutcome.INSERTED
        assert await award_badge(db_session, user.id, badge.id) is AwardOutcome.ALREADY_EARNED
        await db_session.commit()

        assert await get_earned_badge_ids(db_session, user.id) == {badge.id}

    @pytest.mark.asyncio
    async def test_same_badge_for_different_users(self, db_session):
        alex = await make_user(db_session, "alex")
        sam = await make_user(db_session, "sam")
        badge = await make_badge(db_session, "first_send", {"type": "first_send"})

        assert await award_badge(db_session, alex.id, badge.id) is AwardOutcome.INSERTED
        assert await award_badge(db_session, sam.id, badge.id) is AwardOutcome.INSERTED
        await db_session.commit()

        assert await get_earned_counts(db_session) == {badge.id: 2}

    @pytest.mark.asyncio
    async def test_list_user_badges_loads_definition(self, db_session):
        user = await make_user(db_session)
        badge = await make_badge(db_session, "flash_1", {"flashCount": 1})
        await award_badge(db_session, user.id, badge.id)
        await db_session.commit()

        earned = await list_user_badges(db_session, user.id)
        assert [ub.badge.slug for ub in earned] == ["flash_1"]
        assert earned[0].earned_at is not None


class TestCatalog:
    @pytest.mark.asyncio
    async def test_catalog_ordered_and_active_only(self, db_session):
        await make_badge(db_session, "later", {}, sort_order=5)
        await make_badge(db_session, "sooner", {}, sort_order=1)
        await upsert_badge(db_session, "hidden", "Hidden", {}, is_active=False)
        await db_session.commit()

        assert [b.slug for b in await load_badge_catalog(db_session)] == ["sooner", "later"]

    @pytest.mark.asyncio
    async def test_upsert_can_retire_and_restore(self, db_session):
        await upsert_badge(db_session, "crimp_king", "Crimp King", {"climbCount": 10})
        await db_session.commit()

        retired = await upsert_badge(db_session, "crimp_king", "Crimp King", {"climbCount": 10}, is_active=False)
        await db_session.commit()
        assert retired.is_active is False
        assert await load_badge_catalog(db_session) == []

        # Leaving the flag out keeps the badge retired.
        renamed = await upsert_badge(db_session, "crimp_king", "Crimp Royalty", {"climbCount": 10})
        await db_session.commit()
        assert renamed.is_active is False

        await upsert_badge(db_session, "crimp_king", "Crimp Royalty", {"climbCount": 10}, is_active=True)
        await db_session.commit()
        assert [b.slug for b in await load_badge_catalog(db_session)] == ["crimp_king"]

    @pytest.mark.asyncio
    async def test_upsert_creates_then_replaces(self, db_session):
        created = await upsert_badge(db_session, "crimp_king", "Crimp King", {"climbCount": 10})
        await db_session.commit()

        updated = await upsert_badge(
            db_session,
            "crimp_king",
            "Crimp Royalty",
            {"climbCount": 25},
            description="Twenty-five sends",
            sort_order=3,
        )
        await db_session.commit()

        assert updated.id == created.id
        assert updated.name == "Crimp Royalty"
        assert updated.criteria == {"climbCount": 25}
        assert updated.sort_order == 3
        count = await db_session.scalar(select(func.count()).select_from(BadgeDefinition))
        assert count == 1

    @pytest.mark.asyncio
    async def test_delete_removes_awards(self, db_session):
        user = await make_user(db_session)
        badge = await make_badge(db_session, "first_send", {"type": "first_send"})
        await award_badge(db_session, user.id, badge.id)
        await db_session.commit()

        assert await delete_badge(db_session, "first_send")
        await db_session.commit()

        assert await get_badge_by_slug(db_session, "first_send") is None
        remaining = await db_session.scalar(select(func.count()).select_from(UserBadge))
        assert remaining == 0

    @pytest.mark.asyncio
    async def test_delete_unknown_slug(self, db_session):
        assert not await delete_badge(db_session, "nope")


class TestSeed:
    @pytest.mark.asyncio
    async def test_seed_is_idempotent(self, db_session):
        assert await seed_badges(db_session) == len(BADGE_SEED_DATA)
        assert await seed_badges(db_session) == len(BADGE_SEED_DATA)

        catalog = await load_badge_catalog(db_session)
        assert len(catalog) == len(BADGE_SEED_DATA) == 27
        assert catalog[0].slug == "first_send"

    def test_seed_slugs_are_unique(self):
        slugs = [b["slug"] for b in BADGE_SEED_DATA]
        assert len(slugs) == len(set(slugs))

    @pytest.mark.asyncio
    async def test_seed_restores_edited_badge(self, db_session):
        await seed_badges(db_session)
        await upsert_badge(db_session, "first_send", "Renamed", {"type": "first_send"})
        await db_session.commit()

        await seed_badges(db_session)
        badge = await get_badge_by_slug(db_session, "first_send")
        await db_session.refresh(badge)
        assert badge.name == "First Send"

    @pytest.mark.asyncio
    async def test_seed_keeps_retired_badge_retired(self, db_session):
        await seed_badges(db_session)
        await upsert_badge(db_session, "first_send", "First Send", {"type": "first_send"}, is_active=False)
        await db_session.commit()

        await seed_badges(db_session)
        catalog = await load_badge_catalog(db_session)
        assert "first_send" not in {b.slug for b in catalog}
        assert len(catalog) == len(BADGE_SEED_DATA) - 1
