"""Badge and stats endpoints, including badge administration."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession

from betabreaker.climbing.service import get_qualifying_records
from betabreaker.database import get_session
from betabreaker.dependencies import get_redis_dep, require_admin
from betabreaker.gamification.badge_engine import BadgeEvaluationEngine
from betabreaker.gamification.badge_service import (
    delete_badge,
    get_badge_by_slug,
    get_earned_counts,
    list_user_badges,
    load_badge_catalog,
    upsert_badge,
)
from betabreaker.gamification.schemas import (
    AllBadgesResponse,
    BadgeCatalogEntry,
    BadgeCheckResponse,
    BadgeResponse,
    BadgeUpsertRequest,
    EarnedBadgeResponse,
    UserBadgesResponse,
    UserStatsResponse,
)
from betabreaker.gamification.stats import aggregate
from betabreaker.users.service import get_user

router = APIRouter(prefix="/api/v1", tags=["Gamification"])


# ── Public endpoints ──


@router.get("/badges", response_model=AllBadgesResponse)
async def list_badges(db: AsyncSession = Depends(get_session)):
    """Get all badge definitions with earn counts."""
    badges = await load_badge_catalog(db)
    counts = await get_earned_counts(db)
    return AllBadgesResponse(
        badges=[
            BadgeCatalogEntry(
                **BadgeResponse.model_validate(b).model_dump(),
                total_earned=counts.get(b.id, 0),
            )
            for b in badges
        ]
    )


@router.get("/badges/{slug}", response_model=BadgeCatalogEntry)
async def get_badge(slug: str, db: AsyncSession = Depends(get_session)):
    badge = await get_badge_by_slug(db, slug)
    if badge is None:
        raise HTTPException(status_code=404, detail="Badge not found")
    counts = await get_earned_counts(db)
    return BadgeCatalogEntry(
        **BadgeResponse.model_validate(badge).model_dump(),
        total_earned=counts.get(badge.id, 0),
    )


@router.get("/users/{user_id}/badges", response_model=UserBadgesResponse)
async def get_user_badges(user_id: int, db: AsyncSession = Depends(get_session)):
    """Badges earned by a user, newest first."""
    if await get_user(db, user_id) is None:
        raise HTTPException(status_code=404, detail="User not found")
    earned = await list_user_badges(db, user_id)
    catalog = await load_badge_catalog(db)
    return UserBadgesResponse(
        earned=[
            EarnedBadgeResponse(badge=BadgeResponse.model_validate(ub.badge), earned_at=ub.earned_at)
            for ub in earned
        ],
        total_available=len(catalog),
        total_earned=len(earned),
    )


@router.get("/users/{user_id}/stats", response_model=UserStatsResponse)
async def get_user_stats(user_id: int, db: AsyncSession = Depends(get_session)):
    """Aggregated climbing stats used for badge eligibility."""
    if await get_user(db, user_id) is None:
        raise HTTPException(status_code=404, detail="User not found")
    stats = aggregate(await get_qualifying_records(db, user_id))
    return UserStatsResponse(**stats.as_dict())


@router.post("/users/{user_id}/badges/check", response_model=BadgeCheckResponse)
async def check_user_badges(
    user_id: int,
    db: AsyncSession = Depends(get_session),
    redis: object = Depends(get_redis_dep),
):
    """Run a badge evaluation on demand and return anything newly awarded."""
    if await get_user(db, user_id) is None:
        raise HTTPException(status_code=404, detail="User not found")
    awarded = await BadgeEvaluationEngine(db, redis).evaluate(user_id)
    return BadgeCheckResponse(awarded=[BadgeResponse.model_validate(b) for b in awarded])


# ── Admin endpoints ──


@router.put("/admin/badges/{slug}", response_model=BadgeResponse, dependencies=[Depends(require_admin)])
async def admin_upsert_badge(slug: str, body: BadgeUpsertRequest, db: AsyncSession = Depends(get_session)):
    """Create or replace a badge definition."""
    badge = await upsert_badge(
        db,
        slug=slug,
        name=body.name,
        criteria=body.criteria,
        description=body.description,
        icon=body.icon,
        sort_order=body.sort_order,
        is_active=body.is_active,
    )
    await db.commit()
    return BadgeResponse.model_validate(badge)


@router.delete("/admin/badges/{slug}", status_code=204, dependencies=[Depends(require_admin)])
async def admin_delete_badge(slug: str, db: AsyncSession = Depends(get_session)) -> Response:
    if not await delete_badge(db, slug):
        raise HTTPException(status_code=404, detail="Badge not found")
    await db.commit()
    return Response(status_code=204)
