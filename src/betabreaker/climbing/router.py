"""Gym, climb and climb-log endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from betabreaker.climbing.schemas import (
    ClimbCreate,
    ClimbLogCreate,
    ClimbLogCreatedResponse,
    ClimbLogListResponse,
    ClimbLogResponse,
    ClimbResponse,
    GymCreate,
    GymResponse,
)
from betabreaker.climbing.service import (
    create_climb,
    create_climb_log,
    create_gym,
    get_climb,
    get_gym,
    list_climbs,
    list_gyms,
    list_user_climb_logs,
)
from betabreaker.config import get_settings
from betabreaker.database import get_session
from betabreaker.dependencies import get_redis_dep
from betabreaker.gamification.badge_engine import BadgeEvaluationEngine
from betabreaker.gamification.schemas import BadgeResponse
from betabreaker.gamification.scoring import is_qualifying
from betabreaker.users.service import get_user

router = APIRouter(prefix="/api/v1", tags=["Climbing"])


# ── Gyms & climbs ──


@router.get("/gyms", response_model=list[GymResponse])
async def read_gyms(db: AsyncSession = Depends(get_session)):
    return [GymResponse.model_validate(g) for g in await list_gyms(db)]


@router.post("/gyms", response_model=GymResponse, status_code=201)
async def add_gym(body: GymCreate, db: AsyncSession = Depends(get_session)):
    gym = await create_gym(db, body.name, body.location)
    await db.commit()
    return GymResponse.model_validate(gym)


@router.get("/gyms/{gym_id}/climbs", response_model=list[ClimbResponse])
async def read_gym_climbs(gym_id: int, db: AsyncSession = Depends(get_session)):
    if await get_gym(db, gym_id) is None:
        raise HTTPException(status_code=404, detail="Gym not found")
    return [ClimbResponse.model_validate(c) for c in await list_climbs(db, gym_id)]


@router.post("/gyms/{gym_id}/climbs", response_model=ClimbResponse, status_code=201)
async def add_climb(gym_id: int, body: ClimbCreate, db: AsyncSession = Depends(get_session)):
    if await get_gym(db, gym_id) is None:
        raise HTTPException(status_code=404, detail="Gym not found")
    climb = await create_climb(db, gym_id, body.name, body.grade, body.type.value)
    await db.commit()
    return ClimbResponse.model_validate(climb)


# ── Climb logs ──


@router.post("/climb-logs", response_model=ClimbLogCreatedResponse, status_code=201)
async def log_climb(
    body: ClimbLogCreate,
    db: AsyncSession = Depends(get_session),
    redis: object = Depends(get_redis_dep),
):
    """Record a climb. Sends and flashes run a badge check afterwards."""
    if await get_user(db, body.user_id) is None:
        raise HTTPException(status_code=404, detail="User not found")
    if await get_climb(db, body.climb_id) is None:
        raise HTTPException(status_code=404, detail="Climb not found")

    log = await create_climb_log(
        db,
        user_id=body.user_id,
        climb_id=body.climb_id,
        attempt_type=body.attempt_type.value,
        attempts=body.attempts,
        personal_rating=body.personal_rating,
        notes=body.notes,
        logged_at=body.date,
    )
    await db.commit()
    log_response = ClimbLogResponse.model_validate(log)

    new_badges = []
    if is_qualifying(log.attempt_type):
        new_badges = await BadgeEvaluationEngine(db, redis).evaluate(body.user_id)

    return ClimbLogCreatedResponse(
        log=log_response,
        new_badges=[BadgeResponse.model_validate(b) for b in new_badges],
    )


@router.get("/users/{user_id}/climb-logs", response_model=ClimbLogListResponse)
async def read_user_climb_logs(
    user_id: int,
    limit: int = Query(50, ge=1),
    db: AsyncSession = Depends(get_session),
):
    if await get_user(db, user_id) is None:
        raise HTTPException(status_code=404, detail="User not found")
    limit = min(limit, get_settings().climb_log_page_max)
    logs = await list_user_climb_logs(db, user_id, limit=limit)
    return ClimbLogListResponse(logs=[ClimbLogResponse.model_validate(entry) for entry in logs])
