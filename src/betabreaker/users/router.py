"""User router — /api/v1/users endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from betabreaker.database import get_session
from betabreaker.users.schemas import UserCreateRequest, UserResponse
from betabreaker.users.service import create_user, get_user

router = APIRouter(prefix="/api/v1/users", tags=["Users"])


@router.post("", response_model=UserResponse, status_code=201)
async def register_user(
    body: UserCreateRequest,
    db: AsyncSession = Depends(get_session),
) -> UserResponse:
    """Create a climber profile."""
    try:
        user = await create_user(db, body.username, body.display_name)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    await db.commit()
    return UserResponse.model_validate(user)


@router.get("/{user_id}", response_model=UserResponse)
async def read_user(user_id: int, db: AsyncSession = Depends(get_session)) -> UserResponse:
    user = await get_user(db, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return UserResponse.model_validate(user)
