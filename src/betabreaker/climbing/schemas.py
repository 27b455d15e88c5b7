"""Pydantic models for gym, climb and climb-log endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from betabreaker.gamification.schemas import BadgeResponse
from betabreaker.gamification.scoring import AttemptType, ClimbType


class GymCreate(BaseModel):
    name: str = Field(min_length=1, max_length=128)
    location: str | None = Field(default=None, max_length=256)


class GymResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    location: str | None = None


class ClimbCreate(BaseModel):
    name: str = Field(min_length=1, max_length=128)
    grade: int = Field(ge=1)
    type: ClimbType = ClimbType.BOULDER


class ClimbResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    gym_id: int
    name: str
    grade: int
    type: str


class ClimbLogCreate(BaseModel):
    user_id: int
    climb_id: int
    attempt_type: AttemptType
    attempts: int | None = Field(default=None, ge=1)
    personal_rating: int | None = Field(default=None, ge=1, le=5)
    notes: str | None = None
    date: datetime | None = None


class ClimbLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    climb_id: int
    attempt_type: str
    attempts: int | None = None
    personal_rating: int | None = None
    notes: str | None = None
    logged_at: datetime


class ClimbLogCreatedResponse(BaseModel):
    log: ClimbLogResponse
    new_badges: list[BadgeResponse]


class ClimbLogListResponse(BaseModel):
    logs: list[ClimbLogResponse]
