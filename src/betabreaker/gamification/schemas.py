"""Pydantic models for badge endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class BadgeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    slug: str
    name: str
    description: str | None = None
    icon: str | None = None
    criteria: Any = None
    is_active: bool = True


class BadgeCatalogEntry(BadgeResponse):
    total_earned: int = 0


class AllBadgesResponse(BaseModel):
    badges: list[BadgeCatalogEntry]


class EarnedBadgeResponse(BaseModel):
    badge: BadgeResponse
    earned_at: datetime


class UserBadgesResponse(BaseModel):
    earned: list[EarnedBadgeResponse]
    total_available: int
    total_earned: int


class BadgeCheckResponse(BaseModel):
    awarded: list[BadgeResponse]


class BadgeUpsertRequest(BaseModel):
    name: str = Field(min_length=1, max_length=128)
    description: str | None = None
    icon: str | None = Field(default=None, max_length=256)
    criteria: dict[str, Any] = {}
    sort_order: int = 0
    is_active: bool = True


class UserStatsResponse(BaseModel):
    climb_count: int
    highest_grade: int
    flash_count: int
    unique_gyms: int
    consecutive_days: int
    total_points: int
