"""Shared FastAPI dependencies."""

import secrets
from collections.abc import AsyncGenerator

from fastapi import Header, HTTPException

from betabreaker.config import get_settings
from betabreaker.database import get_session as _get_session
from betabreaker.redis_client import get_redis as _get_redis

get_db = _get_session


async def get_redis_dep() -> AsyncGenerator[object, None]:
    """Yield the Redis client as a FastAPI dependency."""
    yield _get_redis()


async def require_admin(x_admin_token: str | None = Header(default=None)) -> None:
    """Reject requests that do not carry the configured admin token."""
    expected = get_settings().admin_token
    if not expected:
        raise HTTPException(status_code=503, detail="Admin access is not configured")
    if x_admin_token is None or not secrets.compare_digest(x_admin_token, expected):
        raise HTTPException(status_code=401, detail="Invalid admin token")
