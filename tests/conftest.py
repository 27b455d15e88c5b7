"""Shared test fixtures.

Tests run against an in-memory SQLite database built from the ORM metadata.
A single StaticPool connection keeps the database alive for the whole test.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from betabreaker.db.base import Base
from betabreaker.db.models import BadgeDefinition, Climb, ClimbLog, Gym, User

BASE_TIME = datetime(2024, 1, 1, 18, 0, tzinfo=timezone.utc)


def make_sqlite_engine(url: str = "sqlite+aiosqlite://", wal: bool = False) -> AsyncEngine:
    """SQLite engine with working SAVEPOINTs.

    The in-memory default shares one StaticPool connection. A file URL with
    ``wal=True`` gives each session its own connection so evaluations can run
    concurrently.
    """
    options: dict = {"connect_args": {"check_same_thread": False}}
    if url == "sqlite+aiosqlite://":
        options["poolclass"] = StaticPool
    eng = create_async_engine(url, **options)

    # pysqlite's implicit transaction handling breaks SAVEPOINT; let
    # SQLAlchemy emit BEGIN itself.
    @event.listens_for(eng.sync_engine, "connect")
    def _do_connect(dbapi_connection, _record):  # noqa: ANN001
        dbapi_connection.isolation_level = None
        if wal:
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.close()

    @event.listens_for(eng.sync_engine, "begin")
    def _do_begin(conn):  # noqa: ANN001
        conn.exec_driver_sql("BEGIN")

    return eng


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    eng = make_sqlite_engine()
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession, None]:
    """Get a direct database session for test setup and assertions."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def redis_mock() -> AsyncMock:
    """Stand-in for the Redis client; records publish() calls."""
    redis = AsyncMock()
    redis.publish = AsyncMock(return_value=1)
    redis.ping = AsyncMock(return_value=True)
    return redis


@pytest_asyncio.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
    redis_mock: AsyncMock,
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the app with DB and Redis dependencies overridden."""
    from betabreaker.database import get_session
    from betabreaker.dependencies import get_redis_dep
    from betabreaker.main import create_app

    app = create_app()

    async def _session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    async def _redis() -> AsyncGenerator[object, None]:
        yield redis_mock

    app.dependency_overrides[get_session] = _session
    app.dependency_overrides[get_redis_dep] = _redis

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ── Data helpers ──


async def make_user(db: AsyncSession, username: str = "alex") -> User:
    user = User(username=username, created_at=BASE_TIME)
    db.add(user)
    await db.flush()
    return user


async def make_gym(db: AsyncSession, name: str = "Crux Central") -> Gym:
    gym = Gym(name=name, created_at=BASE_TIME)
    db.add(gym)
    await db.flush()
    return gym


async def make_climb(db: AsyncSession, gym: Gym, grade: int, climb_type: str = "boulder", name: str = "") -> Climb:
    climb = Climb(
        gym_id=gym.id,
        name=name or f"{climb_type} V{grade}",
        grade=grade,
        type=climb_type,
        created_at=BASE_TIME,
    )
    db.add(climb)
    await db.flush()
    return climb


async def make_log(
    db: AsyncSession,
    user: User,
    climb: Climb,
    attempt_type: str = "sent",
    day: int = 0,
    minutes: int = 0,
) -> ClimbLog:
    """Insert a climb log ``day`` days (plus ``minutes``) after BASE_TIME."""
    when = BASE_TIME + timedelta(days=day, minutes=minutes)
    log = ClimbLog(
        user_id=user.id,
        climb_id=climb.id,
        attempt_type=attempt_type,
        logged_at=when,
        created_at=when,
    )
    db.add(log)
    await db.flush()
    return log


async def make_badge(db: AsyncSession, slug: str, criteria: object, sort_order: int = 0) -> BadgeDefinition:
    badge = BadgeDefinition(
        slug=slug,
        name=slug.replace("_", " ").title(),
        criteria=criteria,
        sort_order=sort_order,
        created_at=BASE_TIME,
    )
    db.add(badge)
    await db.flush()
    return badge
