"""Dialect-aware INSERT ... ON CONFLICT construction."""

from __future__ import annotations

from typing import Any

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession


def conflict_insert(db: AsyncSession, model: Any) -> Any:
    """Return an insert() for ``model`` that supports on_conflict_* clauses.

    PostgreSQL in production, SQLite in tests; both expose the same
    ``on_conflict_do_nothing`` / ``on_conflict_do_update`` API.
    """
    if db.get_bind().dialect.name == "sqlite":
        return sqlite.insert(model)
    return postgresql.insert(model)
