"""Initial schema: users, gyms, climbs, climb logs and badges.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-18
"""

from collections.abc import Sequence

from alembic import op

revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE IF NOT EXISTS users (
            id SERIAL PRIMARY KEY,
            username VARCHAR(64) UNIQUE NOT NULL,
            display_name VARCHAR(128),
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)

    op.execute("""
        CREATE TABLE IF NOT EXISTS gyms (
            id SERIAL PRIMARY KEY,
            name VARCHAR(128) NOT NULL,
            location VARCHAR(256),
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)

    op.execute("""
        CREATE TABLE IF NOT EXISTS climbs (
            id SERIAL PRIMARY KEY,
            gym_id INTEGER NOT NULL REFERENCES gyms(id) ON DELETE CASCADE,
            name VARCHAR(128) NOT NULL,
            grade INTEGER NOT NULL CHECK (grade >= 1),
            type VARCHAR(16) NOT NULL DEFAULT 'boulder',
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS ix_climbs_gym_id ON climbs(gym_id)")

    op.execute("""
        CREATE TABLE IF NOT EXISTS climb_logs (
            id SERIAL PRIMARY KEY,
            user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            climb_id INTEGER NOT NULL REFERENCES climbs(id) ON DELETE CASCADE,
            attempt_type VARCHAR(16) NOT NULL
                CHECK (attempt_type IN ('flashed', 'sent', 'projected')),
            attempts INTEGER,
            personal_rating INTEGER CHECK (personal_rating BETWEEN 1 AND 5),
            notes TEXT,
            logged_at TIMESTAMPTZ NOT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_climb_logs_user_date
        ON climb_logs(user_id, logged_at)
    """)

    op.execute("""
        CREATE TABLE IF NOT EXISTS badge_definitions (
            id SERIAL PRIMARY KEY,
            slug VARCHAR(64) UNIQUE NOT NULL,
            name VARCHAR(128) NOT NULL,
            description TEXT,
            icon VARCHAR(256),
            criteria JSONB NOT NULL DEFAULT '{}',
            sort_order INTEGER NOT NULL DEFAULT 0,
            is_active BOOLEAN NOT NULL DEFAULT true,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)

    op.execute("""
        CREATE TABLE IF NOT EXISTS user_badges (
            id SERIAL PRIMARY KEY,
            user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            badge_id INTEGER NOT NULL REFERENCES badge_definitions(id) ON DELETE CASCADE,
            earned_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT user_badges_user_id_badge_id_key UNIQUE (user_id, badge_id)
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS ix_user_badges_user_id ON user_badges(user_id)")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS user_badges CASCADE")
    op.execute("DROP TABLE IF EXISTS badge_definitions CASCADE")
    op.execute("DROP TABLE IF EXISTS climb_logs CASCADE")
    op.execute("DROP TABLE IF EXISTS climbs CASCADE")
    op.execute("DROP TABLE IF EXISTS gyms CASCADE")
    op.execute("DROP TABLE IF EXISTS users CASCADE")
