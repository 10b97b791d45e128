"""Baseline: users rollup, session ledger, daily cap counters.

Revision ID: 001_baseline
Revises: None
Create Date: 2026-10-19
"""

from collections.abc import Sequence

from alembic import op

revision: str = "001_baseline"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # --- Users (lifetime rollups) ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS users (
            address VARCHAR(128) PRIMARY KEY,
            display_name VARCHAR(32),
            display_name_normalized VARCHAR(32) UNIQUE,
            reward_total BIGINT NOT NULL DEFAULT 0,
            distance_total DOUBLE PRECISION NOT NULL DEFAULT 0,
            best_duration DOUBLE PRECISION NOT NULL DEFAULT 0,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_users_address_created
        ON users(address, created_at)
    """)

    # --- Session ledger (append-only) ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS game_sessions (
            id BIGSERIAL PRIMARY KEY,
            address VARCHAR(128) NOT NULL REFERENCES users(address) ON DELETE CASCADE,
            game VARCHAR(32) NOT NULL DEFAULT 'unknown',
            reward_amount BIGINT NOT NULL DEFAULT 0 CHECK (reward_amount >= 0),
            distance DOUBLE PRECISION NOT NULL DEFAULT 0,
            best_duration DOUBLE PRECISION NOT NULL DEFAULT 0,
            score DOUBLE PRECISION NOT NULL DEFAULT 0,
            streak INTEGER NOT NULL DEFAULT 0,
            duration_ms BIGINT NOT NULL DEFAULT 0,
            idempotency_key VARCHAR(64),
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_game_sessions_address_created
        ON game_sessions(address, created_at)
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_game_sessions_game_created
        ON game_sessions(game, created_at)
    """)
    op.execute("""
        CREATE UNIQUE INDEX IF NOT EXISTS uq_game_sessions_address_idempotency
        ON game_sessions(address, idempotency_key)
        WHERE idempotency_key IS NOT NULL
    """)

    # --- Daily cap lock anchors ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS daily_reward_counters (
            address VARCHAR(128) NOT NULL REFERENCES users(address) ON DELETE CASCADE,
            game VARCHAR(32) NOT NULL,
            day DATE NOT NULL,
            credited BIGINT NOT NULL DEFAULT 0,
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            PRIMARY KEY (address, game, day)
        )
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS daily_reward_counters")
    op.execute("DROP TABLE IF EXISTS game_sessions")
    op.execute("DROP TABLE IF EXISTS users")
