"""create auth schema

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa

revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.execute('CREATE SCHEMA IF NOT EXISTS auth')

    op.execute("""
        CREATE TABLE IF NOT EXISTS auth.users (
            user_id             BIGSERIAL PRIMARY KEY,
            email               VARCHAR(255) NOT NULL UNIQUE,
            username            VARCHAR(30) NOT NULL UNIQUE,
            password_hash       VARCHAR(255) NOT NULL,
            role                VARCHAR(10) NOT NULL DEFAULT 'user',
            created_at          TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT check_user_role CHECK (role IN ('user', 'admin'))
        )
    """)

    op.execute("""
        CREATE TABLE IF NOT EXISTS auth.refresh_tokens (
            token_id             BIGSERIAL PRIMARY KEY,
            user_id              BIGINT NOT NULL REFERENCES auth.users(user_id) ON DELETE CASCADE,
            token_hash           VARCHAR(64) NOT NULL UNIQUE,
            expires_at           TIMESTAMPTZ NOT NULL,
            revoked_at           TIMESTAMPTZ,
            replaced_by_token_id BIGINT REFERENCES auth.refresh_tokens(token_id) ON DELETE SET NULL,
            created_by_ip        VARCHAR(45),
            user_agent           VARCHAR(512),
            created_at           TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)

    op.create_index('idx_refresh_tokens_user_id', 'refresh_tokens', ['user_id'], schema='auth')
    op.create_index('idx_refresh_tokens_expires_at', 'refresh_tokens', ['expires_at'], schema='auth')
    op.create_index(
        'idx_refresh_tokens_active_by_user',
        'refresh_tokens',
        ['user_id'],
        schema='auth',
        postgresql_where=sa.text('revoked_at IS NULL')
    )

    op.execute("""
        CREATE OR REPLACE FUNCTION auth.update_updated_at()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = NOW();
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql
    """)

    op.execute("""
        CREATE TRIGGER trig_users_updated_at
            BEFORE UPDATE ON auth.users
            FOR EACH ROW
            EXECUTE FUNCTION auth.update_updated_at()
    """)


def downgrade() -> None:
    op.execute("DROP TRIGGER IF EXISTS trig_users_updated_at ON auth.users")
    op.execute("DROP FUNCTION IF EXISTS auth.update_updated_at()")

    op.drop_index('idx_refresh_tokens_active_by_user', table_name='refresh_tokens', schema='auth')
    op.drop_index('idx_refresh_tokens_expires_at', table_name='refresh_tokens', schema='auth')
    op.drop_index('idx_refresh_tokens_user_id', table_name='refresh_tokens', schema='auth')

    op.execute("DROP TABLE IF EXISTS auth.refresh_tokens")
    op.execute("DROP TABLE IF EXISTS auth.users")
    op.execute("DROP SCHEMA IF EXISTS auth")
