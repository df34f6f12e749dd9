"""001: create users table

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE IF NOT EXISTS users (
            id              SERIAL          PRIMARY KEY,
            name            VARCHAR(100)    NOT NULL,
            email           VARCHAR(255)    NOT NULL,
            password_hash   VARCHAR(255)    NOT NULL,
            age             INTEGER,
            is_active       BOOLEAN         NOT NULL DEFAULT TRUE,
            created_at      TIMESTAMPTZ     NOT NULL,
            updated_at      TIMESTAMPTZ     NOT NULL,
            CONSTRAINT uq_users_email                   UNIQUE (email),
            CONSTRAINT ck_users_name_len                CHECK (LENGTH(name) >= 2),
            CONSTRAINT ck_users_updated_after_created   CHECK (updated_at >= created_at)
        );
    """)
    op.execute("COMMENT ON TABLE users IS 'User accounts — CRUD + signup/login';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS users CASCADE;")
