"""002: create accounts table

Revision ID: 002
Revises: 001
Create Date: 2026-10-17
"""
from typing import Sequence, Union

from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE accounts (
            id              VARCHAR(64)  PRIMARY KEY,
            name            VARCHAR(100) NOT NULL,
            email           VARCHAR(255) NOT NULL,
            password_hash   VARCHAR(255) NOT NULL,
            listings        JSONB        NOT NULL DEFAULT '[]'::jsonb,
            cart            JSONB        NOT NULL DEFAULT '[]'::jsonb,
            order_refs      JSONB        NOT NULL DEFAULT '[]'::jsonb,
            version         BIGINT       NOT NULL DEFAULT 0,
            created_at      TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_accounts_email UNIQUE (email)
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_accounts_updated_at
            BEFORE UPDATE ON accounts
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute(
        "COMMENT ON COLUMN accounts.version IS "
        "'Optimistic lock: every save must match and bump it';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS accounts CASCADE;")
