"""004: create orders table

Revision ID: 004
Revises: 003
Create Date: 2026-10-17
"""
from typing import Sequence, Union

from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE orders (
            id              VARCHAR(64)  PRIMARY KEY,
            owner_id        VARCHAR(64)  NOT NULL,
            customer_email  VARCHAR(255) NOT NULL,
            total_price     BIGINT       NOT NULL,
            timestamp       TIMESTAMPTZ  NOT NULL,
            purchased_items JSONB        NOT NULL DEFAULT '[]'::jsonb,
            billing_info    JSONB,
            created_at      TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_orders_total_gte_0 CHECK (total_price >= 0)
        );
    """)
    op.execute("CREATE INDEX idx_orders_owner ON orders (owner_id);")
    op.execute("CREATE INDEX idx_orders_customer_email ON orders (customer_email, timestamp DESC);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS orders CASCADE;")
