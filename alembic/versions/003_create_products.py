"""003: create products table

Revision ID: 003
Revises: 002
Create Date: 2026-10-17
"""
from typing import Sequence, Union

from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # No foreign key on owner_id; the consistency checker reconciles it with accounts.
    op.execute("""
        CREATE TABLE products (
            id              VARCHAR(64)  PRIMARY KEY,
            name            VARCHAR(200) NOT NULL,
            price           BIGINT       NOT NULL,
            number_in_stock INT          NOT NULL DEFAULT 0,
            owner_id        VARCHAR(64)  NOT NULL,
            description     TEXT         NOT NULL DEFAULT '',
            image_url       VARCHAR(500),
            genre           VARCHAR(100),
            created_at      TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_products_name             UNIQUE (name),
            CONSTRAINT ck_products_price_gte_0      CHECK (price >= 0),
            CONSTRAINT ck_products_stock_gte_0      CHECK (number_in_stock >= 0)
        );
    """)
    op.execute("CREATE INDEX idx_products_owner ON products (owner_id);")
    op.execute("""
        CREATE TRIGGER trg_products_updated_at
            BEFORE UPDATE ON products
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE products IS 'Canonical product records; prices in cents';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS products CASCADE;")
