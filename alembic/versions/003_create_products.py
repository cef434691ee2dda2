"""003: create products table (read by order creation; written by the catalog service)

Revision ID: 003
Revises: 002
Create Date: 2026-10-01
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE products (
            id              VARCHAR(32)     PRIMARY KEY,
            shopkeeper_id   UUID            NOT NULL REFERENCES users (id),
            name            VARCHAR(200)    NOT NULL,
            price           BIGINT          NOT NULL,
            images          TEXT[]          NOT NULL DEFAULT '{}',
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_products_price CHECK (price >= 0)
        );
    """)
    op.execute("CREATE INDEX idx_products_shopkeeper ON products (shopkeeper_id);")
    op.execute("""
        CREATE TRIGGER trg_products_updated_at
            BEFORE UPDATE ON products
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS products CASCADE;")
