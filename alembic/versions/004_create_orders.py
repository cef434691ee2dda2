"""004: create orders table

Revision ID: 004
Revises: 003
Create Date: 2026-10-01
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
            id                  VARCHAR(32)     PRIMARY KEY,
            customer_id         VARCHAR(64)     NOT NULL,
            shopkeeper_id       VARCHAR(64)     NOT NULL,
            items               JSONB           NOT NULL,
            total               BIGINT          NOT NULL,
            address             JSONB           NOT NULL,
            payment_method      VARCHAR(16)     NOT NULL DEFAULT 'UPI',
            delivery_lat        DOUBLE PRECISION,
            delivery_lng        DOUBLE PRECISION,
            paid                BOOLEAN         NOT NULL DEFAULT FALSE,
            payment_provider    VARCHAR(32),
            payment_id          VARCHAR(128),
            paid_at             TIMESTAMPTZ,
            status              VARCHAR(20)     NOT NULL DEFAULT 'Pending',
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_orders_total          CHECK (total >= 0),
            CONSTRAINT ck_orders_items_array    CHECK (jsonb_typeof(items) = 'array'),
            CONSTRAINT ck_orders_payment_method CHECK (payment_method IN ('UPI', 'CARD', 'COD')),
            CONSTRAINT ck_orders_status         CHECK (
                status IN ('Pending', 'Confirmed', 'Out for Delivery', 'Delivered', 'Cancelled')
            )
        );
    """)
    op.execute("CREATE INDEX idx_orders_customer ON orders (customer_id, created_at DESC);")
    op.execute("CREATE INDEX idx_orders_shopkeeper ON orders (shopkeeper_id, created_at DESC);")
    op.execute("""
        CREATE TRIGGER trg_orders_updated_at
            BEFORE UPDATE ON orders
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE orders IS 'Placed orders; items/total snapshotted at creation, status mutable';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS orders CASCADE;")
