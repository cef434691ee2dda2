"""005: create notifications table

Revision ID: 005
Revises: 004
Create Date: 2026-10-01
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE notifications (
            id              VARCHAR(32)     PRIMARY KEY,
            user_id         VARCHAR(64)     NOT NULL,
            kind            VARCHAR(32)     NOT NULL,
            title           VARCHAR(200)    NOT NULL,
            message         TEXT            NOT NULL,
            metadata        JSONB           NOT NULL DEFAULT '{}',
            is_read         BOOLEAN         NOT NULL DEFAULT FALSE,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_notifications_kind CHECK (kind IN ('ORDER_UPDATE', 'GENERAL'))
        );
    """)
    op.execute("CREATE INDEX idx_notifications_user ON notifications (user_id, created_at DESC);")
    op.execute("""
        CREATE INDEX idx_notifications_unread
        ON notifications (user_id)
        WHERE is_read = FALSE;
    """)
    op.execute("COMMENT ON TABLE notifications IS 'Append-only notification journal; only is_read changes';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS notifications CASCADE;")
