"""Unit tests for NotificationRepository using MagicMock AsyncSession."""
import json
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

from src.lm_notification.domain.models import Notification
from src.lm_notification.infrastructure.db_models import NotificationORM
from src.lm_notification.infrastructure.persistence import NotificationRepository


def _make_row(metadata: object) -> MagicMock:
    row = MagicMock()
    row.id = "n-1"
    row.user_id = "cust-1"
    row.kind = "ORDER_UPDATE"
    row.title = "Order Confirmed"
    row.message = "Your order #000001 was updated to: Confirmed"
    row.metadata = metadata
    row.is_read = False
    row.created_at = datetime.now(UTC)
    return row


class TestNotificationRepository:
    async def test_save_serializes_metadata(self) -> None:
        db = AsyncMock()
        n = Notification("n-1", "cust-1", "ORDER_UPDATE", "t", "m", {"order_id": "o-1"})
        await NotificationRepository().save(n, db)
        params = db.execute.call_args[0][1]
        assert json.loads(params["metadata"]) == {"order_id": "o-1"}
        assert params["is_read"] is False

    async def test_list_decodes_text_metadata(self) -> None:
        db = AsyncMock()
        result = MagicMock()
        result.fetchall.return_value = [_make_row(json.dumps({"status": "Confirmed"}))]
        db.execute.return_value = result
        rows = await NotificationRepository().list_by_user("cust-1", db)
        assert rows[0].metadata == {"status": "Confirmed"}

    async def test_mark_read_scoped_to_user(self) -> None:
        db = AsyncMock()
        result = MagicMock()
        result.fetchone.return_value = None
        db.execute.return_value = result
        assert await NotificationRepository().mark_read("n-1", "intruder", db) is None
        assert db.execute.call_args[0][1] == {"id": "n-1", "user_id": "intruder"}

    async def test_count_unread(self) -> None:
        db = AsyncMock()
        result = MagicMock()
        result.scalar_one.return_value = 4
        db.execute.return_value = result
        assert await NotificationRepository().count_unread("cust-1", db) == 4

    async def test_mark_all_read_returns_rowcount(self) -> None:
        db = AsyncMock()
        result = MagicMock()
        result.rowcount = 3
        db.execute.return_value = result
        assert await NotificationRepository().mark_all_read("cust-1", db) == 3


def test_orm_maps_metadata_column() -> None:
    assert "metadata" in {c.name for c in NotificationORM.__table__.columns}
