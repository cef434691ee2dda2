"""NotificationRepository: raw SQL persistence implementation.

Rows are never deleted. ``mark_read`` scopes the UPDATE by ``{id, user_id}``
so a user can only acknowledge their own notifications; setting TRUE on an
already-read row is a harmless repeat.
"""
import json
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.lm_notification.domain.models import Notification

_INSERT_SQL = text("""
    INSERT INTO notifications (id, user_id, kind, title, message, metadata, is_read, created_at)
    VALUES (:id, :user_id, :kind, :title, :message, CAST(:metadata AS JSONB), :is_read, :created_at)
""")

_COLUMNS = "id, user_id, kind, title, message, metadata, is_read, created_at"

_LIST_BY_USER_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM notifications
    WHERE user_id = :user_id
    ORDER BY created_at DESC, id DESC
""")

_COUNT_UNREAD_SQL = text("""
    SELECT COUNT(*) AS unread FROM notifications
    WHERE user_id = :user_id AND is_read = FALSE
""")

_MARK_READ_SQL = text(f"""
    UPDATE notifications SET is_read = TRUE
    WHERE id = :id AND user_id = :user_id
    RETURNING {_COLUMNS}
""")

_MARK_ALL_READ_SQL = text("""
    UPDATE notifications SET is_read = TRUE
    WHERE user_id = :user_id AND is_read = FALSE
""")


def _row_to_notification(row: Any) -> Notification:
    metadata = row.metadata
    if isinstance(metadata, str):
        metadata = json.loads(metadata)
    return Notification(
        id=row.id,
        user_id=row.user_id,
        kind=row.kind,
        title=row.title,
        message=row.message,
        metadata=metadata or {},
        is_read=row.is_read,
        created_at=row.created_at,
    )


class NotificationRepository:
    async def save(self, notification: Notification, db: AsyncSession) -> None:
        await db.execute(
            _INSERT_SQL,
            {
                "id": notification.id,
                "user_id": notification.user_id,
                "kind": notification.kind,
                "title": notification.title,
                "message": notification.message,
                "metadata": json.dumps(notification.metadata, default=str),
                "is_read": notification.is_read,
                "created_at": notification.created_at,
            },
        )

    async def list_by_user(self, user_id: str, db: AsyncSession) -> list[Notification]:
        result = await db.execute(_LIST_BY_USER_SQL, {"user_id": user_id})
        return [_row_to_notification(row) for row in result.fetchall()]

    async def count_unread(self, user_id: str, db: AsyncSession) -> int:
        result = await db.execute(_COUNT_UNREAD_SQL, {"user_id": user_id})
        return int(result.scalar_one())

    async def mark_read(
        self, notification_id: str, user_id: str, db: AsyncSession
    ) -> Notification | None:
        result = await db.execute(_MARK_READ_SQL, {"id": notification_id, "user_id": user_id})
        row = result.fetchone()
        return _row_to_notification(row) if row else None

    async def mark_all_read(self, user_id: str, db: AsyncSession) -> int:
        result = await db.execute(_MARK_ALL_READ_SQL, {"user_id": user_id})
        return int(result.rowcount or 0)
