"""NotificationRepository Protocol: interface contract for the notification store."""
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.lm_notification.domain.models import Notification


class NotificationRepositoryProtocol(Protocol):
    async def save(self, notification: Notification, db: AsyncSession) -> None: ...

    async def list_by_user(self, user_id: str, db: AsyncSession) -> list[Notification]: ...

    async def count_unread(self, user_id: str, db: AsyncSession) -> int: ...

    async def mark_read(
        self, notification_id: str, user_id: str, db: AsyncSession
    ) -> Notification | None: ...

    async def mark_all_read(self, user_id: str, db: AsyncSession) -> int: ...
