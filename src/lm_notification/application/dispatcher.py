"""NotificationDispatcher: durable write first, best-effort live push second.

Two independent guarantees:
  durable   every emit commits a Notification row or raises InternalError
  live      each open channel of the recipient gets one push attempt,
            bounded by PUSH_TIMEOUT_SECONDS; a failed or timed-out attempt
            is logged and the handle is dropped, never retried

A recipient with no open channel sees the notification on its next backlog
fetch, which is what makes delivery at-least-once eventually.
"""

import asyncio
import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.lm_common.datetime_utils import utc_now
from src.lm_common.enums import NotificationKind
from src.lm_common.errors import InternalError, NotificationNotFoundError
from src.lm_common.id_generator import generate_id
from src.lm_notification.domain.models import Notification
from src.lm_notification.domain.presence import ChannelHandle, PresenceRegistry
from src.lm_notification.domain.repository import NotificationRepositoryProtocol
from src.lm_notification.infrastructure.persistence import NotificationRepository

logger = logging.getLogger(__name__)

NOTIFICATION_EVENT = "notification"


class NotificationDispatcher:
    def __init__(
        self,
        presence: PresenceRegistry,
        repo: NotificationRepositoryProtocol | None = None,
        push_timeout: float | None = None,
    ) -> None:
        self._presence = presence
        self._repo: NotificationRepositoryProtocol = repo or NotificationRepository()
        self._push_timeout = (
            push_timeout if push_timeout is not None else settings.PUSH_TIMEOUT_SECONDS
        )

    async def emit(
        self,
        db: AsyncSession,
        recipient_id: str,
        kind: NotificationKind | str,
        title: str,
        message: str,
        metadata: dict[str, Any] | None = None,
    ) -> Notification:
        notification = Notification(
            id=generate_id(),
            user_id=recipient_id,
            kind=NotificationKind(kind).value,
            title=title,
            message=message,
            metadata=dict(metadata or {}),
            is_read=False,
            created_at=utc_now(),
        )
        try:
            await self._repo.save(notification, db)
            await db.commit()
        except SQLAlchemyError as exc:
            await db.rollback()
            logger.exception("Notification persist failed: recipient=%s", recipient_id)
            raise InternalError("Failed to store notification") from exc

        logger.info(
            "Notification stored: id=%s recipient=%s kind=%s",
            notification.id, recipient_id, notification.kind,
        )
        await self.push(notification)
        return notification

    async def push(self, notification: Notification) -> int:
        """Push to every open channel of the recipient. Returns the number reached."""
        handles = self._presence.channels_for(notification.user_id)
        if not handles:
            logger.debug("No live channel for %s; left for backlog", notification.user_id)
            return 0
        event = {"event": NOTIFICATION_EVENT, "data": notification.to_push_payload()}
        results = await asyncio.gather(*(self._send(h, event) for h in handles))
        delivered = sum(results)
        logger.info(
            "Notification pushed: id=%s delivered=%d/%d",
            notification.id, delivered, len(handles),
        )
        return delivered

    async def _send(self, handle: ChannelHandle, event: dict[str, Any]) -> bool:
        try:
            await asyncio.wait_for(handle.send_json(event), timeout=self._push_timeout)
        except TimeoutError:
            logger.warning("Push timed out after %.1fs, dropping channel", self._push_timeout)
            self._presence.leave(handle)
            return False
        except Exception as exc:  # noqa: BLE001 -- any transport failure just drops the push
            logger.warning("Push failed, dropping channel: %s", exc)
            self._presence.leave(handle)
            return False
        return True

    async def fetch_backlog(self, db: AsyncSession, user_id: str) -> list[Notification]:
        """Everything stored for ``user_id``, newest first, read or not."""
        return await self._repo.list_by_user(user_id, db)

    async def unread_count(self, db: AsyncSession, user_id: str) -> int:
        return await self._repo.count_unread(user_id, db)

    async def mark_read(
        self, db: AsyncSession, user_id: str, notification_id: str
    ) -> Notification:
        try:
            notification = await self._repo.mark_read(notification_id, user_id, db)
            if notification is None:
                raise NotificationNotFoundError(notification_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return notification

    async def mark_all_read(self, db: AsyncSession, user_id: str) -> int:
        try:
            updated = await self._repo.mark_all_read(user_id, db)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return updated
