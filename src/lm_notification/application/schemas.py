from datetime import datetime
from typing import Any

from pydantic import BaseModel

from src.lm_notification.domain.models import Notification


class NotificationResponse(BaseModel):
    id: str
    kind: str
    title: str
    message: str
    metadata: dict[str, Any]
    is_read: bool
    created_at: datetime | None = None

    @classmethod
    def from_domain(cls, n: Notification) -> "NotificationResponse":
        return cls(
            id=n.id,
            kind=n.kind,
            title=n.title,
            message=n.message,
            metadata=n.metadata,
            is_read=n.is_read,
            created_at=n.created_at,
        )


class NotificationListResponse(BaseModel):
    items: list[NotificationResponse]
    unread_count: int


class MarkAllReadResponse(BaseModel):
    updated: int
