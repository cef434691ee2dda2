"""Notification domain model: append-only journal entry; only is_read mutates."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class Notification:
    id: str
    user_id: str  # recipient
    kind: str  # NotificationKind value
    title: str
    message: str
    metadata: dict[str, Any] = field(default_factory=dict)
    is_read: bool = False
    created_at: datetime | None = None

    def to_push_payload(self) -> dict[str, Any]:
        """Body of a live ``notification`` event.

        Metadata keys are lifted to the top level for clients that read e.g.
        ``payload["order_id"]`` directly; core fields win on a name clash.
        """
        core: dict[str, Any] = {
            "id": self.id,
            "kind": self.kind,
            "title": self.title,
            "message": self.message,
            "metadata": dict(self.metadata),
            "is_read": self.is_read,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
        return {**self.metadata, **core}
