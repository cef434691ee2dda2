"""Wiring for the process-wide PresenceRegistry.

The registry lives on ``app.state.presence`` (set up in src/main.py); these
dependencies hand it, or a dispatcher bound to it, to route handlers.
"""

from fastapi import Depends, Request

from src.lm_notification.application.dispatcher import NotificationDispatcher
from src.lm_notification.domain.presence import PresenceRegistry


def get_presence(request: Request) -> PresenceRegistry:
    return request.app.state.presence


def get_dispatcher(
    presence: PresenceRegistry = Depends(get_presence),
) -> NotificationDispatcher:
    return NotificationDispatcher(presence)
