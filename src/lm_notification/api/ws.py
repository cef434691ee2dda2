"""Real-time channel: one websocket per client session.

Client → server events:
    {"event": "join", "user_id": "...", "token": "<access token>"}
    {"event": "leave"}
    {"event": "ping"}
Server → client events:
    {"event": "joined", "user_id": "..."}
    {"event": "notification", "data": {...}}
    {"event": "pong"}
    {"event": "error", "message": "..."}

A join whose token does not verify, names a different user than the token's
subject, or belongs to an unknown or disabled account is answered with an
error and the socket is closed with code 4401. Whatever happens, the socket
leaves presence when it closes.
"""

import json
import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from src.lm_common.errors import AccountDisabledError, InvalidCredentialsError
from src.lm_gateway.auth.dependencies import ActiveUserLookup, get_user_lookup
from src.lm_gateway.auth.jwt_handler import decode_token
from src.lm_notification.domain.presence import PresenceRegistry

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])

UNAUTHORIZED_CLOSE_CODE = 4401


def verify_join_token(message: dict[str, Any]) -> str:
    """Return the token subject of a join event, or raise InvalidCredentialsError."""
    token = message.get("token")
    if not isinstance(token, str) or not token:
        raise InvalidCredentialsError()
    subject = decode_token(token, expected_type="access").get("sub")
    claimed = message.get("user_id") or subject
    if not subject or str(claimed) != str(subject):
        raise InvalidCredentialsError()
    return str(subject)


async def authenticate_join(message: dict[str, Any], users: ActiveUserLookup) -> str:
    """Verify the token, then require the account to exist and be active."""
    user_id = verify_join_token(message)
    await users.require_active(user_id)
    return user_id


@router.websocket("/ws")
async def notification_channel(
    websocket: WebSocket,
    users: Annotated[ActiveUserLookup, Depends(get_user_lookup)],
) -> None:
    presence: PresenceRegistry = websocket.app.state.presence
    await websocket.accept()
    try:
        while True:
            raw = await websocket.receive_text()
            try:
                message = json.loads(raw)
            except json.JSONDecodeError:
                await websocket.send_json({"event": "error", "message": "Malformed JSON"})
                continue
            if not isinstance(message, dict):
                await websocket.send_json({"event": "error", "message": "Expected an object"})
                continue

            event = message.get("event")
            if event == "join":
                try:
                    user_id = await authenticate_join(message, users)
                except (InvalidCredentialsError, AccountDisabledError) as exc:
                    logger.info("Channel join refused: %s", exc.message)
                    await websocket.send_json({"event": "error", "message": exc.message})
                    await websocket.close(code=UNAUTHORIZED_CLOSE_CODE)
                    return
                presence.join(user_id, websocket)
                logger.info("Channel joined: user=%s", user_id)
                await websocket.send_json({"event": "joined", "user_id": user_id})
            elif event == "leave":
                presence.leave(websocket)
                await websocket.send_json({"event": "left"})
            elif event == "ping":
                await websocket.send_json({"event": "pong"})
            else:
                await websocket.send_json({"event": "error", "message": f"Unknown event: {event}"})
    except WebSocketDisconnect:
        pass
    finally:
        user_id = presence.leave(websocket)
        if user_id is not None:
            logger.info("Channel closed: user=%s", user_id)
