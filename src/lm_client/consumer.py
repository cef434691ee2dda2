"""NotificationConsumer: client side of the real-time channel.

Keeps a local, deduplicated copy of a user's notifications:

  * live pushes arrive over the websocket after a ``join``
  * on every (re)connect, and every ``reconcile_interval`` seconds while
    connected, the backlog is fetched over HTTP and merged by id

Pushes are at-least-once, so the same id may arrive via push and via
backlog; ``on_notification`` fires once per id regardless.

Usage:
    async with httpx.AsyncClient() as http:
        consumer = NotificationConsumer(
            "http://localhost:8000/api/v1", user_id, token,
            http_client=http, on_notification=print,
        )
        await consumer.run()
"""

import asyncio
import inspect
import json
import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import Any

import httpx
import websockets
from websockets.exceptions import ConnectionClosed

logger = logging.getLogger(__name__)

NotificationCallback = Callable[[dict[str, Any]], Awaitable[None] | None]


class ConsumerAuthError(Exception):
    """The server refused the join handshake; reconnecting will not help."""


class ChannelProtocolError(Exception):
    """The server sent something that is not a channel event; reconnect."""


_EPOCH = datetime.min.replace(tzinfo=UTC)


def _created_at(notification: dict[str, Any]) -> datetime:
    """Pushes carry ``+00:00`` offsets, backlog items ``Z``; compare as datetimes."""
    raw = notification.get("created_at")
    if not raw:
        return _EPOCH
    try:
        parsed = datetime.fromisoformat(raw)
    except (TypeError, ValueError):
        return _EPOCH
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def default_ws_url(base_url: str) -> str:
    url = httpx.URL(base_url)
    scheme = "wss" if url.scheme == "https" else "ws"
    return str(url.copy_with(scheme=scheme, path="/ws"))


class NotificationConsumer:
    def __init__(
        self,
        base_url: str,
        user_id: str,
        token: str,
        *,
        ws_url: str | None = None,
        http_client: httpx.AsyncClient | None = None,
        on_notification: NotificationCallback | None = None,
        reconcile_interval: float = 30.0,
        initial_backoff: float = 1.0,
        max_backoff: float = 30.0,
        connect: Callable[..., Any] = websockets.connect,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._ws_url = ws_url or default_ws_url(self._base_url)
        self._user_id = user_id
        self._token = token
        self._http = http_client or httpx.AsyncClient()
        self._owns_http = http_client is None
        self._on_notification = on_notification
        self._reconcile_interval = reconcile_interval
        self._initial_backoff = initial_backoff
        self._max_backoff = max_backoff
        self._connect = connect
        self._by_id: dict[str, dict[str, Any]] = {}
        self.connected = asyncio.Event()

    # ------------------------------------------------------------------
    # Local state
    # ------------------------------------------------------------------

    @property
    def notifications(self) -> list[dict[str, Any]]:
        """Newest first."""
        return sorted(
            self._by_id.values(),
            key=lambda n: (_created_at(n), n["id"]),
            reverse=True,
        )

    @property
    def unread_count(self) -> int:
        return sum(1 for n in self._by_id.values() if not n.get("is_read"))

    async def _remember(self, notification: dict[str, Any]) -> bool:
        nid = notification.get("id")
        if not nid:
            logger.warning("Ignoring notification without id: %s", notification)
            return False
        known = self._by_id.get(nid)
        if known is not None:
            # Read is sticky: a local mark_read survives a stale backlog copy
            known["is_read"] = known.get("is_read") or notification.get("is_read", False)
            return False
        self._by_id[nid] = dict(notification)
        if self._on_notification is not None:
            result = self._on_notification(dict(notification))
            if inspect.isawaitable(result):
                await result
        return True

    async def handle_event(self, event: dict[str, Any]) -> bool:
        """Apply one server event. Returns True for a notification not seen before."""
        kind = event.get("event")
        if kind == "notification":
            return await self._remember(event.get("data") or {})
        if kind == "error":
            logger.warning("Channel error: %s", event.get("message"))
        return False

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    @property
    def _auth(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._token}"}

    async def reconcile(self) -> list[dict[str, Any]]:
        """Fetch the backlog and merge it. Returns the notifications that were new."""
        resp = await self._http.get(f"{self._base_url}/notifications", headers=self._auth)
        resp.raise_for_status()
        items = resp.json()["data"]["items"]
        fresh = []
        # Oldest first so callbacks fire in creation order
        for item in reversed(items):
            if await self._remember(item):
                fresh.append(item)
        if fresh:
            logger.info("Reconcile surfaced %d missed notification(s)", len(fresh))
        return fresh

    async def mark_read(self, notification_id: str) -> None:
        resp = await self._http.put(
            f"{self._base_url}/notifications/{notification_id}/read", headers=self._auth
        )
        resp.raise_for_status()
        if notification_id in self._by_id:
            self._by_id[notification_id]["is_read"] = True

    # ------------------------------------------------------------------
    # Channel
    # ------------------------------------------------------------------

    async def _join(self, ws: Any) -> None:
        await ws.send(json.dumps({"event": "join", "user_id": self._user_id, "token": self._token}))
        raw = await ws.recv()
        try:
            reply = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ChannelProtocolError(f"malformed join reply: {raw!r:.80}") from exc
        if not isinstance(reply, dict):
            raise ChannelProtocolError(f"unexpected join reply: {raw!r:.80}")
        if reply.get("event") != "joined":
            raise ConsumerAuthError(reply.get("message", "join rejected"))

    async def _periodic_reconcile(self) -> None:
        while True:
            await asyncio.sleep(self._reconcile_interval)
            try:
                await self.reconcile()
            except httpx.HTTPError as exc:
                logger.warning("Periodic reconcile failed: %s", exc)

    async def listen_once(self) -> None:
        """One connection lifetime: join, reconcile, consume until the socket closes."""
        async with self._connect(self._ws_url) as ws:
            await self._join(ws)
            self.connected.set()
            logger.info("Joined notification channel as %s", self._user_id)
            poller = asyncio.create_task(self._periodic_reconcile())
            try:
                await self.reconcile()
                async for raw in ws:
                    try:
                        event = json.loads(raw)
                    except json.JSONDecodeError:
                        logger.warning("Dropping malformed frame")
                        continue
                    await self.handle_event(event)
            finally:
                self.connected.clear()
                poller.cancel()
                try:
                    await poller
                except asyncio.CancelledError:
                    pass

    async def run(self, stop: asyncio.Event | None = None) -> None:
        """Reconnect loop with capped exponential backoff.

        ``stop`` is checked between connections; cancel the task to stop mid-connection.
        """
        stop = stop or asyncio.Event()
        backoff = self._initial_backoff
        while not stop.is_set():
            try:
                await self.listen_once()
                delay, backoff = self._initial_backoff, self._initial_backoff
            except ConsumerAuthError:
                raise
            except (ConnectionClosed, ChannelProtocolError, OSError, httpx.HTTPError) as exc:
                delay, backoff = backoff, min(backoff * 2, self._max_backoff)
                logger.warning("Channel dropped (%s); retrying in %.1fs", exc, delay)
            if stop.is_set():
                break
            try:
                await asyncio.wait_for(stop.wait(), timeout=delay)
            except asyncio.TimeoutError:
                pass

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()
