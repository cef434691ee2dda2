"""Tests for the client-side NotificationConsumer (mock HTTP, scripted websocket)."""

import asyncio
import json
from typing import Any

import httpx
import pytest

from src.lm_client.consumer import (
    ChannelProtocolError,
    ConsumerAuthError,
    NotificationConsumer,
    default_ws_url,
)

BASE = "http://shop.test/api/v1"


def _n(nid: str, created_at: str, is_read: bool = False) -> dict[str, Any]:
    return {
        "id": nid,
        "kind": "ORDER_UPDATE",
        "title": "Order Confirmed",
        "message": "Your order #000001 was updated to: Confirmed",
        "metadata": {"order_id": "o-1", "status": "Confirmed"},
        "is_read": is_read,
        "created_at": created_at,
    }


N1 = _n("1001", "2026-03-10T09:00:00+00:00")
N2 = _n("1002", "2026-03-10T09:05:00+00:00")
N3 = _n("1003", "2026-03-10T09:10:00+00:00")


class FakeSocket:
    """Answers the join with ``reply`` then yields ``frames`` and closes."""

    def __init__(self, frames: list[Any], reply: dict[str, Any] | str | None = None) -> None:
        self.sent: list[dict[str, Any]] = []
        self._frames = frames
        self._reply = reply or {"event": "joined", "user_id": "cust-1"}

    async def send(self, data: str) -> None:
        self.sent.append(json.loads(data))

    async def recv(self) -> str:
        return self._reply if isinstance(self._reply, str) else json.dumps(self._reply)

    async def _iter(self):  # type: ignore[no-untyped-def]
        for frame in self._frames:
            yield frame if isinstance(frame, str) else json.dumps(frame)

    def __aiter__(self):  # type: ignore[no-untyped-def]
        return self._iter()

    async def __aenter__(self) -> "FakeSocket":
        return self

    async def __aexit__(self, *exc: object) -> None:
        return None


def _connector(*outcomes: Any):  # type: ignore[no-untyped-def]
    """Each call returns the next socket, or raises it if it is an exception."""
    pending = list(outcomes)

    def connect(url: str) -> Any:
        outcome = pending.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    return connect


def _http(
    backlog: list[dict[str, Any]], seen: list[httpx.Request] | None = None
) -> httpx.AsyncClient:
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        if request.method == "GET" and request.url.path == "/api/v1/notifications":
            data = {"items": backlog, "unread_count": sum(not n["is_read"] for n in backlog)}
            return httpx.Response(200, json={"code": 0, "message": "success", "data": data})
        if request.method == "PUT" and request.url.path.endswith("/read"):
            return httpx.Response(200, json={"code": 0, "message": "success", "data": {}})
        return httpx.Response(404, json={"code": 4004})

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def test_default_ws_url() -> None:
    assert default_ws_url("http://localhost:8000/api/v1") == "ws://localhost:8000/ws"
    assert default_ws_url("https://shop.example/api/v1") == "wss://shop.example/ws"


class TestListen:
    async def test_join_then_dedup_push_against_backlog(self) -> None:
        received: list[str] = []
        socket = FakeSocket(
            [{"event": "notification", "data": N1}, {"event": "notification", "data": N2}]
        )
        async with _http([N1]) as http:
            consumer = NotificationConsumer(
                BASE, "cust-1", "tok", http_client=http,
                on_notification=lambda n: received.append(n["id"]),
                connect=_connector(socket),
            )
            await consumer.listen_once()

        assert socket.sent == [{"event": "join", "user_id": "cust-1", "token": "tok"}]
        assert received == ["1001", "1002"]
        assert [n["id"] for n in consumer.notifications] == ["1002", "1001"]
        assert consumer.connected.is_set() is False

    async def test_malformed_frames_are_skipped(self) -> None:
        socket = FakeSocket(["not json", {"event": "pong"}, {"event": "notification", "data": N3}])
        async with _http([]) as http:
            consumer = NotificationConsumer(BASE, "cust-1", "tok", http_client=http,
                                            connect=_connector(socket))
            await consumer.listen_once()
        assert consumer.unread_count == 1

    async def test_rejected_join_raises(self) -> None:
        socket = FakeSocket([], reply={"event": "error", "message": "Invalid username or password"})
        async with _http([]) as http:
            consumer = NotificationConsumer(BASE, "cust-1", "bad", http_client=http,
                                            connect=_connector(socket))
            with pytest.raises(ConsumerAuthError):
                await consumer.run()

    async def test_garbled_join_reply_is_a_protocol_error(self) -> None:
        socket = FakeSocket([], reply="<html>502 Bad Gateway</html>")
        async with _http([]) as http:
            consumer = NotificationConsumer(BASE, "cust-1", "tok", http_client=http,
                                            connect=_connector(socket))
            with pytest.raises(ChannelProtocolError):
                await consumer.listen_once()
        assert consumer.connected.is_set() is False

    async def test_newest_first_across_offset_spellings(self) -> None:
        pushed = _n("1001", "2026-03-10T09:05:00.500000+00:00")
        from_backlog = _n("1000", "2026-03-10T09:05:00Z")
        older = _n("0999", "2026-03-10T09:04:59.900000+00:00")
        async with _http([from_backlog, older]) as http:
            consumer = NotificationConsumer(BASE, "cust-1", "tok", http_client=http)
            await consumer.handle_event({"event": "notification", "data": pushed})
            await consumer.reconcile()
        assert [n["id"] for n in consumer.notifications] == ["1001", "1000", "0999"]


class TestReconcile:
    async def test_missed_notifications_surface_oldest_first(self) -> None:
        received: list[str] = []

        async def on_notification(n: dict[str, Any]) -> None:
            received.append(n["id"])

        async with _http([N3, N2, N1]) as http:
            consumer = NotificationConsumer(BASE, "cust-1", "tok", http_client=http,
                                            on_notification=on_notification)
            await consumer.handle_event({"event": "notification", "data": N1})
            fresh = await consumer.reconcile()

        assert [n["id"] for n in fresh] == ["1002", "1003"]
        assert received == ["1001", "1002", "1003"]

    async def test_local_read_survives_stale_backlog(self) -> None:
        seen: list[httpx.Request] = []
        async with _http([N1], seen) as http:
            consumer = NotificationConsumer(BASE, "cust-1", "tok", http_client=http)
            await consumer.reconcile()
            await consumer.mark_read("1001")
            await consumer.reconcile()
        assert consumer.unread_count == 0
        put = [r for r in seen if r.method == "PUT"][0]
        assert put.url.path == "/api/v1/notifications/1001/read"
        assert put.headers["Authorization"] == "Bearer tok"


class TestRun:
    async def test_reconnects_after_failure(self) -> None:
        stop = asyncio.Event()
        received: list[str] = []

        def on_notification(n: dict[str, Any]) -> None:
            received.append(n["id"])
            stop.set()

        socket = FakeSocket([{"event": "notification", "data": N2}])
        async with _http([]) as http:
            consumer = NotificationConsumer(
                BASE, "cust-1", "tok", http_client=http,
                on_notification=on_notification,
                initial_backoff=0.01, max_backoff=0.02,
                connect=_connector(OSError("connection refused"), socket),
            )
            await asyncio.wait_for(consumer.run(stop), timeout=5)

        assert received == ["1002"]
        assert socket.sent[0]["event"] == "join"

    async def test_garbled_join_reply_reconnects(self) -> None:
        stop = asyncio.Event()
        received: list[str] = []

        def on_notification(n: dict[str, Any]) -> None:
            received.append(n["id"])
            stop.set()

        garbled = FakeSocket([], reply="not json")
        socket = FakeSocket([{"event": "notification", "data": N3}])
        async with _http([]) as http:
            consumer = NotificationConsumer(
                BASE, "cust-1", "tok", http_client=http,
                on_notification=on_notification,
                initial_backoff=0.01, max_backoff=0.02,
                connect=_connector(garbled, socket),
            )
            await asyncio.wait_for(consumer.run(stop), timeout=5)

        assert received == ["1003"]
        assert garbled.sent[0]["event"] == "join"
