"""App-level wiring: health, error envelope, validation mapping (no DB needed)."""

from httpx import AsyncClient


async def test_health(client: AsyncClient) -> None:
    resp = await client.get("/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    assert body["connections"] == 0


async def test_missing_token_is_401(client: AsyncClient) -> None:
    resp = await client.get("/api/v1/notifications")
    assert resp.status_code == 401


async def test_refresh_with_garbage_uses_error_envelope(client: AsyncClient) -> None:
    resp = await client.post("/api/v1/auth/refresh", json={"refresh_token": "garbage"})
    assert resp.status_code == 401
    body = resp.json()
    assert body["code"] == 1005
    assert body["data"] is None


async def test_body_validation_maps_to_400(client: AsyncClient) -> None:
    resp = await client.post("/api/v1/auth/refresh", json={})
    assert resp.status_code == 400
    body = resp.json()
    assert body["code"] == 9003
    assert "refresh_token" in body["message"]
