"""End-to-end fixtures: the real app with in-memory persistence.

Routers, dependencies, services, the dispatcher and the presence registry all
run for real; only the repositories and the DB session are swapped, through
``app.dependency_overrides``. Users are authenticated with real access tokens.
"""

import uuid
from collections.abc import AsyncGenerator, Generator
from contextlib import asynccontextmanager
from typing import Any

import pytest
from fastapi import Depends, FastAPI, HTTPException, status
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient

from src.lm_catalog.domain.models import Product
from src.lm_common.database import get_db_session
from src.lm_common.errors import InvalidCredentialsError
from src.lm_gateway.auth.dependencies import get_current_user, get_user_lookup, oauth2_scheme
from src.lm_gateway.auth.jwt_handler import decode_token
from src.lm_gateway.user.db_models import UserModel
from src.lm_notification.api.dependencies import get_dispatcher, get_presence
from src.lm_notification.application.dispatcher import NotificationDispatcher
from src.lm_notification.domain.presence import PresenceRegistry
from src.lm_order.api.router import get_order_service
from src.lm_order.application.service import OrderApplicationService
from src.lm_order.domain.models import PartyInfo
from src.lm_shop.api.router import get_shop_service
from src.lm_shop.application.service import ShopApplicationService
from src.lm_shop.domain.models import ShopLocation
from src.main import app
from tests.fakes import (
    FakeSession,
    InMemoryNotificationRepository,
    InMemoryOrderRepository,
    InMemoryProductRepository,
    InMemoryUserLookup,
    World,
)


def _user(
    username: str, role: str, lat: float | None = None, lng: float | None = None
) -> UserModel:
    user = UserModel()
    user.id = uuid.uuid4()
    user.username = username
    user.email = f"{username}@example.com"
    user.password_hash = "unused"
    user.role = role
    user.latitude = lat
    user.longitude = lng
    user.is_active = True
    return user


def _party(user: UserModel) -> PartyInfo:
    return PartyInfo(str(user.id), user.username, user.email, user.latitude, user.longitude)


class InMemoryShopRepository:
    def __init__(self, shopkeepers: list[UserModel]) -> None:
        self._shops = [
            ShopLocation(str(u.id), u.username, u.latitude, u.longitude)
            for u in shopkeepers
            if u.latitude is not None and u.longitude is not None
        ]

    async def list_in_box(
        self, db: Any, min_lat: float, max_lat: float, min_lng: float, max_lng: float
    ) -> list[ShopLocation]:
        return [
            s for s in self._shops
            if min_lat <= s.latitude <= max_lat and min_lng <= s.longitude <= max_lng
        ]


@pytest.fixture
def world() -> Generator[World, None, None]:
    customer = _user("asha", "customer")
    shopkeeper = _user("raj_kirana", "shopkeeper", 18.5204, 73.8567)
    other = _user("meena_stores", "shopkeeper", 18.5304, 73.8567)
    shopkeepers = [shopkeeper, other]

    orders = InMemoryOrderRepository(
        shopkeepers=[_party(u) for u in shopkeepers], customers=[_party(customer)]
    )
    products = InMemoryProductRepository(
        [
            Product("p-rice", str(shopkeeper.id), "Rice 5kg", 25000, ["rice.jpg"]),
            Product("p-oil", str(shopkeeper.id), "Sunflower Oil 1L", 18000),
        ]
    )
    notifications = InMemoryNotificationRepository()
    presence = PresenceRegistry()
    users = {str(u.id): u for u in (customer, *shopkeepers)}

    async def current_user(token: str = Depends(oauth2_scheme)) -> UserModel:
        try:
            payload = decode_token(token, expected_type="access")
        except InvalidCredentialsError:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED) from None
        user = users.get(payload.get("sub", ""))
        if user is None:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
        return user

    async def session() -> AsyncGenerator[FakeSession, None]:
        yield FakeSession()

    def dispatcher(p: PresenceRegistry = Depends(get_presence)) -> NotificationDispatcher:
        return NotificationDispatcher(p, repo=notifications)

    def order_service(
        d: NotificationDispatcher = Depends(get_dispatcher),
    ) -> OrderApplicationService:
        return OrderApplicationService(d, repo=orders, product_repo=products)

    def shop_service() -> ShopApplicationService:
        return ShopApplicationService(repo=InMemoryShopRepository(shopkeepers))

    previous_presence = app.state.presence
    app.state.presence = presence
    app.dependency_overrides.update(
        {
            get_current_user: current_user,
            get_db_session: session,
            get_dispatcher: dispatcher,
            get_order_service: order_service,
            get_shop_service: shop_service,
            get_user_lookup: lambda: InMemoryUserLookup(users),
        }
    )
    yield World(customer, shopkeeper, other, orders, notifications, presence, users)
    app.dependency_overrides.clear()
    app.state.presence = previous_presence


@pytest.fixture
async def api(world: World) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@asynccontextmanager
async def _no_lifespan(_: FastAPI) -> AsyncGenerator[None, None]:
    yield


@pytest.fixture
def sync_api(world: World) -> Generator[TestClient, None, None]:
    """Blocking client sharing one event loop between HTTP calls and websockets."""
    original = app.router.lifespan_context
    app.router.lifespan_context = _no_lifespan
    try:
        with TestClient(app) as client:
            yield client
    finally:
        app.router.lifespan_context = original
