# src/lm_order/domain/repository.py
"""OrderRepository Protocol: interface contract for persistence layer."""
from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.lm_order.domain.models import Order, PartyInfo


class OrderRepositoryProtocol(Protocol):
    async def save(self, order: Order, db: AsyncSession) -> None: ...

    async def get_by_id(self, order_id: str, db: AsyncSession) -> Order | None: ...

    async def get_owned(
        self, order_id: str, shopkeeper_id: str, db: AsyncSession
    ) -> Order | None: ...

    async def update_status_if_owned(
        self,
        order_id: str,
        shopkeeper_id: str,
        status: str,
        allowed_sources: list[str],
        db: AsyncSession,
    ) -> Order | None: ...

    async def record_payment(
        self,
        order_id: str,
        provider: str,
        payment_id: str,
        paid_at: datetime,
        db: AsyncSession,
    ) -> Order | None: ...

    async def list_by_customer(self, customer_id: str, db: AsyncSession) -> list[Order]: ...

    async def list_by_shopkeeper(self, shopkeeper_id: str, db: AsyncSession) -> list[Order]: ...

    async def list_created_since(
        self, shopkeeper_id: str, since: datetime, db: AsyncSession
    ) -> list[Order]: ...

    async def get_shopkeeper(self, shopkeeper_id: str, db: AsyncSession) -> PartyInfo | None: ...
