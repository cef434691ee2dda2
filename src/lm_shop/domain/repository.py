"""ShopRepository Protocol."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.lm_shop.domain.models import ShopLocation


class ShopRepositoryProtocol(Protocol):
    async def list_in_box(
        self,
        db: AsyncSession,
        min_lat: float,
        max_lat: float,
        min_lng: float,
        max_lng: float,
    ) -> list[ShopLocation]: ...
