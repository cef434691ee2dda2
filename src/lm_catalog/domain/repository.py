"""ProductRepository Protocol: the catalog boundary seen by order creation."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.lm_catalog.domain.models import Product


class ProductRepositoryProtocol(Protocol):
    async def get_by_ids(self, product_ids: list[str], db: AsyncSession) -> dict[str, Product]: ...
