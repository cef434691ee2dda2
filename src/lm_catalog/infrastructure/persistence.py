"""ProductRepository: raw SQL lookup against the products table.

Catalog writes belong to the catalog service; this module only reads.
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.lm_catalog.domain.models import Product

_GET_PRODUCTS_SQL = text("""
    SELECT id, shopkeeper_id, name, price, images
    FROM products
    WHERE id = ANY(CAST(:ids AS TEXT[]))
""")


def _row_to_product(row: Any) -> Product:
    return Product(
        id=row.id,
        shopkeeper_id=str(row.shopkeeper_id),
        name=row.name,
        price=row.price,
        images=list(row.images or []),
    )


class ProductRepository:
    async def get_by_ids(self, product_ids: list[str], db: AsyncSession) -> dict[str, Product]:
        if not product_ids:
            return {}
        result = await db.execute(_GET_PRODUCTS_SQL, {"ids": list(set(product_ids))})
        return {row.id: _row_to_product(row) for row in result.fetchall()}
