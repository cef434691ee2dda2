"""ShopRepository: read-only snapshot of shopkeeper locations from the users table.

The bounding box is only a prefilter; exact distances are computed in Python.
Boxes crossing the antimeridian are not split, which at shop-search radii only
matters for shops within a few km of ±180° longitude.
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.lm_shop.domain.models import ShopLocation

_LIST_IN_BOX_SQL = text("""
    SELECT id, username, latitude, longitude
    FROM users
    WHERE role = 'shopkeeper'
      AND is_active
      AND latitude IS NOT NULL AND longitude IS NOT NULL
      AND latitude BETWEEN :min_lat AND :max_lat
      AND longitude BETWEEN :min_lng AND :max_lng
""")


def _row_to_location(row: Any) -> ShopLocation:
    return ShopLocation(
        shopkeeper_id=str(row.id),
        username=row.username,
        latitude=row.latitude,
        longitude=row.longitude,
    )


class ShopRepository:
    async def list_in_box(
        self,
        db: AsyncSession,
        min_lat: float,
        max_lat: float,
        min_lng: float,
        max_lng: float,
    ) -> list[ShopLocation]:
        result = await db.execute(
            _LIST_IN_BOX_SQL,
            {"min_lat": min_lat, "max_lat": max_lat, "min_lng": min_lng, "max_lng": max_lng},
        )
        return [_row_to_location(row) for row in result.fetchall()]
