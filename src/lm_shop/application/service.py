"""ShopApplicationService: nearby shopkeeper discovery (stateless, read-only)."""

from sqlalchemy.ext.asyncio import AsyncSession

from src.lm_shop.application.schemas import NearbyShopOut
from src.lm_shop.domain.geo import bounding_box, within_radius
from src.lm_shop.domain.repository import ShopRepositoryProtocol
from src.lm_shop.infrastructure.persistence import ShopRepository


class ShopApplicationService:
    def __init__(self, repo: ShopRepositoryProtocol | None = None) -> None:
        self._repo: ShopRepositoryProtocol = repo or ShopRepository()

    async def nearby_shopkeepers(
        self, db: AsyncSession, lat: float, lng: float, radius_km: float
    ) -> list[NearbyShopOut]:
        candidates = await self._repo.list_in_box(db, *bounding_box(lat, lng, radius_km))
        shops = within_radius(candidates, lat, lng, radius_km)
        return [NearbyShopOut.from_domain(s) for s in shops]
