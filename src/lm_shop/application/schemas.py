from pydantic import BaseModel

from src.lm_shop.domain.models import NearbyShop


class NearbyShopOut(BaseModel):
    shopkeeper_id: str
    username: str
    latitude: float
    longitude: float
    distance_km: float

    @classmethod
    def from_domain(cls, s: NearbyShop) -> "NearbyShopOut":
        return cls(
            shopkeeper_id=s.shopkeeper_id,
            username=s.username,
            latitude=s.latitude,
            longitude=s.longitude,
            distance_km=s.distance_km,
        )
