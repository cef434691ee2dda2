"""Domain models for lm_shop: pure dataclasses."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ShopLocation:
    shopkeeper_id: str
    username: str
    latitude: float
    longitude: float


@dataclass(frozen=True)
class NearbyShop:
    shopkeeper_id: str
    username: str
    latitude: float
    longitude: float
    distance_km: float
