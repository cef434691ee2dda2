"""Great-circle distance and radius filtering over shop locations."""

import math
from collections.abc import Iterable

from src.lm_shop.domain.models import NearbyShop, ShopLocation

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(a)))


def within_radius(
    shops: Iterable[ShopLocation], lat: float, lng: float, radius_km: float
) -> list[NearbyShop]:
    """Shops no further than ``radius_km``, nearest first, distances rounded to 2 dp."""
    nearby: list[NearbyShop] = []
    for shop in shops:
        distance = haversine_km(lat, lng, shop.latitude, shop.longitude)
        if distance <= radius_km:
            nearby.append(
                NearbyShop(
                    shopkeeper_id=shop.shopkeeper_id,
                    username=shop.username,
                    latitude=shop.latitude,
                    longitude=shop.longitude,
                    distance_km=round(distance, 2),
                )
            )
    nearby.sort(key=lambda s: (s.distance_km, s.shopkeeper_id))
    return nearby


def bounding_box(lat: float, lng: float, radius_km: float) -> tuple[float, float, float, float]:
    """(min_lat, max_lat, min_lng, max_lng) enclosing the radius; used as a cheap SQL prefilter."""
    d_lat = math.degrees(radius_km / EARTH_RADIUS_KM)
    cos_lat = max(math.cos(math.radians(lat)), 1e-6)
    d_lng = min(180.0, math.degrees(radius_km / (EARTH_RADIUS_KM * cos_lat)))
    return lat - d_lat, lat + d_lat, lng - d_lng, lng + d_lng
