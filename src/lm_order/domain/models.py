"""Order domain model: pure dataclasses, no SQLAlchemy dependency."""
from dataclasses import asdict, dataclass
from datetime import date, datetime
from typing import Any

from src.lm_common.enums import OrderStatus


@dataclass(frozen=True)
class OrderItem:
    """Catalog snapshot taken at order creation; later catalog edits never reach it."""

    product_id: str
    name: str
    price: int  # minor units, per unit
    quantity: int
    image: str | None = None

    @property
    def line_total(self) -> int:
        return self.price * self.quantity

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OrderItem":
        return cls(
            product_id=str(data["product_id"]),
            name=data["name"],
            price=int(data["price"]),
            quantity=int(data["quantity"]),
            image=data.get("image"),
        )


@dataclass(frozen=True)
class DeliveryAddress:
    name: str
    phone: str
    address: str
    city: str = ""
    pincode: str = ""
    latitude: float | None = None
    longitude: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DeliveryAddress":
        return cls(
            name=data.get("name", ""),
            phone=data.get("phone", ""),
            address=data.get("address", ""),
            city=data.get("city", ""),
            pincode=data.get("pincode", ""),
            latitude=data.get("latitude"),
            longitude=data.get("longitude"),
        )


@dataclass
class PartyInfo:
    """Public fields of the customer or shopkeeper attached to an order."""

    user_id: str
    username: str | None = None
    email: str | None = None
    latitude: float | None = None
    longitude: float | None = None


@dataclass
class Order:
    id: str
    customer_id: str
    shopkeeper_id: str
    items: list[OrderItem]
    total: int  # minor units, fixed at creation
    address: DeliveryAddress
    payment_method: str = "UPI"
    delivery_lat: float | None = None
    delivery_lng: float | None = None
    # Payment metadata: written once by the payment collaborator
    paid: bool = False
    payment_provider: str | None = None
    payment_id: str | None = None
    paid_at: datetime | None = None
    status: str = OrderStatus.PENDING.value
    created_at: datetime | None = None
    updated_at: datetime | None = None
    customer: PartyInfo | None = None
    shopkeeper: PartyInfo | None = None

    @staticmethod
    def compute_total(items: list[OrderItem]) -> int:
        return sum(item.line_total for item in items)


@dataclass
class DailyStat:
    date: date
    order_count: int = 0
    revenue: int = 0
