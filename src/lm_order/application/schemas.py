# src/lm_order/application/schemas.py
from datetime import datetime

from pydantic import BaseModel, Field

from src.lm_common.enums import PaymentMethod
from src.lm_common.money import to_display
from src.lm_order.domain.models import DailyStat, Order, PartyInfo


class OrderItemRequest(BaseModel):
    product_id: str
    quantity: int = Field(1, ge=1, le=1000)


class AddressIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    phone: str = Field(..., min_length=5, max_length=20)
    address: str = Field(..., min_length=1, max_length=500)
    city: str = ""
    pincode: str = ""
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)


class LatLng(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class CreateOrderRequest(BaseModel):
    # Emptiness/absence of items and shopkeeper_id is reported by the service
    items: list[OrderItemRequest] = Field(default_factory=list)
    total_amount: int | None = Field(
        None, ge=0, description="Client-side total; recomputed server-side"
    )
    address: AddressIn
    payment_method: PaymentMethod = PaymentMethod.UPI
    shopkeeper_id: str | None = None
    delivery_location: LatLng | None = None


class UpdateOrderStatusRequest(BaseModel):
    status: str


class OrderItemOut(BaseModel):
    product_id: str
    name: str
    price: int
    quantity: int
    image: str | None = None


class AddressOut(BaseModel):
    name: str
    phone: str
    address: str
    city: str
    pincode: str
    latitude: float | None = None
    longitude: float | None = None


class PartyOut(BaseModel):
    user_id: str
    username: str | None = None
    email: str | None = None
    latitude: float | None = None
    longitude: float | None = None

    @classmethod
    def from_domain(cls, p: PartyInfo) -> "PartyOut":
        return cls(
            user_id=p.user_id,
            username=p.username,
            email=p.email,
            latitude=p.latitude,
            longitude=p.longitude,
        )


class OrderDetail(BaseModel):
    id: str
    customer_id: str
    shopkeeper_id: str
    customer: PartyOut | None = None
    shopkeeper: PartyOut | None = None
    items: list[OrderItemOut]
    total: int
    total_display: str
    address: AddressOut
    payment_method: str
    delivery_location: LatLng | None = None
    paid: bool
    payment_provider: str | None = None
    payment_id: str | None = None
    paid_at: datetime | None = None
    status: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_domain(cls, o: Order) -> "OrderDetail":
        location = None
        if o.delivery_lat is not None and o.delivery_lng is not None:
            location = LatLng(lat=o.delivery_lat, lng=o.delivery_lng)
        return cls(
            id=o.id,
            customer_id=o.customer_id,
            shopkeeper_id=o.shopkeeper_id,
            customer=PartyOut.from_domain(o.customer) if o.customer else None,
            shopkeeper=PartyOut.from_domain(o.shopkeeper) if o.shopkeeper else None,
            items=[OrderItemOut(**it.to_dict()) for it in o.items],
            total=o.total,
            total_display=to_display(o.total),
            address=AddressOut(**o.address.to_dict()),
            payment_method=o.payment_method,
            delivery_location=location,
            paid=o.paid,
            payment_provider=o.payment_provider,
            payment_id=o.payment_id,
            paid_at=o.paid_at,
            status=o.status,
            created_at=o.created_at,
            updated_at=o.updated_at,
        )


class DailyStatOut(BaseModel):
    date: str  # YYYY-MM-DD
    order_count: int
    revenue: int

    @classmethod
    def from_domain(cls, s: DailyStat) -> "DailyStatOut":
        return cls(date=s.date.isoformat(), order_count=s.order_count, revenue=s.revenue)
