"""Global enums: must match DB CHECK constraints exactly."""

from enum import Enum


class UserRole(str, Enum):
    CUSTOMER = "customer"
    SHOPKEEPER = "shopkeeper"


class OrderStatus(str, Enum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    OUT_FOR_DELIVERY = "Out for Delivery"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class PaymentMethod(str, Enum):
    UPI = "UPI"
    CARD = "CARD"
    COD = "COD"


class NotificationKind(str, Enum):
    ORDER_UPDATE = "ORDER_UPDATE"
    GENERAL = "GENERAL"


class TransitionPolicy(str, Enum):
    """permissive: any status from a non-terminal one. strict: forward-only."""
    PERMISSIVE = "permissive"
    STRICT = "strict"
