# src/lm_order/infrastructure/persistence.py
"""OrderRepository: raw SQL persistence implementation.

Reads join the users table twice so every order comes back with the public
fields of both parties. Ownership-scoped writes put ``shopkeeper_id`` in the
same WHERE clause as the id, making check-and-write a single statement.
"""
import json
from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.lm_order.domain.models import DeliveryAddress, Order, OrderItem, PartyInfo

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_INSERT_ORDER_SQL = text("""
    INSERT INTO orders (id, customer_id, shopkeeper_id, items, total, address,
        payment_method, delivery_lat, delivery_lng, paid, status, created_at, updated_at)
    VALUES (:id, :customer_id, :shopkeeper_id, CAST(:items AS JSONB), :total,
        CAST(:address AS JSONB), :payment_method, :delivery_lat, :delivery_lng,
        FALSE, :status, :created_at, :updated_at)
""")

_SELECT_COLUMNS = """
    o.id, o.customer_id, o.shopkeeper_id, o.items, o.total, o.address,
    o.payment_method, o.delivery_lat, o.delivery_lng,
    o.paid, o.payment_provider, o.payment_id, o.paid_at,
    o.status, o.created_at, o.updated_at,
    c.username AS customer_username, c.email AS customer_email,
    c.latitude AS customer_latitude, c.longitude AS customer_longitude,
    s.username AS shopkeeper_username, s.email AS shopkeeper_email,
    s.latitude AS shopkeeper_latitude, s.longitude AS shopkeeper_longitude
"""

_PARTY_JOINS = """
    LEFT JOIN users c ON CAST(c.id AS TEXT) = o.customer_id
    LEFT JOIN users s ON CAST(s.id AS TEXT) = o.shopkeeper_id
"""

_GET_ORDER_BY_ID_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM orders o {_PARTY_JOINS}
    WHERE o.id = :id
""")

_GET_OWNED_ORDER_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM orders o {_PARTY_JOINS}
    WHERE o.id = :id AND o.shopkeeper_id = :shopkeeper_id
""")

_UPDATE_STATUS_IF_OWNED_SQL = text(f"""
    WITH updated AS (
        UPDATE orders
        SET status = :status, updated_at = NOW()
        WHERE id = :id
          AND shopkeeper_id = :shopkeeper_id
          AND status = ANY(CAST(:allowed_sources AS TEXT[]))
        RETURNING *
    )
    SELECT {_SELECT_COLUMNS}
    FROM updated o {_PARTY_JOINS}
""")

_RECORD_PAYMENT_SQL = text(f"""
    WITH updated AS (
        UPDATE orders
        SET paid = TRUE, payment_provider = :provider, payment_id = :payment_id,
            paid_at = :paid_at, updated_at = NOW()
        WHERE id = :id AND paid = FALSE
        RETURNING *
    )
    SELECT {_SELECT_COLUMNS}
    FROM updated o {_PARTY_JOINS}
""")

_LIST_BY_CUSTOMER_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM orders o {_PARTY_JOINS}
    WHERE o.customer_id = :customer_id
    ORDER BY o.created_at DESC, o.id DESC
""")

_LIST_BY_SHOPKEEPER_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM orders o {_PARTY_JOINS}
    WHERE o.shopkeeper_id = :shopkeeper_id
    ORDER BY o.created_at DESC, o.id DESC
""")

_LIST_CREATED_SINCE_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM orders o {_PARTY_JOINS}
    WHERE o.shopkeeper_id = :shopkeeper_id AND o.created_at >= :since
    ORDER BY o.created_at ASC
""")

_GET_SHOPKEEPER_SQL = text("""
    SELECT id, username, email, latitude, longitude
    FROM users
    WHERE CAST(id AS TEXT) = :id AND role = 'shopkeeper' AND is_active
""")


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _json(value: Any) -> Any:
    # asyncpg hands JSONB back decoded; a raw driver may return the text form
    return json.loads(value) if isinstance(value, str) else value


def _party(row: Any, prefix: str, user_id: str) -> PartyInfo:
    return PartyInfo(
        user_id=user_id,
        username=getattr(row, f"{prefix}_username"),
        email=getattr(row, f"{prefix}_email"),
        latitude=getattr(row, f"{prefix}_latitude"),
        longitude=getattr(row, f"{prefix}_longitude"),
    )


def _row_to_order(row: Any) -> Order:
    """Convert a DB result row to an Order domain object."""
    return Order(
        id=row.id,
        customer_id=row.customer_id,
        shopkeeper_id=row.shopkeeper_id,
        items=[OrderItem.from_dict(it) for it in _json(row.items)],
        total=row.total,
        address=DeliveryAddress.from_dict(_json(row.address)),
        payment_method=row.payment_method,
        delivery_lat=row.delivery_lat,
        delivery_lng=row.delivery_lng,
        paid=row.paid,
        payment_provider=row.payment_provider,
        payment_id=row.payment_id,
        paid_at=row.paid_at,
        status=row.status,
        created_at=row.created_at,
        updated_at=row.updated_at,
        customer=_party(row, "customer", row.customer_id),
        shopkeeper=_party(row, "shopkeeper", row.shopkeeper_id),
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class OrderRepository:
    """Concrete implementation of OrderRepositoryProtocol using raw SQL."""

    async def save(self, order: Order, db: AsyncSession) -> None:
        await db.execute(
            _INSERT_ORDER_SQL,
            {
                "id": order.id,
                "customer_id": order.customer_id,
                "shopkeeper_id": order.shopkeeper_id,
                "items": json.dumps([it.to_dict() for it in order.items]),
                "total": order.total,
                "address": json.dumps(order.address.to_dict()),
                "payment_method": order.payment_method,
                "delivery_lat": order.delivery_lat,
                "delivery_lng": order.delivery_lng,
                "status": order.status,
                "created_at": order.created_at,
                "updated_at": order.updated_at,
            },
        )

    async def get_by_id(self, order_id: str, db: AsyncSession) -> Order | None:
        result = await db.execute(_GET_ORDER_BY_ID_SQL, {"id": order_id})
        row = result.fetchone()
        return _row_to_order(row) if row else None

    async def get_owned(
        self, order_id: str, shopkeeper_id: str, db: AsyncSession
    ) -> Order | None:
        result = await db.execute(
            _GET_OWNED_ORDER_SQL, {"id": order_id, "shopkeeper_id": shopkeeper_id}
        )
        row = result.fetchone()
        return _row_to_order(row) if row else None

    async def update_status_if_owned(
        self,
        order_id: str,
        shopkeeper_id: str,
        status: str,
        allowed_sources: list[str],
        db: AsyncSession,
    ) -> Order | None:
        """Returns the updated order, or None when no row matched all conditions."""
        result = await db.execute(
            _UPDATE_STATUS_IF_OWNED_SQL,
            {
                "id": order_id,
                "shopkeeper_id": shopkeeper_id,
                "status": status,
                "allowed_sources": allowed_sources,
            },
        )
        row = result.fetchone()
        return _row_to_order(row) if row else None

    async def record_payment(
        self,
        order_id: str,
        provider: str,
        payment_id: str,
        paid_at: datetime,
        db: AsyncSession,
    ) -> Order | None:
        result = await db.execute(
            _RECORD_PAYMENT_SQL,
            {
                "id": order_id,
                "provider": provider,
                "payment_id": payment_id,
                "paid_at": paid_at,
            },
        )
        row = result.fetchone()
        return _row_to_order(row) if row else None

    async def list_by_customer(self, customer_id: str, db: AsyncSession) -> list[Order]:
        result = await db.execute(_LIST_BY_CUSTOMER_SQL, {"customer_id": customer_id})
        return [_row_to_order(row) for row in result.fetchall()]

    async def list_by_shopkeeper(self, shopkeeper_id: str, db: AsyncSession) -> list[Order]:
        result = await db.execute(_LIST_BY_SHOPKEEPER_SQL, {"shopkeeper_id": shopkeeper_id})
        return [_row_to_order(row) for row in result.fetchall()]

    async def list_created_since(
        self, shopkeeper_id: str, since: datetime, db: AsyncSession
    ) -> list[Order]:
        result = await db.execute(
            _LIST_CREATED_SINCE_SQL, {"shopkeeper_id": shopkeeper_id, "since": since}
        )
        return [_row_to_order(row) for row in result.fetchall()]

    async def get_shopkeeper(self, shopkeeper_id: str, db: AsyncSession) -> PartyInfo | None:
        result = await db.execute(_GET_SHOPKEEPER_SQL, {"id": shopkeeper_id})
        row = result.fetchone()
        if row is None:
            return None
        return PartyInfo(
            user_id=str(row.id),
            username=row.username,
            email=row.email,
            latitude=row.latitude,
            longitude=row.longitude,
        )
