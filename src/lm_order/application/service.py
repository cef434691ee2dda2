# src/lm_order/application/service.py
"""OrderApplicationService: the order lifecycle engine.

Writes run as `try: ...; commit; except: rollback; raise`. Validation always
happens before the first write, so a rejected request leaves nothing behind.
Status notifications are emitted only after the status commit, and a failing
dispatcher is logged without touching the committed status.
"""
import logging
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.lm_catalog.domain.repository import ProductRepositoryProtocol
from src.lm_catalog.infrastructure.persistence import ProductRepository
from src.lm_common.datetime_utils import local_zone, start_of_local_day, utc_now
from src.lm_common.enums import NotificationKind, OrderStatus, TransitionPolicy
from src.lm_common.errors import (
    EmptyOrderError,
    InvalidInputError,
    OrderNotFoundError,
    OrderTransitionNotAllowedError,
    PaymentAlreadyRecordedError,
    ProductNotFoundError,
    ShopkeeperNotFoundError,
)
from src.lm_common.id_generator import generate_id, short_id
from src.lm_notification.application.dispatcher import NotificationDispatcher
from src.lm_order.application.schemas import CreateOrderRequest, DailyStatOut, OrderDetail
from src.lm_order.domain.models import DeliveryAddress, Order, OrderItem
from src.lm_order.domain.repository import OrderRepositoryProtocol
from src.lm_order.domain.state_machine import allowed_sources, parse_status
from src.lm_order.domain.stats import WEEK_DAYS, bucket_by_day
from src.lm_order.infrastructure.persistence import OrderRepository

logger = logging.getLogger(__name__)


def status_notification_text(order_id: str, status: str) -> tuple[str, str]:
    """(title, message) shown to the customer for a status change."""
    return (
        f"Order {status}",
        f"Your order #{short_id(order_id)} was updated to: {status}",
    )


class OrderApplicationService:
    def __init__(
        self,
        dispatcher: NotificationDispatcher,
        repo: OrderRepositoryProtocol | None = None,
        product_repo: ProductRepositoryProtocol | None = None,
        policy: TransitionPolicy | str | None = None,
    ) -> None:
        self._dispatcher = dispatcher
        self._repo: OrderRepositoryProtocol = repo or OrderRepository()
        self._products: ProductRepositoryProtocol = product_repo or ProductRepository()
        self._policy = TransitionPolicy(policy or settings.ORDER_TRANSITION_POLICY)

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    async def create_order(
        self, db: AsyncSession, customer_id: str, req: CreateOrderRequest
    ) -> OrderDetail:
        if not req.items:
            raise EmptyOrderError()
        if not req.shopkeeper_id:
            raise InvalidInputError("Shopkeeper ID is required")

        shopkeeper = await self._repo.get_shopkeeper(req.shopkeeper_id, db)
        if shopkeeper is None:
            raise ShopkeeperNotFoundError(req.shopkeeper_id)

        products = await self._products.get_by_ids([it.product_id for it in req.items], db)
        items: list[OrderItem] = []
        for it in req.items:
            product = products.get(it.product_id)
            if product is None:
                raise ProductNotFoundError(it.product_id)
            items.append(
                OrderItem(
                    product_id=product.id,
                    name=product.name,
                    price=product.price,
                    quantity=it.quantity,
                    image=product.primary_image,
                )
            )

        total = Order.compute_total(items)
        if req.total_amount is not None and req.total_amount != total:
            logger.warning(
                "Client total %d differs from computed total %d; using computed",
                req.total_amount, total,
            )

        now = utc_now()
        order = Order(
            id=generate_id(),
            customer_id=customer_id,
            shopkeeper_id=shopkeeper.user_id,
            items=items,
            total=total,
            address=DeliveryAddress(**req.address.model_dump()),
            payment_method=req.payment_method.value,
            delivery_lat=req.delivery_location.lat if req.delivery_location else None,
            delivery_lng=req.delivery_location.lng if req.delivery_location else None,
            status=OrderStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )
        try:
            await self._repo.save(order, db)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Order created: id=%s customer=%s shopkeeper=%s total=%d",
            order.id, customer_id, order.shopkeeper_id, total,
        )
        stored = await self._repo.get_by_id(order.id, db)
        return OrderDetail.from_domain(stored or order)

    # ------------------------------------------------------------------
    # Transition
    # ------------------------------------------------------------------

    async def update_status(
        self, db: AsyncSession, order_id: str, shopkeeper_id: str, new_status: str
    ) -> OrderDetail:
        target = parse_status(new_status)
        try:
            order = await self._repo.update_status_if_owned(
                order_id, shopkeeper_id, target.value, allowed_sources(target, self._policy), db
            )
            if order is None:
                current = await self._repo.get_owned(order_id, shopkeeper_id, db)
                if current is None:
                    raise OrderNotFoundError(order_id)
                raise OrderTransitionNotAllowedError(order_id, current.status, target.value)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info("Order %s moved to %s by %s", order_id, target.value, shopkeeper_id)
        await self._notify_status_change(db, order)
        return OrderDetail.from_domain(order)

    async def _notify_status_change(self, db: AsyncSession, order: Order) -> None:
        title, message = status_notification_text(order.id, order.status)
        try:
            await self._dispatcher.emit(
                db,
                recipient_id=order.customer_id,
                kind=NotificationKind.ORDER_UPDATE,
                title=title,
                message=message,
                metadata={"order_id": order.id, "status": order.status},
            )
        except Exception:
            # The status change is already committed; the customer still sees it on the order
            logger.exception("Order status notification failed: order=%s", order.id)

    # ------------------------------------------------------------------
    # Payment collaborator boundary
    # ------------------------------------------------------------------

    async def record_payment(
        self,
        db: AsyncSession,
        order_id: str,
        provider: str,
        payment_id: str,
        paid_at: datetime | None = None,
    ) -> OrderDetail:
        try:
            order = await self._repo.record_payment(
                order_id, provider, payment_id, paid_at or utc_now(), db
            )
            if order is None:
                if await self._repo.get_by_id(order_id, db) is None:
                    raise OrderNotFoundError(order_id)
                raise PaymentAlreadyRecordedError(order_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return OrderDetail.from_domain(order)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_order(self, db: AsyncSession, order_id: str) -> OrderDetail:
        order = await self._repo.get_by_id(order_id, db)
        if order is None:
            raise OrderNotFoundError(order_id)
        return OrderDetail.from_domain(order)

    async def list_customer_orders(self, db: AsyncSession, customer_id: str) -> list[OrderDetail]:
        orders = await self._repo.list_by_customer(customer_id, db)
        return [OrderDetail.from_domain(o) for o in orders]

    async def list_shopkeeper_orders(
        self, db: AsyncSession, shopkeeper_id: str
    ) -> list[OrderDetail]:
        orders = await self._repo.list_by_shopkeeper(shopkeeper_id, db)
        return [OrderDetail.from_domain(o) for o in orders]

    async def weekly_stats(
        self, db: AsyncSession, shopkeeper_id: str, now: datetime | None = None
    ) -> list[DailyStatOut]:
        tz = local_zone()
        today = (now or utc_now()).astimezone(tz).date()
        since = start_of_local_day(today - timedelta(days=WEEK_DAYS - 1), tz)
        orders = await self._repo.list_created_since(shopkeeper_id, since, db)
        return [DailyStatOut.from_domain(s) for s in bucket_by_day(orders, today, tz)]
