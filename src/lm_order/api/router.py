# src/lm_order/api/router.py
"""lm_order REST endpoints.

POST /orders                         : customer places an order
GET  /orders/my                      : customer's orders, newest first
GET  /orders/my-shop-orders          : shopkeeper's orders, newest first
GET  /orders/my-shop-orders-weekly   : 7-day per-day count and revenue
GET  /orders/{order_id}              : any authenticated user
PUT  /orders/{order_id}              : owning shopkeeper changes status

The fixed paths are declared before /{order_id} so they are not captured by it.
"""
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.lm_common.database import get_db_session
from src.lm_common.response import ApiResponse, success_response
from src.lm_gateway.auth.dependencies import get_current_user, require_customer, require_shopkeeper
from src.lm_gateway.user.db_models import UserModel
from src.lm_notification.api.dependencies import get_dispatcher
from src.lm_notification.application.dispatcher import NotificationDispatcher
from src.lm_order.application.schemas import CreateOrderRequest, UpdateOrderStatusRequest
from src.lm_order.application.service import OrderApplicationService

router = APIRouter(prefix="/orders", tags=["orders"])


def get_order_service(
    dispatcher: Annotated[NotificationDispatcher, Depends(get_dispatcher)],
) -> OrderApplicationService:
    return OrderApplicationService(dispatcher)


ServiceDep = Annotated[OrderApplicationService, Depends(get_order_service)]
DbDep = Annotated[AsyncSession, Depends(get_db_session)]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_order(
    body: CreateOrderRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(require_customer)],
    db: DbDep,
    service: ServiceDep,
) -> ApiResponse:
    order = await service.create_order(db, str(current_user.id), body)
    resp = success_response(order.model_dump(mode="json"), request)
    resp.message = "Order created successfully"
    return resp


@router.get("/my")
async def list_my_orders(
    request: Request,
    current_user: Annotated[UserModel, Depends(require_customer)],
    db: DbDep,
    service: ServiceDep,
) -> ApiResponse:
    orders = await service.list_customer_orders(db, str(current_user.id))
    return success_response([o.model_dump(mode="json") for o in orders], request)


@router.get("/my-shop-orders")
async def list_my_shop_orders(
    request: Request,
    current_user: Annotated[UserModel, Depends(require_shopkeeper)],
    db: DbDep,
    service: ServiceDep,
) -> ApiResponse:
    orders = await service.list_shopkeeper_orders(db, str(current_user.id))
    return success_response([o.model_dump(mode="json") for o in orders], request)


@router.get("/my-shop-orders-weekly")
async def weekly_stats(
    request: Request,
    current_user: Annotated[UserModel, Depends(require_shopkeeper)],
    db: DbDep,
    service: ServiceDep,
) -> ApiResponse:
    stats = await service.weekly_stats(db, str(current_user.id))
    return success_response([s.model_dump() for s in stats], request)


@router.get("/{order_id}")
async def get_order(
    order_id: str,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: DbDep,
    service: ServiceDep,
) -> ApiResponse:
    order = await service.get_order(db, order_id)
    return success_response(order.model_dump(mode="json"), request)


@router.put("/{order_id}")
async def update_order_status(
    order_id: str,
    body: UpdateOrderStatusRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(require_shopkeeper)],
    db: DbDep,
    service: ServiceDep,
) -> ApiResponse:
    order = await service.update_status(db, order_id, str(current_user.id), body.status)
    resp = success_response(order.model_dump(mode="json"), request)
    resp.message = "Order updated"
    return resp
