"""lm_notification REST endpoints: backlog fetch and read acknowledgment.

GET /notifications                    : full backlog, newest first
PUT /notifications/read-all           : acknowledge everything unread
PUT /notifications/{notification_id}/read
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.lm_common.database import get_db_session
from src.lm_common.response import ApiResponse, success_response
from src.lm_gateway.auth.dependencies import get_current_user
from src.lm_gateway.user.db_models import UserModel
from src.lm_notification.api.dependencies import get_dispatcher
from src.lm_notification.application.dispatcher import NotificationDispatcher
from src.lm_notification.application.schemas import (
    MarkAllReadResponse,
    NotificationListResponse,
    NotificationResponse,
)

router = APIRouter(prefix="/notifications", tags=["notifications"])

DispatcherDep = Annotated[NotificationDispatcher, Depends(get_dispatcher)]


@router.get("")
async def list_notifications(
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    dispatcher: DispatcherDep,
) -> ApiResponse:
    user_id = str(current_user.id)
    backlog = await dispatcher.fetch_backlog(db, user_id)
    data = NotificationListResponse(
        items=[NotificationResponse.from_domain(n) for n in backlog],
        unread_count=await dispatcher.unread_count(db, user_id),
    )
    return success_response(data.model_dump(mode="json"), request)


@router.put("/read-all")
async def mark_all_read(
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    dispatcher: DispatcherDep,
) -> ApiResponse:
    updated = await dispatcher.mark_all_read(db, str(current_user.id))
    return success_response(MarkAllReadResponse(updated=updated).model_dump(), request)


@router.put("/{notification_id}/read")
async def mark_read(
    notification_id: str,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    dispatcher: DispatcherDep,
) -> ApiResponse:
    notification = await dispatcher.mark_read(db, str(current_user.id), notification_id)
    return success_response(
        NotificationResponse.from_domain(notification).model_dump(mode="json"), request
    )
