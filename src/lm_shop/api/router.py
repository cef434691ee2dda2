"""lm_shop REST endpoints.

GET /shopkeepers/nearby?lat=&lng=&radius_km=  : nearest first
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.lm_common.database import get_db_session
from src.lm_common.response import ApiResponse, success_response
from src.lm_gateway.auth.dependencies import get_current_user
from src.lm_gateway.user.db_models import UserModel
from src.lm_shop.application.service import ShopApplicationService

router = APIRouter(prefix="/shopkeepers", tags=["shops"])


def get_shop_service() -> ShopApplicationService:
    return ShopApplicationService()


@router.get("/nearby")
async def nearby_shopkeepers(
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[ShopApplicationService, Depends(get_shop_service)],
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    radius_km: float = Query(5.0, gt=0, le=50),
) -> ApiResponse:
    shops = await service.nearby_shopkeepers(db, lat, lng, radius_km)
    return success_response([s.model_dump() for s in shops], request)
