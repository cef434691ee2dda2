"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy import text

from config.settings import settings
from src.lm_common.database import engine
from src.lm_common.errors import AppError, InvalidInputError
from src.lm_common.redis_client import close_redis, get_redis
from src.lm_common.response import error_response
from src.lm_gateway.api.router import router as auth_router
from src.lm_gateway.middleware.rate_limit import RateLimitMiddleware
from src.lm_gateway.middleware.request_log import RequestLogMiddleware
from src.lm_notification.api.router import router as notification_router
from src.lm_notification.api.ws import router as realtime_router
from src.lm_notification.domain.presence import PresenceRegistry
from src.lm_order.api.router import router as order_router
from src.lm_shop.api.router import router as shop_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB (+ Redis when rate limiting). Shutdown: dispose."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    if settings.RATE_LIMIT_ENABLED:
        await get_redis()
    yield
    await engine.dispose()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)

# One registry per process, shared by the websocket endpoint and every dispatcher
app.state.presence = PresenceRegistry()

app.add_middleware(RateLimitMiddleware)
app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.http_status >= 500:
        logger.error("Request failed: %s %s → %s", request.method, request.url.path, exc.message)
    resp = error_response(exc.code, exc.message)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    err = InvalidInputError(f"{location}: {first.get('msg', 'invalid input')}".strip(": "))
    return JSONResponse(
        status_code=err.http_status,
        content=error_response(err.code, err.message).model_dump(),
    )


app.include_router(auth_router, prefix="/api/v1")
app.include_router(order_router, prefix="/api/v1")
app.include_router(notification_router, prefix="/api/v1")
app.include_router(shop_router, prefix="/api/v1")
app.include_router(realtime_router)


@app.get("/health")
async def health() -> dict[str, object]:
    presence: PresenceRegistry = app.state.presence
    return {
        "status": "ok",
        "version": "0.1.0",
        "online_users": len(presence.online_users()),
        "connections": presence.connection_count(),
    }
