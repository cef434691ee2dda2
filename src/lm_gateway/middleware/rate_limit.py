"""Fixed-window rate limiting for order writes.

Rules:
  - POST/PUT under /api/v1/orders: RATE_LIMIT_WRITE_PER_MINUTE req/min/client
  - Everything else passes through untouched.

Redis logic:
    count = INCR  ratelimit:{client}:{window}
    EXPIRE on first hit; count > limit → 429
The client key is the socket peer, or the nearest untrusted X-Forwarded-For
hop when the peer is listed in TRUSTED_PROXIES.
"""

import logging
import time
from collections.abc import Awaitable, Callable, Iterable

import redis.asyncio as aioredis
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from config.settings import settings
from src.lm_common.errors import RateLimitError
from src.lm_common.redis_client import get_redis
from src.lm_common.response import error_response

logger = logging.getLogger(__name__)

_WINDOW_SECONDS = 60
_LIMITED_METHODS = frozenset({"POST", "PUT"})
_LIMITED_PREFIX = "/api/v1/orders"


def client_key(request: Request, trusted_proxies: frozenset[str]) -> str:
    """The caller's address for rate limiting.

    X-Forwarded-For is honoured only when the socket peer is a trusted proxy,
    and then read right to left, skipping further trusted hops. Hops to the
    left of those were written by the client and are ignored.
    """
    peer = request.client.host if request.client else "unknown"
    if peer not in trusted_proxies:
        return peer
    hops = [h.strip() for h in request.headers.get("x-forwarded-for", "").split(",")]
    for hop in reversed(hops):
        if hop and hop not in trusted_proxies:
            return hop
    return peer


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app: ASGIApp,
        redis_factory: Callable[[], Awaitable[aioredis.Redis]] = get_redis,
        limit: int | None = None,
        enabled: bool | None = None,
        trusted_proxies: Iterable[str] | None = None,
    ) -> None:
        super().__init__(app)
        self._redis_factory = redis_factory
        self._limit = limit if limit is not None else settings.RATE_LIMIT_WRITE_PER_MINUTE
        self._enabled = enabled if enabled is not None else settings.RATE_LIMIT_ENABLED
        self._trusted_proxies = frozenset(
            trusted_proxies if trusted_proxies is not None else settings.TRUSTED_PROXIES
        )

    def _applies(self, request: Request) -> bool:
        return (
            self._enabled
            and request.method in _LIMITED_METHODS
            and request.url.path.startswith(_LIMITED_PREFIX)
        )

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if not self._applies(request):
            return await call_next(request)

        window = int(time.time()) // _WINDOW_SECONDS
        key = f"ratelimit:{client_key(request, self._trusted_proxies)}:{window}"
        redis = await self._redis_factory()
        count = await redis.incr(key)
        if count == 1:
            await redis.expire(key, _WINDOW_SECONDS)
        if count > self._limit:
            logger.warning("Rate limit hit: key=%s count=%d", key, count)
            err = RateLimitError()
            retry_after = _WINDOW_SECONDS - int(time.time()) % _WINDOW_SECONDS
            return JSONResponse(
                status_code=err.http_status,
                content=error_response(err.code, err.message).model_dump(),
                headers={"Retry-After": str(retry_after)},
            )
        return await call_next(request)
