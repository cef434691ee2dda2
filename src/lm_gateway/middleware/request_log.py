"""Access log for the HTTP API, tagged by route group.

Each request gets a short id in request.state (ApiResponse picks it up) and
in the X-Request-ID response header. One line is logged per request:

    INFO orders PUT /api/v1/orders/123 → 200 (23ms) req_a1b2c3d4e5f6

/health is polled by load balancers and logs at DEBUG. The /ws upgrade never
reaches this middleware; the channel logs its own join and close.
"""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("lm.request")

REQUEST_ID_HEADER = "X-Request-ID"
_API_PREFIX = "/api/v1/"


def route_group(path: str) -> str:
    """``/api/v1/orders/123`` → ``orders``; anything outside the API → ``app``."""
    if path == "/health":
        return "health"
    if not path.startswith(_API_PREFIX):
        return "app"
    return path[len(_API_PREFIX):].split("/", 1)[0] or "app"


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = f"req_{uuid.uuid4().hex[:12]}"
        request.state.request_id = request_id

        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        response.headers[REQUEST_ID_HEADER] = request_id

        group = route_group(request.url.path)
        logger.log(
            logging.DEBUG if group == "health" else logging.INFO,
            "%s %s %s → %d (%.0fms) %s",
            group,
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request_id,
        )
        return response
