"""
Postboard Backend: Rate Limiting Middleware
=============================================

What:  Per-IP sliding window rate limiter for the /api/ routes.
How:   Keeps each client's request timestamps in memory; once the window
       holds `limit` requests the next one gets 429 with Retry-After.
Who:   Applied to every request via Starlette middleware; /health and the
       docs are never limited because they live outside /api/.

Defaults: 100 requests per 15 minutes (RATE_LIMIT_REQUESTS,
RATE_LIMIT_WINDOW). State is per process; multiple workers each count
separately.
"""

import logging
import time
from collections import defaultdict
from typing import Callable, Dict, List, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from app.config import settings
from app.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    In-memory sliding window rate limiter.

    Args:
        limit:  Max requests per window (default: settings.rate_limit_requests)
        window: Window length in seconds (default: settings.rate_limit_window)
        prefix: Only paths starting with this are counted
        clock:  Time source, replaceable in tests
    """

    def __init__(
        self,
        app: ASGIApp,
        limit: Optional[int] = None,
        window: Optional[float] = None,
        prefix: str = "/api/",
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__(app)
        self.limit = limit or settings.rate_limit_requests
        self.window = window or settings.rate_limit_window
        self.prefix = prefix
        self._clock = clock
        self._requests: Dict[str, List[float]] = defaultdict(list)
        self._seen = 0

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if not request.url.path.startswith(self.prefix):
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = self._clock()
        window_start = now - self.window

        hits = [ts for ts in self._requests[client_ip] if ts > window_start]
        self._requests[client_ip] = hits

        if len(hits) >= self.limit:
            retry_after = int(hits[0] + self.window - now) + 1
            logger.warning(
                "Rate limit exceeded for IP %s: %d requests in %ss window",
                client_ip, len(hits), self.window,
            )
            return JSONResponse(
                status_code=429,
                content={
                    "success": False,
                    "error": "rate_limit_exceeded",
                    "message": "Too many requests from this IP, please try again later.",
                    "details": {"retry_after": retry_after},
                    "request_id": request_id_var.get("") or None,
                },
                headers={"Retry-After": str(retry_after)},
            )

        hits.append(now)
        self._seen += 1
        if self._seen % 1000 == 0:
            self._cleanup_inactive_ips(window_start)

        return await call_next(request)

    def _cleanup_inactive_ips(self, window_start: float) -> None:
        inactive = [
            ip for ip, timestamps in self._requests.items()
            if not timestamps or timestamps[-1] <= window_start
        ]
        for ip in inactive:
            del self._requests[ip]
        if inactive:
            logger.debug("Cleaned up %d inactive IP entries", len(inactive))
