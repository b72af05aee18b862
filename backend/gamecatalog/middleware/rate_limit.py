"""
Game Catalog API — Rate Limiting Middleware
=============================================

What:  Per-IP sliding-window request limit.
How:   Keeps a deque of request timestamps per client address. Timestamps
       older than RATE_LIMIT_WINDOW seconds are dropped on every request;
       once RATE_LIMIT_REQUESTS remain, the request is rejected with 429 and
       a Retry-After header computed from the oldest timestamp.

State is process-local: with several uvicorn workers each worker enforces
its own limit.
"""

import logging
import time
from collections import deque
from typing import Callable, Deque, Dict, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from gamecatalog.config import settings
from gamecatalog.exceptions import RateLimitExceededError
from gamecatalog.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)

EXEMPT_PATHS = frozenset({"/health", "/docs", "/redoc", "/openapi.json"})

# Forget idle clients every this many requests
SWEEP_EVERY = 1000


class RateLimitMiddleware(BaseHTTPMiddleware):

    def __init__(
        self,
        app,
        max_requests: Optional[int] = None,
        window_seconds: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__(app)
        self.max_requests = max_requests or settings.rate_limit_requests
        self.window_seconds = window_seconds or settings.rate_limit_window
        self.clock = clock
        self._hits: Dict[str, Deque[float]] = {}
        self._seen = 0

    def check(self, client_ip: str) -> None:
        """Record one hit for ``client_ip``; raise if it is over the limit."""
        now = self.clock()
        cutoff = now - self.window_seconds
        hits = self._hits.setdefault(client_ip, deque())
        while hits and hits[0] <= cutoff:
            hits.popleft()

        if len(hits) >= self.max_requests:
            retry_after = int(hits[0] + self.window_seconds - now) + 1
            raise RateLimitExceededError(retry_after=retry_after)

        hits.append(now)
        self._seen += 1
        if self._seen % SWEEP_EVERY == 0:
            self._sweep(cutoff)

    def _sweep(self, cutoff: float) -> None:
        idle = [ip for ip, hits in self._hits.items() if not hits or hits[-1] <= cutoff]
        for ip in idle:
            del self._hits[ip]
        if idle:
            logger.debug("Dropped rate-limit state for %d idle clients", len(idle))

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in EXEMPT_PATHS:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        try:
            self.check(client_ip)
        except RateLimitExceededError as exc:
            logger.warning(
                "Rate limit exceeded for %s: %d requests in %ds",
                client_ip,
                self.max_requests,
                self.window_seconds,
            )
            # Raised before routing, so the app's exception handlers never see it
            return JSONResponse(
                status_code=429,
                content={
                    "message": exc.message,
                    "error": "rate_limit_exceeded",
                    "details": exc.context,
                    "request_id": request_id_var.get(""),
                },
                headers={"Retry-After": str(exc.retry_after)},
            )

        return await call_next(request)
