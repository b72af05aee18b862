"""
Game Catalog API — Access Log Middleware
==========================================

What:  One log line per request on the ``gamecatalog.access`` logger.
Why:   Ties every request to its status, latency and request id so a slow
       or failing call can be traced from a single line.
How:   Times the downstream call with ``time.perf_counter`` and logs
       method, path (with query string), status, duration, request id and
       client address. The level follows the status class:

           5xx → ERROR    4xx → WARNING    otherwise → INFO

What we log vs what we DON'T log:
    ✅ Log: method, path + query string, status, duration, IP, request ID
    ❌ Don't log: request bodies (full game documents), headers

/health is skipped; orchestrator probes hit it every few seconds.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from gamecatalog.middleware.request_id import request_id_var

logger = logging.getLogger("gamecatalog.access")

QUIET_PATHS = frozenset({"/health"})


def level_for_status(status: int) -> int:
    # 5xx → ERROR (server fault), 4xx → WARNING (client error), else INFO
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs method, target, status and duration for each request.

    Duration is measured from middleware entry to response return, so it
    covers validation, storage queries and serialization.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        # perf_counter: monotonic and higher resolution than time.time()
        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - started) * 1000

        # Include the query string so page, filter and search values show up
        target = f"{path}?{request.url.query}" if request.url.query else path
        # request.client is None under some test transports
        client_ip = request.client.host if request.client else "unknown"
        rid = request_id_var.get("")
        status = response.status_code

        logger.log(
            level_for_status(status),
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            target,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )
        return response
