"""
Affiliate Tracker Backend: Request Logging Middleware
=====================================================

What:  One access-log line per HTTP request.
How:   Times the downstream call and logs method, path, status, duration,
       request id, client IP and (for authenticated routes) the user id.
When:  Runs inside RequestIDMiddleware, so the request id is already set.

Log level by status:
    5xx → ERROR, 4xx → WARNING, everything else → INFO

Never logged: request bodies (passwords), the Authorization header (tokens).
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from affiliate_tracker.middleware.request_id import request_id_var

logger = logging.getLogger("affiliate_tracker.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Access log with request-id correlation. /health is not logged."""

    QUIET_PATHS = {"/health"}

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        client_ip = request.client.host if request.client else "unknown"
        rid = request_id_var.get("")
        # Set by require_auth on protected routes
        user = getattr(request.state, "user", None)
        user_id = user.id if user is not None else "-"

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s user=%s",
            request.method,
            request.url.path,
            status,
            duration_ms,
            rid,
            client_ip,
            user_id,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": request.url.path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
                "user_id": user_id,
            },
        )

        return response
