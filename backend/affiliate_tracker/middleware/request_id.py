"""
Affiliate Tracker Backend: Request ID Middleware
================================================

What:  Gives every request a short correlation id.
How:   Reuses a client-supplied X-Request-ID header or generates one, stores
       it in a ContextVar (for loggers and exception handlers) and in
       request.state, and echoes it back in the X-Request-ID response header.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: each concurrent request sees its own value
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

# Client-supplied ids longer than this are replaced
MAX_REQUEST_ID_LENGTH = 64


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Assigns X-Request-ID to each request and response."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID", "")
        if not rid or len(rid) > MAX_REQUEST_ID_LENGTH:
            rid = uuid.uuid4().hex[:8]

        token = request_id_var.set(rid)
        request.state.request_id = rid
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers["X-Request-ID"] = rid
        return response
