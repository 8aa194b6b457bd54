"""
Affiliate Tracker Backend: Rate Limiting Middleware
===================================================

What:  Per-IP fixed window rate limiter applied to every request.
How:   FixedWindowRateLimiter keeps one (window_start, count) pair per client.
       RateLimitMiddleware asks it for a decision before the request
       reaches any route.
When:  First in the middleware chain, so rejected requests cost nothing else.

Algorithm: Fixed Window Counter
    1. First request from an IP opens a window at `now` with count 1
    2. Each further request inside the window increments the count
    3. Once count == limit, further requests in that window get 429
    4. When `window_seconds` have passed since the window opened, the next
       request opens a fresh window (counter reset)

    Defaults: 100 requests per 15 minutes (settings.rate_limit_requests /
    settings.rate_limit_window).

Thread Safety:
    The counter table is guarded by a threading.Lock. Every read-modify-write
    of a client's counter happens under the lock, so concurrent increments
    (async tasks or threadpool workers) never lose updates.
    State is per process; multi-worker deployments get one budget per worker.
"""

import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from affiliate_tracker.exceptions import RateLimitExceededError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of one FixedWindowRateLimiter.hit() call."""
    allowed: bool
    limit: int
    remaining: int
    retry_after: int  # seconds until the window resets; 0 when allowed


class FixedWindowRateLimiter:
    """
    Thread-safe fixed window request counter keyed by client id.

    The clock is injectable so tests can move time forward without sleeping.
    """

    # Purge expired windows once the table grows past this many clients
    CLEANUP_THRESHOLD = 10_000

    def __init__(
        self,
        max_requests: int,
        window_seconds: int,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if window_seconds < 1:
            raise ValueError("window_seconds must be at least 1")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._windows: Dict[str, Tuple[float, int]] = {}

    def hit(self, key: str, now: Optional[float] = None) -> RateLimitDecision:
        """Count one request for `key` and say whether it may proceed."""
        now = self._clock() if now is None else now

        with self._lock:
            window_start, count = self._windows.get(key, (now, 0))
            if now - window_start >= self.window_seconds:
                window_start, count = now, 0

            if count >= self.max_requests:
                retry_after = max(1, math.ceil(window_start + self.window_seconds - now))
                return RateLimitDecision(False, self.max_requests, 0, retry_after)

            count += 1
            self._windows[key] = (window_start, count)

            if len(self._windows) > self.CLEANUP_THRESHOLD:
                self._purge_expired(now)

            return RateLimitDecision(True, self.max_requests, self.max_requests - count, 0)

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()

    def _purge_expired(self, now: float) -> None:
        # Caller holds the lock
        expired = [
            key for key, (start, _) in self._windows.items()
            if now - start >= self.window_seconds
        ]
        for key in expired:
            del self._windows[key]
        if expired:
            logger.debug("Purged %d expired rate limit windows", len(expired))


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Applies a FixedWindowRateLimiter to every request by client IP.

    Excluded paths:
        /health, /docs, /openapi.json, /redoc

    Response on rate limit:
        HTTP 429, Retry-After header,
        body {"success": false, "error": "Too many requests ..."}

    Allowed responses carry X-RateLimit-Limit / X-RateLimit-Remaining headers.
    """

    EXCLUDED_PATHS = {"/health", "/docs", "/openapi.json", "/redoc"}

    def __init__(self, app: ASGIApp, limiter: FixedWindowRateLimiter):
        super().__init__(app)
        self.limiter = limiter

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.EXCLUDED_PATHS:
            return await call_next(request)

        # Behind a proxy this is the proxy's address unless uvicorn runs
        # with --proxy-headers
        client_ip = request.client.host if request.client else "unknown"

        decision = self.limiter.hit(client_ip)
        if not decision.allowed:
            exc = RateLimitExceededError(retry_after=decision.retry_after)
            logger.warning(
                "Rate limit exceeded for IP %s: %d requests per %ds window",
                client_ip,
                decision.limit,
                self.limiter.window_seconds,
            )
            # Exceptions raised inside BaseHTTPMiddleware bypass the app's
            # exception handlers, so the 429 is built here
            return JSONResponse(
                status_code=429,
                content={"success": False, "error": exc.message},
                headers={
                    "Retry-After": str(exc.retry_after),
                    "X-RateLimit-Limit": str(decision.limit),
                    "X-RateLimit-Remaining": "0",
                },
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(decision.limit)
        response.headers["X-RateLimit-Remaining"] = str(decision.remaining)
        return response
