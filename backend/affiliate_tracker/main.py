"""
Affiliate Tracker Backend: FastAPI Application Factory
======================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app(settings) builds the services from an explicit Settings
       object, registers middleware, exception handlers and routers, and
       returns the app.
Who:   uvicorn imports `affiliate_tracker.main:app`; tests call create_app()
       with their own Settings.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────────┐ ┌──────────┐ ┌─────────────────┐  │
    │  │  Rate Limit  │→│ Req ID   │→│  Logging        │  │
    │  └──────────────┘ └──────────┘ └─────────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  /register /login  /platform(s)  /affiliate-link(s) │
    │  /performance-metric(s)  /health                    │
    │                                                     │
    │  Exception Handlers:                                │
    │  Validation→400 │ Auth→401 │ NotFound→404 │ DB→500  │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging setup, configuration check, optional table creation
    Shutdown: dispose database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from affiliate_tracker import __version__
from affiliate_tracker.config import Settings, settings as default_settings
from affiliate_tracker.database import dispose_engine, init_models
from affiliate_tracker.exceptions import (
    AffiliateTrackerError,
    DatabaseError,
    DuplicateEmailError,
    InvalidCredentialsError,
    InvalidTokenError,
    MissingTokenError,
    NotFoundError,
    ValidationError,
)
from affiliate_tracker.middleware.logging import RequestLoggingMiddleware
from affiliate_tracker.middleware.rate_limit import FixedWindowRateLimiter, RateLimitMiddleware
from affiliate_tracker.middleware.request_id import RequestIDMiddleware, request_id_var
from affiliate_tracker.routes import affiliate_links, auth, health, metrics, platforms
from affiliate_tracker.schemas.common import violations_from_errors
from affiliate_tracker.services.affiliate_link_service import AffiliateLinkService
from affiliate_tracker.services.auth_service import AuthService
from affiliate_tracker.services.metric_service import MetricService
from affiliate_tracker.services.platform_service import PlatformService

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(log_level: str) -> None:
    """
    Configure the root logger once, at startup.

    Format: 2024-01-15T12:00:00 [INFO] affiliate_tracker.access: POST /login 200 ...
    """
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party loggers are noisy at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup before the yield, shutdown after it."""
    app_settings: Settings = app.state.settings

    setup_logging(app_settings.log_level)
    logger.info("Affiliate Tracker Backend %s starting up...", __version__)

    try:
        app_settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving; a development secret is still a working secret
        logger.error("Configuration error: %s", str(e))

    if app_settings.create_tables_on_startup:
        await init_models()
        logger.info("Database tables ensured")

    logger.info(
        "Server ready at http://%s:%d (docs at /docs)",
        app_settings.backend_host,
        app_settings.backend_port,
    )

    yield

    logger.info("Affiliate Tracker Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _failure(status_code: int, error: str, headers: Optional[Dict[str, str]] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": error},
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to status codes and the `{success: false, ...}` envelope.

    Handler table:
        RequestValidationError   → 400 {errors: [...]} (body/query/path schema)
        ValidationError          → 400 {errors: [...]} (service-level rules)
        DuplicateEmailError      → 400
        InvalidCredentialsError  → 400
        MissingTokenError        → 401
        InvalidTokenError        → 401
        NotFoundError            → 404
        DatabaseError            → 500 (generic message)
        AffiliateTrackerError    → 500 (catch-all for custom)
        HTTPException            → its own status (unknown route, wrong method)
        Exception                → 500 (unexpected errors)

    The 429 for RateLimitExceededError is written by RateLimitMiddleware,
    which runs outside these handlers.

    Context dicts and stack traces are logged, never returned.
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        violations = violations_from_errors(exc.errors())
        logger.info(
            "[%s] Request validation failed on %s: %s",
            request_id_var.get(""),
            request.url.path,
            ", ".join(v["field"] for v in violations),
        )
        return JSONResponse(status_code=400, content={"success": False, "errors": violations})

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.info("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(status_code=400, content={"success": False, "errors": exc.errors})

    @app.exception_handler(DuplicateEmailError)
    async def handle_duplicate_email(request: Request, exc: DuplicateEmailError):
        return _failure(400, exc.message)

    @app.exception_handler(InvalidCredentialsError)
    async def handle_invalid_credentials(request: Request, exc: InvalidCredentialsError):
        # The reason (unknown email vs wrong password) is for the logs only
        logger.info("[%s] Login rejected: %s", request_id_var.get(""), exc.context.get("reason"))
        return _failure(400, exc.message)

    @app.exception_handler(MissingTokenError)
    async def handle_missing_token(request: Request, exc: MissingTokenError):
        return _failure(401, exc.message, headers={"WWW-Authenticate": "Bearer"})

    @app.exception_handler(InvalidTokenError)
    async def handle_invalid_token(request: Request, exc: InvalidTokenError):
        logger.info("[%s] Token rejected: %s", request_id_var.get(""), exc.context.get("reason"))
        return _failure(401, exc.message, headers={"WWW-Authenticate": "Bearer"})

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _failure(404, exc.message)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return _failure(500, "Server error")

    @app.exception_handler(AffiliateTrackerError)
    async def handle_application_error(request: Request, exc: AffiliateTrackerError):
        logger.error(
            "[%s] Unhandled application error %s: %s | Context: %s",
            request_id_var.get(""),
            type(exc).__name__,
            exc.message,
            exc.context,
        )
        return _failure(500, "Server error")

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        headers: Dict[str, Any] = dict(exc.headers or {})
        return _failure(exc.status_code, str(exc.detail), headers=headers or None)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return _failure(500, "Server error")


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Assemble the application from an explicit Settings object.

    The signing secret and rate limit budget are handed to AuthService and
    FixedWindowRateLimiter here; nothing else reads them.
    """
    app_settings = settings or default_settings

    app = FastAPI(
        title="Affiliate Tracker API",
        description=(
            "Track affiliate platforms, affiliate links and click/conversion metrics. "
            "Protected routes require `Authorization: Bearer <token>` from POST /login."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Services ──────────────────────────────────────────────────────────
    strict = app_settings.strict_referential_integrity
    rate_limiter = FixedWindowRateLimiter(
        max_requests=app_settings.rate_limit_requests,
        window_seconds=app_settings.rate_limit_window,
    )
    app.state.settings = app_settings
    app.state.rate_limiter = rate_limiter
    app.state.auth_service = AuthService(app_settings)
    app.state.platform_service = PlatformService()
    app.state.affiliate_link_service = AffiliateLinkService(strict_referential_integrity=strict)
    app.state.metric_service = MetricService(strict_referential_integrity=strict)

    # ── Register Middleware ───────────────────────────────────────────────
    # Executes in reverse order of addition:
    # RateLimit → RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[
            "X-Request-ID",
            "Retry-After",
            "X-RateLimit-Limit",
            "X-RateLimit-Remaining",
        ],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(RateLimitMiddleware, limiter=rate_limiter)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(auth.router)
    app.include_router(platforms.router)
    app.include_router(affiliate_links.router)
    app.include_router(metrics.router)
    app.include_router(health.router)

    return app


# uvicorn entry point: `uvicorn affiliate_tracker.main:app`
app = create_app()
