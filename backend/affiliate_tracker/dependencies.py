"""
Affiliate Tracker Backend: Route Dependencies
=============================================

What:  FastAPI dependencies that hand route handlers their services and the
       authenticated identity.
How:   Services are built once in create_app() and stored on app.state;
       these functions read them back from the current request's app.

require_auth is the gate in front of protected routes: it resolves the
Authorization header to TokenClaims and stores them on request.state.user.
"""

from fastapi import Request

from affiliate_tracker.services.affiliate_link_service import AffiliateLinkService
from affiliate_tracker.services.auth_service import AuthService, TokenClaims
from affiliate_tracker.services.metric_service import MetricService
from affiliate_tracker.services.platform_service import PlatformService


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_platform_service(request: Request) -> PlatformService:
    return request.app.state.platform_service


def get_affiliate_link_service(request: Request) -> AffiliateLinkService:
    return request.app.state.affiliate_link_service


def get_metric_service(request: Request) -> MetricService:
    return request.app.state.metric_service


def require_auth(request: Request) -> TokenClaims:
    """
    Gate for protected routes.

    Raises MissingTokenError / InvalidTokenError (→ 401 via the global
    handlers). On success the claims are also available as request.state.user.
    """
    auth_service: AuthService = request.app.state.auth_service
    claims = auth_service.authenticate(request.headers.get("Authorization"))
    request.state.user = claims
    return claims
