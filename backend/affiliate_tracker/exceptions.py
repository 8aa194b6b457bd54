"""
Affiliate Tracker Backend: Custom Exception Hierarchy
=====================================================

What:  Application-specific exceptions for each failure the API can report.
How:   Each exception carries a user-facing message and an optional context
       dict. Global handlers (registered in main.py) map them to status codes
       and the `{success: false, ...}` envelope.
Who:   Raised by services, dependencies and middleware; caught by handlers.

Exception Hierarchy:
    AffiliateTrackerError (base)
    ├── ValidationError          → 400 Bad Request
    ├── DuplicateEmailError      → 400 Bad Request (409 semantics)
    ├── InvalidCredentialsError  → 400 Bad Request
    ├── MissingTokenError        → 401 Unauthorized
    ├── InvalidTokenError        → 401 Unauthorized
    ├── NotFoundError            → 404 Not Found
    ├── DatabaseError            → 500 Internal Server Error
    └── RateLimitExceededError   → 429 Too Many Requests

The context dict is logged server-side and never returned to the client.
"""

from typing import Any, Dict, List, Optional


class AffiliateTrackerError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(AffiliateTrackerError):
    """
    Raised when client input fails validation.

    HTTP:    400 Bad Request
    Body:    {"success": false, "errors": [{"field": ..., "message": ...}]}

    `errors` holds every violation found; when a single field is named
    without an explicit list, one entry is synthesised from it.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        errors: Optional[List[Dict[str, str]]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field
        if errors is None:
            errors = [{"field": field or "body", "message": message}]
        self.errors = errors


class DuplicateEmailError(AffiliateTrackerError):
    """
    Raised when registering an email that already belongs to a user.

    HTTP:    400 Bad Request (conflict semantics, reported as 400 for
             compatibility with existing clients)
    """

    def __init__(
        self,
        message: str = "Email is already registered",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InvalidCredentialsError(AffiliateTrackerError):
    """
    Raised when a login attempt fails.

    The same message is used for an unknown email and a wrong password so the
    response cannot be used to enumerate accounts.
    """

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Invalid credentials", context=context)


class MissingTokenError(AffiliateTrackerError):
    """Raised when a protected route is called without a bearer token."""

    def __init__(
        self,
        message: str = "No token provided, authorization denied",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InvalidTokenError(AffiliateTrackerError):
    """Raised when a bearer token has a bad signature, is malformed or expired."""

    def __init__(
        self,
        message: str = "Token is not valid",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(AffiliateTrackerError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing rows; services convert that None into
    this exception so the handler can answer 404.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource.capitalize()} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource = resource


class DatabaseError(AffiliateTrackerError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:    500 Internal Server Error
    The client only ever sees a generic message; the context (operation,
    original exception type) is logged.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(AffiliateTrackerError):
    """
    Raised when a client exceeds the per-IP request budget for the window.

    HTTP:    429 Too Many Requests, with a Retry-After header.
    """

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = "Too many requests from this IP, please try again later."
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
