"""
Affiliate Tracker Backend: Auth Service
=======================================

What:  Registers users, checks login attempts, issues and verifies session tokens.
How:   bcrypt for password hashing, python-jose for HS256-signed JWTs.
Who:   Constructed once by create_app() with the application Settings and
       stored on app.state; routes reach it through dependencies.

Token contract:
    claims  = {"sub": <user id>, "role": <role>, "iat": <issued>, "exp": <issued + ttl>}
    ttl     = settings.token_ttl_seconds (one hour by default)
    secret  = settings.jwt_secret, passed in at construction time

Tokens are stateless: there is no session table. verify_token() depends only
on the secret, the token and the clock, and takes the clock as an argument so
expiry is testable without sleeping.
"""

import logging
import time
from dataclasses import dataclass
from typing import Optional

import bcrypt
from fastapi.concurrency import run_in_threadpool
from jose import JWTError, jwt
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_tracker.config import Settings
from affiliate_tracker.exceptions import (
    AffiliateTrackerError,
    DatabaseError,
    DuplicateEmailError,
    InvalidCredentialsError,
    InvalidTokenError,
    MissingTokenError,
)
from affiliate_tracker.models.user import DEFAULT_ROLE, User
from affiliate_tracker.schemas.auth import UserPublic

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes; newer releases raise instead of truncating
BCRYPT_MAX_BYTES = 72


def normalize_email(email: str) -> str:
    """Canonical form used for storage and lookup."""
    return email.strip().lower()


@dataclass(frozen=True)
class TokenClaims:
    """Identity decoded from a verified token, exposed to protected routes."""
    id: str
    role: str


class AuthService:
    """
    Credential storage, login and token verification.

    Responsibilities:
        - register(): hash password, persist User, map duplicate email
        - login(): generic failure for unknown email or wrong password
        - issue_token() / verify_token(): stateless JWT handling
        - authenticate(): Authorization header → TokenClaims
    """

    def __init__(self, settings: Settings):
        self._secret = settings.jwt_secret
        self._algorithm = settings.jwt_algorithm
        self._ttl_seconds = settings.token_ttl_seconds
        self._rounds = settings.bcrypt_rounds

    # ── Passwords ─────────────────────────────────────────────────────────

    def hash_password(self, password: str) -> str:
        """Salted one-way hash at the configured cost factor."""
        password_bytes = password.encode("utf-8")[:BCRYPT_MAX_BYTES]
        return bcrypt.hashpw(password_bytes, bcrypt.gensalt(rounds=self._rounds)).decode("utf-8")

    def verify_password(self, password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(
                password.encode("utf-8")[:BCRYPT_MAX_BYTES],
                password_hash.encode("utf-8"),
            )
        except ValueError:
            # Malformed stored hash
            logger.warning("Stored password hash could not be parsed")
            return False

    # ── Registration & Login ──────────────────────────────────────────────

    async def register(
        self,
        db: AsyncSession,
        name: str,
        email: str,
        password: str,
    ) -> UserPublic:
        """
        Create a new user account.

        Input shape (non-empty name, well-formed email, password >= 6 chars)
        is checked by RegisterRequest before this runs.
        The email is lower-cased, so addresses differing only in case
        belong to the same account. New accounts always get DEFAULT_ROLE.

        Raises:
            DuplicateEmailError: email already registered (pre-check, or the
                                 unique index firing under a concurrent insert)
            DatabaseError:       any other persistence failure
        """
        email = normalize_email(email)
        try:
            existing = await db.execute(select(User.id).where(User.email == email))
            if existing.scalar_one_or_none() is not None:
                raise DuplicateEmailError(context={"email": email})

            # bcrypt is CPU-bound; keep it off the event loop
            password_hash = await run_in_threadpool(self.hash_password, password)

            user = User(name=name, email=email, password_hash=password_hash, role=DEFAULT_ROLE)
            db.add(user)
            await db.flush()
            logger.info("Registered user %s", user.id)

            return UserPublic.model_validate(user)

        except AffiliateTrackerError:
            raise
        except IntegrityError:
            logger.info("Duplicate registration rejected by unique index")
            raise DuplicateEmailError(context={"email": email})
        except Exception as e:
            logger.error("Database error registering user: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not register the user. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def login(
        self,
        db: AsyncSession,
        email: str,
        password: str,
        now: Optional[float] = None,
    ) -> str:
        """
        Check credentials and return a signed token.

        Unknown email and wrong password raise the same InvalidCredentialsError,
        so responses cannot be used to discover which emails are registered.
        """
        email = normalize_email(email)
        try:
            result = await db.execute(select(User).where(User.email == email))
            user = result.scalar_one_or_none()
        except Exception as e:
            logger.error("Database error during login: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not process the login. Please try again.",
                context={"error_type": type(e).__name__},
            )

        if user is None:
            raise InvalidCredentialsError(context={"reason": "unknown_email"})

        matches = await run_in_threadpool(self.verify_password, password, user.password_hash)
        if not matches:
            raise InvalidCredentialsError(context={"reason": "password_mismatch", "user_id": str(user.id)})

        logger.info("User %s logged in", user.id)
        return self.issue_token(str(user.id), user.role, now=now)

    # ── Tokens ────────────────────────────────────────────────────────────

    def issue_token(self, user_id: str, role: str, now: Optional[float] = None) -> str:
        issued_at = int(time.time() if now is None else now)
        claims = {
            "sub": user_id,
            "role": role,
            "iat": issued_at,
            "exp": issued_at + self._ttl_seconds,
        }
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def verify_token(self, token: str, now: Optional[float] = None) -> TokenClaims:
        """
        Check signature and expiry, return the identity claims.

        Expiry is compared against `now` (defaults to the current time)
        rather than jose's internal clock.

        Raises:
            InvalidTokenError: bad signature, malformed token, missing claims, expired
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"verify_exp": False},
            )
        except JWTError as e:
            raise InvalidTokenError(context={"reason": type(e).__name__})

        subject = payload.get("sub")
        expires_at = payload.get("exp")
        if not subject or not isinstance(expires_at, (int, float)):
            raise InvalidTokenError(context={"reason": "missing_claims"})

        current = time.time() if now is None else now
        if current >= expires_at:
            raise InvalidTokenError(message="Token has expired", context={"reason": "expired"})

        return TokenClaims(id=str(subject), role=str(payload.get("role", DEFAULT_ROLE)))

    def authenticate(self, authorization: Optional[str], now: Optional[float] = None) -> TokenClaims:
        """
        Resolve an `Authorization` header value to token claims.

        Raises:
            MissingTokenError: header absent, empty, or not a Bearer credential
            InvalidTokenError: token present but fails verification
        """
        if not authorization:
            raise MissingTokenError()

        scheme, _, token = authorization.strip().partition(" ")
        token = token.strip()
        if scheme.lower() != "bearer" or not token:
            raise MissingTokenError()

        return self.verify_token(token, now=now)
