"""
Affiliate Tracker Backend: Auth Route Handlers
==============================================

What:  POST /register and POST /login.
How:   FastAPI validates the body against RegisterRequest / LoginRequest
       (violations → 400 list), then the handler delegates to AuthService.

Error responses (global exception handlers):
    400  validation errors, duplicate email, invalid credentials
    500  database failure
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_tracker.database import get_db_session
from affiliate_tracker.dependencies import get_auth_service
from affiliate_tracker.schemas.auth import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
)
from affiliate_tracker.schemas.common import ErrorResponse, ValidationErrorResponse
from affiliate_tracker.services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


@router.post(
    "/register",
    status_code=201,
    response_model=RegisterResponse,
    responses={
        400: {"description": "Invalid input or email already registered", "model": ValidationErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Register a new user",
)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
    auth_service: AuthService = Depends(get_auth_service),
) -> RegisterResponse:
    """
    Create a user account. The response never contains the password or its hash.
    """
    user = await auth_service.register(
        db=db,
        name=body.name,
        email=body.email,
        password=body.password,
    )
    return RegisterResponse(user=user)


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        400: {"description": "Invalid input or invalid credentials", "model": ErrorResponse},
    },
    summary="Exchange email and password for a bearer token",
)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
    auth_service: AuthService = Depends(get_auth_service),
) -> LoginResponse:
    """
    Returns a token valid for one hour. Send it as `Authorization: Bearer <token>`.
    """
    token = await auth_service.login(db=db, email=body.email, password=body.password)
    return LoginResponse(token=token)
