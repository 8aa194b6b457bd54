"""
Affiliate Tracker Backend: Platform Route Handlers
==================================================

Route Inventory:
    POST   /platform        (auth)  create
    GET    /platforms               list all
    GET    /platform/{id}           fetch one
    PUT    /platform/{id}   (auth)  partial update
    DELETE /platform/{id}   (auth)  delete
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_tracker.database import get_db_session
from affiliate_tracker.dependencies import get_platform_service, require_auth
from affiliate_tracker.schemas.common import ErrorResponse, MessageResponse, ValidationErrorResponse
from affiliate_tracker.schemas.platform import (
    PlatformCreate,
    PlatformCreatedResponse,
    PlatformEnvelope,
    PlatformListResponse,
    PlatformUpdate,
)
from affiliate_tracker.services.auth_service import TokenClaims
from affiliate_tracker.services.platform_service import PlatformService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Platforms"])

_AUTH_ERRORS = {401: {"description": "Missing, invalid or expired token", "model": ErrorResponse}}
_NOT_FOUND = {404: {"description": "Platform not found", "model": ErrorResponse}}
_SERVER_ERROR = {500: {"description": "Server error", "model": ErrorResponse}}


@router.post(
    "/platform",
    status_code=201,
    response_model=PlatformCreatedResponse,
    responses={
        400: {"description": "Missing name or description", "model": ValidationErrorResponse},
        **_AUTH_ERRORS,
        **_SERVER_ERROR,
    },
    summary="Create a platform",
)
async def create_platform(
    body: PlatformCreate,
    claims: TokenClaims = Depends(require_auth),
    db: AsyncSession = Depends(get_db_session),
    platform_service: PlatformService = Depends(get_platform_service),
) -> PlatformCreatedResponse:
    platform = await platform_service.create_platform(db=db, data=body)
    logger.info("User %s created platform %s", claims.id, platform.id)
    return PlatformCreatedResponse(platform=platform)


@router.get(
    "/platforms",
    response_model=PlatformListResponse,
    responses={**_SERVER_ERROR},
    summary="List all platforms",
)
async def list_platforms(
    db: AsyncSession = Depends(get_db_session),
    platform_service: PlatformService = Depends(get_platform_service),
) -> PlatformListResponse:
    platforms = await platform_service.list_platforms(db=db)
    return PlatformListResponse(platforms=platforms)


@router.get(
    "/platform/{platform_id}",
    response_model=PlatformEnvelope,
    responses={**_NOT_FOUND, **_SERVER_ERROR},
    summary="Get a single platform",
)
async def get_platform(
    platform_id: UUID,
    db: AsyncSession = Depends(get_db_session),
    platform_service: PlatformService = Depends(get_platform_service),
) -> PlatformEnvelope:
    platform = await platform_service.get_platform(db=db, platform_id=platform_id)
    return PlatformEnvelope(platform=platform)


@router.put(
    "/platform/{platform_id}",
    response_model=PlatformEnvelope,
    responses={**_AUTH_ERRORS, **_NOT_FOUND, **_SERVER_ERROR},
    summary="Update a platform",
    description="Applies only the fields present in the body; others keep their stored values.",
)
async def update_platform(
    platform_id: UUID,
    body: PlatformUpdate,
    claims: TokenClaims = Depends(require_auth),
    db: AsyncSession = Depends(get_db_session),
    platform_service: PlatformService = Depends(get_platform_service),
) -> PlatformEnvelope:
    platform = await platform_service.update_platform(db=db, platform_id=platform_id, data=body)
    return PlatformEnvelope(platform=platform)


@router.delete(
    "/platform/{platform_id}",
    response_model=MessageResponse,
    responses={**_AUTH_ERRORS, **_NOT_FOUND, **_SERVER_ERROR},
    summary="Delete a platform",
)
async def delete_platform(
    platform_id: UUID,
    claims: TokenClaims = Depends(require_auth),
    db: AsyncSession = Depends(get_db_session),
    platform_service: PlatformService = Depends(get_platform_service),
) -> MessageResponse:
    await platform_service.delete_platform(db=db, platform_id=platform_id)
    logger.info("User %s deleted platform %s", claims.id, platform_id)
    return MessageResponse(message="Platform deleted successfully")
