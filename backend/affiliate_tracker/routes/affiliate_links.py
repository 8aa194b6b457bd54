"""
Affiliate Tracker Backend: Affiliate Link Route Handlers
========================================================

Route Inventory:
    POST /affiliate-link   (auth)  create; url must be http(s)/ftp
    GET  /affiliate-links          list all
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_tracker.database import get_db_session
from affiliate_tracker.dependencies import get_affiliate_link_service, require_auth
from affiliate_tracker.schemas.affiliate_link import (
    AffiliateLinkCreate,
    AffiliateLinkCreatedResponse,
    AffiliateLinkListResponse,
)
from affiliate_tracker.schemas.common import ErrorResponse, ValidationErrorResponse
from affiliate_tracker.services.affiliate_link_service import AffiliateLinkService
from affiliate_tracker.services.auth_service import TokenClaims

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Affiliate Links"])


@router.post(
    "/affiliate-link",
    status_code=201,
    response_model=AffiliateLinkCreatedResponse,
    responses={
        400: {"description": "Malformed URL or missing platform", "model": ValidationErrorResponse},
        401: {"description": "Missing, invalid or expired token", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Create an affiliate link",
)
async def create_affiliate_link(
    body: AffiliateLinkCreate,
    claims: TokenClaims = Depends(require_auth),
    db: AsyncSession = Depends(get_db_session),
    link_service: AffiliateLinkService = Depends(get_affiliate_link_service),
) -> AffiliateLinkCreatedResponse:
    link = await link_service.create_link(db=db, url=body.url, platform_id=body.platform_id)
    return AffiliateLinkCreatedResponse(affiliate_link=link)


@router.get(
    "/affiliate-links",
    response_model=AffiliateLinkListResponse,
    responses={500: {"description": "Server error", "model": ErrorResponse}},
    summary="List all affiliate links",
)
async def list_affiliate_links(
    db: AsyncSession = Depends(get_db_session),
    link_service: AffiliateLinkService = Depends(get_affiliate_link_service),
) -> AffiliateLinkListResponse:
    links = await link_service.list_links(db=db)
    return AffiliateLinkListResponse(affiliate_links=links)
