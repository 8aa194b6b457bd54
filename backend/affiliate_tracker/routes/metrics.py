"""
Affiliate Tracker Backend: Performance Metric Route Handlers
============================================================

Route Inventory (all require a bearer token):
    POST /performance-metric                              record one observation
    GET  /performance-metrics[?affiliateLinkId=<uuid>]    list raw rows
    GET  /performance-metrics/{affiliateLinkId}/summary   read-time totals

Every POST inserts a new row; totals are only ever computed on read.
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_tracker.database import get_db_session
from affiliate_tracker.dependencies import get_metric_service, require_auth
from affiliate_tracker.schemas.common import ErrorResponse, ValidationErrorResponse
from affiliate_tracker.schemas.metric import (
    MetricCreate,
    MetricCreatedResponse,
    MetricListResponse,
    MetricSummaryResponse,
)
from affiliate_tracker.services.metric_service import MetricService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Performance Metrics"], dependencies=[Depends(require_auth)])

_AUTH_ERRORS = {401: {"description": "Missing, invalid or expired token", "model": ErrorResponse}}
_SERVER_ERROR = {500: {"description": "Server error", "model": ErrorResponse}}


@router.post(
    "/performance-metric",
    status_code=201,
    response_model=MetricCreatedResponse,
    responses={
        400: {"description": "Malformed body", "model": ValidationErrorResponse},
        **_AUTH_ERRORS,
        **_SERVER_ERROR,
    },
    summary="Record clicks and conversions for an affiliate link",
)
async def record_metric(
    body: MetricCreate,
    db: AsyncSession = Depends(get_db_session),
    metric_service: MetricService = Depends(get_metric_service),
) -> MetricCreatedResponse:
    metric = await metric_service.record_metric(
        db=db,
        affiliate_link_id=body.affiliate_link_id,
        clicks=body.clicks,
        conversions=body.conversions,
    )
    return MetricCreatedResponse(metric=metric)


@router.get(
    "/performance-metrics",
    response_model=MetricListResponse,
    responses={**_AUTH_ERRORS, **_SERVER_ERROR},
    summary="List recorded performance metrics",
)
async def list_metrics(
    affiliate_link_id: Optional[UUID] = Query(
        default=None,
        alias="affiliateLinkId",
        description="Only return rows for this affiliate link",
    ),
    db: AsyncSession = Depends(get_db_session),
    metric_service: MetricService = Depends(get_metric_service),
) -> MetricListResponse:
    metrics = await metric_service.list_metrics(db=db, affiliate_link_id=affiliate_link_id)
    return MetricListResponse(metrics=metrics)


@router.get(
    "/performance-metrics/{affiliate_link_id}/summary",
    response_model=MetricSummaryResponse,
    responses={**_AUTH_ERRORS, **_SERVER_ERROR},
    summary="Total clicks and conversions for an affiliate link",
)
async def summarize_metrics(
    affiliate_link_id: UUID,
    db: AsyncSession = Depends(get_db_session),
    metric_service: MetricService = Depends(get_metric_service),
) -> MetricSummaryResponse:
    summary = await metric_service.summarize_metrics(db=db, affiliate_link_id=affiliate_link_id)
    return MetricSummaryResponse(summary=summary)
