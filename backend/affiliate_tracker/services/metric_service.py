"""
Affiliate Tracker Backend: Performance Metric Service
=====================================================

What:  Records click/conversion observations and reads them back.

Write model:
    record_metric() always INSERTs a new row. Two calls for the same link
    produce two rows; nothing is incremented in place.

Read model:
    list_metrics() returns raw rows; summarize_metrics() sums them at read
    time (COUNT/SUM in one query).
"""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import asc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_tracker.exceptions import (
    AffiliateTrackerError,
    DatabaseError,
    NotFoundError,
    ValidationError,
)
from affiliate_tracker.models.affiliate_link import AffiliateLink
from affiliate_tracker.models.performance_metric import PerformanceMetric
from affiliate_tracker.schemas.metric import MetricResponse, MetricSummary

logger = logging.getLogger(__name__)


class MetricService:
    """Business logic for performance metrics."""

    def __init__(self, strict_referential_integrity: bool = False):
        self.strict_referential_integrity = strict_referential_integrity

    async def record_metric(
        self,
        db: AsyncSession,
        affiliate_link_id: UUID,
        clicks: int = 0,
        conversions: int = 0,
    ) -> MetricResponse:
        """
        Insert one PerformanceMetric row.

        Raises:
            ValidationError: unknown affiliate link (strict mode only)
            DatabaseError:   persistence failed
        """
        try:
            if self.strict_referential_integrity:
                link = await db.get(AffiliateLink, affiliate_link_id)
                if link is None:
                    raise ValidationError(
                        message="Referenced affiliate link does not exist",
                        field="affiliateLinkId",
                        context={"affiliate_link_id": str(affiliate_link_id)},
                    )

            metric = PerformanceMetric(
                affiliate_link_id=affiliate_link_id,
                clicks=clicks,
                conversions=conversions,
            )
            db.add(metric)
            await db.flush()
            logger.info(
                "Metric %s recorded for link %s: clicks=%d conversions=%d",
                metric.id, affiliate_link_id, clicks, conversions,
            )
            return MetricResponse.model_validate(metric)

        except AffiliateTrackerError:
            raise
        except Exception as e:
            logger.error("Database error recording metric: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not record the performance metric. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def list_metrics(
        self,
        db: AsyncSession,
        affiliate_link_id: Optional[UUID] = None,
    ) -> List[MetricResponse]:
        """All metric rows, optionally restricted to one affiliate link."""
        try:
            query = select(PerformanceMetric)
            if affiliate_link_id is not None:
                query = query.where(PerformanceMetric.affiliate_link_id == affiliate_link_id)
            query = query.order_by(asc(PerformanceMetric.created_at))

            result = await db.execute(query)
            return [MetricResponse.model_validate(m) for m in result.scalars().all()]
        except Exception as e:
            logger.error("Database error listing metrics: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve performance metrics. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def summarize_metrics(self, db: AsyncSession, affiliate_link_id: UUID) -> MetricSummary:
        """
        Totals over every row recorded for one link.

        A link with no rows sums to zero. In strict mode an unknown link
        raises NotFoundError instead.
        """
        try:
            if self.strict_referential_integrity:
                link = await db.get(AffiliateLink, affiliate_link_id)
                if link is None:
                    raise NotFoundError(resource="affiliate link", resource_id=str(affiliate_link_id))

            result = await db.execute(
                select(
                    func.count(PerformanceMetric.id),
                    func.coalesce(func.sum(PerformanceMetric.clicks), 0),
                    func.coalesce(func.sum(PerformanceMetric.conversions), 0),
                ).where(PerformanceMetric.affiliate_link_id == affiliate_link_id)
            )
            records, clicks, conversions = result.one()

            return MetricSummary(
                affiliate_link_id=affiliate_link_id,
                records=int(records or 0),
                clicks=int(clicks or 0),
                conversions=int(conversions or 0),
            )

        except AffiliateTrackerError:
            raise
        except Exception as e:
            logger.error("Database error summarizing metrics: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not summarize performance metrics. Please try again.",
                context={"affiliate_link_id": str(affiliate_link_id)},
            )
