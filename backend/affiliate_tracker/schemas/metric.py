"""
Affiliate Tracker Backend: Performance Metric Schemas
=====================================================

What:  Request and response models for /performance-metric(s).

The request must carry clicks and conversions as JSON integers (true, 1.0
and "1" are rejected); the columns default to 0 for rows written elsewhere.
Counts must fit the 32-bit INTEGER columns. Negative values are stored as given.
"""

import uuid
from datetime import datetime
from typing import List

from pydantic import AliasChoices, BaseModel, Field, StrictInt

from affiliate_tracker.schemas.common import wire_name

# Range of the INTEGER clicks/conversions columns
INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1


class MetricCreate(BaseModel):
    """Body of POST /performance-metric."""
    affiliate_link_id: uuid.UUID = Field(
        validation_alias=AliasChoices("affiliateLinkId", "affiliateLink", "affiliate_link_id"),
    )
    clicks: StrictInt = Field(ge=INT32_MIN, le=INT32_MAX)
    conversions: StrictInt = Field(ge=INT32_MIN, le=INT32_MAX)


class MetricResponse(BaseModel):
    """One recorded PerformanceMetric row."""
    id: uuid.UUID
    affiliate_link_id: uuid.UUID = wire_name("affiliate_link_id", "affiliateLinkId")
    clicks: int
    conversions: int
    created_at: datetime = wire_name("created_at", "createdAt")

    model_config = {"from_attributes": True}


class MetricSummary(BaseModel):
    """Read-time totals over every row recorded for one affiliate link."""
    affiliate_link_id: uuid.UUID = wire_name("affiliate_link_id", "affiliateLinkId")
    records: int = Field(description="Number of metric rows summed")
    clicks: int
    conversions: int


class MetricCreatedResponse(BaseModel):
    """201 body of POST /performance-metric."""
    success: bool = Field(default=True)
    message: str = Field(default="Performance metric recorded successfully")
    metric: MetricResponse


class MetricListResponse(BaseModel):
    """Body of GET /performance-metrics."""
    success: bool = Field(default=True)
    metrics: List[MetricResponse]


class MetricSummaryResponse(BaseModel):
    """Body of GET /performance-metrics/{affiliateLinkId}/summary."""
    success: bool = Field(default=True)
    summary: MetricSummary
