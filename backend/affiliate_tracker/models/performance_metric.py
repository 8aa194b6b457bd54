"""
Affiliate Tracker Backend: PerformanceMetric SQLAlchemy Model
=============================================================

What:  ORM model for the `performance_metrics` table.

Each row is one independent observation of clicks/conversions for a link.
Rows are only ever inserted; totals per link are computed at read time by
summing rows (see MetricService.summarize).
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, Integer, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from affiliate_tracker.database import Base


class PerformanceMetric(Base):
    """Clicks and conversions recorded for one affiliate link."""

    __tablename__ = "performance_metrics"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    affiliate_link_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        nullable=False,
        comment="Affiliate link this row belongs to (not enforced by a FK)",
    )

    clicks: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default=text("0"),
    )

    conversions: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default=text("0"),
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_performance_metrics_link_created", "affiliate_link_id", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<PerformanceMetric(id={self.id}, link={self.affiliate_link_id}, "
            f"clicks={self.clicks}, conversions={self.conversions})>"
        )
