"""
Affiliate Tracker Backend: AffiliateLink SQLAlchemy Model
=========================================================

What:  ORM model for the `affiliate_links` table, a tracked outbound URL
       belonging to one platform.

platform_id is an indexed UUID column WITHOUT a database foreign key: links
to platforms that do not exist (or were deleted later) are stored as-is.
AffiliateLinkService checks the reference only when
`strict_referential_integrity` is enabled.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from affiliate_tracker.database import Base


class AffiliateLink(Base):
    """A tracked referral URL."""

    __tablename__ = "affiliate_links"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    url: Mapped[str] = mapped_column(String(2048), nullable=False)

    platform_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        nullable=False,
        comment="Platform this link belongs to (not enforced by a FK)",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_affiliate_links_platform_id", "platform_id"),
    )

    def __repr__(self) -> str:
        return f"<AffiliateLink(id={self.id}, platform_id={self.platform_id})>"
