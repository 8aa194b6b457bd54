"""
Affiliate Tracker Backend: Platform SQLAlchemy Model
====================================================

What:  ORM model for the `platforms` table, one row per affiliate program
       (e.g. an affiliate network or a merchant's in-house program).

Column notes:
    - niches / join_steps: ordered lists of strings stored as JSON, order preserved
    - commission_rate: kept as a display string ("5-10%", "$50 CPA"), never parsed
    - api_url: optional integration endpoint, not validated
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import JSON, DateTime, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from affiliate_tracker.database import Base


class Platform(Base):
    """An affiliate platform that links can point into."""

    __tablename__ = "platforms"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    description: Mapped[str] = mapped_column(Text, nullable=False)

    niches: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    commission_rate: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    api_url: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)

    join_steps: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<Platform(id={self.id}, name='{self.name}')>"
