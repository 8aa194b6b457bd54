"""
Affiliate Tracker Backend: Affiliate Link Service
=================================================

What:  Create and list AffiliateLink records.

Referential integrity:
    By default the platform id is stored without checking that the platform
    exists. With strict_referential_integrity=True, create_link() looks the
    platform up first and rejects unknown ids with a ValidationError.
"""

import logging
from typing import List
from uuid import UUID

from sqlalchemy import asc, select
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_tracker.exceptions import AffiliateTrackerError, DatabaseError, ValidationError
from affiliate_tracker.models.affiliate_link import AffiliateLink
from affiliate_tracker.models.platform import Platform
from affiliate_tracker.schemas.affiliate_link import AffiliateLinkResponse, is_valid_url

logger = logging.getLogger(__name__)


class AffiliateLinkService:
    """Business logic for tracked affiliate URLs."""

    def __init__(self, strict_referential_integrity: bool = False):
        self.strict_referential_integrity = strict_referential_integrity

    async def create_link(self, db: AsyncSession, url: str, platform_id: UUID) -> AffiliateLinkResponse:
        """
        Persist a new affiliate link.

        Raises:
            ValidationError: malformed URL, or unknown platform in strict mode
            DatabaseError:   persistence failed
        """
        if not is_valid_url(url):
            raise ValidationError(message="Please enter a valid URL", field="url")

        try:
            if self.strict_referential_integrity:
                platform = await db.get(Platform, platform_id)
                if platform is None:
                    raise ValidationError(
                        message="Referenced platform does not exist",
                        field="platform",
                        context={"platform_id": str(platform_id)},
                    )

            link = AffiliateLink(url=url, platform_id=platform_id)
            db.add(link)
            await db.flush()
            logger.info("Affiliate link %s created for platform %s", link.id, platform_id)
            return AffiliateLinkResponse.model_validate(link)

        except AffiliateTrackerError:
            raise
        except Exception as e:
            logger.error("Database error creating affiliate link: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the affiliate link. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def list_links(self, db: AsyncSession) -> List[AffiliateLinkResponse]:
        try:
            result = await db.execute(select(AffiliateLink).order_by(asc(AffiliateLink.created_at)))
            return [AffiliateLinkResponse.model_validate(link) for link in result.scalars().all()]
        except Exception as e:
            logger.error("Database error listing affiliate links: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve affiliate links. Please try again.",
                context={"error_type": type(e).__name__},
            )
