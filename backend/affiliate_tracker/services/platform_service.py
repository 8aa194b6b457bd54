"""
Affiliate Tracker Backend: Platform Service
===========================================

What:  Create/read/update/delete for Platform records.
Who:   Called by the /platform(s) route handlers.

Error Handling Strategy:
    NotFoundError for ids that do not resolve; every other unexpected
    failure is logged and wrapped in DatabaseError so no driver detail
    reaches the client. Application errors propagate unchanged.
"""

import logging
from typing import List
from uuid import UUID

from sqlalchemy import asc, select
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_tracker.exceptions import DatabaseError, NotFoundError
from affiliate_tracker.models.platform import Platform
from affiliate_tracker.schemas.platform import PlatformCreate, PlatformResponse, PlatformUpdate

logger = logging.getLogger(__name__)


class PlatformService:
    """Business logic for affiliate platforms."""

    async def create_platform(self, db: AsyncSession, data: PlatformCreate) -> PlatformResponse:
        try:
            platform = Platform(
                name=data.name,
                description=data.description,
                niches=list(data.niches),
                commission_rate=data.commission_rate,
                api_url=data.api_url,
                join_steps=list(data.join_steps),
            )
            db.add(platform)
            await db.flush()
            logger.info("Platform created: %s", platform.id)
            return PlatformResponse.model_validate(platform)

        except Exception as e:
            logger.error("Database error creating platform: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the platform. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def list_platforms(self, db: AsyncSession) -> List[PlatformResponse]:
        """All platforms, unfiltered and unpaginated."""
        try:
            result = await db.execute(select(Platform).order_by(asc(Platform.created_at)))
            return [PlatformResponse.model_validate(p) for p in result.scalars().all()]
        except Exception as e:
            logger.error("Database error listing platforms: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve platforms. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def get_platform(self, db: AsyncSession, platform_id: UUID) -> PlatformResponse:
        platform = await self._load(db, platform_id)
        return PlatformResponse.model_validate(platform)

    async def update_platform(
        self,
        db: AsyncSession,
        platform_id: UUID,
        data: PlatformUpdate,
    ) -> PlatformResponse:
        """
        Merge the supplied fields into an existing platform.

        Fields the client did not send are left untouched; an empty body is
        a no-op that still returns the current record.

        Raises:
            NotFoundError: platform_id does not resolve (→ 404)
            DatabaseError: persistence failed (→ 500)
        """
        platform = await self._load(db, platform_id)
        changes = data.changes()

        try:
            for field, value in changes.items():
                setattr(platform, field, value)
            await db.flush()
        except Exception as e:
            logger.error("Database error updating platform %s: %s", platform_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not update the platform. Please try again.",
                context={"platform_id": str(platform_id), "error_type": type(e).__name__},
            )

        logger.info("Platform %s updated (%s)", platform_id, ", ".join(sorted(changes)) or "no changes")
        return PlatformResponse.model_validate(platform)

    async def delete_platform(self, db: AsyncSession, platform_id: UUID) -> None:
        """
        Remove a platform. Affiliate links pointing at it are left in place.

        Raises:
            NotFoundError: platform_id does not resolve (→ 404)
        """
        platform = await self._load(db, platform_id)
        try:
            await db.delete(platform)
            await db.flush()
        except Exception as e:
            logger.error("Database error deleting platform %s: %s", platform_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not delete the platform. Please try again.",
                context={"platform_id": str(platform_id), "error_type": type(e).__name__},
            )
        logger.info("Platform %s deleted", platform_id)

    async def _load(self, db: AsyncSession, platform_id: UUID) -> Platform:
        try:
            result = await db.execute(select(Platform).where(Platform.id == platform_id))
            platform = result.scalar_one_or_none()
        except Exception as e:
            logger.error("Database error fetching platform %s: %s", platform_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the platform. Please try again.",
                context={"platform_id": str(platform_id)},
            )

        if platform is None:
            raise NotFoundError(resource="platform", resource_id=str(platform_id))
        return platform
