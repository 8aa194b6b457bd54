"""
Affiliate Tracker Backend: Platform Service Unit Tests
======================================================

What:  Tests for PlatformService create/list/get/update/delete.
How:   Uses mock DB sessions (no real DB).

What we test:
    ✅ Create persists every field and returns the public model
    ✅ Unknown ids raise NotFoundError for get, update and delete
    ✅ Update applies only the fields that were sent
    ✅ Driver failures surface as DatabaseError
"""

from datetime import datetime, timezone
from uuid import uuid4

import pytest

from affiliate_tracker.exceptions import DatabaseError, NotFoundError
from affiliate_tracker.models.platform import Platform
from affiliate_tracker.schemas.platform import PlatformCreate, PlatformUpdate
from affiliate_tracker.services.platform_service import PlatformService

from conftest import make_result


def _platform(**overrides):
    values = {
        "id": uuid4(),
        "name": "ShareASale",
        "description": "Affiliate network",
        "niches": ["fashion"],
        "commission_rate": "5%",
        "api_url": "https://api.shareasale.com",
        "join_steps": ["Sign up", "Get approved"],
        "created_at": datetime.now(timezone.utc),
    }
    values.update(overrides)
    return Platform(**values)


class TestCreatePlatform:

    def setup_method(self):
        self.service = PlatformService()

    @pytest.mark.asyncio
    async def test_create_platform(self, mock_db_session):
        data = PlatformCreate.model_validate({
            "name": "Impact",
            "description": "Partnership cloud",
            "niches": ["saas", "travel"],
            "commissionRate": "10%",
            "joinSteps": ["Apply"],
        })

        result = await self.service.create_platform(mock_db_session, data)

        assert result.name == "Impact"
        assert result.niches == ["saas", "travel"]
        assert result.commission_rate == "10%"
        assert result.api_url is None
        assert result.join_steps == ["Apply"]
        mock_db_session.add.assert_called_once()
        mock_db_session.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_create_platform_database_failure(self, mock_db_session):
        mock_db_session.flush.side_effect = RuntimeError("disk full")
        data = PlatformCreate(name="Impact", description="Partnership cloud")

        with pytest.raises(DatabaseError):
            await self.service.create_platform(mock_db_session, data)


class TestReadPlatforms:

    def setup_method(self):
        self.service = PlatformService()

    @pytest.mark.asyncio
    async def test_list_platforms(self, mock_db_session):
        rows = [_platform(name="A"), _platform(name="B")]
        mock_db_session.execute.return_value = make_result(rows=rows)

        result = await self.service.list_platforms(mock_db_session)

        assert [p.name for p in result] == ["A", "B"]

    @pytest.mark.asyncio
    async def test_list_platforms_empty(self, mock_db_session):
        assert await self.service.list_platforms(mock_db_session) == []

    @pytest.mark.asyncio
    async def test_get_platform_not_found(self, mock_db_session):
        with pytest.raises(NotFoundError) as exc_info:
            await self.service.get_platform(mock_db_session, uuid4())
        assert exc_info.value.message == "Platform not found"

    @pytest.mark.asyncio
    async def test_get_platform_database_failure(self, mock_db_session):
        mock_db_session.execute.side_effect = RuntimeError("connection reset")
        with pytest.raises(DatabaseError):
            await self.service.get_platform(mock_db_session, uuid4())


class TestUpdatePlatform:

    def setup_method(self):
        self.service = PlatformService()

    @pytest.mark.asyncio
    async def test_update_applies_only_sent_fields(self, mock_db_session):
        platform = _platform()
        mock_db_session.execute.return_value = make_result(scalar=platform)

        result = await self.service.update_platform(
            mock_db_session,
            platform.id,
            PlatformUpdate.model_validate({"commissionRate": "7%"}),
        )

        assert result.commission_rate == "7%"
        assert result.name == "ShareASale"
        assert result.join_steps == ["Sign up", "Get approved"]
        mock_db_session.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_update_not_found(self, mock_db_session):
        with pytest.raises(NotFoundError):
            await self.service.update_platform(
                mock_db_session,
                uuid4(),
                PlatformUpdate(name="Renamed"),
            )
        mock_db_session.flush.assert_not_awaited()


class TestDeletePlatform:

    def setup_method(self):
        self.service = PlatformService()

    @pytest.mark.asyncio
    async def test_delete_platform(self, mock_db_session):
        platform = _platform()
        mock_db_session.execute.return_value = make_result(scalar=platform)

        await self.service.delete_platform(mock_db_session, platform.id)

        mock_db_session.delete.assert_awaited_once_with(platform)

    @pytest.mark.asyncio
    async def test_delete_not_found(self, mock_db_session):
        with pytest.raises(NotFoundError):
            await self.service.delete_platform(mock_db_session, uuid4())
        mock_db_session.delete.assert_not_awaited()
