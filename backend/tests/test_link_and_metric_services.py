"""
Affiliate Tracker Backend: Affiliate Link & Metric Service Unit Tests
=====================================================================

What:  Tests for AffiliateLinkService and MetricService.
How:   Uses mock DB sessions (no real DB).

What we test:
    ✅ URL shape is enforced on create
    ✅ Dangling parent ids are accepted by default, rejected in strict mode
    ✅ Every record_metric() call inserts a new row
    ✅ Summaries are read-time sums and default to zero
"""

from datetime import datetime, timezone
from uuid import uuid4

import pytest

from affiliate_tracker.exceptions import NotFoundError, ValidationError
from affiliate_tracker.models.affiliate_link import AffiliateLink
from affiliate_tracker.models.performance_metric import PerformanceMetric
from affiliate_tracker.models.platform import Platform
from affiliate_tracker.services.affiliate_link_service import AffiliateLinkService
from affiliate_tracker.services.metric_service import MetricService

from conftest import make_result


class TestAffiliateLinkService:

    def setup_method(self):
        self.service = AffiliateLinkService()

    @pytest.mark.asyncio
    async def test_create_link(self, mock_db_session):
        platform_id = uuid4()

        link = await self.service.create_link(mock_db_session, "https://example.com/ref?id=1", platform_id)

        assert link.url == "https://example.com/ref?id=1"
        assert link.platform_id == platform_id
        mock_db_session.add.assert_called_once()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("url", ["notaurl", "http://", "mailto:someone@example.com", "https://a b.com"])
    async def test_malformed_url_rejected(self, mock_db_session, url):
        with pytest.raises(ValidationError) as exc_info:
            await self.service.create_link(mock_db_session, url, uuid4())

        assert exc_info.value.errors == [{"field": "url", "message": "Please enter a valid URL"}]
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_platform_accepted_by_default(self, mock_db_session):
        await self.service.create_link(mock_db_session, "ftp://files.example.com/x", uuid4())

        mock_db_session.get.assert_not_awaited()
        mock_db_session.add.assert_called_once()

    @pytest.mark.asyncio
    async def test_unknown_platform_rejected_in_strict_mode(self, mock_db_session):
        service = AffiliateLinkService(strict_referential_integrity=True)

        with pytest.raises(ValidationError) as exc_info:
            await service.create_link(mock_db_session, "https://example.com", uuid4())

        assert exc_info.value.field == "platform"
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_known_platform_accepted_in_strict_mode(self, mock_db_session):
        service = AffiliateLinkService(strict_referential_integrity=True)
        platform = Platform(id=uuid4(), name="Impact", description="Network")
        mock_db_session.get.return_value = platform

        link = await service.create_link(mock_db_session, "https://example.com", platform.id)

        assert link.platform_id == platform.id

    @pytest.mark.asyncio
    async def test_list_links(self, mock_db_session):
        rows = [
            AffiliateLink(
                id=uuid4(),
                url="https://example.com",
                platform_id=uuid4(),
                created_at=datetime.now(timezone.utc),
            )
        ]
        mock_db_session.execute.return_value = make_result(rows=rows)

        result = await self.service.list_links(mock_db_session)

        assert [link.url for link in result] == ["https://example.com"]


class TestMetricService:

    def setup_method(self):
        self.service = MetricService()

    @pytest.mark.asyncio
    async def test_record_metric_twice_inserts_two_rows(self, mock_db_session):
        link_id = uuid4()

        first = await self.service.record_metric(mock_db_session, link_id, clicks=5, conversions=1)
        second = await self.service.record_metric(mock_db_session, link_id, clicks=5, conversions=1)

        assert first.id != second.id
        assert mock_db_session.add.call_count == 2
        added = [call.args[0] for call in mock_db_session.add.call_args_list]
        assert all(isinstance(row, PerformanceMetric) for row in added)
        assert added[0] is not added[1]

    @pytest.mark.asyncio
    async def test_record_metric_defaults_to_zero(self, mock_db_session):
        metric = await self.service.record_metric(mock_db_session, uuid4())
        assert (metric.clicks, metric.conversions) == (0, 0)

    @pytest.mark.asyncio
    async def test_unknown_link_accepted_by_default(self, mock_db_session):
        await self.service.record_metric(mock_db_session, uuid4(), clicks=1)
        mock_db_session.get.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_link_rejected_in_strict_mode(self, mock_db_session):
        service = MetricService(strict_referential_integrity=True)

        with pytest.raises(ValidationError) as exc_info:
            await service.record_metric(mock_db_session, uuid4(), clicks=1)

        assert exc_info.value.field == "affiliateLinkId"
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_summarize_metrics(self, mock_db_session):
        link_id = uuid4()
        mock_db_session.execute.return_value = make_result(one=(2, 15, 3))

        summary = await self.service.summarize_metrics(mock_db_session, link_id)

        assert summary.affiliate_link_id == link_id
        assert (summary.records, summary.clicks, summary.conversions) == (2, 15, 3)

    @pytest.mark.asyncio
    async def test_summarize_without_rows_is_zero(self, mock_db_session):
        mock_db_session.execute.return_value = make_result(one=(0, 0, 0))

        summary = await self.service.summarize_metrics(mock_db_session, uuid4())

        assert (summary.records, summary.clicks, summary.conversions) == (0, 0, 0)

    @pytest.mark.asyncio
    async def test_summarize_unknown_link_in_strict_mode(self, mock_db_session):
        service = MetricService(strict_referential_integrity=True)

        with pytest.raises(NotFoundError) as exc_info:
            await service.summarize_metrics(mock_db_session, uuid4())
        assert exc_info.value.message == "Affiliate link not found"
