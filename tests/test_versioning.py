"""Tests for the content version store."""

import json
import time
from datetime import date, datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from alwrity.exceptions import AuthenticationError, SearchConsoleError
from alwrity.models.version import PerformanceRow
from alwrity.repository import InMemoryVersionRepository
from alwrity.services.search_console import SearchConsoleClient
from alwrity.services.versioning import VersionStore, content_diff


def make_rows(*days):
    return [
        PerformanceRow(date=day, clicks=clicks, impressions=clicks * 10, ctr=0.1, position=4.2)
        for day, clicks in days
    ]


@pytest.fixture
def analytics():
    """Authenticated Search Console client mock."""
    client = MagicMock()
    client.is_authenticated = True
    client.fetch_daily_performance = AsyncMock(return_value=[])
    return client


class TestSaveVersion:
    """Test suite for VersionStore.save_version."""

    def test_blank_content_is_ignored(self):
        store = VersionStore()
        assert store.save_version("   ") is None
        assert store.save_version("") is None
        assert store.list_versions() == []

    def test_saves_content_with_timestamp(self):
        store = VersionStore()
        before = int(time.time() * 1000)

        version = store.save_version("Hello")

        versions = store.list_versions()
        assert len(versions) == 1
        assert versions[0].content == "Hello"
        assert before <= version.timestamp <= int(time.time() * 1000)
        assert version.id == str(version.timestamp)
        assert version.metrics is None

    def test_same_millisecond_gets_distinct_ids(self):
        store = VersionStore(clock=lambda: 1700000000.0)

        first = store.save_version("First draft")
        second = store.save_version("Second draft")

        assert first.id == "1700000000000"
        assert second.id == "1700000000001"
        assert [v.content for v in store.list_versions()] == ["First draft", "Second draft"]


class TestFetchPerformanceData:
    """Test suite for VersionStore.fetch_performance_data."""

    @pytest.mark.asyncio
    async def test_requires_authentication(self):
        store = VersionStore()
        version = store.save_version("Hello")

        assert await store.fetch_performance_data(version.id) is None
        assert "authenticate" in store.error

    @pytest.mark.asyncio
    async def test_attaches_latest_day(self, analytics):
        analytics.fetch_daily_performance.return_value = make_rows(
            ("2024-03-01", 3), ("2024-03-02", 7)
        )
        # 2024-03-01 12:00 UTC
        store = VersionStore(analytics=analytics, clock=lambda: 1709294400.0)
        version = store.save_version("Hello")

        rows = await store.fetch_performance_data(version.id)

        assert len(rows) == 2
        start, end = analytics.fetch_daily_performance.call_args.args
        assert start == date(2024, 3, 1)
        assert end == datetime.now(timezone.utc).date()
        assert store.performance_data[version.id] == rows
        metrics = store.get_version(version.id).metrics
        assert metrics.clicks == 7
        assert metrics.impressions == 70

    @pytest.mark.asyncio
    async def test_refetch_overwrites_metrics(self, analytics):
        store = VersionStore(analytics=analytics, clock=lambda: 1709294400.0)
        version = store.save_version("Hello")

        analytics.fetch_daily_performance.return_value = make_rows(("2024-03-01", 3))
        await store.fetch_performance_data(version.id)
        analytics.fetch_daily_performance.return_value = make_rows(("2024-03-05", 11))
        await store.fetch_performance_data(version.id)

        assert store.get_version(version.id).metrics.clicks == 11

    @pytest.mark.asyncio
    async def test_no_data_keeps_metrics_empty(self, analytics):
        store = VersionStore(analytics=analytics)
        version = store.save_version("Hello")

        assert await store.fetch_performance_data(version.id) == []
        assert store.get_version(version.id).metrics is None
        assert store.error is None

    @pytest.mark.asyncio
    async def test_expired_session(self, analytics):
        analytics.fetch_daily_performance.side_effect = AuthenticationError("expired")
        store = VersionStore(analytics=analytics)
        version = store.save_version("Hello")

        assert await store.fetch_performance_data(version.id) is None
        assert store.error == "Please authenticate with Google to view performance data"

    @pytest.mark.asyncio
    async def test_success_clears_earlier_error(self, analytics):
        analytics.fetch_daily_performance.side_effect = [
            AuthenticationError("expired"),
            make_rows(("2024-03-01", 4)),
        ]
        store = VersionStore(analytics=analytics)
        version = store.save_version("Hello")

        assert await store.fetch_performance_data(version.id) is None
        assert store.error is not None

        rows = await store.fetch_performance_data(version.id)
        assert len(rows) == 1
        assert store.error is None

    @pytest.mark.asyncio
    async def test_unknown_version(self, analytics):
        store = VersionStore(analytics=analytics)
        assert await store.fetch_performance_data("missing") is None
        analytics.fetch_daily_performance.assert_not_called()


class TestCompareVersions:
    """Test suite for VersionStore.compare_versions."""

    @pytest.fixture
    def store(self, analytics):
        repository = InMemoryVersionRepository()
        ticks = iter([1709294400.0, 1709380800.0])
        return VersionStore(repository=repository, analytics=analytics, clock=lambda: next(ticks))

    @pytest.mark.asyncio
    async def test_requires_exactly_two(self, store):
        first = store.save_version("Version one")
        assert await store.compare_versions([first.id]) is None
        assert await store.compare_versions([first.id, first.id]) is None
        assert await store.compare_versions([first.id, "a", "b"]) is None

    @pytest.mark.asyncio
    async def test_comparison_with_diff(self, store, analytics):
        first = store.save_version("Intro line\nOld body\n")
        second = store.save_version("Intro line\nNew body\n")
        analytics.fetch_daily_performance.side_effect = [
            make_rows(("2024-03-01", 2)),
            make_rows(("2024-03-02", 5), ("2024-03-03", 6)),
        ]

        comparison = await store.compare_versions([first.id, second.id])

        assert len(comparison.series_a) == 1
        assert len(comparison.series_b) == 2
        assert "-Old body" in comparison.diff
        assert "+New body" in comparison.diff
        assert comparison.version_a.metrics.clicks == 2
        assert comparison.version_b.metrics.clicks == 6

    @pytest.mark.asyncio
    async def test_one_side_failing_leaves_it_empty(self, store, analytics):
        first = store.save_version("Version one")
        second = store.save_version("Version two")
        analytics.fetch_daily_performance.side_effect = [
            make_rows(("2024-03-01", 2)),
            SearchConsoleError("backend error"),
        ]

        comparison = await store.compare_versions([first.id, second.id])

        assert comparison is not None
        assert len(comparison.series_a) == 1
        assert comparison.series_b == []
        assert comparison.version_b.metrics is None
        assert store.error == "Failed to fetch performance data"

    @pytest.mark.asyncio
    async def test_malformed_response_on_one_side(self):
        """An HTML page in place of JSON only empties the side it answered."""
        def handler(request):
            if json.loads(request.content)["startDate"] == "2024-03-01":
                return httpx.Response(200, text="<html>proxy</html>")
            return httpx.Response(200, json={"rows": [
                {"keys": ["2024-03-02"], "clicks": 5, "impressions": 60, "ctr": 0.08, "position": 3.1},
            ]})

        client = SearchConsoleClient(
            access_token="token-123",
            site_url="https://example.com/",
            transport=httpx.MockTransport(handler),
        )
        ticks = iter([1709294400.0, 1709380800.0])
        store = VersionStore(analytics=client, clock=lambda: next(ticks))
        first = store.save_version("Version one")
        second = store.save_version("Version two")

        comparison = await store.compare_versions([first.id, second.id])

        assert comparison is not None
        assert comparison.series_a == []
        assert [row.clicks for row in comparison.series_b] == [5]
        assert comparison.version_b.metrics.clicks == 5
        assert store.error == "Failed to fetch performance data"

    @pytest.mark.asyncio
    async def test_failed_side_error_survives_successful_side(self, store, analytics):
        first = store.save_version("Version one")
        second = store.save_version("Version two")
        analytics.fetch_daily_performance.side_effect = [
            AuthenticationError("expired"),
            make_rows(("2024-03-02", 5)),
        ]

        comparison = await store.compare_versions([first.id, second.id])

        assert comparison.series_a == []
        assert len(comparison.series_b) == 1
        assert store.error == "Please authenticate with Google to view performance data"


class TestContentDiff:
    """Test suite for content_diff."""

    def test_identical_content_has_no_diff(self):
        store = VersionStore(clock=lambda: 1.0)
        first = store.save_version("Same text")
        second = store.save_version("Same text")
        assert content_diff(first, second) == []
