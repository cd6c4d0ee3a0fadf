"""Tests for the Search Console client."""

import json
from datetime import date

import httpx
import pytest

from alwrity.exceptions import AuthenticationError, SearchConsoleError
from alwrity.services.search_console import SearchConsoleClient
from alwrity.utils.usage import get_usage_tracker


DAILY_ROWS = {"rows": [
    {"keys": ["2024-03-01"], "clicks": 3, "impressions": 40, "ctr": 0.075, "position": 5.5},
    {"keys": ["2024-03-02"], "clicks": 6, "impressions": 52, "ctr": 0.115, "position": 4.9},
]}


class RecordingHandler:
    """httpx mock transport handler that records requests."""

    def __init__(self, routes):
        self.routes = routes
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        for suffix, (status, payload) in self.routes.items():
            if request.url.raw_path.decode().split("?")[0].endswith(suffix):
                return httpx.Response(status, json=payload)
        return httpx.Response(404, json={"error": "not found"})


def make_client(routes, **kwargs):
    handler = RecordingHandler(routes)
    kwargs.setdefault("access_token", "token-123")
    client = SearchConsoleClient(transport=httpx.MockTransport(handler), **kwargs)
    return client, handler


class TestSearchConsoleClient:
    """Test suite for SearchConsoleClient."""

    @pytest.mark.asyncio
    async def test_daily_performance(self):
        client, handler = make_client(
            {"/searchAnalytics/query": (200, DAILY_ROWS)},
            site_url="https://example.com/",
        )

        rows = await client.fetch_daily_performance(date(2024, 3, 1), date(2024, 3, 2))

        assert [row.date for row in rows] == ["2024-03-01", "2024-03-02"]
        assert rows[1].clicks == 6
        request = handler.requests[0]
        assert request.headers["Authorization"] == "Bearer token-123"
        assert "https%3A%2F%2Fexample.com%2F" in request.url.raw_path.decode()
        body = json.loads(request.content)
        assert body == {
            "startDate": "2024-03-01",
            "endDate": "2024-03-02",
            "dimensions": ["date"],
            "rowLimit": 100,
        }
        assert get_usage_tracker().get_metrics()["gsc"] == 1

    @pytest.mark.asyncio
    async def test_resolves_first_verified_site(self):
        client, handler = make_client({
            "/sites": (200, {"siteEntry": [{"siteUrl": "sc-domain:example.com"}]}),
            "/searchAnalytics/query": (200, {}),
        })

        assert await client.fetch_daily_performance(date(2024, 3, 1), date(2024, 3, 2)) == []
        assert client.site_url == "sc-domain:example.com"
        assert len(handler.requests) == 2

    @pytest.mark.asyncio
    async def test_no_verified_sites(self):
        client, _ = make_client({"/sites": (200, {})})
        with pytest.raises(SearchConsoleError):
            await client.resolve_site_url()

    @pytest.mark.asyncio
    async def test_missing_token(self):
        client, handler = make_client({}, access_token="", site_url="https://example.com/")

        assert not client.is_authenticated
        with pytest.raises(AuthenticationError):
            await client.fetch_daily_performance(date(2024, 3, 1), date(2024, 3, 2))
        assert handler.requests == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [401, 403])
    async def test_rejected_token(self, status):
        client, _ = make_client(
            {"/searchAnalytics/query": (status, {"error": "unauthorized"})},
            site_url="https://example.com/",
        )
        with pytest.raises(AuthenticationError):
            await client.fetch_daily_performance(date(2024, 3, 1), date(2024, 3, 2))

    @pytest.mark.asyncio
    async def test_server_error(self):
        client, _ = make_client(
            {"/searchAnalytics/query": (500, {"error": "backend"})},
            site_url="https://example.com/",
        )
        with pytest.raises(SearchConsoleError):
            await client.fetch_daily_performance(date(2024, 3, 1), date(2024, 3, 2))

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        """A proxy page with status 200 is a Search Console error."""
        def handler(request):
            return httpx.Response(200, text="<html>proxy</html>")

        client = SearchConsoleClient(
            access_token="token-123",
            site_url="https://example.com/",
            transport=httpx.MockTransport(handler),
        )
        with pytest.raises(SearchConsoleError):
            await client.fetch_daily_performance(date(2024, 3, 1), date(2024, 3, 2))

    @pytest.mark.asyncio
    async def test_query_insights(self):
        client, handler = make_client(
            {"/searchAnalytics/query": (200, {"rows": [
                {"keys": ["apostille cost"], "clicks": 2, "impressions": 80, "ctr": 0.025, "position": 7.2},
                {"keys": []},
            ]})},
            site_url="https://example.com/",
        )

        insights = await client.fetch_query_insights("apostille")

        assert insights == [{
            "keyword": "apostille cost",
            "metrics": {"clicks": 2, "impressions": 80, "ctr": 0.025, "position": 7.2},
            "type": "content_gap",
            "title": "Search term: apostille cost",
        }]
        body = json.loads(handler.requests[0].content)
        assert body["dimensions"] == ["query"]
        assert body["dimensionFilterGroups"][0]["filters"][0]["expression"] == "apostille"
