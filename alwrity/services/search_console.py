"""Google Search Console client for daily performance and query insights."""

from datetime import date, timedelta
from typing import Any, Dict, List, Optional
from urllib.parse import quote
import logging

import httpx

from ..config import get_settings
from ..exceptions import AuthenticationError, SearchConsoleError
from ..models.version import PerformanceRow
from ..utils.usage import get_usage_tracker, UsageMetric

logger = logging.getLogger(__name__)

GSC_BASE_URL = "https://www.googleapis.com/webmasters/v3"


class SearchConsoleClient:
    """
    Thin async wrapper around the Search Console REST API.

    Requires an OAuth access token obtained elsewhere. A missing token or a
    401/403 answer raises AuthenticationError, which callers treat
    differently from an empty result.
    """

    DAILY_ROW_LIMIT = 100
    QUERY_ROW_LIMIT = 20

    def __init__(
        self,
        access_token: Optional[str] = None,
        site_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        settings = get_settings()
        self.access_token = access_token if access_token is not None else settings.gsc_access_token
        self.site_url = site_url or settings.gsc_site_url
        self.timeout = timeout or settings.request_timeout_seconds
        self._transport = transport
        self.usage = get_usage_tracker()

    @property
    def is_authenticated(self) -> bool:
        return bool(self.access_token)

    def _headers(self) -> Dict[str, str]:
        if not self.is_authenticated:
            raise AuthenticationError("Google authentication required to fetch performance data")
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
        }

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=GSC_BASE_URL,
            timeout=self.timeout,
            transport=self._transport,
        )

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        if response.status_code in (401, 403):
            raise AuthenticationError("Not authenticated with Google")
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise SearchConsoleError(
                f"Search Console request failed: {response.status_code}"
            ) from e

    async def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        headers = self._headers()
        self.usage.increment(UsageMetric.GSC)
        try:
            async with self._client() as client:
                response = await client.request(method, path, headers=headers, **kwargs)
        except httpx.RequestError as e:
            raise SearchConsoleError(f"Search Console request failed: {e}") from e
        self._raise_for_status(response)
        try:
            return response.json()
        except ValueError as e:
            raise SearchConsoleError(f"Invalid Search Console response: {e}") from e

    async def resolve_site_url(self) -> str:
        """Configured site, or the first verified site of the account."""
        if self.site_url:
            return self.site_url

        data = await self._request("GET", "/sites")
        entries = data.get("siteEntry") or []
        if not entries:
            raise SearchConsoleError("No verified sites found in Google Search Console")
        self.site_url = entries[0]["siteUrl"]
        logger.info(f"Using Search Console property {self.site_url}")
        return self.site_url

    async def _search_analytics(self, body: Dict[str, Any]) -> List[Dict[str, Any]]:
        site = await self.resolve_site_url()
        path = f"/sites/{quote(site, safe='')}/searchAnalytics/query"
        data = await self._request("POST", path, json=body)
        return data.get("rows") or []

    async def fetch_daily_performance(self, start_date: date, end_date: date) -> List[PerformanceRow]:
        """Daily clicks, impressions, CTR and position over a date range."""
        rows = await self._search_analytics({
            "startDate": start_date.isoformat(),
            "endDate": end_date.isoformat(),
            "dimensions": ["date"],
            "rowLimit": self.DAILY_ROW_LIMIT,
        })
        performance = [
            PerformanceRow(
                date=(row.get("keys") or [""])[0],
                clicks=row.get("clicks", 0) or 0,
                impressions=row.get("impressions", 0) or 0,
                ctr=row.get("ctr", 0.0) or 0.0,
                position=row.get("position", 0.0) or 0.0,
            )
            for row in rows
        ]
        logger.debug(f"Fetched {len(performance)} days of performance {start_date}..{end_date}")
        return performance

    async def fetch_query_insights(self, search_term: str, days: int = 30) -> List[Dict[str, Any]]:
        """
        Queries containing ``search_term`` over the last ``days`` days,
        shaped as content-gap insights for outline prompts.
        """
        end = date.today()
        start = end - timedelta(days=days)
        rows = await self._search_analytics({
            "startDate": start.isoformat(),
            "endDate": end.isoformat(),
            "dimensions": ["query"],
            "rowLimit": self.QUERY_ROW_LIMIT,
            "dimensionFilterGroups": [{
                "filters": [{
                    "dimension": "query",
                    "operator": "contains",
                    "expression": search_term,
                }]
            }],
        })

        insights = []
        for row in rows:
            keyword = (row.get("keys") or [None])[0]
            if not keyword:
                continue
            insights.append({
                "keyword": keyword,
                "metrics": {
                    "clicks": row.get("clicks", 0) or 0,
                    "impressions": row.get("impressions", 0) or 0,
                    "ctr": row.get("ctr", 0.0) or 0.0,
                    "position": row.get("position", 0.0) or 0.0,
                },
                "type": "content_gap",
                "title": f"Search term: {keyword}",
            })
        return insights
