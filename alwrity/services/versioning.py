"""Content version store and Search Console performance correlation."""

import asyncio
import difflib
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Sequence
import logging

from ..exceptions import AuthenticationError, SearchConsoleError
from ..models.version import ContentVersion, PerformanceRow
from ..repository import InMemoryVersionRepository, VersionRepository
from .search_console import SearchConsoleClient

logger = logging.getLogger(__name__)


@dataclass
class VersionComparison:
    """Two versions side by side with their performance series and a content diff."""
    version_a: ContentVersion
    version_b: ContentVersion
    series_a: List[PerformanceRow] = field(default_factory=list)
    series_b: List[PerformanceRow] = field(default_factory=list)
    diff: List[str] = field(default_factory=list)


def content_diff(version_a: ContentVersion, version_b: ContentVersion) -> List[str]:
    """Unified line diff from version A to version B."""
    return list(difflib.unified_diff(
        version_a.content.splitlines(),
        version_b.content.splitlines(),
        fromfile=f"version-{version_a.id}",
        tofile=f"version-{version_b.id}",
        lineterm="",
    ))


class VersionStore:
    """
    Snapshots of the full content and their search performance over time.

    Versions are append-only. Performance is fetched lazily per version and
    the most recent day is attached to the stored record.
    """

    def __init__(
        self,
        repository: Optional[VersionRepository] = None,
        analytics: Optional[SearchConsoleClient] = None,
        clock: Optional[Callable[[], float]] = None
    ):
        self.repository = repository or InMemoryVersionRepository()
        self.analytics = analytics
        self._clock = clock or time.time
        self.performance_data: Dict[str, List[PerformanceRow]] = {}
        self.error: Optional[str] = None

    def _next_id(self) -> int:
        stamp = int(self._clock() * 1000)
        # Two saves within the same millisecond
        while self.repository.exists(str(stamp)):
            stamp += 1
        return stamp

    def save_version(self, content: str) -> Optional[ContentVersion]:
        """Store a snapshot of ``content``; blank content is ignored."""
        if not content or not content.strip():
            logger.debug("Ignoring save of blank content")
            return None

        stamp = self._next_id()
        version = ContentVersion(id=str(stamp), content=content, timestamp=stamp)
        self.repository.save(version)
        logger.info(f"Saved content version {version.id}")
        return version

    def list_versions(self) -> List[ContentVersion]:
        return self.repository.list()

    def get_version(self, version_id: str) -> Optional[ContentVersion]:
        return self.repository.get(version_id)

    async def fetch_performance_data(self, version_id: str) -> Optional[List[PerformanceRow]]:
        """
        Daily performance from the version's save date until today.

        Returns None when the fetch could not be made (see ``self.error``).
        """
        self.error = None
        return await self._fetch(version_id)

    async def _fetch(self, version_id: str) -> Optional[List[PerformanceRow]]:
        if self.analytics is None or not self.analytics.is_authenticated:
            self.error = "Please authenticate with Google to view performance data"
            logger.warning(self.error)
            return None

        version = self.repository.get(version_id)
        if version is None:
            self.error = f"Version {version_id} not found"
            logger.warning(self.error)
            return None

        start = datetime.fromtimestamp(version.timestamp / 1000, tz=timezone.utc).date()
        end = datetime.now(timezone.utc).date()
        if start > end:
            start = end

        try:
            rows = await self.analytics.fetch_daily_performance(start, end)
        except AuthenticationError as e:
            self.error = "Please authenticate with Google to view performance data"
            logger.error(f"Authentication failed fetching performance for {version_id}: {e}")
            return None
        except SearchConsoleError as e:
            self.error = "Failed to fetch performance data"
            logger.error(f"Error fetching performance for {version_id}: {e}")
            return None

        self.performance_data[version_id] = rows
        if rows:
            self.repository.update_metrics(version_id, rows[-1])
        logger.debug(f"Fetched {len(rows)} days of performance for version {version_id}")
        return rows

    async def compare_versions(self, selected: Sequence[str]) -> Optional[VersionComparison]:
        """
        Compare exactly two versions.

        Each side is fetched independently; a failed side leaves its series
        empty. Returns None unless two distinct known ids are given.
        """
        if len(selected) != 2 or selected[0] == selected[1]:
            return None

        version_a = self.repository.get(selected[0])
        version_b = self.repository.get(selected[1])
        if version_a is None or version_b is None:
            logger.warning(f"Cannot compare unknown versions {list(selected)}")
            return None

        self.error = None
        series_a, series_b = await asyncio.gather(
            self._fetch(version_a.id),
            self._fetch(version_b.id),
        )

        # Pick up freshly attached metrics
        version_a = self.repository.get(version_a.id)
        version_b = self.repository.get(version_b.id)
        return VersionComparison(
            version_a=version_a,
            version_b=version_b,
            series_a=series_a or [],
            series_b=series_b or [],
            diff=content_diff(version_a, version_b),
        )
