"""Fixed-window rate limiter for AI and Search Console requests."""

import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Optional
import logging

from ..exceptions import RateLimitExceeded

logger = logging.getLogger(__name__)


@dataclass
class RateLimitResult:
    """Outcome of a successful rate limit check."""
    success: bool
    limit: int
    remaining: int
    reset: float
    current_usage: int


@dataclass
class _Window:
    count: int
    started_at: float


class RateLimiter:
    """
    Per-token fixed-window rate limiter.

    Each token gets ``limit`` requests per ``interval_seconds``. At most
    ``max_tokens`` tokens are tracked; the least recently used token is
    forgotten first.
    """

    def __init__(
        self,
        interval_seconds: float = 60.0,
        max_tokens: int = 500,
        clock: Optional[Callable[[], float]] = None
    ):
        self.interval_seconds = interval_seconds
        self.max_tokens = max_tokens
        self.clock = clock or time.time
        self._windows: "OrderedDict[str, _Window]" = OrderedDict()

    def _get_window(self, key: str, now: float) -> _Window:
        window = self._windows.get(key)
        if window is None or now - window.started_at >= self.interval_seconds:
            window = _Window(count=0, started_at=now)
        return window

    def _store(self, key: str, window: _Window) -> None:
        self._windows[key] = window
        self._windows.move_to_end(key)
        while len(self._windows) > self.max_tokens:
            evicted, _ = self._windows.popitem(last=False)
            logger.debug(f"Rate limiter evicted token {evicted}")

    def check(self, limit: int, token) -> RateLimitResult:
        """
        Count one request for ``token``.

        Raises RateLimitExceeded once the window's limit is used up.
        """
        if token is None or token == "":
            raise ValueError("Rate limiting token is required")

        key = str(token)
        now = self.clock()
        window = self._get_window(key, now)
        reset = window.started_at + self.interval_seconds

        if window.count >= limit:
            logger.warning(f"Rate limit reached for {key}: {window.count}/{limit}")
            raise RateLimitExceeded(limit=limit, reset=reset, current_usage=window.count)

        window.count += 1
        self._store(key, window)
        return RateLimitResult(
            success=True,
            limit=limit,
            remaining=max(0, limit - window.count),
            reset=reset,
            current_usage=window.count,
        )

    def get_stats(self, token: str = None) -> dict:
        """Get usage in the current window per token."""
        now = self.clock()
        keys = [str(token)] if token else list(self._windows)
        stats = {}
        for key in keys:
            window = self._get_window(key, now)
            stats[key] = {"requests_this_window": window.count}
        return stats


# Global rate limiter instance
_rate_limiter: Optional[RateLimiter] = None


def get_rate_limiter() -> RateLimiter:
    """Get the global rate limiter instance."""
    global _rate_limiter
    if _rate_limiter is None:
        _rate_limiter = RateLimiter()
    return _rate_limiter
