"""Process-wide counters for external API usage."""

from enum import Enum
from typing import Callable, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)


class UsageMetric(str, Enum):
    """Kinds of external calls and cache events worth counting."""
    GSC = "gsc"
    OPENAI = "openai"
    GEMINI = "gemini"
    CACHE_HIT = "cache_hit"
    CACHE_MISS = "cache_miss"
    RATE_LIMIT = "rate_limit"


Subscriber = Callable[[Dict[str, int]], None]


class UsageTracker:
    """Counts API calls and notifies subscribers on every change."""

    def __init__(self):
        self._counts: Dict[str, int] = {metric.value: 0 for metric in UsageMetric}
        self._subscribers: List[Subscriber] = []

    def increment(self, metric: UsageMetric) -> None:
        self._counts[UsageMetric(metric).value] += 1
        self._notify()

    def get_metrics(self) -> Dict[str, int]:
        return dict(self._counts)

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a callback; returns a function that unsubscribes it."""
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def reset(self) -> None:
        for key in self._counts:
            self._counts[key] = 0
        self._notify()

    def _notify(self) -> None:
        snapshot = self.get_metrics()
        for callback in list(self._subscribers):
            callback(snapshot)


# Global usage tracker instance
_usage_tracker: Optional[UsageTracker] = None


def get_usage_tracker() -> UsageTracker:
    """Get the global usage tracker instance."""
    global _usage_tracker
    if _usage_tracker is None:
        _usage_tracker = UsageTracker()
    return _usage_tracker
