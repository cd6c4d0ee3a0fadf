"""Utility modules for ALwrity."""

from .cache import TTLCache
from .rate_limiter import RateLimiter
from .usage import UsageTracker, UsageMetric

__all__ = ["TTLCache", "RateLimiter", "UsageTracker", "UsageMetric"]
