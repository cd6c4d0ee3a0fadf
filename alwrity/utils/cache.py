"""Time-based cache with an injectable clock."""

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Optional, TypeVar
import logging

logger = logging.getLogger(__name__)

V = TypeVar("V")


@dataclass
class CacheEntry(Generic[V]):
    """A cached value and the moment it was stored."""
    key: str
    value: V
    inserted_at: float


class TTLCache(Generic[V]):
    """
    Key/value cache whose entries expire ``ttl_seconds`` after insertion.

    Expiry is checked lazily on read against ``clock()``, so tests can
    drive time without sleeping.
    """

    def __init__(
        self,
        ttl_seconds: float,
        clock: Optional[Callable[[], float]] = None,
        on_hit: Optional[Callable[[], None]] = None,
        on_miss: Optional[Callable[[], None]] = None
    ):
        self.ttl_seconds = ttl_seconds
        self.clock = clock or time.time
        self._on_hit = on_hit
        self._on_miss = on_miss
        self._entries: Dict[str, CacheEntry[V]] = {}

    def _is_fresh(self, entry: CacheEntry[V]) -> bool:
        return self.clock() - entry.inserted_at < self.ttl_seconds

    def get(self, key: str) -> Optional[V]:
        """Return the cached value, or None when missing or expired."""
        entry = self._entries.get(key)
        if entry is not None and self._is_fresh(entry):
            if self._on_hit:
                self._on_hit()
            return entry.value

        if entry is not None:
            logger.debug(f"Cache entry expired: {key[:60]}")
            del self._entries[key]
        if self._on_miss:
            self._on_miss()
        return None

    def set(self, key: str, value: V) -> None:
        self._entries[key] = CacheEntry(key=key, value=value, inserted_at=self.clock())

    def purge_expired(self) -> int:
        """Drop every expired entry and return how many were removed."""
        stale = [key for key, entry in self._entries.items() if not self._is_fresh(entry)]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: Any) -> bool:
        entry = self._entries.get(key)
        return entry is not None and self._is_fresh(entry)

    def __len__(self) -> int:
        return len(self._entries)
