"""TTL-based cache for live ETA responses, keyed by platform."""

import asyncio
import time
from typing import Generic, TypeVar

K = TypeVar("K")
V = TypeVar("V")


class FeedCache(Generic[K, V]):
    """Per-key TTL cache for feed responses.

    Each key expires independently and has its own async lock, so concurrent
    requests for the same key share one fetch while different keys fetch in parallel.
    """

    def __init__(self, ttl: float = 30.0):
        """Initialize the cache.

        Args:
            ttl: Time-to-live in seconds for cached values.
        """
        self._ttl = ttl
        self._entries: dict[K, tuple[V, float]] = {}
        self._locks: dict[K, asyncio.Lock] = {}

    def get(self, key: K) -> V | None:
        """Get the cached value for a key if it hasn't expired.

        Returns:
            The cached value if valid, None if expired or not set.
        """
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if time.monotonic() >= expires_at:
            del self._entries[key]
            return None
        return value

    def set(self, key: K, value: V) -> None:
        """Set a value for a key with TTL."""
        self._entries[key] = (value, time.monotonic() + self._ttl)

    def clear(self) -> None:
        """Clear every cached value."""
        self._entries.clear()

    def lock(self, key: K) -> asyncio.Lock:
        """Get the async lock coordinating fetches for a key."""
        if key not in self._locks:
            self._locks[key] = asyncio.Lock()
        return self._locks[key]

    def __len__(self) -> int:
        return len(self._entries)
