"""Tests for the TTL-based per-key cache."""

import time

from cts_mcp.data.cache import FeedCache


def test_cache_ttl_expiration():
    """Cache should return None after TTL expires."""
    # Use a very short TTL for testing
    cache: FeedCache[int, str] = FeedCache(ttl=0.1)

    cache.set(100, "test_value")

    # Should be available immediately
    assert cache.get(100) == "test_value"

    # Wait for TTL to expire
    time.sleep(0.15)

    # Should now return None, and the entry is evicted
    assert cache.get(100) is None
    assert len(cache) == 0


def test_cache_keys_are_independent():
    """Each key has its own value."""
    cache: FeedCache[int, str] = FeedCache(ttl=10.0)

    cache.set(100, "first platform")
    cache.set(200, "second platform")

    assert cache.get(100) == "first platform"
    assert cache.get(200) == "second platform"
    assert cache.get(300) is None
    assert len(cache) == 2


def test_cache_keys_expire_independently():
    """A key set later outlives an older one."""
    cache: FeedCache[int, str] = FeedCache(ttl=0.3)

    cache.set(100, "old")
    time.sleep(0.2)
    cache.set(200, "new")
    time.sleep(0.15)

    assert cache.get(100) is None
    assert cache.get(200) == "new"


def test_cache_clear():
    """Cache clear should remove every value."""
    cache: FeedCache[int, str] = FeedCache(ttl=10.0)

    cache.set(100, "a")
    cache.set(200, "b")

    cache.clear()
    assert cache.get(100) is None
    assert cache.get(200) is None


def test_cache_overwrite():
    """Setting a new value should overwrite the old one."""
    cache: FeedCache[int, str] = FeedCache(ttl=10.0)

    cache.set(100, "first")
    cache.set(100, "second")
    assert cache.get(100) == "second"


def test_cache_empty_value_is_cached():
    """An empty dict is a valid cached value, distinct from a miss."""
    cache: FeedCache[int, dict[str, list[int]]] = FeedCache(ttl=10.0)

    cache.set(100, {})
    assert cache.get(100) == {}


def test_cache_lock_per_key():
    """The same key always gets the same lock."""
    cache: FeedCache[int, str] = FeedCache(ttl=10.0)

    assert cache.lock(100) is cache.lock(100)
    assert cache.lock(100) is not cache.lock(200)
