"""Real-time service for fetching live ETAs with caching.

Provides cached access to per-platform arrival estimates. Fetch errors are logged
and re-raised: a request that needs estimates fails rather than silently
falling back to the schedule.
"""

import logging

from cts_mcp.data.cache import FeedCache
from cts_mcp.data.config import TransitConfig, get_transit_config
from cts_mcp.data.eta_client import EtaFeedClient

logger = logging.getLogger(__name__)

# Module-level cache (lazy-initialized)
_eta_cache: FeedCache[int, dict[str, list[int]]] | None = None
_config: TransitConfig | None = None


def _get_config() -> TransitConfig:
    """Get or create the transit config singleton."""
    global _config
    if _config is None:
        _config = get_transit_config()
    return _config


def _get_eta_cache() -> FeedCache[int, dict[str, list[int]]]:
    """Get or create the ETA cache singleton."""
    global _eta_cache
    if _eta_cache is None:
        config = _get_config()
        _eta_cache = FeedCache[int, dict[str, list[int]]](ttl=config.eta_cache_ttl_seconds)
    return _eta_cache


def is_realtime_available() -> bool:
    """Check if live estimates are available (ETA URL configured).

    Returns:
        True if the CTS_ETA_URL environment variable is set.
    """
    config = _get_config()
    return config.eta_url is not None


async def get_platform_eta(platform_tag: int) -> dict[str, list[int]]:
    """Fetch live estimates for one platform with caching.

    Args:
        platform_tag: The provider's internal platform identifier.

    Returns:
        Dict mapping route number -> estimated minutes. Empty if live estimates are
        disabled or the feed has nothing for the platform.

    Raises:
        httpx.HTTPError: If the feed request fails.
        pydantic.ValidationError: If the feed payload is malformed.
    """
    config = _get_config()
    if config.eta_url is None:
        logger.debug("No ETA URL configured, skipping live estimates")
        return {}

    cache = _get_eta_cache()

    cached = cache.get(platform_tag)
    if cached is not None:
        return cached

    # Acquire lock to prevent concurrent fetches of the same platform
    async with cache.lock(platform_tag):
        # Double-check cache after acquiring lock
        cached = cache.get(platform_tag)
        if cached is not None:
            return cached

        try:
            async with EtaFeedClient(config) as client:
                platform_eta = await client.fetch_platform_eta(platform_tag)
        except Exception as e:
            logger.warning(f"Failed to fetch ETAs for platform {platform_tag}: {e}")
            raise

        estimates = platform_eta.to_route_estimates() if platform_eta else {}
        cache.set(platform_tag, estimates)
        logger.debug(f"Fetched ETAs for platform {platform_tag}: {len(estimates)} routes")
        return estimates


def clear_caches() -> None:
    """Clear the ETA cache.

    Called whenever a new snapshot, with possibly different platform tags, is loaded.
    """
    if _eta_cache is not None:
        _eta_cache.clear()


def reset_service() -> None:
    """Reset the service state completely.

    Clears caches and resets config. Useful for testing.
    """
    global _eta_cache, _config
    _eta_cache = None
    _config = None
    # Clear the lru_cache on get_transit_config so it re-reads .env/environment
    # (hasattr check handles case where function is mocked in tests)
    if hasattr(get_transit_config, "cache_clear"):
        get_transit_config.cache_clear()
