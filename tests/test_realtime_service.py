"""Tests for the real-time service."""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from cts_mcp.data.config import TransitConfig
from cts_mcp.data.eta_client import EtaFeedClient
from cts_mcp.models.realtime import PlatformEta, RouteEstimate
from cts_mcp.services import realtime_service


@pytest.fixture(autouse=True)
def reset_service():
    """Reset the service state before and after each test."""
    realtime_service.reset_service()
    yield
    realtime_service.reset_service()


def _config_without_eta_url() -> TransitConfig:
    """Create a config without an ETA URL.

    Note: Must use alias name (CTS_ETA_URL) to override .env file values.
    """
    return TransitConfig(CTS_ETA_URL=None)


def _config_with_eta_url() -> TransitConfig:
    """Create a config with an ETA URL."""
    return TransitConfig(
        CTS_ETA_URL="https://example.com/eta?platform={platform_tag}",
        CTS_API_KEY="test_key",
    )


def _platform_eta() -> PlatformEta:
    return PlatformEta(
        platform_tag=100,
        routes=[
            RouteEstimate(route_no="1", minutes=[3, 18]),
            RouteEstimate(route_no="6", minutes=[9]),
        ],
    )


@pytest.mark.asyncio
async def test_get_platform_eta_returns_empty_without_eta_url():
    """get_platform_eta should return no estimates when no ETA URL is configured."""
    realtime_service._config = _config_without_eta_url()
    result = await realtime_service.get_platform_eta(100)
    assert result == {}


def test_is_realtime_available_without_eta_url():
    """is_realtime_available should return False without an ETA URL."""
    realtime_service._config = _config_without_eta_url()
    assert realtime_service.is_realtime_available() is False


def test_is_realtime_available_with_eta_url():
    """is_realtime_available should return True with an ETA URL."""
    realtime_service._config = _config_with_eta_url()
    assert realtime_service.is_realtime_available() is True


@pytest.mark.asyncio
async def test_get_platform_eta_fetches_and_caches():
    """A second request within the TTL is served from the cache."""
    realtime_service._config = _config_with_eta_url()

    mock_fetch = AsyncMock(return_value=_platform_eta())
    with patch.object(EtaFeedClient, "fetch_platform_eta", mock_fetch):
        first = await realtime_service.get_platform_eta(100)
        second = await realtime_service.get_platform_eta(100)

    assert first == {"1": [3, 18], "6": [9]}
    assert second == first
    assert mock_fetch.await_count == 1


@pytest.mark.asyncio
async def test_get_platform_eta_caches_per_platform():
    """Different platforms are fetched separately."""
    realtime_service._config = _config_with_eta_url()

    mock_fetch = AsyncMock(return_value=_platform_eta())
    with patch.object(EtaFeedClient, "fetch_platform_eta", mock_fetch):
        await realtime_service.get_platform_eta(100)
        await realtime_service.get_platform_eta(200)

    assert mock_fetch.await_count == 2


@pytest.mark.asyncio
async def test_get_platform_eta_unknown_platform():
    """A platform the feed doesn't know has no estimates, and that is cached."""
    realtime_service._config = _config_with_eta_url()

    mock_fetch = AsyncMock(return_value=None)
    with patch.object(EtaFeedClient, "fetch_platform_eta", mock_fetch):
        assert await realtime_service.get_platform_eta(100) == {}
        assert await realtime_service.get_platform_eta(100) == {}

    assert mock_fetch.await_count == 1


@pytest.mark.asyncio
async def test_get_platform_eta_failure_propagates():
    """Feed errors are raised, not turned into empty estimates."""
    realtime_service._config = _config_with_eta_url()

    mock_fetch = AsyncMock(side_effect=httpx.ConnectError("feed down"))
    with patch.object(EtaFeedClient, "fetch_platform_eta", mock_fetch):
        with pytest.raises(httpx.ConnectError):
            await realtime_service.get_platform_eta(100)


@pytest.mark.asyncio
async def test_failure_is_not_cached():
    """The next request after a failure tries again."""
    realtime_service._config = _config_with_eta_url()

    mock_fetch = AsyncMock(side_effect=[httpx.ConnectError("feed down"), _platform_eta()])
    with patch.object(EtaFeedClient, "fetch_platform_eta", mock_fetch):
        with pytest.raises(httpx.ConnectError):
            await realtime_service.get_platform_eta(100)
        result = await realtime_service.get_platform_eta(100)

    assert result == {"1": [3, 18], "6": [9]}


@pytest.mark.asyncio
async def test_clear_caches():
    """clear_caches forces the next request to fetch."""
    realtime_service._config = _config_with_eta_url()

    mock_fetch = AsyncMock(return_value=_platform_eta())
    with patch.object(EtaFeedClient, "fetch_platform_eta", mock_fetch):
        await realtime_service.get_platform_eta(100)
        realtime_service.clear_caches()
        await realtime_service.get_platform_eta(100)

    assert mock_fetch.await_count == 2
