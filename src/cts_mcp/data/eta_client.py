import httpx

from cts_mcp.data.config import TransitConfig
from cts_mcp.models.realtime import PlatformEta


class EtaFeedClient:
    """Async HTTP client for fetching live arrival estimates for a platform.

    Usage:
        async with EtaFeedClient(config) as client:
            eta = await client.fetch_platform_eta(platform_tag)
    """

    def __init__(self, config: TransitConfig):
        """Initialize the client.

        Args:
            config: Configuration with API key and ETA URL template.
        """
        self._config = config
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "EtaFeedClient":
        """Enter async context - create HTTP client."""
        headers = {}
        if self._config.api_key:
            headers["apikey"] = self._config.api_key
        self._client = httpx.AsyncClient(headers=headers, timeout=self._config.eta_timeout_seconds)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context - close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def fetch_platform_eta(self, platform_tag: int) -> PlatformEta | None:
        """Fetch and parse the estimates for one platform.

        Args:
            platform_tag: The provider's internal platform identifier.

        Returns:
            PlatformEta with per-route estimates, None if the feed has no entry
            for the platform (HTTP 404).

        Raises:
            RuntimeError: If client not initialized or no ETA URL is configured.
            httpx.HTTPError: If the HTTP request fails.
            pydantic.ValidationError: If the payload is malformed.
        """
        if not self._client:
            raise RuntimeError("Client not initialized - use 'async with'")
        if not self._config.eta_url:
            raise RuntimeError("No ETA URL configured - set CTS_ETA_URL")

        url = self._config.eta_url.format(platform_tag=platform_tag)
        response = await self._client.get(url)
        if response.status_code == 404:
            return None
        response.raise_for_status()

        # parse JSON directly into Pydantic model
        return PlatformEta.model_validate(response.json())
