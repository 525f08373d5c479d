from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class TransitConfig(BaseSettings):
    """Configuration for the snapshot database and live ETA feed.

    Automatically loads from environment variables and .env file.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Live ETA feed. Estimates are disabled when no URL is configured.
    eta_url: str | None = Field(
        default=None,
        alias="CTS_ETA_URL",
        description="ETA endpoint template containing '{platform_tag}'",
    )
    api_key: str | None = Field(default=None, alias="CTS_API_KEY")
    eta_cache_ttl_seconds: int = Field(default=30, alias="CTS_ETA_CACHE_TTL")
    eta_timeout_seconds: float = 30.0

    db_path: Path = Field(default=Path("data/snapshot.db"), alias="CTS_DB_PATH")
    timezone: str = Field(default="America/Los_Angeles", alias="CTS_TIMEZONE")


@lru_cache
def get_transit_config() -> TransitConfig:
    """Get transit configuration (cached singleton).

    Returns:
        TransitConfig with values from .env file or environment variables.
    """
    return TransitConfig()
