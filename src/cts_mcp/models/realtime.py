"""Pydantic models for the live ETA feed.

These models represent the subset of the provider's ETA payload we actually use.
"""

from pydantic import BaseModel, ConfigDict, Field


class RouteEstimate(BaseModel):
    """Estimated arrivals of one route at a platform."""

    model_config = ConfigDict(populate_by_name=True)

    route_no: str = Field(alias="routeNo")
    minutes: list[int] = Field(default_factory=list, description="Minutes until each arrival")


class PlatformEta(BaseModel):
    """Live estimates for every route at one platform."""

    model_config = ConfigDict(populate_by_name=True)

    platform_tag: int = Field(alias="platformTag")
    routes: list[RouteEstimate] = Field(default_factory=list)

    def to_route_estimates(self) -> dict[str, list[int]]:
        """Map each route number to its estimated minutes."""
        return {route.route_no: list(route.minutes) for route in self.routes}
