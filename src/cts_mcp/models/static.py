"""Pydantic models for static transit data (stops, routes, snapshot)."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from cts_mcp.models.schedule import RouteStopSchedule


class LatLong(BaseModel):
    """A geographic coordinate in degrees."""

    model_config = ConfigDict(frozen=True)

    lat: float
    lon: float


class BusStop(BaseModel):
    """A stop, identified by the number shown on the physical bus stop sign."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(gt=0)
    name: str
    lat: float
    long: float
    route_names: list[str] = Field(
        default_factory=list, description="Route numbers serving this stop, in display order"
    )


class BusRoute(BaseModel):
    """A route such as "1" or "C3"."""

    model_config = ConfigDict(frozen=True)

    route_no: str
    display_name: str | None = None
    color: str = ""
    url: str | None = None


class StaticData(BaseModel):
    """All stops and routes in the system."""

    model_config = ConfigDict(frozen=True)

    stops: dict[int, BusStop] = Field(default_factory=dict)
    routes: dict[str, BusRoute] = Field(default_factory=dict)


class TransitSnapshot(BaseModel):
    """Everything produced by one static data refresh.

    Owned by the repository and shared read-only by every request.
    """

    model_config = ConfigDict(frozen=True)

    static_data: StaticData
    schedule: dict[int, list[RouteStopSchedule]] = Field(
        default_factory=dict, description="Stop ID -> schedule of each route serving it"
    )
    platform_tags: dict[int, int] = Field(
        default_factory=dict, description="Stop ID -> provider platform tag for ETA lookups"
    )
    created_at: datetime
