from pydantic import BaseModel, ConfigDict, Field

from cts_mcp.models.schedule import ArrivalEntry
from cts_mcp.models.static import BusRoute, BusStop


class RouteArrivalsSummary(BaseModel):
    """Human-readable arrival information for one route at one stop."""

    model_config = ConfigDict(frozen=True)

    route_name: str
    arrivals_summary: str = Field(
        description="Next one or two arrivals, e.g. '5 minutes, then 1:30 PM'"
    )
    schedule_summary: str = Field(
        default="", description="Cadence or last arrival, e.g. 'Hourly until 9:05 PM'"
    )


class FavoriteStop(BaseModel):
    """A stop the user asked about, or the stop nearest to them."""

    id: int
    name: str
    route_names: list[str]
    lat: float
    long: float
    distance_from_user: float = Field(
        default=float("nan"), description="Distance in miles, NaN if the location is unknown"
    )
    is_nearest_stop: bool = False


class FavoriteStopViewModel(BaseModel):
    """Condensed view of a favorite stop: its two soonest routes."""

    model_config = ConfigDict(frozen=True)

    stop_id: int
    stop_name: str

    first_route_name: str = ""
    first_route_color: str = ""
    first_route_arrivals: str = "No arrivals!"

    second_route_name: str = ""
    second_route_color: str = ""
    second_route_arrivals: str = ""

    lat: float
    long: float

    distance_from_user: str = Field(default="", description="e.g. '0.4 miles', empty if unknown")
    is_nearest_stop: bool = False


class RefreshResult(BaseModel):
    """Outcome of loading or rebuilding the static data snapshot."""

    stop_count: int
    route_count: int
    scheduled_stop_count: int = Field(description="Stops with at least one route schedule")
    created_at: str = Field(description="ISO timestamp of the snapshot")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    timestamp: str
    snapshot_created_at: str | None = Field(
        default=None, description="ISO timestamp of the loaded snapshot, null if none"
    )


class GetEtasResponse(BaseModel):
    """Live estimates per stop."""

    etas: dict[int, dict[str, list[int]]] = Field(
        description="Stop ID -> route number -> estimated minutes"
    )
    realtime_available: bool = Field(description="Whether a live ETA feed is configured")


class GetScheduleResponse(BaseModel):
    """Merged scheduled and estimated arrivals per stop."""

    schedule: dict[int, dict[str, list[ArrivalEntry]]] = Field(
        description="Stop ID -> route number -> arrivals sorted soonest first"
    )
    query_time: str = Field(description="ISO timestamp the arrivals are relative to")


class GetArrivalsSummaryResponse(BaseModel):
    """Human-readable arrival summaries per stop."""

    summaries: dict[int, list[RouteArrivalsSummary]] = Field(
        description="Stop ID -> one summary per route, soonest first"
    )
    query_time: str = Field(description="ISO timestamp the summaries are relative to")


class GetFavoritesResponse(BaseModel):
    """Condensed favorites view."""

    favorites: list[FavoriteStopViewModel]
    count: int = Field(description="Number of stops returned")
    query_time: str = Field(description="ISO timestamp the summaries are relative to")


class GetStaticDataResponse(BaseModel):
    """Every stop and route in the system."""

    stops: dict[int, BusStop] = Field(description="Stop ID -> name, location and routes")
    routes: dict[str, BusRoute] = Field(description="Route number -> display name and color")
    created_at: str = Field(description="ISO timestamp of the snapshot")
