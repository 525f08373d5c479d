"""MCP tools for the favorites view."""

from cts_mcp.app import mcp
from cts_mcp.data.repository import get_repository
from cts_mcp.models.responses import GetFavoritesResponse
from cts_mcp.models.static import LatLong
from cts_mcp.services.favorites_service import get_favorites_view_model
from cts_mcp.services.schedule_service import get_current_time
from cts_mcp.tools.arrivals_tools import parse_stop_ids


def parse_location(location: str) -> LatLong:
    """Parse a "lat,lon" pair such as "44.5646,-123.2620".

    Raises:
        ValueError: If the pair is malformed or out of range.
    """
    parts = [part.strip() for part in location.split(",")]
    if len(parts) != 2:
        raise ValueError(f"Location must be 'lat,lon', got {location!r}")
    try:
        lat, lon = float(parts[0]), float(parts[1])
    except ValueError as e:
        raise ValueError(f"Location must be 'lat,lon', got {location!r}") from e
    if not -90 <= lat <= 90 or not -180 <= lon <= 180:
        raise ValueError(f"Location out of range: {location!r}")
    return LatLong(lat=lat, lon=lon)


@mcp.tool()
async def get_favorites(
    stops: str | None = None,
    location: str | None = None,
) -> GetFavoritesResponse:
    """Get a condensed view of favorite CTS bus stops.

    Each stop shows its two routes arriving soonest. When a location is given, the
    stop nearest to it is added and stops are sorted by distance.

    Examples:
        get_favorites(stops="10001,10002")
        get_favorites(location="44.5646,-123.2620")  # Just the nearest stop
        get_favorites(stops="10001", location="44.5646,-123.2620")

    Args:
        stops: Comma-separated favorite stop numbers.
        location: User location as "lat,lon".

    Returns:
        GetFavoritesResponse with one entry per stop.
    """
    if not stops and not location:
        raise ValueError("Provide stops, location, or both")

    stop_ids = parse_stop_ids(stops) if stops else []
    user_location = parse_location(location) if location else None

    current_time = get_current_time()
    favorites = await get_favorites_view_model(
        get_repository(), current_time, stop_ids, user_location
    )
    return GetFavoritesResponse(
        favorites=favorites,
        count=len(favorites),
        query_time=current_time.isoformat(),
    )
