"""Favorites service: a condensed view of the user's stops and the nearest stop."""

import math
from datetime import datetime
from typing import Any

from cts_mcp.data.repository import TransitRepository
from cts_mcp.models.responses import FavoriteStop, FavoriteStopViewModel
from cts_mcp.models.schedule import ArrivalEntry
from cts_mcp.models.static import BusRoute, BusStop, LatLong, StaticData
from cts_mcp.services.arrivals_service import get_schedule, soonest_arrival_key
from cts_mcp.services.summary_service import to_estimate_summary

# Earth's radius in meters for haversine calculation
EARTH_RADIUS_METERS = 6_371_000

METERS_PER_MILE = 1609.344


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate the great-circle distance between two points in meters.

    Args:
        lat1, lon1: First point coordinates in degrees.
        lat2, lon2: Second point coordinates in degrees.

    Returns:
        Distance in meters.
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(delta_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_METERS * c


def distance_in_miles(location: LatLong, stop: BusStop) -> float:
    """Distance from a location to a stop in miles."""
    return haversine_distance(location.lat, location.lon, stop.lat, stop.long) / METERS_PER_MILE


def _to_favorite(stop: BusStop, distance: float, is_nearest_stop: bool = False) -> FavoriteStop:
    return FavoriteStop(
        id=stop.id,
        name=stop.name,
        route_names=stop.route_names,
        lat=stop.lat,
        long=stop.long,
        distance_from_user=distance,
        is_nearest_stop=is_nearest_stop,
    )


def get_favorite_stops(
    static_data: StaticData,
    stop_ids: list[int],
    user_location: LatLong | None,
) -> list[FavoriteStop]:
    """Resolve requested stops, adding the stop nearest to the user.

    Unknown stop IDs are skipped. With a location, the nearest stop in the system
    is appended (unless already requested) and the result is sorted by distance.
    Without one, request order is kept and distances are NaN.
    """
    favorites = [
        _to_favorite(
            static_data.stops[stop_id],
            distance_in_miles(user_location, static_data.stops[stop_id])
            if user_location is not None
            else math.nan,
        )
        for stop_id in dict.fromkeys(stop_ids)
        if stop_id in static_data.stops
    ]

    if user_location is None or not static_data.stops:
        return favorites

    nearest = min(
        static_data.stops.values(), key=lambda stop: distance_in_miles(user_location, stop)
    )
    if not any(favorite.id == nearest.id for favorite in favorites):
        favorites.append(
            _to_favorite(nearest, distance_in_miles(user_location, nearest), is_nearest_stop=True)
        )

    favorites.sort(key=lambda favorite: favorite.distance_from_user)
    return favorites


def format_distance(distance_miles: float) -> str:
    """Format a distance like "0.4 miles", empty if unknown."""
    if math.isnan(distance_miles):
        return ""
    return f"{distance_miles:.1f} miles"


def to_view_model(
    favorite: FavoriteStop,
    static_data: StaticData,
    stop_arrivals: dict[str, list[ArrivalEntry]],
    current_time: datetime,
) -> FavoriteStopViewModel:
    """Build the view model of one favorite stop from its two soonest routes.

    Routes without arrivals or missing from static data are skipped.
    """
    route_arrivals: list[tuple[BusRoute, list[ArrivalEntry]]] = [
        (static_data.routes[route_no], arrivals)
        for route_no, arrivals in stop_arrivals.items()
        if arrivals and route_no in static_data.routes
    ]
    route_arrivals.sort(key=lambda item: soonest_arrival_key(item[1]))

    fields: dict[str, Any] = {
        "stop_id": favorite.id,
        "stop_name": favorite.name,
        "lat": favorite.lat,
        "long": favorite.long,
        "distance_from_user": format_distance(favorite.distance_from_user),
        "is_nearest_stop": favorite.is_nearest_stop,
    }
    for prefix, (route, arrivals) in zip(("first", "second"), route_arrivals):
        fields[f"{prefix}_route_name"] = route.route_no
        fields[f"{prefix}_route_color"] = route.color
        fields[f"{prefix}_route_arrivals"] = to_estimate_summary(arrivals, current_time)

    return FavoriteStopViewModel(**fields)


async def get_favorites_view_model(
    repository: TransitRepository,
    current_time: datetime,
    stop_ids: list[int],
    user_location: LatLong | None = None,
) -> list[FavoriteStopViewModel]:
    """Get the condensed favorites view for a set of stops.

    Args:
        repository: Snapshot owner.
        current_time: The moment of the request.
        stop_ids: The user's favorite stop IDs.
        user_location: Optional user location, adds the nearest stop and distances.

    Returns:
        One view model per favorite stop, nearest first when a location is given.
    """
    static_data = await repository.get_static_data()

    favorites = get_favorite_stops(static_data, stop_ids, user_location)

    favorite_ids = [favorite.id for favorite in favorites]
    schedule = await get_schedule(repository, current_time, favorite_ids)

    return [
        to_view_model(favorite, static_data, schedule.get(favorite.id, {}), current_time)
        for favorite in favorites
    ]
