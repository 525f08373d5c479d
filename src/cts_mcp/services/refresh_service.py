"""Refresh job: turns the upstream topology document into a stored snapshot.

Upstream data defects fail the refresh loudly; the previously stored snapshot is
left untouched so requests keep being served from it.
"""

import logging
from datetime import UTC, datetime
from itertools import combinations
from pathlib import Path

from cts_mcp.data.snapshot_store import SnapshotStore
from cts_mcp.models.static import StaticData, TransitSnapshot
from cts_mcp.models.topology import RouteTopology, TransitTopology
from cts_mcp.services.interpolation import build_stop_schedules

logger = logging.getLogger(__name__)


class OverlappingDayPatternsError(ValueError):
    """Raised when two timetables of one route claim the same weekday."""


def validate_day_patterns(route: RouteTopology) -> None:
    """Ensure at most one of a route's timetables applies on any weekday.

    Raises:
        OverlappingDayPatternsError: If two day patterns share a weekday.
    """
    for first, second in combinations(route.day_timetables, 2):
        overlap = first.days & second.days
        if len(overlap) > 0:
            raise OverlappingDayPatternsError(
                f"Route {route.route_no}: day patterns '{first.days}' and '{second.days}' "
                f"overlap on {overlap}"
            )


def load_topology(topology_path: Path) -> TransitTopology:
    """Read and validate a topology JSON document.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        pydantic.ValidationError: If the document is malformed.
    """
    topology_path = Path(topology_path)
    if not topology_path.exists():
        raise FileNotFoundError(f"Topology file not found: {topology_path}")
    return TransitTopology.model_validate_json(topology_path.read_text(encoding="utf-8"))


def build_snapshot(topology: TransitTopology) -> TransitSnapshot:
    """Interpolate the topology into a stop-oriented snapshot.

    Args:
        topology: Validated upstream document.

    Returns:
        A new snapshot stamped with the current time.

    Raises:
        OverlappingDayPatternsError: If a route has overlapping day patterns.
        ScheduleIntegrityError: If a route's timetables cannot be interpolated.
    """
    for route in topology.route_topologies:
        validate_day_patterns(route)

    stops = {stop.id: stop for stop in topology.stops}
    routes = {route.route_no: route for route in topology.routes}

    schedule = build_stop_schedules(topology.route_topologies, list(stops))

    unknown_routes = [
        route.route_no for route in topology.route_topologies if route.route_no not in routes
    ]
    if unknown_routes:
        logger.warning(f"Routes with timetables but no static data: {', '.join(unknown_routes)}")

    return TransitSnapshot(
        static_data=StaticData(stops=stops, routes=routes),
        schedule=schedule,
        platform_tags=dict(topology.platform_tags),
        created_at=datetime.now(UTC),
    )


async def refresh_snapshot(topology_path: Path, db_path: Path) -> dict[str, int]:
    """Build a snapshot from a topology document and store it.

    Args:
        topology_path: Path of the topology JSON document.
        db_path: Snapshot database to replace.

    Returns:
        Dictionary with row counts per table.
    """
    topology = load_topology(topology_path)
    logger.info(
        f"Loaded topology: {len(topology.stops)} stops, {len(topology.routes)} routes, "
        f"{len(topology.route_topologies)} route timetables"
    )

    snapshot = build_snapshot(topology)
    return await SnapshotStore(db_path).save(snapshot)
