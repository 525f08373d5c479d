from cts_mcp.app import mcp
from cts_mcp.data.repository import get_repository
from cts_mcp.models.responses import RefreshResult
from cts_mcp.services.realtime_service import clear_caches


@mcp.tool()
async def reload_static_data() -> RefreshResult:
    """Reload stops, routes, and schedules from the snapshot database.

    Use after running `cts-mcp refresh <topology.json>` to pick up a new snapshot
    without restarting the server. Requests in flight keep using the previous one.
    Cached live estimates are discarded.

    Returns:
        RefreshResult with counts and the snapshot creation time.
    """
    snapshot = await get_repository().reload()
    clear_caches()
    return RefreshResult(
        stop_count=len(snapshot.static_data.stops),
        route_count=len(snapshot.static_data.routes),
        scheduled_stop_count=sum(1 for routes in snapshot.schedule.values() if routes),
        created_at=snapshot.created_at.isoformat(),
    )
