from cts_mcp.app import mcp
from cts_mcp.data.repository import get_repository
from cts_mcp.models.responses import GetStaticDataResponse


@mcp.tool()
async def get_static_data() -> GetStaticDataResponse:
    """Get every CTS bus stop and route.

    Use this to show stop names, locations and route colors alongside the results of
    the arrivals tools, or to look up the stop number of a stop by name.

    Returns:
        GetStaticDataResponse with stops keyed by stop number and routes keyed by
        route number.
    """
    repository = get_repository()
    static_data = await repository.get_static_data()
    return GetStaticDataResponse(
        stops=static_data.stops,
        routes=static_data.routes,
        created_at=repository.snapshot.created_at.isoformat(),
    )
