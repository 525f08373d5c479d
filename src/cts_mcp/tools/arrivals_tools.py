from cts_mcp.app import mcp
from cts_mcp.data.repository import get_repository
from cts_mcp.models.responses import (
    GetArrivalsSummaryResponse,
    GetEtasResponse,
    GetScheduleResponse,
)
from cts_mcp.services.arrivals_service import (
    get_arrivals_summary as _get_arrivals_summary,
)
from cts_mcp.services.arrivals_service import get_etas as _get_etas
from cts_mcp.services.arrivals_service import get_schedule as _get_schedule
from cts_mcp.services.realtime_service import is_realtime_available
from cts_mcp.services.schedule_service import get_current_time

# Upper bound on stops per request
MAX_STOP_IDS = 50


def parse_stop_ids(stop_ids: str) -> list[int]:
    """Parse a comma-separated list of stop IDs such as "10001,10002".

    Raises:
        ValueError: If the list is empty, too long, or holds a non-positive or
            non-numeric ID.
    """
    pieces = [piece.strip() for piece in stop_ids.split(",") if piece.strip()]
    if not pieces:
        raise ValueError("At least one stop ID is required")
    if len(pieces) > MAX_STOP_IDS:
        raise ValueError(f"At most {MAX_STOP_IDS} stop IDs can be requested at once")

    parsed: list[int] = []
    for piece in pieces:
        try:
            stop_id = int(piece)
        except ValueError as e:
            raise ValueError(f"Invalid stop ID: {piece!r}") from e
        if stop_id <= 0:
            raise ValueError(f"Invalid stop ID: {piece!r}")
        parsed.append(stop_id)
    return parsed


@mcp.tool()
async def get_etas(stop_ids: str) -> GetEtasResponse:
    """Get live estimated arrival times for one or more CTS bus stops.

    Estimates only cover roughly the next 30 minutes. Stops without live tracking
    return an empty mapping.

    Args:
        stop_ids: Comma-separated stop numbers as shown on the bus stop sign
                  (e.g., "10001,10002").

    Returns:
        GetEtasResponse mapping stop ID -> route number -> minutes until arrival.
    """
    parsed = parse_stop_ids(stop_ids)
    etas = await _get_etas(get_repository(), parsed)
    return GetEtasResponse(etas=etas, realtime_available=is_realtime_available())


@mcp.tool()
async def get_schedule(stop_ids: str) -> GetScheduleResponse:
    """Get today's remaining arrivals at one or more CTS bus stops.

    Combines the published schedule with live estimates. Scheduled times within the
    next 20 minutes are omitted, and a scheduled time within 10 minutes of a live
    estimate is replaced by the estimate.

    Args:
        stop_ids: Comma-separated stop numbers (e.g., "10001,10002").

    Returns:
        GetScheduleResponse mapping stop ID -> route number -> arrivals, each with
        minutes_from_now and is_estimate.
    """
    parsed = parse_stop_ids(stop_ids)
    current_time = get_current_time()
    schedule = await _get_schedule(get_repository(), current_time, parsed)
    return GetScheduleResponse(schedule=schedule, query_time=current_time.isoformat())


@mcp.tool()
async def get_arrivals_summary(stop_ids: str) -> GetArrivalsSummaryResponse:
    """Get a short, human-readable arrivals summary for each route at CTS bus stops.

    Examples of summaries: "5 minutes, then 1:30 PM" and "Hourly until 9:05 PM".

    Args:
        stop_ids: Comma-separated stop numbers (e.g., "10001,10002").

    Returns:
        GetArrivalsSummaryResponse mapping stop ID -> route summaries, soonest first.
    """
    parsed = parse_stop_ids(stop_ids)
    current_time = get_current_time()
    summaries = await _get_arrivals_summary(get_repository(), current_time, parsed)
    return GetArrivalsSummaryResponse(summaries=summaries, query_time=current_time.isoformat())
