"""Arrivals service for merging the static schedule with live estimates.

Live estimates supersede the scheduled times they correspond to. Any failure to
read the schedule or to fetch estimates fails the whole request.
"""

import asyncio
import logging
from datetime import datetime

from cts_mcp.data.repository import TransitRepository
from cts_mcp.models.responses import RouteArrivalsSummary
from cts_mcp.models.schedule import ArrivalEntry, RouteStopSchedule
from cts_mcp.models.static import StaticData
from cts_mcp.services.realtime_service import get_platform_eta
from cts_mcp.services.schedule_service import make_relative_schedule, select_day_schedule
from cts_mcp.services.summary_service import (
    ESTIMATES_MAX_ADVANCE_MINUTES,
    to_estimate_summary,
    to_schedule_summary,
)

logger = logging.getLogger(__name__)

# The range of minutes in which an estimate replaces a scheduled time.
ESTIMATE_CORRELATION_TOLERANCE_MINUTES = 10

# stop_id -> route_no -> arrivals
StopArrivals = dict[int, dict[str, list[ArrivalEntry]]]

# stop_id -> route_no -> estimated minutes
StopEstimates = dict[int, dict[str, list[int]]]


def merge_arrivals(scheduled_minutes: list[int], estimate_minutes: list[int]) -> list[ArrivalEntry]:
    """Merge scheduled arrivals with live estimates for one route at one stop.

    Estimates outside (0, ESTIMATES_MAX_ADVANCE_MINUTES] are ignored. A scheduled
    time within ESTIMATE_CORRELATION_TOLERANCE_MINUTES of any estimate is the same
    bus, so it is dropped in favor of the estimate.

    Args:
        scheduled_minutes: Minutes from now of each scheduled arrival.
        estimate_minutes: Minutes from now of each live estimate.

    Returns:
        Arrivals sorted by minutes from now. The sort is stable, scheduled entries
        precede estimates with the same value.
    """
    estimates = [
        minutes for minutes in estimate_minutes if 0 < minutes <= ESTIMATES_MAX_ADVANCE_MINUTES
    ]

    arrivals = [
        ArrivalEntry(minutes_from_now=minutes, is_estimate=False)
        for minutes in scheduled_minutes
        if not any(
            abs(minutes - estimate) <= ESTIMATE_CORRELATION_TOLERANCE_MINUTES
            for estimate in estimates
        )
    ]
    arrivals.extend(
        ArrivalEntry(minutes_from_now=minutes, is_estimate=True) for minutes in estimates
    )

    arrivals.sort(key=lambda arrival: arrival.minutes_from_now)
    return arrivals


def interleave_route_schedule_and_estimates(
    route_schedule: RouteStopSchedule,
    stop_estimates: dict[str, list[int]],
    current_time: datetime,
) -> list[ArrivalEntry]:
    """Build the arrival list of one route at one stop.

    Args:
        route_schedule: The route's day schedules at the stop.
        stop_estimates: Route number -> estimated minutes for the stop.
        current_time: The moment of the request.

    Returns:
        Sorted arrivals; empty if no day schedule is in effect and no estimates exist.
    """
    scheduled_minutes: list[int] = []
    day_schedule = select_day_schedule(route_schedule.day_schedules, current_time)
    if day_schedule is not None:
        scheduled_minutes = make_relative_schedule(day_schedule, current_time)

    return merge_arrivals(scheduled_minutes, stop_estimates.get(route_schedule.route_no, []))


async def get_etas(repository: TransitRepository, stop_ids: list[int]) -> StopEstimates:
    """Get live estimates for a set of stops.

    One fetch is issued per distinct platform tag, all concurrently.

    Args:
        repository: Source of the stop ID -> platform tag mapping.
        stop_ids: Stop IDs to get estimates for.

    Returns:
        Dict mapping stop_id -> route_no -> estimated minutes. Stops without a
        platform tag map to an empty dict.

    Raises:
        httpx.HTTPError: If any estimate fetch fails.
    """
    platform_tags = await repository.get_platform_tags()

    # distinct tags, in request order
    tags = list(
        dict.fromkeys(platform_tags[stop_id] for stop_id in stop_ids if stop_id in platform_tags)
    )
    results = await asyncio.gather(*(get_platform_eta(tag) for tag in tags))
    estimates_by_tag = dict(zip(tags, results))

    return {
        stop_id: estimates_by_tag[platform_tags[stop_id]] if stop_id in platform_tags else {}
        for stop_id in stop_ids
    }


async def get_schedule(
    repository: TransitRepository,
    current_time: datetime,
    stop_ids: list[int],
) -> StopArrivals:
    """Get today's arrivals for a set of stops, incorporating live estimates.

    The schedule read and the estimate fetches run concurrently.

    Args:
        repository: Snapshot owner.
        current_time: The moment of the request.
        stop_ids: Stop IDs to get arrivals for.

    Returns:
        Dict mapping stop_id -> route_no -> sorted arrivals, for every requested
        stop that has a schedule.
    """
    schedule, estimates = await asyncio.gather(
        repository.get_schedule(),
        get_etas(repository, stop_ids),
    )

    result: StopArrivals = {}
    for stop_id in stop_ids:
        if stop_id not in schedule:
            continue
        stop_estimates = estimates.get(stop_id, {})
        result[stop_id] = {
            route_schedule.route_no: interleave_route_schedule_and_estimates(
                route_schedule, stop_estimates, current_time
            )
            for route_schedule in schedule[stop_id]
        }

    return result


def soonest_arrival_key(arrivals: list[ArrivalEntry]) -> int | float:
    """Sort key placing routes with the soonest arrival first and empty routes last."""
    return min((arrival.minutes_from_now for arrival in arrivals), default=float("inf"))


def to_route_arrivals_summaries(
    route_names: list[str],
    stop_arrivals: dict[str, list[ArrivalEntry]],
    current_time: datetime,
    static_data: StaticData,
) -> list[RouteArrivalsSummary]:
    """Summarize every route serving a stop, soonest first.

    Routes missing from static data are skipped.
    """
    route_arrivals = [(name, stop_arrivals.get(name, [])) for name in route_names]
    route_arrivals.sort(key=lambda item: soonest_arrival_key(item[1]))

    return [
        RouteArrivalsSummary(
            route_name=name,
            arrivals_summary=to_estimate_summary(arrivals, current_time),
            schedule_summary=to_schedule_summary(arrivals, current_time),
        )
        for name, arrivals in route_arrivals
        if name in static_data.routes
    ]


async def get_arrivals_summary(
    repository: TransitRepository,
    current_time: datetime,
    stop_ids: list[int],
) -> dict[int, list[RouteArrivalsSummary]]:
    """Get user friendly arrival summaries for a set of stops.

    Args:
        repository: Snapshot owner.
        current_time: The moment of the request.
        stop_ids: Stop IDs to summarize.

    Returns:
        Dict mapping stop_id -> route summaries (soonest first), for every requested
        stop present in static data.
    """
    schedule = await get_schedule(repository, current_time, stop_ids)
    static_data = await repository.get_static_data()

    summaries: dict[int, list[RouteArrivalsSummary]] = {}
    for stop_id in stop_ids:
        stop = static_data.stops.get(stop_id)
        if stop is None:
            logger.debug(f"Stop {stop_id} not found in static data, skipping")
            continue
        summaries[stop_id] = to_route_arrivals_summaries(
            stop.route_names, schedule.get(stop_id, {}), current_time, static_data
        )

    return summaries
