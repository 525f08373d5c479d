"""Schedule interpolation from route checkpoints to every stop on the path.

The provider only publishes timetables for a handful of checkpoints per route.
Every stop between two checkpoints gets an evenly spaced share of the travel time.
"""

import logging
from datetime import timedelta

from cts_mcp.models.days import WeekdaySet
from cts_mcp.models.schedule import DaySchedule, RouteStopSchedule
from cts_mcp.models.topology import RoutePathStop, RouteTopology

logger = logging.getLogger(__name__)

_ONE_MINUTE_US = 60_000_000


class ScheduleIntegrityError(ValueError):
    """Raised when upstream timetables cannot be interpolated consistently."""


def _to_microseconds(value: timedelta) -> int:
    return (value.days * 86_400 + value.seconds) * 1_000_000 + value.microseconds


def round_to_nearest_minute(value: timedelta) -> timedelta:
    """Round a time to the nearest whole minute, exactly half a minute rounds up."""
    total = _to_microseconds(value)
    remainder = total % _ONE_MINUTE_US
    if remainder < _ONE_MINUTE_US // 2:
        return timedelta(microseconds=total - remainder)
    return timedelta(microseconds=total + _ONE_MINUTE_US - remainder)


def _step_size(start: timedelta, end: timedelta, section_length: int) -> int:
    """Per-stop time step in microseconds, truncated toward zero."""
    difference = _to_microseconds(end) - _to_microseconds(start)
    step = abs(difference) // section_length
    return step if difference >= 0 else -step


def interpolate_route_schedule(
    route_no: str,
    path: list[RoutePathStop],
    checkpoint_times: list[list[timedelta]],
) -> list[tuple[int, list[timedelta]]]:
    """Fabricate a timetable for every stop on a route's path for one set of days.

    The first stop on the path is always a checkpoint. The last stop is not flagged as
    one even though it has a timetable, so a synthetic checkpoint is placed just past
    the end of the path (index len(path)) carrying the final timetable.

    Args:
        route_no: Route number, used in error messages.
        path: Ordered stops on the route.
        checkpoint_times: One timetable per checkpoint in path order, followed by the
            final stop's timetable. Each timetable has one time per trip.

    Returns:
        List of (stop_id, times) in path order, one entry per path position.

    Raises:
        ScheduleIntegrityError: If the path and timetables are inconsistent, or if a
            trip would overtake an earlier one at some stop.
    """
    if not path:
        raise ScheduleIntegrityError(f"Route {route_no} has an empty path")
    if not path[0].is_checkpoint:
        raise ScheduleIntegrityError(
            f"Route {route_no}: first stop {path[0].stop_id} is not a checkpoint"
        )

    checkpoint_indexes = [index for index, stop in enumerate(path) if stop.is_checkpoint]
    checkpoint_indexes.append(len(path))

    if len(checkpoint_times) != len(checkpoint_indexes):
        raise ScheduleIntegrityError(
            f"Route {route_no}: {len(checkpoint_times)} checkpoint timetables "
            f"for {len(checkpoint_indexes)} checkpoints (including the final stop)"
        )

    results: list[tuple[int, list[timedelta]]] = []
    for i in range(len(checkpoint_indexes) - 1):
        start_index = checkpoint_indexes[i]
        section_length = checkpoint_indexes[i + 1] - start_index
        start_times = checkpoint_times[i]
        end_times = checkpoint_times[i + 1]

        if len(start_times) != len(end_times):
            raise ScheduleIntegrityError(
                f"Route {route_no}: checkpoint at path index {start_index} has "
                f"{len(start_times)} trips but the next checkpoint has {len(end_times)}"
            )

        steps = [
            _step_size(start, end, section_length) for start, end in zip(start_times, end_times)
        ]

        for offset, stop in enumerate(path[start_index : start_index + section_length]):
            times = [
                round_to_nearest_minute(start + timedelta(microseconds=step * offset))
                for start, step in zip(start_times, steps)
            ]
            if any(later < earlier for earlier, later in zip(times, times[1:])):
                raise ScheduleIntegrityError(
                    f"Route {route_no}: times at stop {stop.stop_id} decrease "
                    f"(a trip overtakes an earlier one)"
                )
            results.append((stop.stop_id, times))

    return results


def build_stop_schedules(
    routes: list[RouteTopology],
    stop_ids: list[int],
) -> dict[int, list[RouteStopSchedule]]:
    """Interpolate every route and regroup the result by stop.

    When a path visits the same stop twice, the first visit's times are used.

    Args:
        routes: Route topologies with checkpoint timetables.
        stop_ids: Every stop ID in the system; each gets an entry, possibly empty.

    Returns:
        Dict mapping stop_id -> schedules of the routes serving it.

    Raises:
        ScheduleIntegrityError: If any route's timetables are inconsistent.
    """
    # (route_no, [(days, stop_id -> times)])
    interpolated: list[tuple[str, list[tuple[WeekdaySet, dict[int, list[timedelta]]]]]] = []

    for route in routes:
        day_results = []
        for day_timetable in route.day_timetables:
            stop_times: dict[int, list[timedelta]] = {}
            for stop_id, times in interpolate_route_schedule(
                route.route_no, route.path, day_timetable.checkpoint_times
            ):
                stop_times.setdefault(stop_id, times)
            day_results.append((day_timetable.days, stop_times))
        interpolated.append((route.route_no, day_results))
        logger.debug(f"Interpolated route {route.route_no} over {len(route.path)} stops")

    schedule: dict[int, list[RouteStopSchedule]] = {}
    for stop_id in stop_ids:
        route_schedules: list[RouteStopSchedule] = []
        for route_no, day_results in interpolated:
            day_schedules = [
                DaySchedule(days=days, times=stop_times[stop_id])
                for days, stop_times in day_results
                if stop_times.get(stop_id)
            ]
            if day_schedules:
                route_schedules.append(
                    RouteStopSchedule(route_no=route_no, day_schedules=day_schedules)
                )
        schedule[stop_id] = route_schedules

    return schedule
