"""Pydantic models for the route topology document consumed by the refresh job.

The document is produced upstream from the provider's route patterns and published
timetables. Only checkpoint stops carry timetables; intermediate stops are interpolated.
"""

from pydantic import BaseModel, Field

from cts_mcp.models.days import WeekdaySet
from cts_mcp.models.schedule import ScheduleTime
from cts_mcp.models.static import BusRoute, BusStop


class RoutePathStop(BaseModel):
    """A stop on a route's path."""

    stop_id: int = Field(gt=0)
    is_checkpoint: bool = Field(
        default=False, description="True if the stop has an authoritative timetable"
    )


class RouteDayTimetable(BaseModel):
    """Checkpoint timetables for one route on one set of days.

    checkpoint_times holds one timetable per checkpoint on the path, in path order,
    followed by the timetable of the final stop. Each timetable has one entry per trip.
    """

    days: WeekdaySet
    checkpoint_times: list[list[ScheduleTime]]


class RouteTopology(BaseModel):
    """A route's path and its checkpoint timetables."""

    route_no: str
    path: list[RoutePathStop]
    day_timetables: list[RouteDayTimetable] = Field(default_factory=list)


class TransitTopology(BaseModel):
    """The full upstream document: static data plus route topology."""

    stops: list[BusStop]
    routes: list[BusRoute]
    route_topologies: list[RouteTopology] = Field(default_factory=list)
    platform_tags: dict[int, int] = Field(
        default_factory=dict, description="Stop ID -> provider platform tag"
    )
