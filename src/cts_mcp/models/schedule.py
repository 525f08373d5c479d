"""Pydantic models for stop schedules and arrival times."""

from datetime import timedelta
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, PlainSerializer, field_validator

from cts_mcp.models.days import WeekdaySet


def parse_schedule_time(value: Any) -> Any:
    """Parse a schedule time string into a timedelta since the start of the service day.

    Schedule times can exceed 24:00 for trips that run past midnight.
    For example, "25:30" means 1:30 AM the next calendar day.

    Args:
        value: Time string in H:MM or H:MM:SS format, or a timedelta.

    Returns:
        A timedelta. Values that are not strings are passed through for pydantic to
        validate.

    Raises:
        ValueError: If the time string is invalid.
    """
    if not isinstance(value, str):
        return value

    parts = value.strip().split(":")
    if len(parts) not in (2, 3):
        raise ValueError(f"Invalid schedule time format: {value}")

    try:
        hours = int(parts[0])
        minutes = int(parts[1])
        seconds = int(parts[2]) if len(parts) == 3 else 0
    except ValueError as e:
        raise ValueError(f"Invalid schedule time format: {value}") from e

    if minutes >= 60 or seconds >= 60 or min(hours, minutes, seconds) < 0:
        raise ValueError(f"Invalid schedule time format: {value}")

    return timedelta(hours=hours, minutes=minutes, seconds=seconds)


def format_schedule_time(value: timedelta) -> str:
    """Format a schedule time as HH:MM:SS (hours can exceed 24)."""
    total_seconds = int(value.total_seconds())
    hours, remaining = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remaining, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


ScheduleTime = Annotated[
    timedelta,
    BeforeValidator(parse_schedule_time),
    PlainSerializer(format_schedule_time, return_type=str, when_used="json"),
]


class DaySchedule(BaseModel):
    """The times a route serves a stop on a particular set of days."""

    model_config = ConfigDict(frozen=True)

    days: WeekdaySet
    times: list[ScheduleTime] = Field(min_length=1)

    @field_validator("times")
    @classmethod
    def _times_non_decreasing(cls, times: list[timedelta]) -> list[timedelta]:
        for earlier, later in zip(times, times[1:]):
            if later < earlier:
                raise ValueError(
                    f"Schedule times must be non-decreasing: "
                    f"{format_schedule_time(later)} follows {format_schedule_time(earlier)}"
                )
        return times


class RouteStopSchedule(BaseModel):
    """Every day schedule of one route at one stop."""

    model_config = ConfigDict(frozen=True)

    route_no: str
    day_schedules: list[DaySchedule]


class ArrivalEntry(BaseModel):
    """A single upcoming arrival relative to the time of the request."""

    model_config = ConfigDict(frozen=True)

    minutes_from_now: int = Field(gt=0, description="Whole minutes until the bus arrives")
    is_estimate: bool = Field(description="True for live estimates, False for scheduled times")
