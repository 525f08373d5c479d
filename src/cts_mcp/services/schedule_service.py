"""Schedule service for choosing today's timetable and windowing it around now."""

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from cts_mcp.data.config import TransitConfig, get_transit_config
from cts_mcp.models.days import Weekday
from cts_mcp.models.schedule import DaySchedule

# The smallest number of minutes from now that a scheduled time can be rendered.
# Schedule data this close to now is unreliable; live estimates cover that range.
SCHEDULE_CUTOFF_MINUTES = 20

ONE_DAY = timedelta(days=1)


def get_current_time(config: TransitConfig | None = None) -> datetime:
    """Get the current time in the transit system's timezone.

    Args:
        config: Optional config override.

    Returns:
        Timezone-aware datetime.
    """
    if config is None:
        config = get_transit_config()
    return datetime.now(ZoneInfo(config.timezone))


def time_of_day(moment: datetime) -> timedelta:
    """Get the time elapsed since midnight of a moment's calendar day."""
    return timedelta(
        hours=moment.hour,
        minutes=moment.minute,
        seconds=moment.second,
        microseconds=moment.microsecond,
    )


def format_clock(moment: datetime) -> str:
    """Format a moment for human display as h:mm AM/PM.

    Args:
        moment: Datetime to format.

    Returns:
        Human-readable time like "8:30 AM" or "12:05 PM".
    """
    hours = moment.hour

    period = "AM"
    display_hour = hours
    if hours == 0:
        display_hour = 12
    elif hours == 12:
        period = "PM"
    elif hours > 12:
        display_hour = hours - 12
        period = "PM"

    return f"{display_hour}:{moment.minute:02d} {period}"


def is_in_effect(day_schedule: DaySchedule, current_time: datetime) -> bool:
    """Return whether a day schedule applies at the given moment.

    The moment is shifted back by the schedule's last time of day (wrapped into a
    single day) before its weekday is checked. A night owl trip arriving at 1:30 AM on
    Sunday therefore still belongs to Saturday's service.

    Args:
        day_schedule: Candidate schedule.
        current_time: The moment to check.

    Returns:
        True if the effective weekday is one of the schedule's days.
    """
    last_time = day_schedule.times[-1]
    normalized_last_time = last_time - ONE_DAY if last_time >= ONE_DAY else last_time

    effective_moment = current_time - normalized_last_time

    return Weekday.from_date(effective_moment) in day_schedule.days


def select_day_schedule(
    day_schedules: list[DaySchedule],
    current_time: datetime,
) -> DaySchedule | None:
    """Get the first day schedule in effect at the given moment, if any."""
    return next((ds for ds in day_schedules if is_in_effect(ds, current_time)), None)


def make_relative_schedule(day_schedule: DaySchedule, current_time: datetime) -> list[int]:
    """Convert a day schedule into minutes from now, dropping the near term.

    Only times strictly later than SCHEDULE_CUTOFF_MINUTES from now are kept.
    When the schedule runs past midnight and now is before its last time on the next
    calendar day, now is moved into the extended (24h+) range so both are comparable.

    Args:
        day_schedule: The schedule in effect.
        current_time: The moment of the request.

    Returns:
        Whole minutes until each remaining scheduled arrival, in schedule order.
    """
    last_time = day_schedule.times[-1]
    now = time_of_day(current_time)
    if last_time >= ONE_DAY and now < last_time - ONE_DAY:
        now += ONE_DAY

    # Truncate to the minute so that whole-minute schedule times convert cleanly
    now -= timedelta(seconds=now.seconds % 60, microseconds=now.microseconds)

    cutoff = now + timedelta(minutes=SCHEDULE_CUTOFF_MINUTES)

    return [(time - now) // timedelta(minutes=1) for time in day_schedule.times if time > cutoff]
