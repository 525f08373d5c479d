"""Rendering of arrival lists into short human-readable summaries."""

from datetime import datetime, timedelta

from cts_mcp.models.schedule import ArrivalEntry
from cts_mcp.services.schedule_service import format_clock

# The greatest number of minutes from now that an estimate can have.
ESTIMATES_MAX_ADVANCE_MINUTES = 30

NO_ARRIVALS = "No arrivals!"

# (min gap, max gap, label), checked in order
CADENCES = [
    (110, 130, "Every 2 hours until"),
    (50, 70, "Hourly until"),
    (20, 40, "Every 30 minutes until"),
]


def arrival_clock_time(arrival: ArrivalEntry, current_time: datetime) -> str:
    """Format the absolute time of an arrival."""
    return format_clock(current_time + timedelta(minutes=arrival.minutes_from_now))


def describe_arrival(arrival: ArrivalEntry, current_time: datetime, is_first: bool) -> str:
    """Describe a single arrival.

    Args:
        arrival: The arrival to describe.
        current_time: The moment of the request.
        is_first: Whether this is the first description in the summary.

    Returns:
        "1 minute", "N minutes", "Over 30 minutes" or a clock time like "1:30 PM".

    Raises:
        ValueError: If the arrival is not in the future.
    """
    minutes = arrival.minutes_from_now
    if minutes <= 0:
        raise ValueError(f"Arrival must be in the future, got {minutes} minutes from now")

    if minutes == 1:
        return "1 minute"
    if arrival.is_estimate and 2 <= minutes <= ESTIMATES_MAX_ADVANCE_MINUTES:
        return f"{minutes} minutes"
    if not arrival.is_estimate and minutes <= ESTIMATES_MAX_ADVANCE_MINUTES:
        return "Over 30 minutes" if is_first else "over 30 minutes"
    return arrival_clock_time(arrival, current_time)


def to_estimate_summary(arrivals: list[ArrivalEntry], current_time: datetime) -> str:
    """Summarize the next one or two arrivals, e.g. "5 minutes, then 1:30 PM"."""
    if not arrivals:
        return NO_ARRIVALS

    summary = describe_arrival(arrivals[0], current_time, is_first=True)
    if len(arrivals) > 1:
        summary += ", then " + describe_arrival(arrivals[1], current_time, is_first=False)
    return summary


def to_schedule_summary(arrivals: list[ArrivalEntry], current_time: datetime) -> str:
    """Describe the rest of the day, e.g. "Hourly until 9:05 PM".

    The gap before the second arrival is ignored, since the first arrival is often a
    live estimate that doesn't follow the schedule's cadence.

    Returns:
        Empty for two arrivals or fewer, else a cadence or "Last arrival at ...".
    """
    if len(arrivals) <= 2:
        return ""

    last_time = arrival_clock_time(arrivals[-1], current_time)

    if len(arrivals) > 3:
        gaps = [
            later.minutes_from_now - earlier.minutes_from_now
            for earlier, later in zip(arrivals[1:], arrivals[2:])
        ]
        for low, high, label in CADENCES:
            if all(low <= gap <= high for gap in gaps):
                return f"{label} {last_time}"

    return f"Last arrival at {last_time}"
