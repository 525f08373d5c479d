"""Tests for day schedule selection and the arrival window."""

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest
from pydantic import ValidationError

from cts_mcp.data.config import TransitConfig
from cts_mcp.models.days import ALL_DAYS, NIGHT_OWL, WEEKDAYS, WEEKEND
from cts_mcp.models.schedule import DaySchedule, format_schedule_time, parse_schedule_time
from cts_mcp.services.schedule_service import (
    format_clock,
    get_current_time,
    is_in_effect,
    make_relative_schedule,
    select_day_schedule,
)

# 2024-01-07 was a Sunday
SUNDAY = datetime(2024, 1, 7)
MONDAY = datetime(2024, 1, 8)
WEDNESDAY = datetime(2024, 1, 10)
SATURDAY = datetime(2024, 1, 13)


def at(day: datetime, hours: int, minutes: int, seconds: int = 0) -> datetime:
    """A moment on the given day."""
    return day.replace(hour=hours, minute=minutes, second=seconds)


class TestScheduleTimeParsing:
    """Tests for schedule time strings."""

    def test_parse_hours_minutes(self) -> None:
        assert parse_schedule_time("8:05") == timedelta(hours=8, minutes=5)

    def test_parse_with_seconds(self) -> None:
        assert parse_schedule_time("08:05:30") == timedelta(hours=8, minutes=5, seconds=30)

    def test_parse_time_exceeding_24(self) -> None:
        """Times past midnight belong to the previous service day."""
        assert parse_schedule_time("25:30") == timedelta(hours=25, minutes=30)

    def test_parse_invalid_format(self) -> None:
        with pytest.raises(ValueError, match="Invalid schedule time format"):
            parse_schedule_time("invalid")

    def test_parse_invalid_minutes(self) -> None:
        with pytest.raises(ValueError):
            parse_schedule_time("8:75")

    def test_format_time_exceeding_24(self) -> None:
        assert format_schedule_time(timedelta(hours=25, minutes=30)) == "25:30:00"

    def test_day_schedule_from_strings(self) -> None:
        schedule = DaySchedule(days="Thu Fri Sat", times=["23:30", "25:30"])

        assert schedule.days == NIGHT_OWL
        assert schedule.times[-1] == timedelta(hours=25, minutes=30)

    def test_day_schedule_rejects_decreasing_times(self) -> None:
        with pytest.raises(ValidationError, match="non-decreasing"):
            DaySchedule(days=WEEKDAYS, times=["9:00", "8:00"])

    def test_day_schedule_requires_times(self) -> None:
        with pytest.raises(ValidationError):
            DaySchedule(days=WEEKDAYS, times=[])


class TestFormatClock:
    """Tests for format_clock."""

    def test_morning(self) -> None:
        assert format_clock(at(MONDAY, 8, 30)) == "8:30 AM"

    def test_midnight(self) -> None:
        assert format_clock(at(MONDAY, 0, 5)) == "12:05 AM"

    def test_noon(self) -> None:
        assert format_clock(at(MONDAY, 12, 0)) == "12:00 PM"

    def test_afternoon(self) -> None:
        assert format_clock(at(MONDAY, 13, 30)) == "1:30 PM"

    def test_late_evening(self) -> None:
        assert format_clock(at(MONDAY, 23, 59)) == "11:59 PM"


class TestIsInEffect:
    """Tests for is_in_effect."""

    def test_night_owl_after_midnight_belongs_to_saturday(self) -> None:
        """A 25:30 last trip evaluated at Sunday 01:00 is Saturday's service."""
        schedule = DaySchedule(days=NIGHT_OWL, times=["22:00", "25:30"])

        assert is_in_effect(schedule, at(SUNDAY, 1, 0))

    def test_night_owl_does_not_run_into_monday(self) -> None:
        schedule = DaySchedule(days=NIGHT_OWL, times=["22:00", "25:30"])

        assert not is_in_effect(schedule, at(MONDAY, 1, 0))

    def test_night_owl_on_friday_evening(self) -> None:
        schedule = DaySchedule(days=NIGHT_OWL, times=["22:00", "25:30"])

        assert is_in_effect(schedule, at(SATURDAY, 0, 30))
        assert is_in_effect(schedule, at(SATURDAY, 22, 0))

    def test_evening_uses_same_day(self) -> None:
        schedule = DaySchedule(days=WEEKDAYS, times=["7:00", "19:00"])

        assert is_in_effect(schedule, at(WEDNESDAY, 20, 0))
        assert not is_in_effect(schedule, at(SATURDAY, 20, 0))

    def test_shift_applies_to_daytime_schedules(self) -> None:
        """The moment is shifted back by the last time even when it is before midnight."""
        schedule = DaySchedule(days=WEEKEND, times=["7:00", "19:00"])

        # Monday 10:00 minus 19 hours is Sunday 15:00
        assert is_in_effect(schedule, at(MONDAY, 10, 0))

    def test_every_day(self) -> None:
        schedule = DaySchedule(days=ALL_DAYS, times=["7:00", "19:00"])

        for offset in range(7):
            assert is_in_effect(schedule, at(MONDAY, 12, 0) + timedelta(days=offset))


class TestSelectDaySchedule:
    """Tests for select_day_schedule."""

    def test_picks_matching_pattern(self) -> None:
        weekday = DaySchedule(days=WEEKDAYS, times=["7:00", "19:00"])
        weekend = DaySchedule(days=WEEKEND, times=["9:00", "17:00"])

        assert select_day_schedule([weekday, weekend], at(WEDNESDAY, 20, 0)) is weekday
        assert select_day_schedule([weekday, weekend], at(SATURDAY, 20, 0)) is weekend

    def test_first_match_wins(self) -> None:
        first = DaySchedule(days=ALL_DAYS, times=["7:00"])
        second = DaySchedule(days=ALL_DAYS, times=["8:00"])

        assert select_day_schedule([first, second], at(WEDNESDAY, 20, 0)) is first

    def test_no_match(self) -> None:
        weekend = DaySchedule(days=WEEKEND, times=["9:00", "17:00"])

        assert select_day_schedule([weekend], at(WEDNESDAY, 20, 0)) is None

    def test_empty(self) -> None:
        assert select_day_schedule([], at(WEDNESDAY, 20, 0)) is None


class TestMakeRelativeSchedule:
    """Tests for make_relative_schedule."""

    def test_cutoff_is_exclusive(self) -> None:
        """At 08:05 the cutoff is 08:25, which is itself dropped."""
        schedule = DaySchedule(days=ALL_DAYS, times=["8:00", "8:25", "9:00"])

        assert make_relative_schedule(schedule, at(MONDAY, 8, 5)) == [55]

    def test_seconds_are_truncated(self) -> None:
        schedule = DaySchedule(days=ALL_DAYS, times=["8:00", "8:25", "9:00"])

        assert make_relative_schedule(schedule, at(MONDAY, 8, 5, 59)) == [55]

    def test_microseconds_are_truncated(self) -> None:
        schedule = DaySchedule(days=ALL_DAYS, times=["9:00"])
        now = at(MONDAY, 8, 5, 30).replace(microsecond=500_000)

        assert make_relative_schedule(schedule, now) == [55]

    def test_keeps_schedule_order(self) -> None:
        schedule = DaySchedule(days=ALL_DAYS, times=["9:00", "10:00", "10:00", "11:30"])

        assert make_relative_schedule(schedule, at(MONDAY, 8, 0)) == [60, 120, 120, 210]

    def test_after_midnight_moves_now_forward(self) -> None:
        """At 00:10 a schedule ending 25:30 treats now as 24:10."""
        schedule = DaySchedule(days=NIGHT_OWL, times=["23:00", "24:30", "25:30"])

        assert make_relative_schedule(schedule, at(SUNDAY, 0, 10)) == [80]

    def test_before_midnight_keeps_now(self) -> None:
        schedule = DaySchedule(days=NIGHT_OWL, times=["23:00", "24:30", "25:30"])

        assert make_relative_schedule(schedule, at(SATURDAY, 22, 0)) == [60, 150, 210]

    def test_after_last_trip(self) -> None:
        schedule = DaySchedule(days=ALL_DAYS, times=["8:00", "9:00"])

        assert make_relative_schedule(schedule, at(MONDAY, 21, 0)) == []

    def test_all_values_positive(self) -> None:
        schedule = DaySchedule(days=ALL_DAYS, times=["6:00", "8:21", "8:30", "22:00"])

        result = make_relative_schedule(schedule, at(MONDAY, 8, 0))

        assert result == [21, 30, 840]
        assert all(minutes > 20 for minutes in result)


class TestGetCurrentTime:
    """Tests for get_current_time."""

    def test_uses_configured_timezone(self) -> None:
        config = TransitConfig(CTS_TIMEZONE="America/Los_Angeles")

        now = get_current_time(config)

        assert now.tzinfo == ZoneInfo("America/Los_Angeles")
