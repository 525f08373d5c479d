"""Day-of-week sets used to describe when a schedule is in effect."""

import re
from datetime import date
from enum import Enum
from typing import Any

from pydantic import ConfigDict, RootModel, field_serializer, model_validator


class Weekday(str, Enum):
    """A single day of the week, using the abbreviations found in timetables."""

    SUNDAY = "Sun"
    MONDAY = "Mon"
    TUESDAY = "Tue"
    WEDNESDAY = "Wed"
    THURSDAY = "Thu"
    FRIDAY = "Fri"
    SATURDAY = "Sat"

    @classmethod
    def from_date(cls, d: date) -> "Weekday":
        """Get the weekday of a calendar date (or datetime)."""
        return _PYTHON_WEEKDAYS[d.weekday()]


# Indexed by date.weekday() (0=Monday, 6=Sunday)
_PYTHON_WEEKDAYS = [
    Weekday.MONDAY,
    Weekday.TUESDAY,
    Weekday.WEDNESDAY,
    Weekday.THURSDAY,
    Weekday.FRIDAY,
    Weekday.SATURDAY,
    Weekday.SUNDAY,
]

# Sunday-first display order
_ORDER = {day: index for index, day in enumerate(Weekday)}

_DAY_PATTERN = re.compile("|".join(day.value for day in Weekday))


class WeekdaySet(RootModel[frozenset[Weekday]]):
    """Immutable set of weekdays during which a schedule applies.

    Sets are combined with ``|`` and ``&`` and tested with ``in``. Validates from a
    list of day abbreviations or from free text, which is scanned for day tokens
    (``"Thu Fri Sat"``). Ranges such as ``"Mon-Fri"`` only yield their endpoints.
    """

    model_config = ConfigDict(frozen=True)

    root: frozenset[Weekday] = frozenset()

    @model_validator(mode="before")
    @classmethod
    def _coerce(cls, value: Any) -> Any:
        if isinstance(value, str):
            return frozenset(Weekday(token) for token in _DAY_PATTERN.findall(value))
        return value

    @field_serializer("root")
    def _serialize(self, days: frozenset[Weekday]) -> list[str]:
        return [day.value for day in sorted(days, key=_ORDER.__getitem__)]

    @classmethod
    def of(cls, *days: Weekday) -> "WeekdaySet":
        """Build a set from individual weekdays."""
        return cls(frozenset(days))

    @classmethod
    def parse(cls, text: str) -> "WeekdaySet":
        """Collect every day abbreviation (Mon, Tue, ...) found in text."""
        return cls.model_validate(text)

    def __contains__(self, day: object) -> bool:
        return day in self.root

    def __iter__(self):  # type: ignore[override]
        return iter(sorted(self.root, key=_ORDER.__getitem__))

    def __len__(self) -> int:
        return len(self.root)

    def __or__(self, other: "WeekdaySet") -> "WeekdaySet":
        return WeekdaySet(self.root | other.root)

    def __and__(self, other: "WeekdaySet") -> "WeekdaySet":
        return WeekdaySet(self.root & other.root)

    def isdisjoint(self, other: "WeekdaySet") -> bool:
        """Return True if the two sets share no day."""
        return self.root.isdisjoint(other.root)

    def __str__(self) -> str:
        return " ".join(day.value for day in self)


NO_DAYS = WeekdaySet()
WEEKDAYS = WeekdaySet.of(
    Weekday.MONDAY, Weekday.TUESDAY, Weekday.WEDNESDAY, Weekday.THURSDAY, Weekday.FRIDAY
)
WEEKEND = WeekdaySet.of(Weekday.SATURDAY, Weekday.SUNDAY)
NIGHT_OWL = WeekdaySet.of(Weekday.THURSDAY, Weekday.FRIDAY, Weekday.SATURDAY)
ALL_DAYS = WEEKDAYS | WEEKEND
