#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Wall-clock and calendar helpers shared by the whole engine: parsing of the
boundary `HH:MM`/`YYYY-MM-DD` strings, minute intervals, weekday indexing and
time slot generation."""

import datetime
import re
from collections.abc import Iterator
from enum import StrEnum
from typing import NamedTuple, Self

from dateutil import rrule
from pydantic import BaseModel, field_validator

from dayledger.aliases import DateStr, Minutes, TimeStr
from dayledger.constants import DEFAULT_SLOT_STEP_MINUTES, MINUTES_PER_DAY
from dayledger.exceptions import (
    InvalidRangeError,
    MalformedDateError,
    MalformedTimeError,
)

_TIME_PATTERN = re.compile(r"^(\d{2}):(\d{2})(?::(\d{2}))?$")
_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_SLOT_LABEL_PATTERN = re.compile(r"^(\d{1,2}):(\d{2}) (AM|PM)$")


def to_minutes(time: TimeStr) -> Minutes:
    """Convert a `HH:MM` time of the day to minutes since midnight.

    Stores commonly return times with a seconds component (`HH:MM:SS`); the
    seconds are accepted and ignored.

    Raises
    ------
    MalformedTimeError if `time` is not a valid 24-hour time.
    """
    if not isinstance(time, str):
        raise MalformedTimeError(f"Expected a HH:MM string, got {time!r}")
    match = _TIME_PATTERN.match(time.strip())
    if match is None:
        raise MalformedTimeError(f"Cannot parse time {time!r}, expected HH:MM")
    hours, minutes = int(match.group(1)), int(match.group(2))
    seconds = int(match.group(3) or 0)
    if hours > 23 or minutes > 59 or seconds > 59:
        raise MalformedTimeError(f"Time {time!r} is out of range")
    return hours * 60 + minutes


def from_minutes(minutes: Minutes) -> TimeStr:
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise MalformedTimeError(f"{minutes} minutes is not a time of the day")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def normalise_time(time: TimeStr) -> TimeStr:
    """Return the canonical `HH:MM` form of `time`."""
    return from_minutes(to_minutes(time))


def parse_date(value: DateStr | datetime.date) -> datetime.date:
    """Parse a `YYYY-MM-DD` string. `datetime.datetime` values are truncated
    to their date and `datetime.date` values are returned unchanged.

    Raises
    ------
    MalformedDateError if `value` cannot be parsed.
    """
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    if not isinstance(value, str) or not _DATE_PATTERN.match(value.strip()):
        raise MalformedDateError(f"Cannot parse date {value!r}, expected YYYY-MM-DD")
    try:
        return datetime.date.fromisoformat(value.strip())
    except ValueError as exc:
        raise MalformedDateError(f"Date {value!r} does not exist") from exc


def format_date(date: datetime.date) -> DateStr:
    return date.isoformat()


class TimeInterval(NamedTuple):
    """A half-open `[start, end)` span of the day, in minutes since midnight."""

    start: Minutes
    end: Minutes

    @classmethod
    def from_times(cls, start: TimeStr, end: TimeStr) -> Self:
        """Build an interval from two `HH:MM` strings.

        Raises
        ------
        InvalidRangeError if `end` is not after `start`. Intervals crossing
        midnight are not supported.
        """
        start_minutes, end_minutes = to_minutes(start), to_minutes(end)
        if end_minutes <= start_minutes:
            raise InvalidRangeError(
                f"Interval ends at {end} which is not after its start {start}"
            )
        return cls(start=start_minutes, end=end_minutes)

    @property
    def duration(self) -> Minutes:
        return self.end - self.start

    def overlaps(self, other: Self) -> bool:
        return overlaps(self, other)

    def contains(self, minute: Minutes) -> bool:
        return self.start <= minute < self.end


def overlaps(interval_1: TimeInterval, interval_2: TimeInterval) -> bool:
    """Check whether two intervals share at least one minute. An interval
    ending exactly when the other starts does not overlap it."""
    return interval_1.start < interval_2.end and interval_2.start < interval_1.end


class Weekday(StrEnum):
    """Days of the week, as serialised by the task store. The ordinal used
    everywhere in the engine is `WEEKDAY_ORDER.index(day)` (sunday is 0)."""

    sunday = "sunday"
    monday = "monday"
    tuesday = "tuesday"
    wednesday = "wednesday"
    thursday = "thursday"
    friday = "friday"
    saturday = "saturday"

    @property
    def ordinal(self) -> int:
        return WEEKDAY_ORDER.index(self)


WEEKDAY_ORDER = tuple(Weekday)


def weekday_of(date: datetime.date) -> Weekday:
    # isoweekday is 1 for Monday ... 7 for Sunday
    return WEEKDAY_ORDER[date.isoweekday() % 7]


def parse_weekday(value: Weekday | str | int) -> Weekday:
    """Resolve a weekday name (case insensitive) or a sunday-based ordinal."""
    if isinstance(value, Weekday):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        if not 0 <= value < 7:
            raise ValueError(f"Weekday ordinal must be in [0, 6], got {value}")
        return WEEKDAY_ORDER[value]
    if isinstance(value, str):
        try:
            return Weekday(value.strip().lower())
        except ValueError:
            raise ValueError(f"Unknown weekday {value!r}")
    raise ValueError(f"Cannot interpret {value!r} as a weekday")


def iter_dates(
    start: datetime.date, end: datetime.date
) -> Iterator[datetime.date]:
    """Yield every calendar date in `[start, end]`.

    Raises
    ------
    InvalidRangeError if `end` is before `start`.
    """
    if end < start:
        raise InvalidRangeError(f"Date range ends ({end}) before it starts ({start})")
    rule = rrule.rrule(
        freq=rrule.DAILY,
        dtstart=datetime.datetime.combine(start, datetime.time()),
        until=datetime.datetime.combine(end, datetime.time()),
    )
    return (occurrence.date() for occurrence in rule)


def week_key(date: datetime.date) -> datetime.date:
    """The Monday of the week `date` falls in."""
    return date - datetime.timedelta(days=date.weekday())


def month_key(date: datetime.date) -> str:
    return f"{date.year:04d}-{date.month:02d}"


def week_dates(any_day: datetime.date) -> list[datetime.date]:
    """The seven dates of the Monday-first week containing `any_day`."""
    monday = week_key(any_day)
    return [monday + datetime.timedelta(days=i) for i in range(7)]


def generate_time_slots(
    step_minutes: int = DEFAULT_SLOT_STEP_MINUTES,
) -> list[TimeStr]:
    """Return the start of every slot of the day in `HH:MM` format. The
    default 15 minute step yields 96 slots."""
    if step_minutes <= 0 or MINUTES_PER_DAY % step_minutes:
        raise ValueError(f"Slot step must divide a day evenly, got {step_minutes}")
    return [from_minutes(m) for m in range(0, MINUTES_PER_DAY, step_minutes)]


def slot_label(time: TimeStr) -> str:
    """Format a `HH:MM` time as a 12-hour label such as `7:15 AM`."""
    minutes = to_minutes(time)
    hour, minute = divmod(minutes, 60)
    period = "AM" if hour < 12 else "PM"
    display_hour = hour % 12 or 12
    return f"{display_hour}:{minute:02d} {period}"


def label_to_time(label: str) -> TimeStr:
    """Inverse of `slot_label`."""
    match = _SLOT_LABEL_PATTERN.match(label.strip())
    if match is None:
        raise MalformedTimeError(f"Cannot parse slot label {label!r}")
    hour, minute, period = int(match.group(1)), int(match.group(2)), match.group(3)
    if not 1 <= hour <= 12 or minute > 59:
        raise MalformedTimeError(f"Slot label {label!r} is out of range")
    if period == "AM" and hour == 12:
        hour = 0
    elif period == "PM" and hour != 12:
        hour += 12
    return f"{hour:02d}:{minute:02d}"


class HiddenRange(BaseModel):
    """A user preference hiding part of the day from the timetable. The range
    may cross midnight (eg 22:00 to 06:00)."""

    start: TimeStr
    end: TimeStr
    enabled: bool = True

    @field_validator("start", "end", mode="before")
    @classmethod
    def _normalise(cls, value: TimeStr) -> TimeStr:
        return normalise_time(value)

    def hides(self, minute: Minutes) -> bool:
        start, end = to_minutes(self.start), to_minutes(self.end)
        if start > end:
            return minute >= start or minute < end
        return start <= minute < end


def filter_hidden_time_slots(
    time_slots: list[TimeStr], hidden_ranges: list[HiddenRange] | None
) -> list[TimeStr]:
    """Drop the slots that start inside any enabled hidden range."""
    enabled = [r for r in hidden_ranges or [] if r.enabled]
    if not enabled:
        return list(time_slots)
    return [
        slot
        for slot in time_slots
        if not any(r.hides(to_minutes(slot)) for r in enabled)
    ]
