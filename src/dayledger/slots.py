#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Timetable queries: which occurrences fall in a time slot of a day column
and which occurrences of a day overlap each other."""

import datetime
from collections.abc import Sequence
from typing import NamedTuple

from dayledger.aliases import DateStr, Minutes, OccurrenceId, TimeStr
from dayledger.constants import DEFAULT_SLOT_WIDTH_MINUTES
from dayledger.models import Occurrence
from dayledger.time_utils import TimeInterval, overlaps, parse_date, to_minutes

WeekDates = Sequence[datetime.date | DateStr]


def _slot_minutes(slot_start: TimeStr | Minutes) -> Minutes:
    if isinstance(slot_start, int):
        return slot_start
    return to_minutes(slot_start)


def _day_date(day_index: int, week_dates: WeekDates) -> datetime.date:
    return parse_date(week_dates[day_index])


def _slot_interval(slot_start: TimeStr | Minutes, width: int) -> TimeInterval:
    start = _slot_minutes(slot_start)
    return TimeInterval(start=start, end=start + width)


def occurrences_in_slot(
    day_index: int,
    slot_start: TimeStr | Minutes,
    week_dates: WeekDates,
    occurrences: list[Occurrence],
    slot_width_minutes: int = DEFAULT_SLOT_WIDTH_MINUTES,
) -> list[Occurrence]:
    """Return the occurrences dated `week_dates[day_index]` which overlap the
    slot `[slot_start, slot_start + slot_width_minutes)`.

    Parameters
    ----------
    slot_start
        A `HH:MM` time or minutes since midnight.
    week_dates
        The dates of the displayed columns, as dates or `YYYY-MM-DD` strings.
    """
    date = _day_date(day_index, week_dates)
    slot = _slot_interval(slot_start, slot_width_minutes)
    return [
        o
        for o in occurrences
        if o.occurrence_date == date and overlaps(o.interval, slot)
    ]


def is_first_slot_for_occurrence(
    occurrence: Occurrence,
    slot_start: TimeStr | Minutes,
    slot_width_minutes: int = DEFAULT_SLOT_WIDTH_MINUTES,
) -> bool:
    """Whether the occurrence starts inside this slot. Renderers draw an
    occurrence only in its first slot even when it spans several."""
    return _slot_interval(slot_start, slot_width_minutes).contains(
        occurrence.start_minutes
    )


def detect_conflicts(
    day_index: int, week_dates: WeekDates, occurrences: list[Occurrence]
) -> set[OccurrenceId]:
    """Return the ids of the occurrences on `week_dates[day_index]` which
    overlap at least one other occurrence of that day."""
    date = _day_date(day_index, week_dates)
    day_occurrences = [o for o in occurrences if o.occurrence_date == date]
    conflicts = set()
    for i, first in enumerate(day_occurrences):
        for second in day_occurrences[i + 1 :]:
            if overlaps(first.interval, second.interval):
                conflicts.add(first.id)
                conflicts.add(second.id)
    return conflicts


class SlotCell(NamedTuple):
    """The content of one time slot of a day column.

    Parameters
    ----------
    occurrences
        All occurrences overlapping the slot.
    starting
        The occurrences whose first slot this is, ie the ones to draw here.
    has_conflict
        Set if more than one occurrence overlaps the slot.
    """

    slot: TimeStr
    occurrences: list[Occurrence]
    starting: list[Occurrence]
    has_conflict: bool


def build_day_column(
    day_index: int,
    week_dates: WeekDates,
    occurrences: list[Occurrence],
    time_slots: list[TimeStr],
    slot_width_minutes: int = DEFAULT_SLOT_WIDTH_MINUTES,
) -> list[SlotCell]:
    """Describe each of `time_slots` in the column of `week_dates[day_index]`.

    Slots are usually narrower apart than they are wide, so an occurrence can
    start inside two consecutive slots. It is only listed as starting in the
    earlier one.
    """
    column = []
    drawn = set()
    for slot in time_slots:
        in_slot = occurrences_in_slot(
            day_index, slot, week_dates, occurrences, slot_width_minutes
        )
        starting = [
            o
            for o in in_slot
            if o.id not in drawn
            and is_first_slot_for_occurrence(o, slot, slot_width_minutes)
        ]
        drawn.update(o.id for o in starting)
        column.append(
            SlotCell(
                slot=slot,
                occurrences=in_slot,
                starting=starting,
                has_conflict=len(in_slot) > 1,
            )
        )
    return column
