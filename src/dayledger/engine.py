#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import datetime
import logging
from typing import Literal, NamedTuple

from dayledger import aggregation, categories, slots
from dayledger.aliases import DateStr, Minutes, OccurrenceId, TimeStr, UserId
from dayledger.constants import (
    DARK_PALETTE,
    DEFAULT_SLOT_STEP_MINUTES,
    DEFAULT_SLOT_WIDTH_MINUTES,
    LIGHT_PALETTE,
)
from dayledger.exceptions import InvalidRangeError
from dayledger.models import Occurrence
from dayledger.occurrences import build_occurrence_set
from dayledger.recurrence import RecurringTaskStats, recurring_task_stats
from dayledger.store import TaskSource
from dayledger.time_utils import (
    HiddenRange,
    filter_hidden_time_slots,
    format_date,
    generate_time_slots,
    iter_dates,
    parse_date,
)

logger = logging.getLogger(__name__)

Theme = Literal["light", "dark"]


class EngineSettings(NamedTuple):
    """Engine settings.

    Parameters
    ----------
    slot_width_minutes
        Width of a timetable slot. An occurrence is shown in every slot it
        overlaps.
    slot_step_minutes
        Distance between the starts of consecutive timetable slots.
    palette
        Colours assigned to the categories, in order.
    hidden_ranges
        Times of the day left out of the timetable.
    """

    slot_width_minutes: int
    slot_step_minutes: int
    palette: tuple[str, ...]
    hidden_ranges: tuple[HiddenRange, ...] = ()


def get_engine_settings(theme: Theme = "light") -> EngineSettings:
    """Getter for the default engine settings of a colour theme."""
    if theme not in {"light", "dark"}:
        raise ValueError(f"Unknown theme {theme}, expected 'light' or 'dark'.")
    return EngineSettings(
        slot_width_minutes=DEFAULT_SLOT_WIDTH_MINUTES,
        slot_step_minutes=DEFAULT_SLOT_STEP_MINUTES,
        palette=LIGHT_PALETTE if theme == "light" else DARK_PALETTE,
    )


class ScheduleEngine:
    """Builds the occurrences of a user from the task storage and answers the
    timetable and reporting queries on them.

    The engine keeps no state between calls: each call fetches its own
    records from `source`, so concurrent calls for different users or
    windows do not interfere.
    """

    def __init__(self, source: TaskSource, settings: EngineSettings | None = None):
        self.source = source
        self.settings = settings or get_engine_settings()

    def get_occurrences_for_range(
        self,
        user_id: UserId,
        start_date: DateStr | datetime.date,
        end_date: DateStr | datetime.date,
    ) -> list[Occurrence]:
        """Return the sorted, deduplicated, override-applied occurrences of
        `user_id` between `start_date` and `end_date` inclusive.

        Raises
        ------
        MalformedDateError if a date cannot be parsed.
        InvalidRangeError if `end_date` is before `start_date`.
        """
        start, end = parse_date(start_date), parse_date(end_date)
        if end < start:
            raise InvalidRangeError(f"Window ends ({end}) before it starts ({start})")
        non_recurring = self.source.list_non_recurring_schedulable(user_id, start, end)
        recurring = self.source.list_recurring_schedulable(user_id)
        overrides = self.source.list_overrides(
            user_id, [format_date(date) for date in iter_dates(start, end)]
        )
        logger.debug(
            f"Fetched {len(non_recurring)} one-off tasks, {len(recurring)} recurring "
            f"tasks and {len(overrides)} overrides for user {user_id}"
        )
        return build_occurrence_set(non_recurring, recurring, overrides, start, end)

    def occurrences_in_slot(
        self,
        day_index: int,
        time_slot: TimeStr | Minutes,
        week_dates: slots.WeekDates,
        occurrences: list[Occurrence],
    ) -> list[Occurrence]:
        return slots.occurrences_in_slot(
            day_index,
            time_slot,
            week_dates,
            occurrences,
            slot_width_minutes=self.settings.slot_width_minutes,
        )

    def daily_non_overlapping_hours(self, day_occurrences: list[Occurrence]) -> float:
        return aggregation.daily_non_overlapping_hours(day_occurrences)

    def daily_session_count(self, day_occurrences: list[Occurrence]) -> int:
        return aggregation.daily_session_count(day_occurrences)

    def detect_conflicts(
        self,
        day_index: int,
        week_dates: slots.WeekDates,
        occurrences: list[Occurrence],
    ) -> set[OccurrenceId]:
        return slots.detect_conflicts(day_index, week_dates, occurrences)

    def canonicalize_categories(
        self, occurrences: list[Occurrence]
    ) -> list[categories.CategorySlice]:
        return categories.canonicalize_categories(
            occurrences, palette=self.settings.palette
        )

    def time_slots(self) -> list[TimeStr]:
        """The start times of the visible timetable slots."""
        return filter_hidden_time_slots(
            generate_time_slots(self.settings.slot_step_minutes),
            list(self.settings.hidden_ranges),
        )

    def day_column(
        self,
        day_index: int,
        week_dates: slots.WeekDates,
        occurrences: list[Occurrence],
    ) -> list[slots.SlotCell]:
        return slots.build_day_column(
            day_index,
            week_dates,
            occurrences,
            self.time_slots(),
            slot_width_minutes=self.settings.slot_width_minutes,
        )

    def recurring_task_stats(
        self,
        user_id: UserId,
        start_date: DateStr | datetime.date,
        end_date: DateStr | datetime.date,
    ) -> list[RecurringTaskStats]:
        """Completion statistics of each recurring task of the user over the
        range, overrides included."""
        start, end = parse_date(start_date), parse_date(end_date)
        occurrences = self.get_occurrences_for_range(user_id, start, end)
        return [
            recurring_task_stats(template, occurrences, start, end)
            for template in self.source.list_recurring_schedulable(user_id)
        ]
