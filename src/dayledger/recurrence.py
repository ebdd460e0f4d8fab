#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Weekday recurrence: deciding whether a recurring task occurs on a date and
expanding recurring tasks into their instances over a window."""

import datetime
import logging
from typing import NamedTuple

from dayledger.aliases import TemplateId
from dayledger.exceptions import InvalidRangeError
from dayledger.models import Occurrence, RecurringInstance, TaskTemplate
from dayledger.time_utils import Weekday, iter_dates, weekday_of

logger = logging.getLogger(__name__)


def occurs_on(template: TaskTemplate, date: datetime.date) -> bool:
    """Check whether a recurring task has an instance on `date`.

    One-off tasks always return `False`: they are matched on their own date
    when the occurrence set is built.
    """
    if not template.is_recurring or not template.recurring_days:
        return False
    if template.start_date is not None and date < template.start_date:
        return False
    if template.end_date is not None and date > template.end_date:
        return False
    return weekday_of(date) in template.recurring_days


def expand_template(
    template: TaskTemplate,
    window_start: datetime.date,
    window_end: datetime.date,
) -> list[RecurringInstance]:
    """Return the instances of `template` in the inclusive window, in date
    order. The template itself is not modified."""
    return [
        RecurringInstance(template=template, instance_date=date)
        for date in iter_dates(window_start, window_end)
        if occurs_on(template, date)
    ]


def expand_instances(
    templates: list[TaskTemplate],
    window_start: datetime.date,
    window_end: datetime.date,
) -> list[RecurringInstance]:
    """Expand every recurring template over `[window_start, window_end]`.

    Notes
    -----
    1. Templates which cannot be placed on the calendar (not schedulable,
    deleted, missing times or weekdays) yield no instances.
    2. Expansion is idempotent: the same templates and window always produce
    the same instances, with the same ids, in the same order.
    """
    if window_end < window_start:
        raise InvalidRangeError(
            f"Window ends ({window_end}) before it starts ({window_start})"
        )
    instances = []
    for template in templates:
        if not template.is_recurring:
            logger.warning(
                f"Task {template.id} is not recurring and will not be expanded"
            )
            continue
        if not template.participates_in_schedule:
            logger.debug(f"Task {template.id} is not schedulable, skipping")
            continue
        instances.extend(expand_template(template, window_start, window_end))
    logger.debug(
        f"Expanded {len(templates)} recurring tasks into {len(instances)} "
        f"instances between {window_start} and {window_end}"
    )
    return instances


class RecurringTaskStats(NamedTuple):
    """Completion statistics of a recurring task over a date range.

    Parameters
    ----------
    total_possible_occurrences
        Number of dates in the range the task recurs on.
    completed_occurrences
        Number of those instances marked as completed (after overrides).
    completion_rate
        `completed_occurrences / total_possible_occurrences`, 0 when the task
        never occurs in the range.
    average_per_week
        Completed instances per seven days of the range.
    """

    template_id: TemplateId
    title: str
    recurring_days: list[Weekday]
    start: datetime.date
    end: datetime.date
    total_possible_occurrences: int
    completed_occurrences: int
    completion_rate: float
    average_per_week: float


def recurring_task_stats(
    template: TaskTemplate,
    occurrences: list[Occurrence],
    start: datetime.date,
    end: datetime.date,
) -> RecurringTaskStats:
    """Summarise how often a recurring task was completed in `[start, end]`.

    Parameters
    ----------
    occurrences
        Resolved occurrences, used to read the completion state of each
        instance. Occurrences of other tasks or outside the range are ignored.
    """
    possible_dates = {d for d in iter_dates(start, end) if occurs_on(template, d)}
    completed = sum(
        1
        for o in occurrences
        if o.source_template_id == template.id
        and o.occurrence_date in possible_dates
        and o.completed
    )
    total = len(possible_dates)
    weeks = ((end - start).days + 1) / 7
    return RecurringTaskStats(
        template_id=template.id,
        title=template.title,
        recurring_days=sorted(template.recurring_days, key=lambda d: d.ordinal),
        start=start,
        end=end,
        total_possible_occurrences=total,
        completed_occurrences=completed,
        completion_rate=completed / total if total else 0.0,
        average_per_week=completed / weeks,
    )
