#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Merging one-off tasks and recurring instances into the single, ordered
occurrence set consumed by the timetable and the statistics."""

import datetime
import logging
from collections import defaultdict

from dayledger.exceptions import InvalidRangeError
from dayledger.models import Occurrence, Override, Standalone, TaskTemplate
from dayledger.overrides import apply_overrides
from dayledger.recurrence import expand_instances

logger = logging.getLogger(__name__)


def _sort_key(occurrence: Occurrence) -> tuple:
    return (
        occurrence.occurrence_date,
        occurrence.start_minutes,
        occurrence.is_instance,
        occurrence.id,
    )


def sort_occurrences(occurrences: list[Occurrence]) -> list[Occurrence]:
    """Order by date, then start time. One-off tasks come before recurring
    instances starting at the same time and the id breaks any remaining tie,
    so the order does not depend on the order of the input."""
    return sorted(occurrences, key=_sort_key)


def standalone_occurrences(
    templates: list[TaskTemplate],
    window_start: datetime.date,
    window_end: datetime.date,
) -> list[Occurrence]:
    """One occurrence for each schedulable one-off task dated in the window."""
    occurrences = []
    for template in templates:
        if template.is_recurring:
            logger.warning(
                f"Task {template.id} is recurring and cannot be scheduled as a one-off task"
            )
            continue
        if not template.participates_in_schedule or template.start_date is None:
            continue
        if not window_start <= template.start_date <= window_end:
            continue
        occurrences.append(Standalone(template=template).resolve())
    return occurrences


def _deduplicate(occurrences: list[Occurrence]) -> list[Occurrence]:
    seen = set()
    unique = []
    for occurrence in occurrences:
        if occurrence.id in seen:
            logger.warning(f"Dropping duplicate occurrence {occurrence.id}")
            continue
        seen.add(occurrence.id)
        unique.append(occurrence)
    return unique


def build_occurrence_set(
    non_recurring: list[TaskTemplate],
    recurring: list[TaskTemplate],
    overrides: list[Override],
    window_start: datetime.date,
    window_end: datetime.date,
) -> list[Occurrence]:
    """Build the sorted, deduplicated, override-applied occurrences of the
    inclusive window `[window_start, window_end]`.

    Parameters
    ----------
    non_recurring
        One-off tasks. Only schedulable tasks dated inside the window are kept.
    recurring
        Recurring tasks, expanded over the window.
    overrides
        Per-instance edits of the recurring tasks. Overrides which match no
        instance are logged and ignored.

    Raises
    ------
    InvalidRangeError if the window is inverted or a resolved occurrence
    does not end after it starts.
    UnresolvedOverrideConflict if two overrides edit the same instance.
    """
    if window_end < window_start:
        raise InvalidRangeError(
            f"Window ends ({window_end}) before it starts ({window_start})"
        )
    standalone = standalone_occurrences(non_recurring, window_start, window_end)
    instances = apply_overrides(
        expand_instances(recurring, window_start, window_end), overrides
    )
    combined = _deduplicate(standalone + [i.resolve() for i in instances])
    logger.debug(
        f"Built {len(combined)} occurrences ({len(standalone)} one-off) "
        f"between {window_start} and {window_end}"
    )
    return sort_occurrences(combined)


def occurrences_on(
    date: datetime.date, occurrences: list[Occurrence]
) -> list[Occurrence]:
    return [o for o in occurrences if o.occurrence_date == date]


def group_by_date(
    occurrences: list[Occurrence],
) -> dict[datetime.date, list[Occurrence]]:
    """Group occurrences by calendar date, dates in ascending order."""
    groups = defaultdict(list)
    for occurrence in occurrences:
        groups[occurrence.occurrence_date].append(occurrence)
    return {date: groups[date] for date in sorted(groups)}
