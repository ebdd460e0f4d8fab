#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Occupied time aggregation.

Occurrences of the same day may overlap (double booking), so occupied time is
the length of the union of their intervals rather than the sum of their
durations. Each calendar day is aggregated on its own; weekly and monthly
figures are sums of daily figures.
"""

import datetime
import logging
from typing import Literal, NamedTuple

import polars as pl

from dayledger.models import Occurrence
from dayledger.occurrences import group_by_date
from dayledger.time_utils import TimeInterval, iter_dates

logger = logging.getLogger(__name__)

ViewMode = Literal["day", "week", "month"]


def merge_intervals(intervals: list[TimeInterval]) -> list[TimeInterval]:
    """Merge overlapping intervals into disjoint blocks, in start order.
    Intervals that only touch are kept as separate blocks."""
    blocks: list[TimeInterval] = []
    for interval in sorted(intervals):
        if blocks and interval.start < blocks[-1].end:
            if interval.end > blocks[-1].end:
                blocks[-1] = TimeInterval(blocks[-1].start, interval.end)
            continue
        blocks.append(interval)
    return blocks


def _sweep(intervals: list[TimeInterval]) -> tuple[int, int]:
    """Return the covered minutes and the number of separate blocks."""
    covered_until = 0
    covered = 0
    sessions = 0
    for interval in sorted(intervals, key=lambda i: i.start):
        if interval.start >= covered_until:
            covered += interval.duration
            covered_until = interval.end
            sessions += 1
        elif interval.end > covered_until:
            covered += interval.end - covered_until
            covered_until = interval.end
    return covered, sessions


def daily_non_overlapping_hours(day_occurrences: list[Occurrence]) -> float:
    """Hours of the day covered by at least one occurrence. Time booked by
    several overlapping occurrences is counted once."""
    covered, _ = _sweep([o.interval for o in day_occurrences])
    return covered / 60


def daily_session_count(day_occurrences: list[Occurrence]) -> int:
    """Number of separate blocks of work in the day. An occurrence that
    starts before the previous block has ended extends that block instead of
    starting a new one."""
    _, sessions = _sweep([o.interval for o in day_occurrences])
    return sessions


def daily_totals(occurrences: list[Occurrence]) -> dict[datetime.date, float]:
    """Non-overlapping hours for each date that has occurrences."""
    return {
        date: daily_non_overlapping_hours(day)
        for date, day in group_by_date(occurrences).items()
    }


def _daily_frame(occurrences: list[Occurrence]) -> pl.DataFrame:
    by_date = group_by_date(occurrences)
    return pl.DataFrame(
        {
            "date": list(by_date.keys()),
            "hours": [daily_non_overlapping_hours(day) for day in by_date.values()],
            "sessions": [daily_session_count(day) for day in by_date.values()],
        },
        schema={"date": pl.Date, "hours": pl.Float64, "sessions": pl.Int64},
    )


def _bucket_expr(view: ViewMode) -> pl.Expr:
    date = pl.col("date")
    if view == "day":
        return date.dt.strftime("%Y-%m-%d")
    if view == "week":
        # weeks are truncated to their Monday
        return date.dt.truncate("1w").dt.strftime("%Y-%m-%d")
    if view == "month":
        return date.dt.strftime("%Y-%m")
    raise ValueError(f"Unsupported view: {view}")


class PeriodTotal(NamedTuple):
    """Occupied time of one reporting bucket.

    Parameters
    ----------
    period
        `YYYY-MM-DD` for days, the date of the Monday for weeks and
        `YYYY-MM` for months.
    """

    period: str
    hours: float
    sessions: int
    days: int


def period_totals(
    occurrences: list[Occurrence], view: ViewMode = "day"
) -> list[PeriodTotal]:
    """Sum the daily non-overlapping hours into day, week or month buckets,
    ordered by bucket."""
    bucket = _bucket_expr(view)
    frame = _daily_frame(occurrences)
    if frame.is_empty():
        return []
    buckets = frame.with_columns(bucket.alias("period"))
    grouped = (
        buckets.group_by("period")
        .agg(
            pl.col("hours").sum(),
            pl.col("sessions").sum(),
            pl.col("date").count().alias("days"),
        )
        .sort("period")
    )
    return [PeriodTotal(**row) for row in grouped.to_dicts()]


class WorkHourTotals(NamedTuple):
    per_day: list[float]
    today_hours: float
    week_hours: float
    month_hours: float


def work_hour_totals(
    week_dates: list[datetime.date],
    occurrences: list[Occurrence],
    today: datetime.date,
    month_occurrences: list[Occurrence] | None = None,
) -> WorkHourTotals:
    """Totals displayed above a week timetable.

    Parameters
    ----------
    week_dates
        The dates of the displayed columns.
    today
        Used to pick today's column. `today_hours` is 0 if today is not
        displayed.
    month_occurrences
        Occurrences of the whole month. If not provided, the month total
        falls back to the week total.
    """
    totals = daily_totals(occurrences)
    per_day = [totals.get(date, 0.0) for date in week_dates]
    today_hours = per_day[week_dates.index(today)] if today in week_dates else 0.0
    week_hours = sum(per_day)
    month_hours = week_hours
    if month_occurrences is not None:
        month_hours = sum(daily_totals(month_occurrences).values())
    return WorkHourTotals(
        per_day=per_day,
        today_hours=today_hours,
        week_hours=week_hours,
        month_hours=month_hours,
    )


class RangeSummary(NamedTuple):
    daily: list[tuple[datetime.date, float]]
    total_hours: float
    highest_day_hours: float
    average_per_day: float
    days: int


def summarise_range(
    occurrences: list[Occurrence], start: datetime.date, end: datetime.date
) -> RangeSummary:
    """Summarise occupied time over `[start, end]`. The average is taken over
    every day of the range, including days without occurrences."""
    days = sum(1 for _ in iter_dates(start, end))
    in_range = [o for o in occurrences if start <= o.occurrence_date <= end]
    daily = sorted(daily_totals(in_range).items())
    total = sum(hours for _, hours in daily)
    return RangeSummary(
        daily=daily,
        total_hours=total,
        highest_day_hours=max((hours for _, hours in daily), default=0.0),
        average_per_day=total / days,
        days=days,
    )


def hourly_distribution(occurrences: list[Occurrence]) -> list[float]:
    """Occupied hours falling in each hour of the day (index 0 is midnight
    to 1am), accumulated over all dates."""
    hours = [0.0] * 24
    for day in group_by_date(occurrences).values():
        for block in merge_intervals([o.interval for o in day]):
            for hour in range(block.start // 60, (block.end - 1) // 60 + 1):
                overlap = min(block.end, (hour + 1) * 60) - max(block.start, hour * 60)
                if overlap > 0:
                    hours[hour] += overlap / 60
    logger.debug(f"Distributed {sum(hours):.2f} hours over the day")
    return hours
