#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Row predicates for the task storage tables, as `polars` expressions.

Predicates are combined with `&` and passed to `DataFrame.filter`, eg

```py
tasks.filter(owned_by(user_id) & schedulable(is_recurring=False))
```
"""

import datetime
from collections.abc import Iterable

import polars as pl

from dayledger.aliases import DateStr, UserId
from dayledger.time_utils import parse_date


def owned_by(user_id: UserId) -> pl.Expr:
    return pl.col("user_id") == user_id


def schedulable(is_recurring: bool) -> pl.Expr:
    """Tasks of the given kind which can be placed on a calendar: flagged
    schedulable, not deleted and with both times set. Recurring tasks must
    also repeat on at least one weekday."""
    predicate = (
        (pl.col("is_recurring") == is_recurring)
        & pl.col("is_schedulable")
        & pl.col("deleted_at").is_null()
        & pl.col("start_time").is_not_null()
        & pl.col("end_time").is_not_null()
    )
    if is_recurring:
        predicate &= pl.col("recurring_days").list.len() > 0
    return predicate


def dated_between(
    start: datetime.date | DateStr, end: datetime.date | DateStr
) -> pl.Expr:
    """Tasks whose `start_date` is in `[start, end]`."""
    return pl.col("start_date").is_between(parse_date(start), parse_date(end))


def on_instance_dates(dates: Iterable[datetime.date | DateStr]) -> pl.Expr:
    """Overrides targeting one of `dates`."""
    return pl.col("instance_date").is_in([parse_date(date) for date in dates])
