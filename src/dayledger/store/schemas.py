#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
from enum import StrEnum, auto

import polars as pl


class StoreNamespace(StrEnum):
    """Namespace for each table of the task store"""

    TASKS = auto()
    OVERRIDES = auto()


TASKS_SCHEMA = {
    "id": pl.String,
    "user_id": pl.String,
    "title": pl.String,
    "description": pl.String,
    "priority": pl.String,
    "is_recurring": pl.Boolean,
    "recurring_days": pl.List(pl.String),
    "start_date": pl.Date,
    "end_date": pl.Date,
    "start_time": pl.String,
    "end_time": pl.String,
    "is_schedulable": pl.Boolean,
    "completed": pl.Boolean,
    "deleted_at": pl.Datetime,
}
OVERRIDES_SCHEMA = {
    "parent_template_id": pl.String,
    "instance_date": pl.Date,
    "user_id": pl.String,
    "title": pl.String,
    "description": pl.String,
    "start_time": pl.String,
    "end_time": pl.String,
    "priority": pl.String,
    "completed": pl.Boolean,
}
STORE_SCHEMAS = {
    StoreNamespace.TASKS: TASKS_SCHEMA,
    StoreNamespace.OVERRIDES: OVERRIDES_SCHEMA,
}
