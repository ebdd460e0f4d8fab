#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import datetime
import logging
from typing import Any, Protocol, Self, runtime_checkable

import polars as pl
from polars.exceptions import NoDataError

from dayledger.aliases import DateStr, TemplateId, UserId
from dayledger.exceptions import SearchError
from dayledger.models import Override, TaskTemplate
from dayledger.store.queries import (
    dated_between,
    on_instance_dates,
    owned_by,
    schedulable,
)
from dayledger.store.schemas import STORE_SCHEMAS, StoreNamespace

logger = logging.getLogger(__name__)


@runtime_checkable
class TaskSource(Protocol):
    """The queries the engine issues against the task storage. Each query
    returns a fresh list the caller is free to keep."""

    def list_non_recurring_schedulable(
        self, user_id: UserId, start: datetime.date, end: datetime.date
    ) -> list[TaskTemplate]: ...

    def list_recurring_schedulable(self, user_id: UserId) -> list[TaskTemplate]: ...

    def list_overrides(
        self, user_id: UserId, instance_dates: list[DateStr | datetime.date]
    ) -> list[Override]: ...


def _to_column_value(value: Any, dtype: Any) -> Any:
    if value is None or value == "":
        return None
    if dtype is pl.Datetime and isinstance(value, str):
        return datetime.datetime.fromisoformat(value)
    if dtype is pl.Date and isinstance(value, str):
        return datetime.date.fromisoformat(value)
    return value


def _to_snapshot_value(value: Any) -> Any:
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    return value


class TaskStore:
    """In-memory task storage, one `polars` dataframe per `StoreNamespace`.

    The dataframes returned by `get_database` are views on the store and
    should be treated as immutable; use `add_to_database` and
    `remove_from_database` to modify the store.
    """

    schemas: dict[StoreNamespace, dict[str, Any]] = STORE_SCHEMAS

    def __init__(self):
        self._dbs: dict[StoreNamespace, pl.DataFrame] = {
            namespace: pl.DataFrame(schema=schema)
            for namespace, schema in self.schemas.items()
        }

    def get_database(self, namespace: StoreNamespace) -> pl.DataFrame:
        return self._dbs[namespace]

    def add_to_database(
        self,
        namespace: StoreNamespace,
        rows: list[dict[str, Any]],
    ) -> None:
        """Add multiple rows to a table.

        Parameters
        ----------
        namespace
            Table namespace
        rows
            List of rows to be added, each item should be a dict of column and value.
            Dates may be given as `YYYY-MM-DD` strings.

        Raises
        ------
        KeyError:   When provided column names in rows do not match the table schema
        """
        schema = self.schemas[namespace]
        rows_column_names = {x for row in rows for x in row.keys()}
        if unknown := rows_column_names - set(schema):
            raise KeyError(
                f"Only column names {set(schema)} are allowed for namespace {namespace}. "
                f"Found unknown column name {unknown}"
            )
        if not rows:
            return
        rows = [
            {
                column: _to_column_value(row.get(column), dtype)
                for column, dtype in schema.items()
            }
            for row in rows
        ]
        self._dbs[namespace] = self._dbs[namespace].vstack(
            pl.DataFrame(rows, schema=schema)
        )

    def remove_from_database(
        self,
        namespace: StoreNamespace,
        predicate: pl.Expr,
    ) -> None:
        """Remove the rows of a table matching `predicate`.

        Raises
        ------
        NoDataError: If no matching rows where found
        """
        if self._dbs[namespace].filter(predicate).is_empty():
            raise NoDataError(f"No db entry matching {predicate=} found")
        self._dbs[namespace] = self._dbs[namespace].filter(~predicate)

    def add_tasks(self, tasks: list[TaskTemplate]) -> None:
        self.add_to_database(
            StoreNamespace.TASKS, [task.model_dump(mode="json") for task in tasks]
        )

    def add_overrides(self, overrides: list[Override]) -> None:
        self.add_to_database(
            StoreNamespace.OVERRIDES,
            [override.model_dump(mode="json") for override in overrides],
        )

    def get_task(self, template_id: TemplateId) -> TaskTemplate:
        """Return the task with id `template_id`.

        Raises
        ------
        SearchError if no task has this id.
        """
        rows = self._dbs[StoreNamespace.TASKS].filter(pl.col("id") == template_id)
        if rows.is_empty():
            raise SearchError(f"No task with id {template_id} was found")
        return TaskTemplate(**rows.row(0, named=True))

    def list_non_recurring_schedulable(
        self, user_id: UserId, start: datetime.date, end: datetime.date
    ) -> list[TaskTemplate]:
        """Schedulable one-off tasks of the user dated in `[start, end]`,
        ordered by date then start time."""
        tasks = (
            self._dbs[StoreNamespace.TASKS]
            .filter(
                owned_by(user_id)
                & schedulable(is_recurring=False)
                & dated_between(start, end)
            )
            .sort(["start_date", "start_time"])
        )
        return [TaskTemplate(**row) for row in tasks.to_dicts()]

    def list_recurring_schedulable(self, user_id: UserId) -> list[TaskTemplate]:
        """Schedulable recurring tasks of the user with at least one weekday."""
        tasks = self._dbs[StoreNamespace.TASKS].filter(
            owned_by(user_id) & schedulable(is_recurring=True)
        )
        return [TaskTemplate(**row) for row in tasks.to_dicts()]

    def list_overrides(
        self,
        user_id: UserId,
        instance_dates: list[DateStr | datetime.date] | None = None,
    ) -> list[Override]:
        """Overrides of the user, restricted to `instance_dates` if given."""
        predicate = owned_by(user_id)
        if instance_dates is not None:
            predicate &= on_instance_dates(instance_dates)
        overrides = self._dbs[StoreNamespace.OVERRIDES].filter(predicate)
        return [Override(**row) for row in overrides.to_dicts()]

    def to_snapshot(self) -> dict[str, list[dict[str, Any]]]:
        """Serialise the store to plain records, dates in ISO format."""
        return {
            str(namespace): [
                {k: _to_snapshot_value(v) for k, v in record.items()}
                for record in database.to_dicts()
            ]
            for namespace, database in self._dbs.items()
        }

    @classmethod
    def from_snapshot(cls, snapshot: dict[str, list[dict[str, Any]]]) -> Self:
        """Load a snapshot produced by `to_snapshot` or exported from the task
        storage. Every record is validated, so a single malformed record
        fails the whole load."""
        store = cls()
        tasks = [
            TaskTemplate(**record)
            for record in snapshot.get(str(StoreNamespace.TASKS), [])
        ]
        overrides = [
            Override(**record)
            for record in snapshot.get(str(StoreNamespace.OVERRIDES), [])
        ]
        store.add_tasks(tasks)
        store.add_overrides(overrides)
        logger.debug(f"Loaded {len(tasks)} tasks and {len(overrides)} overrides")
        return store
