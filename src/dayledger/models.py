#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Records read from the task store and the occurrences derived from them."""

import datetime
from enum import StrEnum, auto
from typing import Annotated, Any, Literal, Self

from pydantic import BaseModel, Field, field_serializer, field_validator, model_validator

from dayledger.aliases import OccurrenceId, TemplateId, TimeStr, UserId
from dayledger.constants import INSTANCE_ID_SEPARATOR, UNTITLED_CATEGORY
from dayledger.exceptions import InvalidRangeError
from dayledger.time_utils import (
    TimeInterval,
    Weekday,
    format_date,
    normalise_time,
    parse_date,
    parse_weekday,
    to_minutes,
)


class Priority(StrEnum):
    low = auto()
    medium = auto()
    high = auto()


def _maybe_date(value: Any) -> datetime.date | None:
    if value is None or value == "":
        return None
    return parse_date(value)


def _maybe_time(value: Any) -> TimeStr | None:
    if value is None or value == "":
        return None
    return normalise_time(value)


def _check_time_order(start: TimeStr | None, end: TimeStr | None, owner: str):
    if start is not None and end is not None and to_minutes(end) <= to_minutes(start):
        raise InvalidRangeError(
            f"{owner} ends at {end} which is not after its start time {start}"
        )


class TaskTemplate(BaseModel):
    """A schedulable unit owned by a user.

    Parameters
    ----------
    is_recurring
        If set, the task repeats on each of `recurring_days` between
        `start_date` and `end_date`. Otherwise the task occurs once, on
        `start_date`.
    recurring_days
        The weekdays a recurring task occurs on. Empty for one-off tasks.
    start_date, end_date
        Inclusive bounds of a recurring task. A missing bound leaves the
        recurrence open on that side.
    start_time, end_time
        `HH:MM` times of the day, both required for the task to be placed on
        the calendar.
    is_schedulable
        Only schedulable tasks enter the timetable.
    """

    id: TemplateId
    user_id: UserId | None = None
    title: str = ""
    description: str | None = None
    priority: Priority | None = None
    is_recurring: bool = False
    recurring_days: set[Weekday] = Field(default_factory=set)
    start_date: datetime.date | None = None
    end_date: datetime.date | None = None
    start_time: TimeStr | None = None
    end_time: TimeStr | None = None
    is_schedulable: bool = True
    completed: bool = False
    deleted_at: datetime.datetime | None = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _parse_dates(cls, value: Any) -> datetime.date | None:
        return _maybe_date(value)

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _parse_times(cls, value: Any) -> TimeStr | None:
        return _maybe_time(value)

    @field_validator("recurring_days", mode="before")
    @classmethod
    def _parse_days(cls, value: Any) -> set[Weekday]:
        if value is None:
            return set()
        return {parse_weekday(day) for day in value}

    @field_validator("priority", "deleted_at", mode="before")
    @classmethod
    def _empty_to_none(cls, value: Any) -> Any:
        return None if value == "" else value

    @model_validator(mode="after")
    def _check_ranges(self) -> Self:
        if (
            self.start_date is not None
            and self.end_date is not None
            and self.end_date < self.start_date
        ):
            raise InvalidRangeError(
                f"Task {self.id} ends on {self.end_date} before it starts on {self.start_date}"
            )
        _check_time_order(self.start_time, self.end_time, f"Task {self.id}")
        return self

    @field_serializer("recurring_days")
    def _serialise_days(self, days: set[Weekday]) -> list[str]:
        return [str(day) for day in sorted(days, key=lambda d: d.ordinal)]

    @property
    def has_times(self) -> bool:
        return self.start_time is not None and self.end_time is not None

    @property
    def participates_in_schedule(self) -> bool:
        """Whether the task can produce calendar occurrences at all."""
        if not self.is_schedulable or self.deleted_at is not None or not self.has_times:
            return False
        if self.is_recurring:
            return bool(self.recurring_days)
        return True


OVERRIDABLE_FIELDS = (
    "title",
    "description",
    "start_time",
    "end_time",
    "priority",
    "completed",
)


class Override(BaseModel):
    """An edit made to a single instance of a recurring task. Fields left as
    `None` keep the value of the parent task."""

    parent_template_id: TemplateId
    instance_date: datetime.date
    user_id: UserId | None = None
    title: str | None = None
    description: str | None = None
    start_time: TimeStr | None = None
    end_time: TimeStr | None = None
    priority: Priority | None = None
    completed: bool | None = None

    @field_validator("instance_date", mode="before")
    @classmethod
    def _parse_date(cls, value: Any) -> datetime.date:
        return parse_date(value)

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _parse_times(cls, value: Any) -> TimeStr | None:
        return _maybe_time(value)

    @field_validator("priority", "completed", mode="before")
    @classmethod
    def _empty_to_none(cls, value: Any) -> Any:
        return None if value == "" else value

    @property
    def key(self) -> tuple[TemplateId, datetime.date]:
        return self.parent_template_id, self.instance_date

    def overridden_fields(self) -> dict[str, Any]:
        return {
            field: getattr(self, field)
            for field in OVERRIDABLE_FIELDS
            if getattr(self, field) is not None
        }


def _template_fields(template: TaskTemplate) -> dict[str, Any]:
    fields = template.model_dump(exclude={"id"})
    # model_dump serialises the weekdays to a list
    fields["recurring_days"] = set(template.recurring_days)
    return fields


def _require_times(template: TaskTemplate):
    if not template.has_times:
        raise InvalidRangeError(
            f"Task {template.id} has no start or end time and cannot be placed "
            f"on the calendar"
        )


def instance_id(template_id: TemplateId, date: datetime.date) -> OccurrenceId:
    return f"{template_id}{INSTANCE_ID_SEPARATOR}{format_date(date)}"


class Standalone(BaseModel):
    """A one-off task, which is its own single occurrence."""

    kind: Literal["standalone"] = "standalone"
    template: TaskTemplate

    @property
    def occurrence_id(self) -> OccurrenceId:
        return self.template.id

    def resolve(self) -> "Occurrence":
        template = self.template
        _require_times(template)
        if template.start_date is None:
            raise InvalidRangeError(
                f"One-off task {template.id} has no date and cannot be placed on the calendar"
            )
        return Occurrence(
            id=self.occurrence_id,
            source_template_id=template.id,
            occurrence_date=template.start_date,
            source=self,
            **_template_fields(template),
        )


class RecurringInstance(BaseModel):
    """The occurrence of a recurring task on `instance_date`, possibly edited
    by an override."""

    kind: Literal["recurring"] = "recurring"
    template: TaskTemplate
    instance_date: datetime.date
    override: Override | None = None

    @model_validator(mode="after")
    def _check_override_key(self) -> Self:
        if self.override is not None and self.override.key != (
            self.template.id,
            self.instance_date,
        ):
            raise ValueError(
                f"Override for {self.override.key} cannot be applied to the "
                f"instance of {self.template.id} on {self.instance_date}"
            )
        return self

    @property
    def occurrence_id(self) -> OccurrenceId:
        return instance_id(self.template.id, self.instance_date)

    def with_override(self, override: Override | None) -> Self:
        return type(self)(
            template=self.template,
            instance_date=self.instance_date,
            override=override,
        )

    def resolve(self) -> "Occurrence":
        """Project the template onto `instance_date`. Fields set on the
        override replace the template value; identity and date never change."""
        template = self.template
        _require_times(template)
        fields = _template_fields(template)
        if self.override is not None:
            fields.update(self.override.overridden_fields())
        return Occurrence(
            id=self.occurrence_id,
            source_template_id=template.id,
            occurrence_date=self.instance_date,
            override_applied=self.override is not None,
            source=self,
            **fields,
        )


OccurrenceSource = Annotated[Standalone | RecurringInstance, Field(discriminator="kind")]


class Occurrence(BaseModel):
    """A task placed on a concrete date. Occurrences are projections of the
    stored records and are never persisted by the engine."""

    id: OccurrenceId
    source_template_id: TemplateId
    occurrence_date: datetime.date
    user_id: UserId | None = None
    title: str = ""
    description: str | None = None
    priority: Priority | None = None
    is_recurring: bool = False
    recurring_days: set[Weekday] = Field(default_factory=set)
    start_date: datetime.date | None = None
    end_date: datetime.date | None = None
    start_time: TimeStr
    end_time: TimeStr
    is_schedulable: bool = True
    completed: bool = False
    deleted_at: datetime.datetime | None = None
    override_applied: bool = False
    source: OccurrenceSource

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _parse_times(cls, value: Any) -> TimeStr:
        return normalise_time(value)

    @model_validator(mode="after")
    def _check_interval(self) -> Self:
        _check_time_order(self.start_time, self.end_time, f"Occurrence {self.id}")
        return self

    @field_serializer("recurring_days")
    def _serialise_days(self, days: set[Weekday]) -> list[str]:
        return [str(day) for day in sorted(days, key=lambda d: d.ordinal)]

    @property
    def interval(self) -> TimeInterval:
        return TimeInterval.from_times(self.start_time, self.end_time)

    @property
    def start_minutes(self) -> int:
        return to_minutes(self.start_time)

    @property
    def duration_minutes(self) -> int:
        return self.interval.duration

    @property
    def duration_hours(self) -> float:
        return self.duration_minutes / 60

    @property
    def is_instance(self) -> bool:
        return isinstance(self.source, RecurringInstance)

    def __str__(self) -> str:
        title = self.title or UNTITLED_CATEGORY
        return (
            f"'{title}' on {format_date(self.occurrence_date)} "
            f"from {self.start_time} to {self.end_time}"
        )
