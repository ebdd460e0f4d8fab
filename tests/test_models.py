#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import datetime

import pytest

from dayledger.exceptions import (
    InvalidRangeError,
    MalformedDateError,
    MalformedTimeError,
)
from dayledger.models import (
    Occurrence,
    Override,
    Priority,
    RecurringInstance,
    Standalone,
    TaskTemplate,
    instance_id,
)
from dayledger.time_utils import Weekday
from tests.task_utils import make_recurring, make_template


def test_template_parses_boundary_strings():
    template = TaskTemplate(
        id="t1",
        title="Study",
        is_recurring=True,
        recurring_days=["Monday", "friday", 3],
        start_date="2024-01-01",
        end_date="",
        start_time="09:00:00",
        end_time="10:30",
        priority="high",
    )
    assert template.recurring_days == {Weekday.monday, Weekday.wednesday, Weekday.friday}
    assert template.start_date == datetime.date(2024, 1, 1)
    assert template.end_date is None
    assert template.start_time == "09:00"
    assert template.priority == Priority.high
    assert template.participates_in_schedule
    assert template.model_dump()["recurring_days"] == ["monday", "wednesday", "friday"]


def test_malformed_records_raise_engine_errors():
    with pytest.raises(MalformedTimeError):
        make_template(start_time="9am")
    with pytest.raises(MalformedDateError):
        make_template(start_date="2024-13-01")
    with pytest.raises(InvalidRangeError):
        make_template(start_time="10:00", end_time="09:00")
    with pytest.raises(InvalidRangeError):
        make_recurring(start_date="2024-01-10", end_date="2024-01-01")


@pytest.mark.parametrize(
    "fields",
    [
        {"is_schedulable": False},
        {"deleted_at": datetime.datetime(2024, 1, 1)},
        {"start_time": None},
        {"days": ()},
    ],
)
def test_templates_not_participating_in_schedule(fields):
    assert not make_recurring(**fields).participates_in_schedule


def test_standalone_occurrence_keeps_template_identity():
    template = make_template("dentist", start_date="2024-01-03")
    occurrence = Standalone(template=template).resolve()
    assert occurrence.id == "dentist"
    assert occurrence.occurrence_date == datetime.date(2024, 1, 3)
    assert not occurrence.is_instance
    assert not occurrence.override_applied
    assert occurrence.duration_hours == 1.0


def test_standalone_without_date_cannot_be_resolved():
    with pytest.raises(InvalidRangeError):
        Standalone(template=make_template()).resolve()


def test_recurring_instance_identity():
    template = make_recurring("t1")
    date = datetime.date(2024, 1, 8)
    occurrence = RecurringInstance(template=template, instance_date=date).resolve()
    assert occurrence.id == instance_id("t1", date) == "t1_2024-01-08"
    assert occurrence.source_template_id == "t1"
    assert occurrence.occurrence_date == date
    assert occurrence.is_instance


def test_title_override_changes_no_other_field():
    template = make_recurring("t1", description="Chapter 3", priority="low")
    date = datetime.date(2024, 1, 8)
    instance = RecurringInstance(template=template, instance_date=date)
    override = Override(parent_template_id="t1", instance_date=date, title="Exam prep")
    plain = instance.resolve().model_dump(exclude={"source", "override_applied"})
    edited = (
        instance.with_override(override)
        .resolve()
        .model_dump(exclude={"source", "override_applied"})
    )
    assert edited.pop("title") == "Exam prep"
    assert plain.pop("title") == "Study"
    assert edited == plain


def test_override_fields_replace_template_values():
    template = make_recurring("t1")
    date = datetime.date(2024, 1, 8)
    override = Override(
        parent_template_id="t1",
        instance_date="2024-01-08",
        start_time="14:00",
        end_time="15:30",
        completed=True,
    )
    occurrence = RecurringInstance(
        template=template, instance_date=date, override=override
    ).resolve()
    assert occurrence.override_applied
    assert (occurrence.start_time, occurrence.end_time) == ("14:00", "15:30")
    assert occurrence.completed
    assert occurrence.id == "t1_2024-01-08"
    assert override.overridden_fields() == {
        "start_time": "14:00",
        "end_time": "15:30",
        "completed": True,
    }


def test_override_inverting_the_times_is_rejected():
    template = make_recurring("t1")
    override = Override(
        parent_template_id="t1", instance_date="2024-01-08", start_time="11:00"
    )
    instance = RecurringInstance(
        template=template, instance_date=datetime.date(2024, 1, 8), override=override
    )
    with pytest.raises(InvalidRangeError):
        instance.resolve()


def test_override_must_match_its_instance():
    override = Override(parent_template_id="t1", instance_date="2024-01-09")
    with pytest.raises(ValueError):
        RecurringInstance(
            template=make_recurring("t1"),
            instance_date=datetime.date(2024, 1, 8),
            override=override,
        )


def test_occurrence_source_is_discriminated():
    occurrence = RecurringInstance(
        template=make_recurring("t1"), instance_date=datetime.date(2024, 1, 8)
    ).resolve()
    restored = Occurrence.model_validate(occurrence.model_dump())
    assert isinstance(restored.source, RecurringInstance)
    assert restored == occurrence
