#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import datetime
import logging

import pytest

from dayledger.exceptions import UnresolvedOverrideConflict
from dayledger.models import Override, TaskTemplate
from dayledger.overrides import apply_overrides, find_orphaned_overrides, index_overrides
from dayledger.recurrence import expand_template

JAN_1 = datetime.date(2024, 1, 1)
JAN_7 = datetime.date(2024, 1, 7)


def test_duplicate_overrides_conflict():
    overrides = [
        Override(parent_template_id="t1", instance_date="2024-01-03", title="A"),
        Override(parent_template_id="t1", instance_date="2024-01-03", title="B"),
    ]
    with pytest.raises(UnresolvedOverrideConflict):
        index_overrides(overrides)


def test_overrides_attach_to_their_instance(weekly_study: TaskTemplate):
    override = Override(
        parent_template_id="t1", instance_date="2024-01-03", title="Mock exam"
    )
    instances = apply_overrides(expand_template(weekly_study, JAN_1, JAN_7), [override])
    titles = [i.resolve().title for i in instances]
    assert titles == ["Study", "Mock exam", "Study"]
    assert [i.override is not None for i in instances] == [False, True, False]


def test_orphaned_overrides_are_ignored(weekly_study: TaskTemplate, caplog):
    # 2024-01-02 is a Tuesday, the task does not recur on it
    orphan = Override(parent_template_id="t1", instance_date="2024-01-02", title="X")
    other_task = Override(parent_template_id="t9", instance_date="2024-01-03")
    instances = expand_template(weekly_study, JAN_1, JAN_7)
    with caplog.at_level(logging.WARNING, logger="dayledger.overrides"):
        applied = apply_overrides(instances, [orphan, other_task])
    assert applied == instances
    assert find_orphaned_overrides(instances, [orphan, other_task]) == [orphan, other_task]
    assert "Ignoring override of task t1 on 2024-01-02" in caplog.text
