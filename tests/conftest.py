#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import pytest

from dayledger.engine import ScheduleEngine, get_engine_settings
from dayledger.models import Override, TaskTemplate
from dayledger.store import TaskStore
from tests.task_utils import USER_ID, make_recurring, make_template


@pytest.fixture
def weekly_study() -> TaskTemplate:
    return make_recurring(
        "t1",
        days=("monday", "wednesday", "friday"),
        title="Study",
        start_time="09:00",
        end_time="10:00",
        start_date="2024-01-01",
    )


@pytest.fixture
def dentist() -> TaskTemplate:
    return make_template(
        "dentist",
        title="Dentist",
        start_date="2024-01-03",
        start_time="09:30",
        end_time="10:15",
    )


@pytest.fixture
def store(weekly_study: TaskTemplate, dentist: TaskTemplate) -> TaskStore:
    store = TaskStore()
    store.add_tasks(
        [
            weekly_study,
            dentist,
            make_template(
                "other-user", user_id="u2", start_date="2024-01-02", title="Gym"
            ),
        ]
    )
    store.add_overrides(
        [
            Override(
                parent_template_id="t1",
                instance_date="2024-01-05",
                user_id=USER_ID,
                title="Study group",
            )
        ]
    )
    return store


@pytest.fixture
def engine(store: TaskStore) -> ScheduleEngine:
    return ScheduleEngine(store, get_engine_settings("light"))
