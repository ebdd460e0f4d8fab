#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import datetime
import logging

from dayledger.aliases import TemplateId
from dayledger.exceptions import UnresolvedOverrideConflict
from dayledger.models import Override, RecurringInstance

logger = logging.getLogger(__name__)

OverrideIndex = dict[tuple[TemplateId, datetime.date], Override]


def index_overrides(overrides: list[Override]) -> OverrideIndex:
    """Key overrides by `(parent_template_id, instance_date)`.

    Raises
    ------
    UnresolvedOverrideConflict if two overrides edit the same instance.
    """
    index: OverrideIndex = {}
    for override in overrides:
        if override.key in index:
            template_id, date = override.key
            raise UnresolvedOverrideConflict(
                f"Found more than one override for the instance of task "
                f"{template_id} on {date}"
            )
        index[override.key] = override
    return index


def apply_overrides(
    instances: list[RecurringInstance], overrides: list[Override]
) -> list[RecurringInstance]:
    """Attach to each instance the override editing it, if any.

    The merge itself happens when the instance is resolved into an
    occurrence, see `RecurringInstance.resolve`. Overrides that match no
    instance are ignored.
    """
    index = index_overrides(overrides)
    applied = []
    for instance in instances:
        override = index.get((instance.template.id, instance.instance_date))
        applied.append(instance if override is None else instance.with_override(override))
    orphans = find_orphaned_overrides(instances, overrides)
    for orphan in orphans:
        logger.warning(
            f"Ignoring override of task {orphan.parent_template_id} on "
            f"{orphan.instance_date}: the task does not recur on that date"
        )
    return applied


def find_orphaned_overrides(
    instances: list[RecurringInstance], overrides: list[Override]
) -> list[Override]:
    """Return the overrides which do not edit any of `instances`, for
    example because the recurrence of the parent task changed after the
    override was created."""
    keys = {(i.template.id, i.instance_date) for i in instances}
    return [o for o in overrides if o.key not in keys]
