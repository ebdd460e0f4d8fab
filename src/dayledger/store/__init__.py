#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
from dayledger.store.schemas import StoreNamespace
from dayledger.store.task_store import TaskSource, TaskStore

__all__ = ["StoreNamespace", "TaskSource", "TaskStore"]
