"""
Builds concrete Task records out of a distribution plan and the static data of each item
"""

import logging
from collections import defaultdict
from typing import Sequence

from cleanplan.config import MAX_BATCH_SIZE
from cleanplan.low.core import (
    DistributionPolicy,
    Interval,
    ItemStaticData,
    PlannedSlot,
    Task,
    TaskStatus,
    TimeOfDay,
    WorkerId,
)
from cleanplan.low.errors import BatchTooLargeError, EmptyBatchError
from cleanplan.scheduler.plan import plan_distribution

logger = logging.getLogger(__name__)


def _check_size(items: Sequence[ItemStaticData], max_size: int) -> None:
    # NOTE an empty selection is an upstream mistake, not a degenerate success
    if not items:
        raise EmptyBatchError("batch requires at least one item")
    if len(items) > max_size:
        raise BatchTooLargeError(f"batch of {len(items)} items exceeds the maximum of {max_size}")


def build_batch(
    plan: Sequence[PlannedSlot],
    items: Sequence[ItemStaticData],
    max_size: int = MAX_BATCH_SIZE,
) -> list[Task]:
    """One pending, unpersisted Task per item, with interval [start, start + duration)"""
    _check_size(items, max_size)
    if len(plan) != len(items):
        raise ValueError(f"plan of {len(plan)} slots does not match {len(items)} items")

    tasks: list[Task] = []
    for position, slot in enumerate(plan):
        # plan slots are aligned 1:1 with the items, in item order
        if slot.item_index != position:
            raise ValueError(f"plan slot {position} refers to item {slot.item_index}")
        item = items[slot.item_index]
        tasks.append(
            Task(
                worker_id=slot.worker_id,
                interval=Interval.of(slot.start, item.duration_minutes),
                duration_minutes=item.duration_minutes,
                cost_amount=item.cost_amount,
                property_ref=item.property_ref,
                address=item.address,
                status=TaskStatus.pending,
            )
        )
    logger.debug(f"built batch of {len(tasks)} tasks")
    return tasks


def generate_batch(
    items: Sequence[ItemStaticData],
    policy: DistributionPolicy,
    base_start: TimeOfDay,
    max_size: int = MAX_BATCH_SIZE,
) -> list[Task]:
    """Plans and builds in one go. Size is checked first, so that no planning happens for a rejected batch"""
    _check_size(items, max_size)
    plan = plan_distribution(items, policy, base_start)
    tasks = build_batch(plan, items, max_size)
    logger.info(f"generated {len(tasks)} tasks, {sum(t.is_assigned for t in tasks)} assigned")
    return tasks


def group_by_worker(tasks: Sequence[Task]) -> dict[WorkerId, list[Task]]:
    """Assigned tasks per worker, in input order. Unassigned tasks are left out"""
    rv: dict[WorkerId, list[Task]] = defaultdict(list)
    for task in tasks:
        if task.worker_id is not None:
            rv[task.worker_id].append(task)
    return dict(rv)
