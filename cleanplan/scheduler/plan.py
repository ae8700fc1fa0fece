"""
Distribution planning:
1. none
 - every item unassigned, at the base start
 - never auto-scaled, unassigned tasks have no timeline to pack into

2. single
 - every item to the same worker
 - auto-scale packs the items back to back on that worker's timeline

3. round robin
 - item i to worker i mod k, by input order rather than by load
 - auto-scale keeps one timeline per worker, packed independently and in parallel

Uneven durations are not rebalanced: a worker may end up with more planned minutes than
another. Use `worker_load` to inspect the outcome
"""

import logging
from collections import defaultdict
from itertools import cycle
from typing import Sequence

from cleanplan.low.core import (
    DistributionPolicy,
    ItemDuration,
    NoAssignment,
    PlannedSlot,
    RoundRobin,
    SingleAssignee,
    TimeOfDay,
    WorkerId,
    check_duration,
    check_time,
)
from cleanplan.low.errors import InvalidPolicyError
from cleanplan.low.func import assert_never

logger = logging.getLogger(__name__)


def _validate(items: Sequence[ItemDuration], policy: DistributionPolicy, base_start: TimeOfDay) -> None:
    for item in items:
        check_duration(item.duration_minutes)
    check_time(base_start)
    assignment = policy.assignment
    if isinstance(assignment, SingleAssignee) and not assignment.worker_id:
        raise InvalidPolicyError("worker_id", "single assignment requires a worker")
    if isinstance(assignment, RoundRobin):
        if not assignment.worker_ids:
            raise InvalidPolicyError("worker_ids", "round robin requires at least one worker")
        if not all(assignment.worker_ids):
            raise InvalidPolicyError("worker_ids", "round robin contains an empty worker id")


def _workers(assignment: NoAssignment | SingleAssignee | RoundRobin, n: int) -> list[WorkerId | None]:
    if isinstance(assignment, NoAssignment):
        return [None] * n
    elif isinstance(assignment, SingleAssignee):
        return [assignment.worker_id] * n
    elif isinstance(assignment, RoundRobin):
        return [worker for _, worker in zip(range(n), cycle(assignment.worker_ids))]
    else:
        assert_never(assignment)


def plan_distribution(
    items: Sequence[ItemDuration], policy: DistributionPolicy, base_start: TimeOfDay
) -> list[PlannedSlot]:
    """Plans worker and start time for each item, aligned 1:1 with `items`.
    Validates everything before planning, so that no partial plan is ever produced"""
    _validate(items, policy, base_start)
    workers = _workers(policy.assignment, len(items))

    auto_scale = policy.auto_scale and not isinstance(policy.assignment, NoAssignment)
    # one cursor per timeline. For single there is just one worker, so this is the sequential
    # mode, for round robin it is the parallel mode
    cursors: dict[WorkerId | None, TimeOfDay] = defaultdict(lambda: base_start)

    plan: list[PlannedSlot] = []
    for index, (item, worker) in enumerate(zip(items, workers)):
        if auto_scale:
            start = check_time(cursors[worker])
            cursors[worker] = start + item.duration_minutes
        else:
            start = base_start
        check_time(start + item.duration_minutes, allow_end_of_day=True)
        plan.append(PlannedSlot(item_index=index, worker_id=worker, start=start))

    logger.debug(f"planned {len(plan)} items with {policy.assignment.kind=} {auto_scale=}")
    return plan


def distribution_preview(task_count: int, worker_ids: Sequence[WorkerId]) -> list[tuple[WorkerId, int]]:
    """How many of `task_count` tasks each worker receives under round robin, in worker order"""
    if not worker_ids:
        raise InvalidPolicyError("worker_ids", "round robin requires at least one worker")
    if task_count < 0:
        raise ValueError(f"task count must not be negative, got {task_count}")
    per_worker, remainder = divmod(task_count, len(worker_ids))
    return [
        (worker, per_worker + (1 if index < remainder else 0))
        for index, worker in enumerate(worker_ids)
    ]


def worker_load(plan: Sequence[PlannedSlot], items: Sequence[ItemDuration]) -> dict[WorkerId, int]:
    """Total planned minutes per assigned worker"""
    rv: dict[WorkerId, int] = defaultdict(int)
    for slot in plan:
        if slot.worker_id is not None:
            rv[slot.worker_id] += items[slot.item_index].duration_minutes
    return dict(rv)
