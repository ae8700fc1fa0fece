"""
Occupancy and overlap resolution for the tasks of a single worker.

Used for two purposes:
 - rendering, where simultaneous tasks are stacked vertically in a stable order
 - validation of drop targets, where intersecting tasks block an assignment

All intervals are half-open, so a task ending exactly when another starts does not overlap it
"""

import logging
from typing import Iterable

from pydantic import BaseModel
from sortedcontainers import SortedKeyList

from cleanplan.config import Z_INDEX_SINGLE, Z_INDEX_STACKED
from cleanplan.grid import TimeGrid
from cleanplan.low.core import Interval, OverlapInfo, Task, TaskId, TimeOfDay, WorkerId

logger = logging.getLogger(__name__)


def overlaps(a: Interval, b: Interval) -> bool:
    return a.start < b.end and b.start < a.end


def _of_worker(worker_id: WorkerId, tasks: Iterable[Task]) -> list[Task]:
    return [task for task in tasks if task.worker_id == worker_id]


def _sort_key(task: Task) -> tuple[int, str]:
    return (task.interval.start, task.id or "")


def resolve_overlaps(worker_id: WorkerId, tasks: Iterable[Task]) -> list[OverlapInfo]:
    """Sweeps the worker's tasks by start time, keeping the currently open ones ordered by end.
    A task's group size is the number of open tasks at the moment it opens, itself included,
    and its rank is its position among those in opening order.
    Output follows the sweep order, ie, by start then id"""
    # NOTE keyed by end so that expired tasks are always at the head
    ongoing: SortedKeyList = SortedKeyList(key=lambda task: task.interval.end)
    rv: list[OverlapInfo] = []
    for task in sorted(_of_worker(worker_id, tasks), key=_sort_key):
        while ongoing and ongoing[0].interval.end <= task.interval.start:
            ongoing.pop(0)
        # everything still open opened no later than this task, so it ranks last among them
        rank = len(ongoing)
        rv.append(OverlapInfo(task_id=task.id, group_size=rank + 1, rank=rank))
        ongoing.add(task)
    return rv


def detect_overlaps(
    worker_id: WorkerId,
    interval: Interval,
    tasks: Iterable[Task],
    exclude_task_id: TaskId | None = None,
) -> list[Task]:
    """Tasks of the worker which intersect `interval`, ie, which would block placing a task there.
    The task being moved is passed as `exclude_task_id` so that it never blocks itself"""
    return sorted(
        (
            task
            for task in _of_worker(worker_id, tasks)
            if not (exclude_task_id is not None and task.id == exclude_task_id)
            and overlaps(task.interval, interval)
        ),
        key=_sort_key,
    )


def is_slot_occupied(
    worker_id: WorkerId,
    slot: TimeOfDay,
    tasks: Iterable[Task],
    exclude_task_id: TaskId | None = None,
) -> bool:
    """Whether some task of the worker covers the slot's starting minute"""
    return any(
        task.interval.start <= slot < task.interval.end
        for task in _of_worker(worker_id, tasks)
        if exclude_task_id is None or task.id != exclude_task_id
    )


class TaskPlacement(BaseModel, frozen=True):
    left_px: float
    width_px: float
    top_pct: float
    height_pct: float
    group_size: int
    rank: int
    z_index: int

    @property
    def has_overlap(self) -> bool:
        return self.group_size > 1


def place_tasks(worker_id: WorkerId, tasks: list[Task], grid: TimeGrid) -> list[tuple[Task, TaskPlacement]]:
    """Horizontal position from the grid, vertical stacking from the overlap resolution"""
    ordered = sorted(_of_worker(worker_id, tasks), key=_sort_key)
    infos = resolve_overlaps(worker_id, ordered)
    rv = []
    for task, info in zip(ordered, infos):
        left, width = grid.position(task.interval)
        rv.append(
            (
                task,
                TaskPlacement(
                    left_px=left,
                    width_px=width,
                    top_pct=info.rank * 100 / info.group_size,
                    height_pct=100 / info.group_size,
                    group_size=info.group_size,
                    rank=info.rank,
                    z_index=Z_INDEX_STACKED if info.group_size > 1 else Z_INDEX_SINGLE,
                ),
            )
        )
    logger.debug(f"placed {len(rv)} tasks of {worker_id=}")
    return rv
