"""
Scheduling and assignment engine for cleaning-service tasks.

 - grid: the daily time grid and clock/offset conversions
 - overlap: occupancy and overlap resolution per worker
 - controller: the assignment coordinator for drag and drop reassignments
 - scheduler: distribution planning and batch task building

Persistence, notifications and rendering are the caller's business.
"""

from cleanplan.controller import AssignmentCoordinator, Snapshot
from cleanplan.grid import TimeGrid, clock_to_minutes, compute_grid, minutes_to_clock, to_offset
from cleanplan.low.core import (
    DistributionPolicy,
    Interval,
    ItemDuration,
    ItemStaticData,
    MutationRequest,
    OverlapInfo,
    PlannedSlot,
    Task,
    TaskStatus,
    Worker,
)
from cleanplan.overlap import detect_overlaps, overlaps, resolve_overlaps
from cleanplan.scheduler import build_batch, generate_batch, plan_distribution
from cleanplan.version import __version__

__all__ = [
    "AssignmentCoordinator",
    "DistributionPolicy",
    "Interval",
    "ItemDuration",
    "ItemStaticData",
    "MutationRequest",
    "OverlapInfo",
    "PlannedSlot",
    "Snapshot",
    "Task",
    "TaskStatus",
    "TimeGrid",
    "Worker",
    "__version__",
    "build_batch",
    "clock_to_minutes",
    "compute_grid",
    "detect_overlaps",
    "generate_batch",
    "minutes_to_clock",
    "overlaps",
    "plan_distribution",
    "resolve_overlaps",
    "to_offset",
]
