"""
Scheduler module is responsible for turning a selection of work items into concretely
scheduled, concretely assigned tasks.

There are two submodules:
 - plan: the distribution planner, which decides worker and start time per item under a
   policy (unassigned, single worker, round robin), optionally auto-scaling start times
 - batch: the batch builder, which combines a plan with per-item static data into Task
   records, ready to be handed over to the persistence layer

Both are pure and deterministic: identical inputs always give identical outputs.
"""

from cleanplan.scheduler.batch import build_batch, generate_batch, group_by_worker
from cleanplan.scheduler.plan import distribution_preview, plan_distribution, worker_load

__all__ = [
    "build_batch",
    "distribution_preview",
    "generate_batch",
    "group_by_worker",
    "plan_distribution",
    "worker_load",
]
