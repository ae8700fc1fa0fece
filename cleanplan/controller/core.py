"""
Core data structures: ProposalHandle and Snapshot
"""

import uuid
from dataclasses import dataclass, field
from enum import Enum

from cleanplan.low.core import MutationRequest, Task, TaskId, TimeOfDay, Worker, WorkerId
from cleanplan.low.func import maybe_head


class ProposalStatus(str, Enum):
    proposed = "proposed"  # set by propose
    committed = "committed"  # set by commit, mutation request handed to the caller
    rejected = "rejected"  # conflict, cancellation or superseded by a later proposal
    acknowledged = "acknowledged"  # persistence succeeded
    failed = "failed"  # persistence reported a failure


class CoordinatorState(str, Enum):
    idle = "idle"
    proposed = "proposed"
    committed = "committed"


@dataclass
class ProposalHandle:
    task_id: TaskId
    target_worker_id: WorkerId
    target_start: TimeOfDay | None = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    status: ProposalStatus = ProposalStatus.proposed
    reason: str | None = None  # why it was rejected, if it was
    request: MutationRequest | None = None  # set once committed

    @property
    def is_resolved(self) -> bool:
        return self.status in (ProposalStatus.rejected, ProposalStatus.acknowledged, ProposalStatus.failed)


@dataclass(frozen=True)
class Snapshot:
    """Caller's read of tasks and workers at the time of a call. Never retained by the coordinator"""

    tasks: list[Task]
    workers: list[Worker]

    def task(self, task_id: TaskId) -> Task | None:
        return maybe_head(t for t in self.tasks if t.id == task_id)

    def worker(self, worker_id: WorkerId) -> Worker | None:
        return maybe_head(w for w in self.workers if w.id == worker_id)
