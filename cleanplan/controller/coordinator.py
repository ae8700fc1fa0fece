"""
Implements the assignment state machine:

  idle --propose--> proposed --commit--> committed --acknowledge--> idle
                        |
                        +--conflict / cancel / superseded--> rejected --> idle

At most one proposal is outstanding at a time. A new proposal rejects a still-proposed older
one as stale, but it cannot displace a committed one, as that mutation is already dispatched.
Proposals are totally ordered by arrival.

While a proposal is outstanding every slot is reported as a legal drop target, to keep the
visual feedback steady. Only `commit` validates, always against the snapshot passed to it, so
a stale "allowed" rendering is still rejected there.

Not thread safe: concurrent callers need either a coordinator each, or external locking
"""

import logging
from typing import Callable

from cleanplan.controller.core import CoordinatorState, ProposalHandle, ProposalStatus, Snapshot
from cleanplan.low.core import MutationRequest, Task, TaskId, TimeOfDay, WorkerId, check_time
from cleanplan.low.errors import (
    AssignmentInFlightError,
    CleanplanError,
    ConflictError,
    PersistenceError,
    StaleProposalError,
)
from cleanplan.overlap import detect_overlaps

logger = logging.getLogger(__name__)


def _clock(t: TimeOfDay) -> str:
    # NOTE not grid.minutes_to_clock, as interval ends may be midnight
    return f"{t // 60:02d}:{t % 60:02d}"


def _describe(task: Task) -> str:
    return f"task {task.id} at {task.property_ref} ({_clock(task.interval.start)}-{_clock(task.interval.end)})"


def validate(handle: ProposalHandle, snapshot: Snapshot) -> MutationRequest:
    """Checks the proposal against the snapshot, returns the mutation it amounts to.
    A moved task keeps its duration. Raises ConflictError when the target cannot take the task,
    StaleProposalError when the task itself is gone"""
    task = snapshot.task(handle.task_id)
    if task is None or task.id is None:
        raise StaleProposalError(f"task {handle.task_id} is no longer present")
    worker = snapshot.worker(handle.target_worker_id)
    if worker is None:
        raise ConflictError(f"worker {handle.target_worker_id} is unknown")
    if not worker.active:
        raise ConflictError(f"worker {worker.id} ({worker.display_name}) is not active")

    if handle.target_start is None:
        interval = task.interval
    else:
        interval = task.interval.shifted_to(handle.target_start)

    blocking = detect_overlaps(worker.id, interval, snapshot.tasks, exclude_task_id=task.id)
    if blocking:
        raise ConflictError(
            f"{_clock(interval.start)}-{_clock(interval.end)} at {worker.display_name} is blocked by "
            + ", ".join(_describe(b) for b in blocking),
            blocking=blocking,
        )
    return MutationRequest(task_id=task.id, worker_id=worker.id, start=interval.start, end=interval.end)


class AssignmentCoordinator:
    def __init__(self) -> None:
        self.current: ProposalHandle | None = None

    @property
    def state(self) -> CoordinatorState:
        if self.current is None:
            return CoordinatorState.idle
        if self.current.status == ProposalStatus.committed:
            return CoordinatorState.committed
        return CoordinatorState.proposed

    def _reject(self, handle: ProposalHandle, reason: str) -> None:
        handle.status = ProposalStatus.rejected
        handle.reason = reason
        if self.current is handle:
            self.current = None
        logger.debug(f"rejected proposal {handle.id} for task {handle.task_id}: {reason}")

    def _expect(self, handle: ProposalHandle, status: ProposalStatus) -> None:
        if handle.is_resolved or handle is not self.current or handle.status != status:
            raise StaleProposalError(
                f"proposal {handle.id} for task {handle.task_id} is {handle.status.value}"
                + (f" ({handle.reason})" if handle.reason else "")
                + f", expected {status.value}"
            )

    def propose(
        self,
        task_id: TaskId,
        target_worker_id: WorkerId,
        target_start: TimeOfDay | None = None,
        snapshot: Snapshot | None = None,
    ) -> ProposalHandle:
        """Opens a new proposal, superseding any outstanding one. If a snapshot is given, the proposal is
        pre-validated and a conflict rejects it right away -- commit validates again regardless"""
        if self.current is not None and self.current.status == ProposalStatus.committed:
            raise AssignmentInFlightError(
                f"proposal {self.current.id} for task {self.current.task_id} awaits acknowledgement"
            )
        # every arrival supersedes, even one which then fails its own checks
        if self.current is not None:
            self._reject(self.current, "superseded")
        if target_start is not None:
            check_time(target_start)

        handle = ProposalHandle(task_id=task_id, target_worker_id=target_worker_id, target_start=target_start)
        self.current = handle
        logger.debug(f"proposal {handle.id}: task {task_id} to {target_worker_id} at {target_start}")
        if snapshot is not None:
            try:
                validate(handle, snapshot)
            except CleanplanError as e:
                self._reject(handle, str(e))
                raise
        return handle

    def accepts_drop(self, worker_id: WorkerId, slot: TimeOfDay) -> bool:
        """Visual feedback only, every slot is allowed while a proposal is outstanding"""
        return self.state == CoordinatorState.proposed

    def cancel(self, handle: ProposalHandle) -> None:
        if handle is self.current and handle.status == ProposalStatus.committed:
            raise AssignmentInFlightError(
                f"proposal {handle.id} is already committed, issue a compensating reassignment instead"
            )
        self._expect(handle, ProposalStatus.proposed)
        self._reject(handle, "cancelled")

    def commit(self, handle: ProposalHandle, snapshot: Snapshot) -> MutationRequest:
        """Validates fully against the snapshot. On success the returned request is to be written by
        the caller, who must then report the outcome via `acknowledge`"""
        self._expect(handle, ProposalStatus.proposed)
        try:
            request = validate(handle, snapshot)
        except CleanplanError as e:
            self._reject(handle, str(e))
            raise
        handle.status = ProposalStatus.committed
        handle.request = request
        logger.info(f"committed task {request.task_id} to {request.worker_id} at {_clock(request.start)}")
        return request

    def acknowledge(self, handle: ProposalHandle, ok: bool, error: BaseException | None = None) -> MutationRequest:
        """Resolves a committed proposal and returns to idle. A failure is re-raised as is, never retried"""
        self._expect(handle, ProposalStatus.committed)
        self.current = None
        request = handle.request
        if request is None:
            raise TypeError(handle)
        if ok:
            handle.status = ProposalStatus.acknowledged
            logger.debug(f"proposal {handle.id} acknowledged")
            return request
        handle.status = ProposalStatus.failed
        logger.warning(f"persisting {request} failed: {error}")
        if error is not None:
            raise error
        raise PersistenceError(f"persisting assignment of task {request.task_id} failed")

    def dispatch(
        self, handle: ProposalHandle, snapshot: Snapshot, persist: Callable[[MutationRequest], None]
    ) -> MutationRequest:
        """Commits, hands the request to `persist`, and acknowledges with its outcome"""
        request = self.commit(handle, snapshot)
        try:
            persist(request)
        except BaseException as e:
            # also KeyboardInterrupt, CancelledError etc, so that the coordinator never stays committed
            self.acknowledge(handle, ok=False, error=e)
        return self.acknowledge(handle, ok=True)
