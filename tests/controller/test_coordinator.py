"""
Tests the proposal lifecycle of the assignment coordinator against caller-supplied snapshots
"""

import pytest
from conftest import make_task

from cleanplan.controller import AssignmentCoordinator, CoordinatorState, ProposalStatus, Snapshot
from cleanplan.low.core import MutationRequest
from cleanplan.low.errors import (
    AssignmentInFlightError,
    ConflictError,
    OutOfRangeError,
    PersistenceError,
    StaleProposalError,
)


@pytest.fixture(scope="function")
def snapshot(tasks, workers):
    return Snapshot(tasks=tasks, workers=workers)


def test_commit_and_acknowledge(snapshot):
    coordinator = AssignmentCoordinator()
    assert coordinator.state == CoordinatorState.idle
    handle = coordinator.propose("t5", "luis", 720)
    assert coordinator.state == CoordinatorState.proposed

    request = coordinator.commit(handle, snapshot)
    assert request == MutationRequest(task_id="t5", worker_id="luis", start=720, end=780)
    assert handle.status == ProposalStatus.committed
    assert coordinator.state == CoordinatorState.committed

    assert coordinator.acknowledge(handle, ok=True) == request
    assert handle.status == ProposalStatus.acknowledged
    assert coordinator.state == CoordinatorState.idle


def test_move_keeps_duration(snapshot):
    coordinator = AssignmentCoordinator()
    handle = coordinator.propose("t4", "ana", 690)
    request = coordinator.commit(handle, snapshot)
    assert (request.start, request.end) == (690, 810)


def test_reassign_without_new_start(snapshot):
    coordinator = AssignmentCoordinator()
    handle = coordinator.propose("t5", "ana")
    request = coordinator.commit(handle, snapshot)
    assert (request.worker_id, request.start, request.end) == ("ana", 720, 780)


def test_move_within_own_timeline_not_blocked_by_itself(snapshot):
    coordinator = AssignmentCoordinator()
    handle = coordinator.propose("t4", "luis", 570)
    assert coordinator.commit(handle, snapshot).start == 570


def test_conflict_names_blocking_tasks(snapshot):
    coordinator = AssignmentCoordinator()
    handle = coordinator.propose("t4", "ana", 600)
    with pytest.raises(ConflictError) as e:
        coordinator.commit(handle, snapshot)
    assert [t.id for t in e.value.blocking] == ["t2", "t3"]
    assert "t2" in str(e.value) and "t3" in str(e.value)
    assert handle.status == ProposalStatus.rejected
    assert coordinator.state == CoordinatorState.idle
    # recoverable, a new proposal goes through
    handle = coordinator.propose("t4", "ana", 660)
    assert coordinator.commit(handle, snapshot).start == 660


def test_touching_slot_is_free(snapshot):
    coordinator = AssignmentCoordinator()
    handle = coordinator.propose("t5", "ana", 660)
    assert coordinator.commit(handle, snapshot).end == 720


@pytest.mark.parametrize("worker", ["marta", "nobody"])
def test_worker_not_eligible(snapshot, worker):
    coordinator = AssignmentCoordinator()
    handle = coordinator.propose("t5", worker, 720)
    with pytest.raises(ConflictError) as e:
        coordinator.commit(handle, snapshot)
    assert e.value.blocking == []
    assert coordinator.state == CoordinatorState.idle


def test_superseded_proposal(snapshot):
    coordinator = AssignmentCoordinator()
    p1 = coordinator.propose("t5", "luis", 720)
    p2 = coordinator.propose("t5", "ana", 720)
    assert p1.status == ProposalStatus.rejected
    assert p1.reason == "superseded"
    with pytest.raises(StaleProposalError):
        coordinator.commit(p1, snapshot)
    assert coordinator.commit(p2, snapshot).worker_id == "ana"
    assert p1.status == ProposalStatus.rejected


def test_prevalidation_on_propose(snapshot):
    coordinator = AssignmentCoordinator()
    with pytest.raises(ConflictError):
        coordinator.propose("t4", "ana", 540, snapshot=snapshot)
    assert coordinator.state == CoordinatorState.idle


def test_commit_revalidates_fresh_snapshot(tasks, workers):
    coordinator = AssignmentCoordinator()
    handle = coordinator.propose("t5", "luis", 720, snapshot=Snapshot(tasks=tasks, workers=workers))
    # visual feedback allows any slot while proposed
    assert coordinator.accepts_drop("luis", 540)
    # meanwhile somebody else booked luis at noon
    fresh = Snapshot(tasks=tasks + [make_task("t6", "luis", 700, 760)], workers=workers)
    with pytest.raises(ConflictError):
        coordinator.commit(handle, fresh)
    assert not coordinator.accepts_drop("luis", 540)


def test_task_gone_at_commit(tasks, workers):
    coordinator = AssignmentCoordinator()
    handle = coordinator.propose("t5", "luis", 720)
    fresh = Snapshot(tasks=[t for t in tasks if t.id != "t5"], workers=workers)
    with pytest.raises(StaleProposalError):
        coordinator.commit(handle, fresh)
    assert coordinator.state == CoordinatorState.idle


def test_out_of_day(snapshot):
    coordinator = AssignmentCoordinator()
    with pytest.raises(OutOfRangeError):
        coordinator.propose("t5", "luis", 1440)
    handle = coordinator.propose("t4", "luis", 1380)
    with pytest.raises(OutOfRangeError):
        coordinator.commit(handle, snapshot)
    assert handle.status == ProposalStatus.rejected


def test_cancel(snapshot):
    coordinator = AssignmentCoordinator()
    handle = coordinator.propose("t5", "luis", 720)
    coordinator.cancel(handle)
    assert handle.status == ProposalStatus.rejected
    assert handle.reason == "cancelled"
    with pytest.raises(StaleProposalError):
        coordinator.commit(handle, snapshot)
    with pytest.raises(StaleProposalError):
        coordinator.cancel(handle)


def test_single_in_flight(snapshot):
    coordinator = AssignmentCoordinator()
    handle = coordinator.propose("t5", "luis", 720)
    coordinator.commit(handle, snapshot)
    with pytest.raises(AssignmentInFlightError):
        coordinator.propose("t4", "ana", 660)
    with pytest.raises(AssignmentInFlightError):
        coordinator.cancel(handle)
    coordinator.acknowledge(handle, ok=True)
    coordinator.propose("t4", "ana", 660)


def test_acknowledge_failure_surfaces_verbatim(snapshot):
    coordinator = AssignmentCoordinator()
    handle = coordinator.propose("t5", "luis", 720)
    coordinator.commit(handle, snapshot)
    error = RuntimeError("row locked")
    with pytest.raises(RuntimeError) as e:
        coordinator.acknowledge(handle, ok=False, error=error)
    assert e.value is error
    assert handle.status == ProposalStatus.failed
    assert coordinator.state == CoordinatorState.idle

    handle = coordinator.propose("t5", "luis", 720)
    coordinator.commit(handle, snapshot)
    with pytest.raises(PersistenceError):
        coordinator.acknowledge(handle, ok=False)


def test_acknowledge_requires_commit(snapshot):
    coordinator = AssignmentCoordinator()
    handle = coordinator.propose("t5", "luis", 720)
    with pytest.raises(StaleProposalError):
        coordinator.acknowledge(handle, ok=True)


def test_dispatch(snapshot):
    coordinator = AssignmentCoordinator()
    written: list[MutationRequest] = []
    handle = coordinator.propose("t5", "luis", 720)
    request = coordinator.dispatch(handle, snapshot, written.append)
    assert written == [request]
    assert handle.status == ProposalStatus.acknowledged

    def failing(request: MutationRequest) -> None:
        raise KeyError(request.task_id)

    handle = coordinator.propose("t5", "luis", 720)
    with pytest.raises(KeyError):
        coordinator.dispatch(handle, snapshot, failing)
    assert handle.status == ProposalStatus.failed
    assert coordinator.state == CoordinatorState.idle


def test_out_of_day_proposal_still_supersedes():
    coordinator = AssignmentCoordinator()
    p1 = coordinator.propose("t5", "luis", 720)
    with pytest.raises(OutOfRangeError):
        coordinator.propose("t4", "ana", 1500)
    assert p1.status == ProposalStatus.rejected
    assert p1.reason == "superseded"
    assert coordinator.state == CoordinatorState.idle


def test_dispatch_interrupted(snapshot):
    coordinator = AssignmentCoordinator()

    def interrupted(request: MutationRequest) -> None:
        raise KeyboardInterrupt

    handle = coordinator.propose("t5", "luis", 720)
    with pytest.raises(KeyboardInterrupt):
        coordinator.dispatch(handle, snapshot, interrupted)
    assert handle.status == ProposalStatus.failed
    assert handle.is_resolved
    assert coordinator.state == CoordinatorState.idle
    # not stuck in committed
    coordinator.propose("t5", "luis", 720)


def test_resolved_handles(snapshot):
    coordinator = AssignmentCoordinator()
    handle = coordinator.propose("t5", "luis", 720)
    assert not handle.is_resolved
    coordinator.commit(handle, snapshot)
    assert not handle.is_resolved
    coordinator.acknowledge(handle, ok=True)
    assert handle.is_resolved
    with pytest.raises(StaleProposalError):
        coordinator.acknowledge(handle, ok=True)
