"""
This module coordinates a single "move task X to worker Y at time T" operation, as issued
by a drag and drop on the calendar: a proposal is validated against the caller's current
snapshot of tasks and workers, committed into a mutation request for the persistence layer,
and resolved once that layer acknowledges.

The module is organised as follows:
 - core defines data structures such as ProposalHandle, ProposalStatus, Snapshot
 - coordinator implements the state machine itself
"""

from cleanplan.controller.coordinator import AssignmentCoordinator
from cleanplan.controller.core import CoordinatorState, ProposalHandle, ProposalStatus, Snapshot

__all__ = [
    "AssignmentCoordinator",
    "CoordinatorState",
    "ProposalHandle",
    "ProposalStatus",
    "Snapshot",
]
