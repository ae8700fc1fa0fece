"""
Core data structures -- prescribes most of the API
"""

from enum import Enum
from typing import Literal, Union

from pydantic import BaseModel, Field, model_validator

from cleanplan.config import MINUTES_PER_DAY
from cleanplan.low.errors import InvalidDurationError, OutOfRangeError

# NOTE all times are integer minutes since midnight. An interval end may equal MINUTES_PER_DAY,
# ie, a task may finish exactly at midnight, but no task may start there
TimeOfDay = int
WorkerId = str
TaskId = str


def check_time(t: TimeOfDay, allow_end_of_day: bool = False) -> TimeOfDay:
    upper = MINUTES_PER_DAY if allow_end_of_day else MINUTES_PER_DAY - 1
    if not (0 <= t <= upper):
        raise OutOfRangeError(f"time {t} outside of the day [0, {MINUTES_PER_DAY})")
    return t


def check_duration(duration: int) -> int:
    if duration <= 0:
        raise InvalidDurationError(f"duration must be positive, got {duration}")
    return duration


class Interval(BaseModel, frozen=True):
    """Half-open time range [start, end)"""

    start: TimeOfDay
    end: TimeOfDay

    @model_validator(mode="after")
    def _nondegenerate(self) -> "Interval":
        if not (0 <= self.start < self.end <= MINUTES_PER_DAY):
            raise ValueError(f"malformed interval [{self.start}, {self.end})")
        return self

    @classmethod
    def of(cls, start: TimeOfDay, duration: int) -> "Interval":
        """Checks the parts before construction, so that callers get the domain errors rather than pydantic's"""
        check_time(start)
        check_duration(duration)
        check_time(start + duration, allow_end_of_day=True)
        return cls(start=start, end=start + duration)

    @property
    def duration(self) -> int:
        return self.end - self.start

    def shifted_to(self, start: TimeOfDay) -> "Interval":
        return Interval.of(start, self.duration)


class Worker(BaseModel, frozen=True):
    id: WorkerId
    display_name: str
    # eligibility only -- inactive workers keep their tasks but cannot receive new ones
    active: bool = True


class TaskStatus(str, Enum):
    pending = "pending"
    in_progress = "in_progress"
    completed = "completed"


class Task(BaseModel, frozen=True):
    id: TaskId | None = Field(None, description="None until the persistence layer stores the task")
    worker_id: WorkerId | None = None
    interval: Interval
    duration_minutes: int
    cost_amount: float = 0.0
    property_ref: str
    address: str = ""
    status: TaskStatus = TaskStatus.pending

    @property
    def is_assigned(self) -> bool:
        return self.worker_id is not None


class ItemDuration(BaseModel):
    duration_minutes: int


class ItemStaticData(ItemDuration):
    """Per-property data of one selected work item in a batch"""

    property_ref: str
    address: str = ""
    cost_amount: float = 0.0


# Distribution policies
class NoAssignment(BaseModel, frozen=True):
    kind: Literal["none"] = "none"


class SingleAssignee(BaseModel, frozen=True):
    kind: Literal["single"] = "single"
    worker_id: WorkerId


class RoundRobin(BaseModel, frozen=True):
    kind: Literal["round_robin"] = "round_robin"
    # NOTE order matters, item i goes to worker_ids[i % len(worker_ids)]
    worker_ids: list[WorkerId]


Assignment = Union[NoAssignment, SingleAssignee, RoundRobin]


class DistributionPolicy(BaseModel, frozen=True):
    assignment: Assignment = Field(discriminator="kind")
    auto_scale: bool = Field(
        False,
        description="derive start times from cumulative durations instead of a fixed base start",
    )

    @classmethod
    def none(cls) -> "DistributionPolicy":
        return cls(assignment=NoAssignment())

    @classmethod
    def single(cls, worker_id: WorkerId, auto_scale: bool = False) -> "DistributionPolicy":
        return cls(assignment=SingleAssignee(worker_id=worker_id), auto_scale=auto_scale)

    @classmethod
    def round_robin(cls, worker_ids: list[WorkerId], auto_scale: bool = False) -> "DistributionPolicy":
        return cls(assignment=RoundRobin(worker_ids=list(worker_ids)), auto_scale=auto_scale)


class PlannedSlot(BaseModel, frozen=True):
    item_index: int
    worker_id: WorkerId | None
    start: TimeOfDay


class OverlapInfo(BaseModel, frozen=True):
    task_id: TaskId | None
    group_size: int
    rank: int


class MutationRequest(BaseModel, frozen=True):
    """What the coordinator asks the persistence collaborator to write"""

    task_id: TaskId
    worker_id: WorkerId
    start: TimeOfDay
    end: TimeOfDay
