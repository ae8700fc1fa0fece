"""
The schedulable day as a discrete sequence of slots, and conversions between clock
time, grid slots and render offsets. Pure functions, no state
"""

import re
from dataclasses import dataclass
from typing import Iterator

import numpy as np

from cleanplan.config import DAY_END, DAY_START, MIN_TASK_WIDTH_PX, SLOT_WIDTH_PX, STEP_MINUTES
from cleanplan.low.core import Interval, TimeOfDay, check_time
from cleanplan.low.errors import OutOfRangeError

_clock_re = re.compile(r"^(\d{1,2}):(\d{2})$")


def minutes_to_clock(m: TimeOfDay) -> str:
    """540 -> '09:00'"""
    check_time(m)
    return f"{m // 60:02d}:{m % 60:02d}"


def clock_to_minutes(clock: str) -> TimeOfDay:
    """'09:00' -> 540. Malformed strings raise ValueError, times outside the day OutOfRangeError"""
    match = _clock_re.match(clock.strip())
    if not match:
        raise ValueError(f"not a HH:MM clock time: {clock!r}")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if minutes >= 60:
        raise OutOfRangeError(f"minutes out of range in {clock!r}")
    return check_time(hours * 60 + minutes)


def compute_grid(
    day_start: TimeOfDay = DAY_START, day_end: TimeOfDay = DAY_END, step: int = STEP_MINUTES
) -> list[TimeOfDay]:
    """Slot boundaries from day_start up to and including day_end"""
    check_time(day_start)
    check_time(day_end)
    if step <= 0:
        raise ValueError(f"grid step must be positive, got {step}")
    if day_end < day_start:
        raise OutOfRangeError(f"day end {day_end} before day start {day_start}")
    return [int(t) for t in np.arange(day_start, day_end + 1, step)]


def to_offset(t: TimeOfDay, day_start: TimeOfDay, span: int) -> float:
    """Fraction of the visible day elapsed at `t`, for left/width positioning"""
    if span <= 0:
        raise ValueError(f"span must be positive, got {span}")
    if not (day_start <= t <= day_start + span):
        raise OutOfRangeError(f"time {t} outside of the visible day [{day_start}, {day_start + span}]")
    return (t - day_start) / span


@dataclass(frozen=True)
class TimeGrid:
    day_start: TimeOfDay = DAY_START
    day_end: TimeOfDay = DAY_END
    step: int = STEP_MINUTES
    slot_width_px: int = SLOT_WIDTH_PX

    def __post_init__(self) -> None:
        # validates bounds and step eagerly
        compute_grid(self.day_start, self.day_end, self.step)

    @property
    def span(self) -> int:
        return self.day_end - self.day_start

    def slots(self) -> Iterator[TimeOfDay]:
        """Restartable -- every call yields the full sequence anew"""
        yield from compute_grid(self.day_start, self.day_end, self.step)

    def cells(self) -> Iterator[TimeOfDay]:
        """Slots which begin a full cell before the day end, ie, valid drop targets"""
        for slot in self.slots():
            if slot + self.step <= self.day_end:
                yield slot

    def labels(self) -> list[str]:
        return [minutes_to_clock(slot) for slot in self.slots()]

    def snap(self, t: TimeOfDay) -> TimeOfDay:
        """Rounds down to the nearest slot boundary, clamped to the visible day"""
        check_time(t, allow_end_of_day=True)
        t = min(max(t, self.day_start), self.day_end)
        return self.day_start + ((t - self.day_start) // self.step) * self.step

    def to_offset(self, t: TimeOfDay) -> float:
        return to_offset(t, self.day_start, self.span)

    def fractions(self, interval: Interval) -> tuple[float, float]:
        """(left, width) of the interval as fractions of the visible day"""
        left = self.to_offset(interval.start)
        return left, self.to_offset(interval.end) - left

    def position(self, interval: Interval) -> tuple[float, float]:
        """(left, width) in pixels. Tasks starting before the visible day get a negative left"""
        minutes_per_px = self.step / self.slot_width_px
        left = (interval.start - self.day_start) / minutes_per_px
        width = interval.duration / minutes_per_px
        return left, max(width, MIN_TASK_WIDTH_PX)
