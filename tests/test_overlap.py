import itertools

import pytest
from conftest import make_task

from cleanplan.low.core import Interval
from cleanplan.overlap import detect_overlaps, is_slot_occupied, overlaps, place_tasks, resolve_overlaps

intervals = [Interval(start=s, end=e) for s, e in [(540, 600), (570, 630), (600, 660), (0, 1440), (1380, 1440)]]


@pytest.mark.parametrize("a, b", list(itertools.product(intervals, intervals)))
def test_overlaps_symmetric(a, b):
    assert overlaps(a, b) == overlaps(b, a)
    assert overlaps(a, a)


def test_touching_intervals_do_not_overlap():
    assert not overlaps(Interval(start=540, end=600), Interval(start=600, end=660))


def test_resolve_empty():
    assert resolve_overlaps("ana", []) == []


def test_resolve_chain(tasks):
    infos = resolve_overlaps("ana", tasks)
    assert [(i.task_id, i.group_size, i.rank) for i in infos] == [
        ("t1", 1, 0),
        ("t2", 2, 1),
        # t1 has ended exactly when t3 starts
        ("t3", 2, 1),
    ]


def test_resolve_ignores_other_workers(tasks):
    infos = resolve_overlaps("luis", tasks)
    assert [(i.task_id, i.group_size, i.rank) for i in infos] == [("t4", 1, 0)]


def test_resolve_ties_by_id():
    tasks = [make_task("b", "ana", 540, 600), make_task("a", "ana", 540, 600), make_task("c", "ana", 540, 570)]
    infos = resolve_overlaps("ana", tasks)
    assert [(i.task_id, i.rank) for i in infos] == [("a", 0), ("b", 1), ("c", 2)]
    # input order does not matter
    assert resolve_overlaps("ana", list(reversed(tasks))) == infos


def test_non_overlapping_tasks_rank_zero():
    tasks = [make_task(str(i), "ana", 360 + 60 * i, 420 + 60 * i) for i in range(5)]
    assert all(i.rank == 0 and i.group_size == 1 for i in resolve_overlaps("ana", tasks))


def test_detect_overlaps(tasks):
    blocking = detect_overlaps("ana", Interval(start=590, end=610), tasks)
    assert [t.id for t in blocking] == ["t1", "t2", "t3"]
    blocking = detect_overlaps("ana", Interval(start=590, end=610), tasks, exclude_task_id="t2")
    assert [t.id for t in blocking] == ["t1", "t3"]
    assert detect_overlaps("ana", Interval(start=660, end=720), tasks) == []


def test_slot_occupied(tasks):
    assert is_slot_occupied("ana", 540, tasks)
    assert not is_slot_occupied("ana", 660, tasks)
    assert not is_slot_occupied("luis", 660, tasks)
    assert not is_slot_occupied("ana", 540, tasks, exclude_task_id="t1")


def test_place_tasks(tasks, grid):
    placements = {task.id: placement for task, placement in place_tasks("ana", tasks, grid)}
    assert set(placements) == {"t1", "t2", "t3"}
    assert placements["t1"].top_pct == 0
    assert placements["t1"].height_pct == 100
    assert placements["t1"].z_index == 10
    assert not placements["t1"].has_overlap
    assert placements["t2"].top_pct == 50
    assert placements["t2"].height_pct == 50
    assert placements["t2"].z_index == 20
    assert placements["t2"].left_px == 420.0
