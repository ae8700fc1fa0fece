import pytest

from cleanplan.grid import TimeGrid
from cleanplan.low.core import Interval, ItemStaticData, Task, Worker


def make_task(id: str | None, worker: str | None, start: int, end: int, prop: str = "Apt") -> Task:
    return Task(
        id=id,
        worker_id=worker,
        interval=Interval(start=start, end=end),
        duration_minutes=end - start,
        cost_amount=30.0,
        property_ref=f"{prop} {id}",
    )


@pytest.fixture(scope="function")
def workers():
    return [
        Worker(id="ana", display_name="Ana"),
        Worker(id="luis", display_name="Luis"),
        Worker(id="marta", display_name="Marta", active=False),
    ]


@pytest.fixture(scope="function")
def tasks():
    return [
        make_task("t1", "ana", 540, 600),  # 09:00-10:00
        make_task("t2", "ana", 570, 630),  # 09:30-10:30
        make_task("t3", "ana", 600, 660),  # 10:00-11:00
        make_task("t4", "luis", 540, 660),  # 09:00-11:00
        make_task("t5", None, 720, 780),  # unassigned
    ]


@pytest.fixture(scope="function")
def grid():
    return TimeGrid()


@pytest.fixture(scope="function")
def items():
    return [
        ItemStaticData(property_ref="Apt 1", address="Calle Mayor 1", cost_amount=45.0, duration_minutes=60),
        ItemStaticData(property_ref="Apt 2", address="Calle Mayor 2", cost_amount=30.0, duration_minutes=30),
        ItemStaticData(property_ref="Apt 3", address="Calle Mayor 3", cost_amount=50.0, duration_minutes=45),
    ]
