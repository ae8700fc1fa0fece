"""
Command line entrypoint

Example:
```
python -m cleanplan grid --day_start 06:00 --day_end 22:00 --step 30
python -m cleanplan plan batch.json
```

where batch.json looks like
```
{
  "base_start": "09:00",
  "policy": {"assignment": {"kind": "round_robin", "worker_ids": ["ana", "luis"]}, "auto_scale": true},
  "items": [{"property_ref": "Apt 1", "duration_minutes": 90, "cost_amount": 45.0}]
}
```
"""

import logging
import logging.config
from pathlib import Path

import fire
from pydantic import BaseModel

from cleanplan.config import logging_config
from cleanplan.grid import TimeGrid, clock_to_minutes
from cleanplan.low.core import DistributionPolicy, ItemStaticData
from cleanplan.scheduler.batch import generate_batch

logger = logging.getLogger("cleanplan.main")


class BatchRequest(BaseModel):
    base_start: str
    policy: DistributionPolicy
    items: list[ItemStaticData]


def grid(day_start: str = "06:00", day_end: str = "22:00", step: int = 30) -> list[str]:
    """Lists the slot labels of the day grid"""
    return TimeGrid(clock_to_minutes(day_start), clock_to_minutes(day_end), step).labels()


def plan(path: str) -> str:
    """Generates the tasks of a batch request, printed as one json document per line"""
    request = BatchRequest.model_validate_json(Path(path).read_text())
    logger.debug(f"read batch request of {len(request.items)} items from {path}")
    tasks = generate_batch(request.items, request.policy, clock_to_minutes(request.base_start))
    return "\n".join(task.model_dump_json(exclude={"id"}) for task in tasks)


def main() -> None:
    logging.config.dictConfig(logging_config)
    fire.Fire({"grid": grid, "plan": plan})


if __name__ == "__main__":
    main()
