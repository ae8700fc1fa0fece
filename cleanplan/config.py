"""
Defaults of the business day and batch limits, plus the logging config used by entrypoints.

Values can be overridden via environment variables, read once at import time
"""

import os

# minutes since midnight
DAY_START = int(os.environ.get("CLEANPLAN_DAY_START", 6 * 60))
DAY_END = int(os.environ.get("CLEANPLAN_DAY_END", 22 * 60))
STEP_MINUTES = int(os.environ.get("CLEANPLAN_STEP", 30))

MINUTES_PER_DAY = 24 * 60

# calendar rendering: one slot cell is this wide, tasks never narrower than the minimum
SLOT_WIDTH_PX = 60
MIN_TASK_WIDTH_PX = 100
Z_INDEX_SINGLE = 10
Z_INDEX_STACKED = 20

MAX_BATCH_SIZE = int(os.environ.get("CLEANPLAN_MAX_BATCH", 50))

logging_config = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {
            "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "default",
            "stream": "ext://sys.stderr",
        },
    },
    "loggers": {
        "cleanplan": {
            "level": os.environ.get("CLEANPLAN_LOG_LEVEL", "INFO"),
            "handlers": ["console"],
            "propagate": False,
        },
    },
}
