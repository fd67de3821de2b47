from __future__ import annotations

from cronmonitor.utils.exceptions import (
    AlertDeliveryError,
    CronMonitorException,
    InvalidInputError,
    MonitorNotFoundError,
    StoreFailureError,
)
from cronmonitor.utils.logging import get_logger, setup_logging
from cronmonitor.utils.time import ms_to_datetime, now_ms

__all__ = [
    "setup_logging",
    "get_logger",
    "now_ms",
    "ms_to_datetime",
    "CronMonitorException",
    "MonitorNotFoundError",
    "InvalidInputError",
    "StoreFailureError",
    "AlertDeliveryError",
]
