from __future__ import annotations

from cronmonitor.services.monitor_service import MonitorService
from cronmonitor.services.ping_service import PingService
from cronmonitor.services.reconciler import Reconciliation, reconcile
from cronmonitor.services.schedule import (
    DEFAULT_INTERVAL_MS,
    is_valid_schedule,
    parse_schedule,
)

__all__ = [
    "MonitorService",
    "PingService",
    "Reconciliation",
    "reconcile",
    "parse_schedule",
    "is_valid_schedule",
    "DEFAULT_INTERVAL_MS",
]
