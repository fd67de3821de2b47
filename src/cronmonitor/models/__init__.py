from __future__ import annotations

from cronmonitor.models.base import Base
from cronmonitor.models.monitor import ACTIVE_STATUSES, Monitor, MonitorStatus
from cronmonitor.models.ping import Ping, PingStatus

__all__ = [
    "Base",
    "Monitor",
    "MonitorStatus",
    "ACTIVE_STATUSES",
    "Ping",
    "PingStatus",
]
