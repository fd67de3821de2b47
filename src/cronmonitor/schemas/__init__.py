from __future__ import annotations

from cronmonitor.schemas.monitor import (
    MonitorCreate,
    MonitorDetail,
    MonitorList,
    MonitorResponse,
)
from cronmonitor.schemas.ping import PingResponse

__all__ = [
    # Monitor
    "MonitorCreate",
    "MonitorResponse",
    "MonitorDetail",
    "MonitorList",
    # Ping
    "PingResponse",
]
