from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cronmonitor.config import Settings, get_settings
from cronmonitor.database import get_db
from cronmonitor.services.monitor_service import MonitorService
from cronmonitor.services.ping_service import PingService

# Type alias for database dependency
DbSession = Annotated[AsyncSession, Depends(get_db)]
SettingsDep = Annotated[Settings, Depends(get_settings)]


def get_monitor_service(db: DbSession, settings: SettingsDep) -> MonitorService:
    """Dependency to get the monitor store bound to the request session."""
    return MonitorService(db, default_grace_seconds=settings.default_grace_seconds)


def get_ping_service(db: DbSession) -> PingService:
    """Dependency to get the ping ingestion service."""
    return PingService(db)


MonitorServiceDep = Annotated[MonitorService, Depends(get_monitor_service)]
PingServiceDep = Annotated[PingService, Depends(get_ping_service)]
