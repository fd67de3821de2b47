from __future__ import annotations

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cronmonitor.models.monitor import Monitor, MonitorStatus
from cronmonitor.services.monitor_service import MonitorService
from cronmonitor.utils.exceptions import (
    InvalidInputError,
    MonitorNotFoundError,
    StoreFailureError,
)
from cronmonitor.utils.time import now_ms

logger = structlog.get_logger(__name__)


class PingService:
    """Check-in ingestion: the only path that brings a monitor back ``up``."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.store = MonitorService(db)

    async def ingest(self, monitor_id: str | None, now: int | None = None) -> Monitor:
        """
        Record a successful check-in for a monitor.

        Appends a ping row and marks the monitor ``up`` with a zero failure
        count, inside the caller's transaction.

        Args:
            monitor_id: Monitor identifier taken from the ping URL
            now: Ping time in epoch milliseconds, defaults to the wall clock

        Returns:
            The updated monitor

        Raises:
            InvalidInputError: If the identifier is missing or blank
            MonitorNotFoundError: If no monitor has this identifier
            StoreFailureError: If the store fails while reading or writing
        """
        if not monitor_id or not monitor_id.strip():
            raise InvalidInputError("Missing monitor ID")

        timestamp = now if now is not None else now_ms()

        try:
            monitor = await self.store.get_monitor(monitor_id)
            if monitor is None:
                logger.info("ping_unknown_monitor", monitor_id=monitor_id)
                raise MonitorNotFoundError(monitor_id)

            previous_status = monitor.status
            await self.store.record_ping(monitor_id, timestamp)
            await self.store.mark_pinged_ok(monitor_id, timestamp)
            await self.db.refresh(monitor)

        except SQLAlchemyError as exc:
            logger.error(
                "ping_store_failure",
                monitor_id=monitor_id,
                error=str(exc),
            )
            raise StoreFailureError("ingest", str(exc)) from exc

        if previous_status != monitor.status:
            event = (
                "monitor_recovered"
                if previous_status == MonitorStatus.DOWN.value
                else "monitor_first_ping"
            )
            logger.info(
                event,
                monitor_id=monitor.id,
                name=monitor.name,
                previous_status=previous_status,
            )

        logger.info(
            "ping_recorded",
            monitor_id=monitor.id,
            timestamp=timestamp,
        )

        return monitor
