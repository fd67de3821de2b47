from __future__ import annotations

import structlog
from sqlalchemy import case, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from cronmonitor.models.monitor import ACTIVE_STATUSES, Monitor, MonitorStatus
from cronmonitor.models.ping import Ping, PingStatus
from cronmonitor.schemas.monitor import MonitorCreate
from cronmonitor.services.schedule import DEFAULT_INTERVAL_MS, is_valid_schedule
from cronmonitor.utils.time import now_ms

logger = structlog.get_logger(__name__)


class MonitorService:
    """Monitor record store: monitor metadata and ping history."""

    def __init__(self, db: AsyncSession, default_grace_seconds: int = 60):
        self.db = db
        self.default_grace_seconds = default_grace_seconds

    async def create_monitor(
        self,
        data: MonitorCreate,
        now: int | None = None,
    ) -> Monitor:
        """
        Create a new monitor in the ``new`` state.

        Args:
            data: Monitor creation data
            now: Creation time in epoch milliseconds, defaults to the wall clock

        Returns:
            Created monitor
        """
        grace_seconds = data.grace_seconds
        if grace_seconds is None:
            grace_seconds = self.default_grace_seconds

        monitor = Monitor(
            name=data.name,
            schedule=data.schedule,
            grace_seconds=grace_seconds,
            alert_webhook=str(data.alert_webhook) if data.alert_webhook else None,
            alert_email=str(data.alert_email) if data.alert_email else None,
            created_at=now if now is not None else now_ms(),
            status=MonitorStatus.NEW.value,
            failure_count=0,
        )
        self.db.add(monitor)
        await self.db.flush()
        await self.db.refresh(monitor)

        if not is_valid_schedule(monitor.schedule):
            logger.warning(
                "schedule_fallback_applied",
                monitor_id=monitor.id,
                schedule=monitor.schedule,
                fallback_ms=DEFAULT_INTERVAL_MS,
            )

        logger.info(
            "monitor_created",
            monitor_id=monitor.id,
            name=monitor.name,
            schedule=monitor.schedule,
            grace_seconds=monitor.grace_seconds,
        )

        return monitor

    async def get_monitor(self, monitor_id: str) -> Monitor | None:
        """
        Get monitor by ID.

        Args:
            monitor_id: Monitor identifier

        Returns:
            Monitor if found, None otherwise
        """
        stmt = select(Monitor).where(Monitor.id == monitor_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def list_monitors(
        self,
        skip: int = 0,
        limit: int = 100,
    ) -> tuple[list[Monitor], int]:
        """
        List monitors newest first, with pagination and total count.

        Args:
            skip: Number of records to skip
            limit: Maximum number of records to return

        Returns:
            A tuple containing the list of monitors and the total count
        """
        base_stmt = select(Monitor)

        count_stmt = select(func.count()).select_from(base_stmt.subquery())
        total_result = await self.db.execute(count_stmt)
        total = total_result.scalar() or 0

        stmt = (
            base_stmt.order_by(Monitor.created_at.desc(), Monitor.id)
            .offset(skip)
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        monitors = list(result.scalars().all())

        return monitors, total

    async def list_active_monitors(self) -> list[Monitor]:
        """Return every monitor the sweep must evaluate (``new``, ``up``, ``down``)."""
        stmt = (
            select(Monitor)
            .where(Monitor.status.in_([s.value for s in ACTIVE_STATUSES]))
            .order_by(Monitor.created_at)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def list_recent_pings(self, monitor_id: str, limit: int = 50) -> list[Ping]:
        """
        Get the most recent pings for a monitor, newest first.

        Args:
            monitor_id: Monitor identifier
            limit: Maximum number of pings to return

        Returns:
            List of pings
        """
        stmt = (
            select(Ping)
            .where(Ping.monitor_id == monitor_id)
            .order_by(Ping.timestamp.desc(), Ping.id.desc())
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def record_ping(
        self,
        monitor_id: str,
        timestamp: int,
        status: PingStatus = PingStatus.SUCCESS,
    ) -> Ping:
        """Append a ping to the monitor's log."""
        ping = Ping(monitor_id=monitor_id, timestamp=timestamp, status=status.value)
        self.db.add(ping)
        await self.db.flush()
        return ping

    async def mark_pinged_ok(self, monitor_id: str, timestamp: int) -> bool:
        """
        Mark a monitor as alive after a successful ping.

        Sets ``status`` to ``up`` and resets ``failure_count``. ``last_ping``
        only ever moves forward, so a late-arriving older ping cannot rewind it.

        Args:
            monitor_id: Monitor identifier
            timestamp: Ping time in epoch milliseconds

        Returns:
            True if the monitor row was updated, False if it does not exist
        """
        stmt = (
            update(Monitor)
            .where(Monitor.id == monitor_id)
            .values(
                last_ping=case(
                    (Monitor.last_ping.is_(None), timestamp),
                    (Monitor.last_ping < timestamp, timestamp),
                    else_=Monitor.last_ping,
                ),
                status=MonitorStatus.UP.value,
                failure_count=0,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount == 1

    async def mark_overdue(
        self,
        monitor_id: str,
        new_failure_count: int,
        observed_last_ping: int | None,
    ) -> bool:
        """
        Move a monitor to ``down`` with an incremented failure count.

        The update is conditional on the row still holding the ``last_ping``
        and ``failure_count`` the caller evaluated. A ping or another sweep
        that touched the row in the meantime makes this a no-op.

        Args:
            monitor_id: Monitor identifier
            new_failure_count: Failure count to store
            observed_last_ping: ``last_ping`` value the overdue decision was based on

        Returns:
            True if the transition was applied, False if the row changed or is gone
        """
        stmt = update(Monitor).where(
            Monitor.id == monitor_id,
            Monitor.failure_count == new_failure_count - 1,
        )
        if observed_last_ping is None:
            stmt = stmt.where(Monitor.last_ping.is_(None))
        else:
            stmt = stmt.where(Monitor.last_ping == observed_last_ping)

        stmt = stmt.values(
            status=MonitorStatus.DOWN.value,
            failure_count=new_failure_count,
        ).execution_options(synchronize_session=False)

        result = await self.db.execute(stmt)
        return result.rowcount == 1

    async def delete_monitor_and_pings(self, monitor_id: str) -> bool:
        """
        Delete a monitor together with its whole ping history.

        Args:
            monitor_id: Monitor identifier

        Returns:
            True if deleted, False if not found
        """
        await self.db.execute(delete(Ping).where(Ping.monitor_id == monitor_id))
        result = await self.db.execute(delete(Monitor).where(Monitor.id == monitor_id))
        deleted = result.rowcount == 1

        if deleted:
            logger.info("monitor_deleted", monitor_id=monitor_id)

        return deleted

    async def count_by_status(self) -> dict[str, int]:
        """Number of monitors in each status."""
        stmt = select(Monitor.status, func.count(Monitor.id)).group_by(Monitor.status)
        result = await self.db.execute(stmt)
        counts = {status.value: 0 for status in MonitorStatus}
        for status, count in result.all():
            counts[status] = count
        return counts

    async def count_pings(self) -> int:
        result = await self.db.execute(select(func.count(Ping.id)))
        return result.scalar() or 0
