from __future__ import annotations

import asyncio
from dataclasses import dataclass

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from cronmonitor.alerting.dispatcher import AlertDispatcher
from cronmonitor.config import Settings
from cronmonitor.database import AsyncSessionLocal
from cronmonitor.models.monitor import Monitor, MonitorStatus
from cronmonitor.services.monitor_service import MonitorService
from cronmonitor.services.reconciler import Reconciliation, reconcile
from cronmonitor.utils.exceptions import StoreFailureError
from cronmonitor.utils.time import now_ms

logger = structlog.get_logger(__name__)


@dataclass
class SweepReport:
    """Counters for one reconciliation pass."""

    now: int
    evaluated: int = 0
    overdue: int = 0
    skipped: int = 0
    errors: int = 0
    alerts_sent: int = 0
    alerts_failed: int = 0


class LivenessSweeper:
    """Periodically reconciles every active monitor against its schedule."""

    def __init__(
        self,
        dispatcher: AlertDispatcher,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        interval_seconds: float = 60.0,
        monitor_timeout_seconds: float = 10.0,
        max_concurrency: int = 20,
    ):
        self.dispatcher = dispatcher
        self.session_factory = session_factory or AsyncSessionLocal
        self.interval_seconds = interval_seconds
        self.monitor_timeout_seconds = monitor_timeout_seconds
        self.max_concurrency = max_concurrency
        self.running = False

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
    ) -> LivenessSweeper:
        return cls(
            dispatcher=AlertDispatcher.from_settings(settings),
            session_factory=session_factory,
            interval_seconds=settings.sweep_interval_seconds,
            monitor_timeout_seconds=settings.sweep_monitor_timeout_seconds,
            max_concurrency=settings.sweep_max_concurrency,
        )

    async def start(self) -> None:
        """Run a sweep every ``interval_seconds`` until stopped."""
        self.running = True
        logger.info("sweeper_started", interval_seconds=self.interval_seconds)

        while self.running:
            try:
                await self.run_sweep()
            except Exception as exc:
                logger.error("sweep_error", error=str(exc), exc_info=True)
            await asyncio.sleep(self.interval_seconds)

    async def stop(self) -> None:
        """Stop the sweeper after the current pass."""
        self.running = False
        logger.info("sweeper_stopped")

    async def run_sweep(self, now: int | None = None) -> SweepReport:
        """
        Evaluate every active monitor once.

        Monitors are evaluated independently: a store failure, timeout or
        delivery failure on one monitor is logged and never stops the rest
        of the pass.

        Args:
            now: Evaluation time in epoch milliseconds, defaults to the wall clock

        Returns:
            Counters describing the pass

        Raises:
            StoreFailureError: If the active monitors cannot be listed
        """
        now = now if now is not None else now_ms()
        report = SweepReport(now=now)

        try:
            async with self.session_factory() as db:
                monitors = await MonitorService(db).list_active_monitors()
        except SQLAlchemyError as exc:
            logger.error("sweep_list_failed", error=str(exc))
            raise StoreFailureError("list_active_monitors", str(exc)) from exc

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def _guarded(monitor: Monitor) -> None:
            async with semaphore:
                await self._sweep_monitor(monitor, now, report)

        results = await asyncio.gather(
            *(_guarded(monitor) for monitor in monitors),
            return_exceptions=True,
        )

        for monitor, result in zip(monitors, results):
            if isinstance(result, Exception):
                report.errors += 1
                logger.error(
                    "sweep_monitor_failed",
                    monitor_id=monitor.id,
                    monitor_name=monitor.name,
                    error=str(result),
                )

        logger.info(
            "sweep_completed",
            now=now,
            evaluated=report.evaluated,
            overdue=report.overdue,
            skipped=report.skipped,
            errors=report.errors,
            alerts_sent=report.alerts_sent,
            alerts_failed=report.alerts_failed,
        )

        return report

    async def _sweep_monitor(
        self,
        monitor: Monitor,
        now: int,
        report: SweepReport,
    ) -> None:
        """Reconcile one monitor, apply the transition and dispatch its alert."""
        reconciliation = reconcile(monitor, now)
        report.evaluated += 1

        if not reconciliation.overdue:
            return

        try:
            applied = await self._apply_overdue(monitor, reconciliation)
        except asyncio.TimeoutError:
            report.errors += 1
            logger.error(
                "sweep_monitor_timeout",
                monitor_id=monitor.id,
                timeout_seconds=self.monitor_timeout_seconds,
            )
            return
        except SQLAlchemyError as exc:
            report.errors += 1
            logger.error(
                "sweep_store_failure",
                monitor_id=monitor.id,
                error=str(exc),
            )
            return

        if not applied:
            # A ping or another sweep changed the row after it was read
            report.skipped += 1
            logger.info(
                "overdue_transition_skipped",
                monitor_id=monitor.id,
                observed_last_ping=monitor.last_ping,
            )
            return

        report.overdue += 1
        already_down = monitor.status == MonitorStatus.DOWN.value
        logger.warning(
            "monitor_still_down" if already_down else "monitor_down",
            monitor_id=monitor.id,
            monitor_name=monitor.name,
            failure_count=reconciliation.new_failure_count,
            elapsed_ms=reconciliation.elapsed_ms,
            threshold_ms=reconciliation.threshold_ms,
        )

        if reconciliation.alert is None:
            return

        outcomes = await self.dispatcher.dispatch(monitor, reconciliation.alert)
        for outcome in outcomes:
            if outcome.delivered:
                report.alerts_sent += 1
            else:
                report.alerts_failed += 1

    async def _apply_overdue(
        self,
        monitor: Monitor,
        reconciliation: Reconciliation,
    ) -> bool:
        """
        Write the overdue transition in its own transaction.

        Only the UPDATE is bounded by ``monitor_timeout_seconds``. Once it
        has matched the row the commit always runs to completion, so a
        stored transition is never reported as a timeout.
        """
        async with self.session_factory() as db:
            applied = await asyncio.wait_for(
                MonitorService(db).mark_overdue(
                    monitor.id,
                    reconciliation.new_failure_count,
                    observed_last_ping=monitor.last_ping,
                ),
                timeout=self.monitor_timeout_seconds,
            )
            await db.commit()
            return applied
