"""Unit tests for check-in ingestion."""
from __future__ import annotations

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from cronmonitor.models.monitor import Monitor
from cronmonitor.services.monitor_service import MonitorService
from cronmonitor.services.ping_service import PingService
from cronmonitor.utils.exceptions import (
    InvalidInputError,
    MonitorNotFoundError,
    StoreFailureError,
)

T0 = 1_700_000_000_000


@pytest.mark.unit
async def test_first_ping_moves_new_to_up(
    test_db: AsyncSession, sample_monitor: Monitor
) -> None:
    service = PingService(test_db)
    monitor = await service.ingest(sample_monitor.id, now=T0 + 1_000)

    assert monitor.status == "up"
    assert monitor.failure_count == 0
    assert monitor.last_ping == T0 + 1_000

    pings = await MonitorService(test_db).list_recent_pings(sample_monitor.id)
    assert len(pings) == 1
    assert pings[0].timestamp == T0 + 1_000
    assert pings[0].status == "success"


@pytest.mark.unit
async def test_ping_recovers_down_monitor(
    test_db: AsyncSession, sample_monitor: Monitor
) -> None:
    sample_monitor.status = "down"
    sample_monitor.failure_count = 3
    await test_db.commit()

    monitor = await PingService(test_db).ingest(sample_monitor.id, now=T0 + 500_000)

    assert monitor.status == "up"
    assert monitor.failure_count == 0
    assert monitor.last_ping == T0 + 500_000


@pytest.mark.unit
async def test_consecutive_pings_keep_latest(
    test_db: AsyncSession, sample_monitor: Monitor
) -> None:
    service = PingService(test_db)
    await service.ingest(sample_monitor.id, now=T0 + 10)
    monitor = await service.ingest(sample_monitor.id, now=T0 + 11)

    assert monitor.status == "up"
    assert monitor.failure_count == 0
    assert monitor.last_ping == T0 + 11

    pings = await MonitorService(test_db).list_recent_pings(sample_monitor.id)
    assert [p.timestamp for p in pings] == [T0 + 11, T0 + 10]


@pytest.mark.unit
async def test_out_of_order_ping_is_logged_without_rewinding(
    test_db: AsyncSession, sample_monitor: Monitor
) -> None:
    service = PingService(test_db)
    await service.ingest(sample_monitor.id, now=T0 + 20)
    monitor = await service.ingest(sample_monitor.id, now=T0 + 5)

    assert monitor.last_ping == T0 + 20
    pings = await MonitorService(test_db).list_recent_pings(sample_monitor.id)
    assert len(pings) == 2


@pytest.mark.unit
async def test_unknown_monitor(test_db: AsyncSession) -> None:
    with pytest.raises(MonitorNotFoundError) as exc_info:
        await PingService(test_db).ingest("does-not-exist", now=T0)
    assert exc_info.value.monitor_id == "does-not-exist"


@pytest.mark.unit
@pytest.mark.parametrize("monitor_id", [None, "", "   "])
async def test_missing_monitor_id(test_db: AsyncSession, monitor_id) -> None:
    with pytest.raises(InvalidInputError):
        await PingService(test_db).ingest(monitor_id, now=T0)


@pytest.mark.unit
async def test_store_failure_is_wrapped(
    test_db: AsyncSession, sample_monitor: Monitor, monkeypatch
) -> None:
    async def _broken(self, monitor_id, timestamp, status=None):
        raise OperationalError("INSERT INTO pings", {}, Exception("disk I/O error"))

    monkeypatch.setattr(MonitorService, "record_ping", _broken)

    with pytest.raises(StoreFailureError) as exc_info:
        await PingService(test_db).ingest(sample_monitor.id, now=T0)
    assert exc_info.value.operation == "ingest"
