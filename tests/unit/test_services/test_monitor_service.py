"""Unit tests for MonitorService (the monitor record store)."""
from __future__ import annotations

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from cronmonitor.models.monitor import Monitor
from cronmonitor.models.ping import Ping
from cronmonitor.schemas.monitor import MonitorCreate
from cronmonitor.services.monitor_service import MonitorService

T0 = 1_700_000_000_000


async def _ping_count(db: AsyncSession, monitor_id: str) -> int:
    result = await db.execute(
        select(func.count(Ping.id)).where(Ping.monitor_id == monitor_id)
    )
    return result.scalar() or 0


@pytest.mark.unit
async def test_create_monitor(test_db: AsyncSession) -> None:
    service = MonitorService(test_db)
    monitor = await service.create_monitor(
        MonitorCreate(
            name="Nightly backup",
            schedule="1d",
            grace_seconds=300,
            alert_webhook="https://hooks.example.com/alert",
        ),
        now=T0,
    )

    assert monitor.id
    assert monitor.name == "Nightly backup"
    assert monitor.schedule == "1d"
    assert monitor.grace_seconds == 300
    assert monitor.alert_webhook == "https://hooks.example.com/alert"
    assert monitor.alert_email is None
    assert monitor.created_at == T0
    assert monitor.last_ping is None
    assert monitor.status == "new"
    assert monitor.failure_count == 0


@pytest.mark.unit
async def test_create_monitor_default_grace(test_db: AsyncSession) -> None:
    service = MonitorService(test_db, default_grace_seconds=60)
    monitor = await service.create_monitor(MonitorCreate(name="Job", schedule="5m"))
    assert monitor.grace_seconds == 60


@pytest.mark.unit
async def test_create_monitor_keeps_zero_grace(test_db: AsyncSession) -> None:
    service = MonitorService(test_db, default_grace_seconds=60)
    monitor = await service.create_monitor(
        MonitorCreate(name="Job", schedule="5m", grace_seconds=0)
    )
    assert monitor.grace_seconds == 0


@pytest.mark.unit
async def test_create_monitor_accepts_malformed_schedule(test_db: AsyncSession) -> None:
    service = MonitorService(test_db)
    monitor = await service.create_monitor(MonitorCreate(name="Job", schedule="often"))
    assert monitor.schedule == "often"


@pytest.mark.unit
async def test_create_monitor_unique_ids(test_db: AsyncSession) -> None:
    service = MonitorService(test_db)
    a = await service.create_monitor(MonitorCreate(name="A", schedule="5m"))
    b = await service.create_monitor(MonitorCreate(name="B", schedule="5m"))
    assert a.id != b.id


@pytest.mark.unit
async def test_get_monitor(test_db: AsyncSession, sample_monitor: Monitor) -> None:
    service = MonitorService(test_db)
    found = await service.get_monitor(sample_monitor.id)
    assert found is not None
    assert found.name == sample_monitor.name


@pytest.mark.unit
async def test_get_monitor_not_found(test_db: AsyncSession) -> None:
    service = MonitorService(test_db)
    assert await service.get_monitor("does-not-exist") is None


@pytest.mark.unit
async def test_list_monitors_newest_first(test_db: AsyncSession) -> None:
    service = MonitorService(test_db)
    older = await service.create_monitor(MonitorCreate(name="Old", schedule="5m"), now=T0)
    newer = await service.create_monitor(
        MonitorCreate(name="New", schedule="5m"), now=T0 + 1_000
    )

    monitors, total = await service.list_monitors()
    assert total == 2
    assert [m.id for m in monitors] == [newer.id, older.id]


@pytest.mark.unit
async def test_list_monitors_pagination(test_db: AsyncSession) -> None:
    service = MonitorService(test_db)
    for i in range(5):
        await service.create_monitor(
            MonitorCreate(name=f"Job {i}", schedule="5m"), now=T0 + i
        )

    page1, total = await service.list_monitors(skip=0, limit=3)
    page2, _ = await service.list_monitors(skip=3, limit=3)
    assert total == 5
    assert len(page1) == 3
    assert len(page2) == 2


@pytest.mark.unit
async def test_list_active_monitors_covers_all_states(test_db: AsyncSession) -> None:
    for status in ("new", "up", "down"):
        test_db.add(
            Monitor(name=status, schedule="5m", grace_seconds=0, created_at=T0, status=status)
        )
    await test_db.commit()

    service = MonitorService(test_db)
    active = await service.list_active_monitors()
    assert sorted(m.status for m in active) == ["down", "new", "up"]


@pytest.mark.unit
async def test_record_ping(test_db: AsyncSession, sample_monitor: Monitor) -> None:
    service = MonitorService(test_db)
    ping = await service.record_ping(sample_monitor.id, T0 + 5)
    assert ping.id is not None
    assert ping.timestamp == T0 + 5
    assert ping.status == "success"


@pytest.mark.unit
async def test_list_recent_pings_newest_first(
    test_db: AsyncSession, sample_monitor: Monitor
) -> None:
    service = MonitorService(test_db)
    for offset in (1, 3, 2):
        await service.record_ping(sample_monitor.id, T0 + offset)

    pings = await service.list_recent_pings(sample_monitor.id, limit=2)
    assert [p.timestamp for p in pings] == [T0 + 3, T0 + 2]


@pytest.mark.unit
async def test_mark_pinged_ok_resets_down_monitor(
    test_db: AsyncSession, sample_monitor: Monitor
) -> None:
    sample_monitor.status = "down"
    sample_monitor.failure_count = 7
    await test_db.commit()

    service = MonitorService(test_db)
    assert await service.mark_pinged_ok(sample_monitor.id, T0 + 10) is True
    await test_db.refresh(sample_monitor)

    assert sample_monitor.status == "up"
    assert sample_monitor.failure_count == 0
    assert sample_monitor.last_ping == T0 + 10


@pytest.mark.unit
async def test_mark_pinged_ok_never_rewinds_last_ping(
    test_db: AsyncSession, sample_monitor: Monitor
) -> None:
    service = MonitorService(test_db)
    await service.mark_pinged_ok(sample_monitor.id, T0 + 10)
    await service.mark_pinged_ok(sample_monitor.id, T0 + 5)
    await test_db.refresh(sample_monitor)

    assert sample_monitor.last_ping == T0 + 10


@pytest.mark.unit
async def test_mark_pinged_ok_unknown_monitor(test_db: AsyncSession) -> None:
    service = MonitorService(test_db)
    assert await service.mark_pinged_ok("does-not-exist", T0) is False


@pytest.mark.unit
async def test_mark_overdue(test_db: AsyncSession, sample_monitor: Monitor) -> None:
    service = MonitorService(test_db)
    applied = await service.mark_overdue(sample_monitor.id, 1, observed_last_ping=None)
    await test_db.refresh(sample_monitor)

    assert applied is True
    assert sample_monitor.status == "down"
    assert sample_monitor.failure_count == 1


@pytest.mark.unit
async def test_mark_overdue_skips_when_ping_arrived(
    test_db: AsyncSession, sample_monitor: Monitor
) -> None:
    service = MonitorService(test_db)
    # Sweep read the monitor before any ping, then a ping landed
    await service.mark_pinged_ok(sample_monitor.id, T0 + 10)

    applied = await service.mark_overdue(sample_monitor.id, 1, observed_last_ping=None)
    await test_db.refresh(sample_monitor)

    assert applied is False
    assert sample_monitor.status == "up"
    assert sample_monitor.failure_count == 0


@pytest.mark.unit
async def test_mark_overdue_skips_stale_failure_count(
    test_db: AsyncSession, sample_monitor: Monitor
) -> None:
    service = MonitorService(test_db)
    assert await service.mark_overdue(sample_monitor.id, 1, observed_last_ping=None) is True
    # A second sweep that read the same snapshot loses the race
    assert await service.mark_overdue(sample_monitor.id, 1, observed_last_ping=None) is False

    await test_db.refresh(sample_monitor)
    assert sample_monitor.failure_count == 1


@pytest.mark.unit
async def test_delete_monitor_and_pings(
    test_db: AsyncSession, sample_monitor: Monitor
) -> None:
    service = MonitorService(test_db)
    await service.record_ping(sample_monitor.id, T0 + 1)
    await service.record_ping(sample_monitor.id, T0 + 2)
    monitor_id = sample_monitor.id

    assert await service.delete_monitor_and_pings(monitor_id) is True

    assert await service.get_monitor(monitor_id) is None
    assert await _ping_count(test_db, monitor_id) == 0
    assert all(m.id != monitor_id for m in await service.list_active_monitors())


@pytest.mark.unit
async def test_delete_monitor_leaves_other_pings(test_db: AsyncSession) -> None:
    service = MonitorService(test_db)
    keep = await service.create_monitor(MonitorCreate(name="Keep", schedule="5m"))
    drop = await service.create_monitor(MonitorCreate(name="Drop", schedule="5m"))
    await service.record_ping(keep.id, T0)
    await service.record_ping(drop.id, T0)

    await service.delete_monitor_and_pings(drop.id)
    assert await _ping_count(test_db, keep.id) == 1


@pytest.mark.unit
async def test_delete_monitor_not_found(test_db: AsyncSession) -> None:
    service = MonitorService(test_db)
    assert await service.delete_monitor_and_pings("does-not-exist") is False


@pytest.mark.unit
async def test_count_by_status(test_db: AsyncSession, sample_monitor: Monitor) -> None:
    service = MonitorService(test_db)
    counts = await service.count_by_status()
    assert counts == {"new": 1, "up": 0, "down": 0}
