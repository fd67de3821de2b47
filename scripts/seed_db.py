#!/usr/bin/env python3
"""Seed database with sample monitors for development."""
from __future__ import annotations

import asyncio

from cronmonitor.database import AsyncSessionLocal, init_db
from cronmonitor.schemas.monitor import MonitorCreate
from cronmonitor.services.monitor_service import MonitorService
from cronmonitor.utils.logging import get_logger, setup_logging

setup_logging()
logger = get_logger(__name__)

SAMPLE_MONITORS = [
    MonitorCreate(name="Nightly backup", schedule="1d", grace_seconds=1800),
    MonitorCreate(name="Hourly report export", schedule="1h", grace_seconds=300),
    MonitorCreate(
        name="Queue drain",
        schedule="5m",
        grace_seconds=60,
        alert_webhook="https://hooks.example.com/cron-alerts",
    ),
]


async def seed_database() -> None:
    """Create the tables if needed and insert the sample monitors."""
    await init_db()

    async with AsyncSessionLocal() as db:
        try:
            service = MonitorService(db)
            for data in SAMPLE_MONITORS:
                await service.create_monitor(data)

            await db.commit()

            logger.info(
                "database_seeded",
                monitor_count=len(SAMPLE_MONITORS),
            )

        except Exception as exc:
            logger.error("seed_failed", error=str(exc))
            await db.rollback()
            raise


if __name__ == "__main__":
    asyncio.run(seed_database())
