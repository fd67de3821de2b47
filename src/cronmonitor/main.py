from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cronmonitor.api import ping
from cronmonitor.api.v1 import monitors
from cronmonitor.config import get_settings
from cronmonitor.database import close_db, init_db
from cronmonitor.dependencies import MonitorServiceDep
from cronmonitor.utils.logging import get_logger, setup_logging
from cronmonitor.workers.sweeper import LivenessSweeper

# Setup logging
setup_logging()
logger = get_logger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan events.

    Creates tables and, unless disabled, runs the liveness sweep as a
    background task for the lifetime of the process.
    """
    logger.info("application_startup")

    # Initialize database (development only - use Alembic in production)
    await init_db()

    sweeper: LivenessSweeper | None = None
    sweep_task: asyncio.Task | None = None
    if settings.sweep_enabled:
        sweeper = LivenessSweeper.from_settings(settings)
        sweep_task = asyncio.create_task(sweeper.start())

    yield

    # Cleanup
    if sweeper is not None and sweep_task is not None:
        await sweeper.stop()
        sweep_task.cancel()
        try:
            await sweep_task
        except asyncio.CancelledError:
            pass

    await close_db()
    logger.info("application_shutdown")


# Create FastAPI app
app = FastAPI(
    title="Cron Monitor API",
    description="Dead-man's-switch monitoring for cron jobs and batch pipelines",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type"],
)

# Include routers
app.include_router(
    monitors.router,
    prefix="/api/v1/monitors",
    tags=["monitors"],
)
app.include_router(
    ping.router,
    prefix="/ping",
    tags=["ping"],
)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/api/v1/stats")
async def get_stats(service: MonitorServiceDep) -> dict[str, int]:
    """Get aggregate monitor and ping counts."""
    by_status = await service.count_by_status()
    return {
        "total_monitors": sum(by_status.values()),
        "new_monitors": by_status["new"],
        "up_monitors": by_status["up"],
        "down_monitors": by_status["down"],
        "total_pings": await service.count_pings(),
    }


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "message": "Cron Monitor API",
        "version": "1.0.0",
        "docs": "/docs",
    }
