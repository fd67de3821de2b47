#!/usr/bin/env python3
"""Run the liveness sweep outside the API process."""
from __future__ import annotations

import argparse
import asyncio

from cronmonitor.config import get_settings
from cronmonitor.database import close_db
from cronmonitor.utils.logging import get_logger, setup_logging
from cronmonitor.workers.sweeper import LivenessSweeper

setup_logging()
logger = get_logger(__name__)

settings = get_settings()


async def main(once: bool = False) -> None:
    """Run the sweeper loop, or a single pass with ``once``."""
    sweeper = LivenessSweeper.from_settings(settings)

    logger.info(
        "starting_sweeper",
        once=once,
        interval_seconds=settings.sweep_interval_seconds,
        email_enabled=sweeper.dispatcher.email_channel is not None,
    )

    try:
        if once:
            await sweeper.run_sweep()
        else:
            await sweeper.start()
    except asyncio.CancelledError:
        logger.info("shutdown_requested")
        await sweeper.stop()
        raise
    finally:
        await close_db()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--once",
        action="store_true",
        help="run a single sweep and exit (for an external cron timer)",
    )
    args = parser.parse_args()

    try:
        asyncio.run(main(once=args.once))
    except KeyboardInterrupt:
        pass
