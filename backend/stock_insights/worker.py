"""Scheduler-only process: refreshes the store without serving the API."""

import asyncio
import logging

from stock_insights.config import configure_logging
from stock_insights.database import engine
from stock_insights.scheduler import build_scheduler
from stock_insights.services.refresh_service import init_refresher

logger = logging.getLogger(__name__)


async def run_worker(stop: asyncio.Event | None = None) -> None:
    """Run the refresh scheduler until ``stop`` is set (forever by default)."""
    stop = stop or asyncio.Event()
    refresher = init_refresher()
    scheduler = build_scheduler(refresher)
    scheduler.start()
    logger.info("%s data cron job started", refresher.profile.label.capitalize())
    try:
        await stop.wait()
    finally:
        scheduler.shutdown(wait=False)
        await engine.dispose()


def main() -> None:
    configure_logging()
    try:
        asyncio.run(run_worker())
    except KeyboardInterrupt:
        logger.info("Worker stopped")


if __name__ == "__main__":
    main()
