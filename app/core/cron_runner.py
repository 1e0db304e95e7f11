"""
Run the fleet jobs in the background (non-blocking).
Started on app startup when FLEET_JOBS_ENABLED; cancelled on shutdown.
"""
import asyncio
import logging

from app.core.config import settings
from app.cron.fleet_jobs import run_fleet_jobs

logger = logging.getLogger(__name__)


async def run_fleet_jobs_loop() -> None:
    """Loop: run once after short delay, then every FLEET_JOBS_INTERVAL_HOURS."""
    interval_hours = settings.FLEET_JOBS_INTERVAL_HOURS
    interval_seconds = max(60.0, interval_hours * 3600)  # minimum 1 minute
    logger.info("Fleet jobs loop started (interval=%.2f hours)", interval_hours)
    # Let the app finish starting before the first run
    await asyncio.sleep(10)
    while True:
        try:
            await run_fleet_jobs()
            await asyncio.sleep(interval_seconds)
        except asyncio.CancelledError:
            logger.info("Fleet jobs loop cancelled")
            break
        except Exception as e:
            logger.exception("Fleet jobs loop error: %s", e)
            await asyncio.sleep(interval_seconds)
