"""
Periodic resync of live sessions with the authoritative pump state
"""
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from typing import Optional
import logging

from pump_control.services.sync_service import SyncService

logger = logging.getLogger(__name__)

def create_scheduler(sync_service: SyncService, interval_seconds: int) -> Optional[AsyncIOScheduler]:
    """Build the resync scheduler; None when the interval disables it"""
    if interval_seconds <= 0:
        logger.info("Pump status resync disabled")
        return None

    logger.info(f"Pump status resync every {interval_seconds} seconds")
    scheduler = AsyncIOScheduler()
    scheduler.add_job(
        sync_service.resync_all,
        IntervalTrigger(seconds=interval_seconds),
        id='pump_status_resync',
        replace_existing=True,
        coalesce=True,
        max_instances=1
    )
    return scheduler

def start_scheduler(scheduler: Optional[AsyncIOScheduler]):
    """Start the scheduler; must be called with the event loop running"""
    if scheduler and not scheduler.running:
        scheduler.start()
        logger.info("Pump status resync scheduler started")

def stop_scheduler(scheduler: Optional[AsyncIOScheduler]):
    if scheduler and scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Pump status resync scheduler stopped")
