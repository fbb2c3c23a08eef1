"""
Background task scheduler using APScheduler
"""
import logging
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from adwarden.core.config import settings

logger = logging.getLogger(__name__)

# Global scheduler instance
scheduler: Optional[BackgroundScheduler] = None


def start_scheduler():
    """Initialize and start the scheduler"""
    global scheduler

    if scheduler is not None:
        return

    scheduler = BackgroundScheduler()

    scheduler.add_job(
        func=sync_statuses_job,
        trigger=IntervalTrigger(minutes=settings.STATUS_SYNC_INTERVAL_MINUTES),
        id="sync_statuses",
        name="Expire ended campaigns and ads",
        replace_existing=True,
    )

    scheduler.start()
    logger.info(f"Scheduler started with {len(scheduler.get_jobs())} jobs")


def stop_scheduler():
    """Stop the scheduler"""
    global scheduler

    if scheduler is not None:
        scheduler.shutdown()
        scheduler = None
        logger.info("Scheduler stopped")


# ============================================
# Job Functions
# ============================================

def sync_statuses_job():
    """Expire campaigns and ads past their end date"""
    logger.debug("Running status sync job...")
    try:
        from adwarden.tasks.status_tasks import sync_statuses
        sync_statuses()
    except Exception:
        logger.exception("Status sync failed")
