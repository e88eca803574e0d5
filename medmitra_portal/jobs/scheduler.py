import logging
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from ..config import settings
from ..services import drafts, sessions

logger = logging.getLogger(__name__)

_scheduler: Optional[BackgroundScheduler] = None

def housekeeping_job():
    n_drafts = drafts.purge_stale()
    n_sessions = sessions.purge_expired()
    if n_drafts or n_sessions:
        logger.info("Housekeeping: %d stale draft(s), %d expired session(s) removed", n_drafts, n_sessions)

def get_scheduler() -> Optional[BackgroundScheduler]:
    if _scheduler is not None and _scheduler.running:
        return _scheduler
    return None

def start_scheduler():
    global _scheduler
    scheduler = BackgroundScheduler(timezone=settings.TIMEZONE)
    scheduler.add_job(housekeeping_job, CronTrigger(minute=0), id="housekeeping", replace_existing=True)  # hourly
    scheduler.start()
    _scheduler = scheduler
    return scheduler

def stop_scheduler():
    global _scheduler
    if _scheduler is None:
        return
    drafts.flush_pending(_scheduler)
    if _scheduler.running:
        _scheduler.shutdown(wait=False)
    _scheduler = None
