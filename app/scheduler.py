# app/scheduler.py
import os
from typing import Optional
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.events import EVENT_JOB_EXECUTED, EVENT_JOB_ERROR
from .auction import reconcile_auction_statuses
from .cleanup import run_activity_cleanup, run_inactive_user_cleanup
from .utils import logger

AUCTION_STATUS_INTERVAL_SECONDS = int(os.getenv("AUCTION_STATUS_INTERVAL_SECONDS", "60"))

scheduler: Optional[BackgroundScheduler] = None


def scheduler_enabled() -> bool:
    return os.getenv("SCHEDULER_ENABLED", "1") == "1"


def job_listener(event):
    if event.exception:
        logger.error("Job %s crashed: %s", event.job_id, event.exception)
    else:
        logger.debug("Job %s executed", event.job_id)


def create_scheduler() -> BackgroundScheduler:
    sched = BackgroundScheduler(job_defaults={"coalesce": True, "max_instances": 1})
    sched.add_job(
        reconcile_auction_statuses, "interval",
        seconds=AUCTION_STATUS_INTERVAL_SECONDS, id="auction_status", replace_existing=True,
    )
    sched.add_job(
        run_activity_cleanup, CronTrigger(hour=2, minute=0),
        id="activity_cleanup", replace_existing=True,
    )
    sched.add_job(
        run_inactive_user_cleanup, CronTrigger(day_of_week="sun", hour=3, minute=0),
        id="inactive_user_cleanup", replace_existing=True,
    )
    sched.add_listener(job_listener, EVENT_JOB_EXECUTED | EVENT_JOB_ERROR)
    return sched


def start_scheduler() -> Optional[BackgroundScheduler]:
    global scheduler
    if not scheduler_enabled():
        logger.info("Scheduler disabled")
        return None
    if scheduler is None:
        scheduler = create_scheduler()
        scheduler.start()
        logger.info("Scheduler started")
    return scheduler


def shutdown_scheduler():
    global scheduler
    if scheduler is not None:
        scheduler.shutdown(wait=False)
        scheduler = None
        logger.info("Scheduler stopped")
