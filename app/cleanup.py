# app/cleanup.py
"""Retention cleanup for the activity log and dormant user accounts.

The cutoff is exclusive: a row whose timestamp is exactly ``now - N days``
is kept, anything strictly older is deleted.
"""
import os
from datetime import datetime, timedelta
from typing import Optional
from sqlalchemy import delete, select, func
from sqlalchemy.orm import Session
from .activity import activity_logger
from .db import SessionLocal
from .models import UserActivity, User
from .utils import logger, utcnow

ACTIVITY_RETENTION_DAYS = int(os.getenv("ACTIVITY_RETENTION_DAYS", "90"))
INACTIVE_USER_RETENTION_DAYS = int(os.getenv("INACTIVE_USER_RETENTION_DAYS", "365"))


def _cutoff(days: int, now: Optional[datetime]) -> datetime:
    if days < 0:
        raise ValueError("retention window must be non-negative")
    return (now or utcnow()) - timedelta(days=days)


def purge_activity(db: Session, older_than_days: int = ACTIVITY_RETENTION_DAYS, now: Optional[datetime] = None) -> int:
    cutoff = _cutoff(older_than_days, now)
    result = db.execute(
        delete(UserActivity)
        .where(UserActivity.created_at < cutoff)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    return result.rowcount or 0


def activity_cleanup_stats(db: Session, older_than_days: int = ACTIVITY_RETENTION_DAYS, now: Optional[datetime] = None):
    """Describe what :func:`purge_activity` would delete with the same arguments."""
    cutoff = _cutoff(older_than_days, now)
    total, users, oldest, newest = db.execute(
        select(
            func.count(UserActivity.id),
            func.count(func.distinct(UserActivity.user_id)),
            func.min(UserActivity.created_at),
            func.max(UserActivity.created_at),
        ).where(UserActivity.created_at < cutoff)
    ).one()
    return {
        "total_records": total,
        "affected_users": users,
        "oldest_record": oldest,
        "newest_record": newest,
    }


def purge_inactive_users(db: Session, older_than_days: int = INACTIVE_USER_RETENTION_DAYS, now: Optional[datetime] = None) -> int:
    cutoff = _cutoff(older_than_days, now)
    result = db.execute(
        delete(User)
        .where(User.is_active.is_(False), User.updated_at < cutoff)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    return result.rowcount or 0


def run_activity_cleanup(older_than_days: int = ACTIVITY_RETENTION_DAYS) -> int:
    logger.info("Running activity cleanup (older than %d days)", older_than_days)
    db = SessionLocal()
    try:
        deleted = purge_activity(db, older_than_days)
    except Exception as e:
        db.rollback()
        logger.exception("Activity cleanup job failed: %s", e)
        return 0
    finally:
        db.close()
    logger.info("Activity cleanup completed: %d records deleted", deleted)
    activity_logger.log_system_event("system_cleanup", {
        "type": "activity_cleanup",
        "records_deleted": deleted,
        "older_than_days": older_than_days,
    })
    return deleted


def run_inactive_user_cleanup(older_than_days: int = INACTIVE_USER_RETENTION_DAYS) -> int:
    logger.info("Running inactive user cleanup (older than %d days)", older_than_days)
    db = SessionLocal()
    try:
        deleted = purge_inactive_users(db, older_than_days)
        logger.info("Inactive user cleanup completed: %d users removed", deleted)
        return deleted
    except Exception as e:
        db.rollback()
        logger.exception("Inactive user cleanup failed: %s", e)
        return 0
    finally:
        db.close()
