# app/activity.py
"""User activity log: fire-and-forget writer and read-side queries.

Writes go through :class:`ActivityLogger`, which hands each insert to a
small thread pool and returns immediately. A failed write is logged and
dropped; it never reaches the request that triggered it.
"""
import os
import threading
from concurrent.futures import ThreadPoolExecutor, wait
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional
from sqlalchemy import select, func, desc
from sqlalchemy.orm import Session
from .db import SessionLocal
from .models import UserActivity
from .utils import logger, utcnow


def record_activity(
    db: Session,
    user_id: Optional[int],
    action: str,
    action_category: Optional[str] = None,
    data: Optional[Dict[str, Any]] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> UserActivity:
    row = UserActivity(
        user_id=user_id,
        action=action,
        action_category=action_category,
        data=data,
        ip_address=ip_address,
        user_agent=user_agent,
        created_at=utcnow(),
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


class ActivityLogger:
    def __init__(self, session_factory=SessionLocal, max_workers: Optional[int] = None):
        self.session_factory = session_factory
        self._max_workers = max_workers or int(os.getenv("ACTIVITY_LOG_WORKERS", "2"))
        self._executor = None
        self._pending = set()
        self._lock = threading.Lock()

    def _get_executor(self) -> ThreadPoolExecutor:
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self._max_workers, thread_name_prefix="activity-log"
                )
            return self._executor

    def log(
        self,
        user_id: Optional[int],
        action: str,
        action_category: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> None:
        """Schedule one activity insert and return without waiting for it."""
        try:
            future = self._get_executor().submit(
                self._write, user_id, action, action_category, data, ip_address, user_agent
            )
        except RuntimeError as e:
            # executor already shut down
            logger.error("Activity %s not logged: %s", action, e)
            return
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._forget)

    def _forget(self, future):
        with self._lock:
            self._pending.discard(future)

    def _write(self, user_id, action, action_category, data, ip_address, user_agent):
        db = None
        try:
            db = self.session_factory()
            record_activity(db, user_id, action, action_category, data, ip_address, user_agent)
        except Exception as e:
            if db is not None:
                db.rollback()
            logger.error("Error logging activity %s: %s", action, e)
        finally:
            if db is not None:
                db.close()

    def drain(self, timeout: float = 5.0) -> None:
        """Block until writes scheduled so far have finished."""
        with self._lock:
            pending = list(self._pending)
        if pending:
            wait(pending, timeout=timeout)

    def shutdown(self, wait_for_pending: bool = True) -> None:
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=wait_for_pending)

    # Convenience wrappers for the common property/user events

    def log_property_view(self, user_id, property_id, ip_address=None, user_agent=None):
        self.log(user_id, "property_viewed", "property", {"property_id": property_id}, ip_address, user_agent)

    def log_property_enquiry(self, user_id, property_id, enquiry_type, ip_address=None, user_agent=None):
        self.log(
            user_id, "property_enquiry", "property",
            {"property_id": property_id, "enquiry_type": enquiry_type},
            ip_address, user_agent,
        )

    def log_property_interest(self, user_id, property_id, interest_type, ip_address=None, user_agent=None):
        self.log(
            user_id, f"property_{interest_type}", "property",
            {"property_id": property_id, "interest_type": interest_type},
            ip_address, user_agent,
        )

    def log_profile_update(self, user_id, fields, ip_address=None, user_agent=None):
        self.log(user_id, "profile_updated", "user_profile", {"fields_updated": fields}, ip_address, user_agent)

    def log_system_event(self, action, data=None):
        self.log(None, action, "system", data)


activity_logger = ActivityLogger()


def _page(stmt, limit: int, offset: int):
    return stmt.order_by(UserActivity.created_at.desc(), UserActivity.id.desc()).limit(limit).offset(offset)


def get_user_activity(db: Session, user_id: int, limit: int = 50, offset: int = 0) -> List[UserActivity]:
    stmt = select(UserActivity).where(UserActivity.user_id == user_id)
    return list(db.scalars(_page(stmt, limit, offset)))


def count_user_activity(db: Session, user_id: int) -> int:
    return db.scalar(select(func.count(UserActivity.id)).where(UserActivity.user_id == user_id)) or 0


def get_all_activities(db: Session, limit: int = 50, offset: int = 0) -> List[UserActivity]:
    return list(db.scalars(_page(select(UserActivity), limit, offset)))


def get_activities_by_category(db: Session, category: str, limit: int = 50, offset: int = 0) -> List[UserActivity]:
    stmt = select(UserActivity).where(UserActivity.action_category == category)
    return list(db.scalars(_page(stmt, limit, offset)))


def get_activities_by_action(db: Session, action: str, limit: int = 50, offset: int = 0) -> List[UserActivity]:
    stmt = select(UserActivity).where(UserActivity.action == action)
    return list(db.scalars(_page(stmt, limit, offset)))


def get_user_activity_stats(db: Session, user_id: int, days_back: int = 30, now: Optional[datetime] = None):
    """Per-action counts for one user over the trailing ``days_back`` days."""
    since = (now or utcnow()) - timedelta(days=days_back)
    count = func.count(UserActivity.id).label("count")
    stmt = (
        select(UserActivity.action, count, func.max(UserActivity.created_at).label("last_activity"))
        .where(UserActivity.user_id == user_id, UserActivity.created_at >= since)
        .group_by(UserActivity.action)
        .order_by(desc(count), UserActivity.action)
    )
    return [
        {"action": action, "count": n, "last_activity": last}
        for action, n, last in db.execute(stmt)
    ]


def get_activity_stats(db: Session, days_back: int = 30, now: Optional[datetime] = None):
    """Per-category counts and distinct users across all accounts."""
    since = (now or utcnow()) - timedelta(days=days_back)
    count = func.count(UserActivity.id).label("count")
    stmt = (
        select(
            UserActivity.action_category,
            count,
            func.count(func.distinct(UserActivity.user_id)).label("unique_users"),
        )
        .where(UserActivity.created_at >= since)
        .group_by(UserActivity.action_category)
        .order_by(desc(count))
    )
    return [
        {"action_category": category, "count": n, "unique_users": users}
        for category, n, users in db.execute(stmt)
    ]
