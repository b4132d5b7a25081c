# tests/test_activity.py
import threading
from datetime import datetime, timedelta, timezone

from app import activity
from app.activity import ActivityLogger, activity_logger
from app.db import SessionLocal
from app.models import UserActivity

NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


def add_activity(db, user_id, action, days_ago, category="property"):
    row = UserActivity(
        user_id=user_id, action=action, action_category=category,
        created_at=NOW - timedelta(days=days_ago),
    )
    db.add(row)
    db.commit()
    return row


def test_log_writes_in_background(db, make_user):
    user = make_user()
    assert activity_logger.log(user.id, "property_viewed", "property", {"property_id": 7}, "10.0.0.1", "pytest") is None
    activity_logger.drain()
    rows = activity.get_user_activity(db, user.id)
    assert len(rows) == 1
    assert rows[0].action == "property_viewed"
    assert rows[0].data == {"property_id": 7}
    assert rows[0].ip_address == "10.0.0.1"


def test_log_returns_before_write_completes(db):
    release = threading.Event()

    def slow_session():
        release.wait(timeout=5)
        return SessionLocal()

    writer = ActivityLogger(session_factory=slow_session, max_workers=1)
    try:
        writer.log(None, "property_viewed", "property")
        assert db.query(UserActivity).count() == 0
        release.set()
        writer.drain()
    finally:
        release.set()
        writer.shutdown()
    assert [r.action for r in activity.get_all_activities(db)] == ["property_viewed"]


def test_log_failure_is_swallowed(db, monkeypatch, caplog):
    def broken(*args, **kwargs):
        raise RuntimeError("insert failed")

    monkeypatch.setattr(activity, "record_activity", broken)
    activity_logger.log(None, "property_viewed")
    activity_logger.drain()
    assert db.query(UserActivity).count() == 0
    assert "Error logging activity property_viewed" in caplog.text


def test_log_after_shutdown_recreates_executor(db):
    logger = ActivityLogger(max_workers=1)
    logger.log(None, "first")
    logger.shutdown()
    logger.log(None, "second")
    logger.drain()
    logger.shutdown()
    assert {r.action for r in activity.get_all_activities(db)} == {"first", "second"}


def test_every_call_is_recorded(db, make_user):
    user = make_user()
    for _ in range(3):
        activity_logger.log(user.id, "property_shared", "property")
    activity_logger.drain()
    assert activity.count_user_activity(db, user.id) == 3


def test_user_activity_is_most_recent_first_and_paged(db, make_user):
    user = make_user()
    for days_ago, action in [(3, "a"), (1, "b"), (2, "c")]:
        add_activity(db, user.id, action, days_ago)
    assert [r.action for r in activity.get_user_activity(db, user.id)] == ["b", "c", "a"]
    assert [r.action for r in activity.get_user_activity(db, user.id, limit=1, offset=1)] == ["c"]


def test_user_stats_window_and_order(db, make_user):
    user, other = make_user(), make_user()
    for days_ago in (1, 2, 3):
        add_activity(db, user.id, "property_viewed", days_ago)
    add_activity(db, user.id, "user_login", 5, category="authentication")
    add_activity(db, user.id, "user_login", 45, category="authentication")
    add_activity(db, user.id, "property_shared", 31)
    add_activity(db, other.id, "property_viewed", 1)

    stats = activity.get_user_activity_stats(db, user.id, days_back=30, now=NOW)

    assert [(s["action"], s["count"]) for s in stats] == [("property_viewed", 3), ("user_login", 1)]
    assert stats[0]["last_activity"].replace(tzinfo=timezone.utc) == NOW - timedelta(days=1)


def test_category_stats(db, make_user):
    u1, u2 = make_user(), make_user()
    add_activity(db, u1.id, "property_viewed", 1)
    add_activity(db, u2.id, "property_viewed", 2)
    add_activity(db, u2.id, "property_shared", 3)
    add_activity(db, u1.id, "user_login", 4, category="authentication")
    add_activity(db, u1.id, "user_login", 60, category="authentication")

    stats = activity.get_activity_stats(db, days_back=30, now=NOW)

    assert stats == [
        {"action_category": "property", "count": 3, "unique_users": 2},
        {"action_category": "authentication", "count": 1, "unique_users": 1},
    ]


def test_filters_by_category_and_action(db):
    add_activity(db, None, "system_cleanup", 1, category="system")
    add_activity(db, None, "property_viewed", 1)
    assert [r.action for r in activity.get_activities_by_category(db, "system")] == ["system_cleanup"]
    assert [r.action_category for r in activity.get_activities_by_action(db, "property_viewed")] == ["property"]
