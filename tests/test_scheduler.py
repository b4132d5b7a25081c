# tests/test_scheduler.py
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from app import scheduler


def test_jobs_registered():
    sched = scheduler.create_scheduler()
    jobs = {job.id: job for job in sched.get_jobs()}
    assert set(jobs) == {"auction_status", "activity_cleanup", "inactive_user_cleanup"}

    interval = jobs["auction_status"].trigger
    assert isinstance(interval, IntervalTrigger)
    assert interval.interval.total_seconds() == 60

    daily = jobs["activity_cleanup"].trigger
    assert isinstance(daily, CronTrigger)
    fields = {f.name: str(f) for f in daily.fields}
    assert (fields["hour"], fields["minute"]) == ("2", "0")

    weekly = {f.name: str(f) for f in jobs["inactive_user_cleanup"].trigger.fields}
    assert (weekly["day_of_week"], weekly["hour"]) == ("sun", "3")


def test_start_scheduler_respects_disable_flag(monkeypatch):
    monkeypatch.setenv("SCHEDULER_ENABLED", "0")
    assert scheduler.start_scheduler() is None
    assert scheduler.scheduler is None
