"""Tests for the APScheduler-backed reminder scheduler."""

from datetime import datetime, timedelta

import pytest

from moodtrack.reminders import (
    DAILY_REMINDER_ID,
    ReminderScheduler,
    SchedulingFailed,
)


@pytest.fixture
def reminders():
    sent = []
    scheduler = ReminderScheduler(notifier=lambda title, body: sent.append((title, body)))
    scheduler.sent = sent
    yield scheduler
    scheduler.stop()


def test_schedule_daily_reminder(reminders):
    reminders.schedule_daily_reminder(20, 0)

    assert reminders.daily_reminder_time() == (20, 0)
    job = reminders.scheduler.get_job(DAILY_REMINDER_ID)
    title, body = job.args
    assert title == "Wie fühlst du dich heute?"
    assert body.startswith("Nimm dir einen Moment Zeit")


def test_rescheduling_replaces_previous_reminder(reminders):
    reminders.schedule_daily_reminder(20, 0)
    reminders.schedule_daily_reminder(7, 45, language="en")

    assert reminders.daily_reminder_time() == (7, 45)
    jobs = [job for job in reminders.scheduler.get_jobs() if job.id == DAILY_REMINDER_ID]
    assert len(jobs) == 1
    assert jobs[0].args[0] == "How are you feeling today?"


def test_cancel_daily_reminder(reminders):
    reminders.schedule_daily_reminder(20, 0)
    reminders.cancel_daily_reminder()
    assert reminders.daily_reminder_time() is None

    # cancelling again is fine
    reminders.cancel_daily_reminder()


def test_invalid_time_raises(reminders):
    with pytest.raises(SchedulingFailed):
        reminders.schedule_daily_reminder(25, 0)


def test_one_off_notification(reminders):
    at = datetime.now() + timedelta(days=1)
    reminders.schedule_notification("Weekly report", "Ready", at, "weekly_report")

    job = reminders.scheduler.get_job("weekly_report")
    assert job.args == ("Weekly report", "Ready")

    reminders.remove_all_pending()
    assert reminders.scheduler.get_jobs() == []


def test_start_and_stop(reminders):
    reminders.schedule_daily_reminder(20, 0)
    reminders.start()
    assert reminders.scheduler.running
    assert reminders.daily_reminder_time() == (20, 0)

    reminders.stop()
    assert not reminders.scheduler.running


def test_request_authorization(reminders):
    assert reminders.request_authorization() is True
