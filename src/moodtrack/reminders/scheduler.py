"""Local reminder notifications scheduled with APScheduler."""

from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime

import structlog
from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.date import DateTrigger

from moodtrack.locale import translate

logger = structlog.get_logger()

DAILY_REMINDER_ID = "daily_mood_reminder"

Notifier = Callable[[str, str], None]


class NotificationError(Exception):
    """Base exception for notification errors."""

    pass


class NotificationAuthorizationFailed(NotificationError):
    """Raised when the user does not allow notifications."""

    pass


class SchedulingFailed(NotificationError):
    """Raised when a notification could not be scheduled."""

    pass


class NotificationScheduler(ABC):
    """Arranges local reminder notifications."""

    @abstractmethod
    def request_authorization(self) -> bool:
        """Ask permission to notify. Raises ``NotificationAuthorizationFailed``."""

    @abstractmethod
    def schedule_daily_reminder(self, hour: int, minute: int, language: str | None = None) -> None:
        """Schedule the daily reminder, replacing any previous one."""

    @abstractmethod
    def cancel_daily_reminder(self) -> None:
        """Remove the daily reminder if one is scheduled."""

    @abstractmethod
    def schedule_notification(
        self, title: str, body: str, at: datetime, identifier: str
    ) -> None:
        """Schedule a one-off notification."""


def log_notification(title: str, body: str) -> None:
    logger.info("Notification", title=title, body=body)


class ReminderScheduler(NotificationScheduler):
    """Delivers reminders from an in-process APScheduler.

    Delivery goes through ``notifier``; the default writes a log event.
    """

    def __init__(
        self,
        notifier: Notifier = log_notification,
        scheduler: BackgroundScheduler | None = None,
    ) -> None:
        self.notifier = notifier
        self.scheduler = scheduler or BackgroundScheduler()

    def request_authorization(self) -> bool:
        # Local delivery needs no permission.
        return True

    def schedule_daily_reminder(self, hour: int, minute: int, language: str | None = None) -> None:
        self.cancel_daily_reminder()
        try:
            self.scheduler.add_job(
                self.notifier,
                CronTrigger(hour=hour, minute=minute),
                args=[translate("reminder_title", language), translate("reminder_body", language)],
                id=DAILY_REMINDER_ID,
                name="Daily Mood Reminder",
                replace_existing=True,
            )
        except ValueError as e:
            raise SchedulingFailed(f"Invalid reminder time {hour}:{minute}: {e}") from e
        logger.info("Daily reminder scheduled", hour=hour, minute=minute)

    def cancel_daily_reminder(self) -> None:
        try:
            self.scheduler.remove_job(DAILY_REMINDER_ID)
            logger.info("Daily reminder removed")
        except JobLookupError:
            pass

    def schedule_notification(
        self, title: str, body: str, at: datetime, identifier: str
    ) -> None:
        self.scheduler.add_job(
            self.notifier,
            DateTrigger(run_date=at),
            args=[title, body],
            id=identifier,
            name=title,
            replace_existing=True,
        )
        logger.info("Notification scheduled", identifier=identifier, at=at.isoformat())

    def daily_reminder_time(self) -> tuple[int, int] | None:
        """Hour and minute of the scheduled daily reminder, if any."""
        job = self.scheduler.get_job(DAILY_REMINDER_ID)
        if job is None:
            return None
        fields = {field.name: str(field) for field in job.trigger.fields}
        return int(fields["hour"]), int(fields["minute"])

    def remove_all_pending(self) -> None:
        self.scheduler.remove_all_jobs()

    def start(self) -> None:
        """Start the scheduler."""
        if not self.scheduler.running:
            self.scheduler.start()
            logger.info("Reminder scheduler started")

    def stop(self) -> None:
        """Stop the scheduler."""
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Reminder scheduler stopped")
