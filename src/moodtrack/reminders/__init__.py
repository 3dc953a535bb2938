"""Daily reminder notifications."""

from moodtrack.reminders.scheduler import (
    DAILY_REMINDER_ID,
    NotificationAuthorizationFailed,
    NotificationError,
    NotificationScheduler,
    ReminderScheduler,
    SchedulingFailed,
)

__all__ = [
    "DAILY_REMINDER_ID",
    "NotificationAuthorizationFailed",
    "NotificationError",
    "NotificationScheduler",
    "ReminderScheduler",
    "SchedulingFailed",
]
