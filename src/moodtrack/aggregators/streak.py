"""Logging streak shown on the home-screen widget."""

from collections.abc import Collection
from datetime import date, timedelta

STREAK_WINDOW_DAYS = 7


def streak_count(days_with_entries: Collection[date], today: date) -> int:
    """Consecutive days with a mood entry, counting back from ``today``.

    A day without an entry ends the streak, so the count is 0 until today's
    mood is logged.
    """
    count = 0
    current = today
    while current in days_with_entries:
        count += 1
        current -= timedelta(days=1)
    return count


def last_seven_days(days_with_entries: Collection[date], today: date) -> list[bool]:
    """Entry presence for the last seven days, oldest first, ending today."""
    start = today - timedelta(days=STREAK_WINDOW_DAYS - 1)
    return [
        start + timedelta(days=offset) in days_with_entries
        for offset in range(STREAK_WINDOW_DAYS)
    ]
