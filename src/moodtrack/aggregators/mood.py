"""Mood statistics and rule-based insights."""

from collections import Counter
from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta

from moodtrack.db.models import MoodCategory, MoodEntry
from moodtrack.locale import mood_label, translate

DEFAULT_MOOD_SCORE = 5.0

POSITIVE_THRESHOLD = 7.0
CHALLENGING_THRESHOLD = 4.0
CONSISTENCY_MIN_ENTRIES = 5
INSIGHT_WINDOW_DAYS = 7


def within_days(
    entries: Iterable[MoodEntry], days: int, now: datetime | None = None
) -> list[MoodEntry]:
    """Entries dated on or after ``now - days``, in the given order."""
    cutoff = (now or datetime.now()) - timedelta(days=days)
    return [entry for entry in entries if entry.date >= cutoff]


def average_mood_score(entries: Sequence[MoodEntry]) -> float:
    """Mean mood score; 5.0 when there are no entries."""
    if not entries:
        return DEFAULT_MOOD_SCORE
    return sum(entry.mood.score for entry in entries) / len(entries)


def most_frequent_mood(entries: Iterable[MoodEntry]) -> MoodCategory | None:
    """Most common mood.

    Ties go to the mood that appears first in ``entries``.
    """
    counts = Counter(entry.mood for entry in entries)
    if not counts:
        return None
    # most_common keeps insertion order among equal counts
    return counts.most_common(1)[0][0]


def mood_distribution(entries: Iterable[MoodEntry]) -> dict[MoodCategory, int]:
    return dict(Counter(entry.mood for entry in entries))


def mood_chart_points(entries: Iterable[MoodEntry]) -> list[tuple[datetime, float]]:
    """(timestamp, score) pairs, oldest first."""
    return sorted((entry.date, entry.mood.score) for entry in entries)


def generate_insights(
    entries: Sequence[MoodEntry],
    now: datetime | None = None,
    language: str | None = None,
) -> list[str]:
    """Short messages about the last week.

    Rules run in a fixed order: positive week, challenging week, most common
    feeling, logging consistency.
    """
    week = within_days(entries, INSIGHT_WINDOW_DAYS, now)
    insights: list[str] = []

    average = average_mood_score(week)
    if average >= POSITIVE_THRESHOLD:
        insights.append(translate("insight_positive", language))
    elif average <= CHALLENGING_THRESHOLD:
        insights.append(translate("insight_challenging", language))

    most_frequent = most_frequent_mood(week)
    if most_frequent is not None:
        insights.append(
            translate("insight_most_common", language, mood=mood_label(most_frequent, language))
        )

    if len(week) >= CONSISTENCY_MIN_ENTRIES:
        insights.append(translate("insight_consistent", language))

    return insights
