"""Statistics computed over stored mood and health entries."""

from moodtrack.aggregators.health import HealthAverages, weekly_health_averages
from moodtrack.aggregators.mood import (
    average_mood_score,
    generate_insights,
    mood_chart_points,
    mood_distribution,
    most_frequent_mood,
    within_days,
)
from moodtrack.aggregators.streak import last_seven_days, streak_count

__all__ = [
    "HealthAverages",
    "weekly_health_averages",
    "average_mood_score",
    "generate_insights",
    "mood_chart_points",
    "mood_distribution",
    "most_frequent_mood",
    "within_days",
    "last_seven_days",
    "streak_count",
]
