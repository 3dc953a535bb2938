"""Health metric averages over stored entries."""

from collections.abc import Iterable

from pydantic import BaseModel

from moodtrack.db.models import HealthDataEntry


class HealthAverages(BaseModel):
    """Per-metric means. A metric with no recorded values averages to 0."""

    steps: float = 0.0
    calories: float = 0.0
    sleep: float = 0.0
    water: float = 0.0


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def weekly_health_averages(entries: Iterable[HealthDataEntry]) -> HealthAverages:
    """Average each metric over the entries where it is present."""
    entries = list(entries)
    return HealthAverages(
        steps=_mean([e.steps for e in entries if e.steps is not None]),
        calories=_mean([e.calories for e in entries if e.calories is not None]),
        sleep=_mean([e.sleep_hours for e in entries if e.sleep_hours is not None]),
        water=_mean([e.water_intake for e in entries if e.water_intake is not None]),
    )
