"""Local persistence for moodtrack."""

from moodtrack.db.models import (
    AppSettings,
    Entry,
    EntryKind,
    HealthDataEntry,
    HealthMetric,
    MoodCategory,
    MoodEntry,
    User,
    clamp_intensity,
)
from moodtrack.db.store import RecordStore, StorageError, create_store, day_range, start_of_day

__all__ = [
    # Models
    "AppSettings",
    "Entry",
    "EntryKind",
    "HealthDataEntry",
    "HealthMetric",
    "MoodCategory",
    "MoodEntry",
    "User",
    "clamp_intensity",
    # Store
    "RecordStore",
    "StorageError",
    "create_store",
    "day_range",
    "start_of_day",
]
