"""Database models for moodtrack using SQLModel."""

import uuid
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

from sqlalchemy import JSON, Column, DateTime, UniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

INTENSITY_MIN = 1
INTENSITY_MAX = 10


def clamp_intensity(value: int) -> int:
    """Clamp a mood intensity into the 1-10 range."""
    return min(max(int(value), INTENSITY_MIN), INTENSITY_MAX)


def _timestamp(index: bool = False, nullable: bool = False) -> Column:
    """Naive local-time column. Timestamps are stored without a zone."""
    return Column(DateTime(timezone=False), index=index, nullable=nullable)


class MoodCategory(str, Enum):
    """The ten fixed moods a user can log."""

    VERY_HAPPY = "very_happy"
    HAPPY = "happy"
    NEUTRAL = "neutral"
    SAD = "sad"
    VERY_SAD = "very_sad"
    ANXIOUS = "anxious"
    STRESSED = "stressed"
    CALM = "calm"
    ENERGETIC = "energetic"
    TIRED = "tired"

    @property
    def label(self) -> str:
        return _MOOD_LABELS[self]

    @property
    def symbol(self) -> str:
        return _MOOD_SYMBOLS[self]

    @property
    def score(self) -> float:
        """Numeric value used for charts and averages (1-9)."""
        return _MOOD_SCORES[self]


_MOOD_LABELS = {
    MoodCategory.VERY_HAPPY: "Sehr glücklich",
    MoodCategory.HAPPY: "Glücklich",
    MoodCategory.NEUTRAL: "Neutral",
    MoodCategory.SAD: "Traurig",
    MoodCategory.VERY_SAD: "Sehr traurig",
    MoodCategory.ANXIOUS: "Ängstlich",
    MoodCategory.STRESSED: "Gestresst",
    MoodCategory.CALM: "Ruhig",
    MoodCategory.ENERGETIC: "Energiegeladen",
    MoodCategory.TIRED: "Müde",
}

_MOOD_SYMBOLS = {
    MoodCategory.VERY_HAPPY: "😄",
    MoodCategory.HAPPY: "🙂",
    MoodCategory.NEUTRAL: "😐",
    MoodCategory.SAD: "😔",
    MoodCategory.VERY_SAD: "😢",
    MoodCategory.ANXIOUS: "😰",
    MoodCategory.STRESSED: "😫",
    MoodCategory.CALM: "😌",
    MoodCategory.ENERGETIC: "⚡",
    MoodCategory.TIRED: "😴",
}

_MOOD_SCORES = {
    MoodCategory.VERY_HAPPY: 9.0,
    MoodCategory.ENERGETIC: 9.0,
    MoodCategory.HAPPY: 7.0,
    MoodCategory.CALM: 7.0,
    MoodCategory.NEUTRAL: 5.0,
    MoodCategory.TIRED: 4.0,
    MoodCategory.SAD: 3.0,
    MoodCategory.ANXIOUS: 3.0,
    MoodCategory.VERY_SAD: 1.0,
    MoodCategory.STRESSED: 1.0,
}


class HealthMetric(str, Enum):
    """The four synced health metrics."""

    STEPS = "steps"
    CALORIES = "calories"
    SLEEP = "sleep"
    WATER = "water"

    @property
    def value_field(self) -> str:
        return _METRIC_FIELDS[self][0]

    @property
    def flag_field(self) -> str:
        return _METRIC_FIELDS[self][1]


_METRIC_FIELDS = {
    HealthMetric.STEPS: ("steps", "steps_manually_edited"),
    HealthMetric.CALORIES: ("calories", "calories_manually_edited"),
    HealthMetric.SLEEP: ("sleep_hours", "sleep_manually_edited"),
    HealthMetric.WATER: ("water_intake", "water_manually_edited"),
}


class User(SQLModel, table=True):
    """Profile of a signed-in user. Owns mood and health entries."""

    __tablename__ = "users"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    email: str = Field(index=True, unique=True)
    name: str
    age: int | None = None
    weight: float | None = None  # kg
    height: float | None = None  # cm
    gender: str | None = None

    created_at: datetime = Field(default_factory=datetime.now, sa_column=_timestamp())
    updated_at: datetime = Field(default_factory=datetime.now, sa_column=_timestamp())

    mood_entries: list["MoodEntry"] = Relationship(
        back_populates="user",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )
    health_entries: list["HealthDataEntry"] = Relationship(
        back_populates="user",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )

    def update_profile(self, **fields: Any) -> None:
        """Set profile fields and refresh ``updated_at``."""
        for name, value in fields.items():
            if name not in _PROFILE_FIELDS:
                raise ValueError(f"Unknown profile field: {name}")
            if name == "name" and not (value or "").strip():
                raise ValueError("Name must not be empty")
        for name, value in fields.items():
            setattr(self, name, value)
        self.updated_at = datetime.now()


_PROFILE_FIELDS = frozenset({"name", "age", "weight", "height", "gender"})


class MoodEntry(SQLModel, table=True):
    """One mood diary entry. At most one per user and calendar day."""

    __tablename__ = "mood_entries"
    __table_args__ = (UniqueConstraint("user_id", "day", name="uq_mood_user_day"),)

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID = Field(foreign_key="users.id", index=True)
    day: date = Field(index=True)
    date: datetime = Field(default_factory=datetime.now, sa_column=_timestamp(index=True))

    mood: MoodCategory = MoodCategory.NEUTRAL
    notes: str | None = None
    intensity: int = 5

    # What triggered the feeling / what the user did
    triggers: list[str] | None = Field(default=None, sa_column=Column(JSON))
    activities: list[str] | None = Field(default=None, sa_column=Column(JSON))

    user: Optional["User"] = Relationship(back_populates="mood_entries")

    def __init__(self, **data: Any) -> None:
        if "intensity" in data:
            data["intensity"] = clamp_intensity(data["intensity"])
        if "day" not in data:
            data["day"] = data.setdefault("date", datetime.now()).date()
        super().__init__(**data)

    def apply(
        self,
        mood: MoodCategory | None = None,
        intensity: int | None = None,
        notes: str | None = None,
        triggers: list[str] | None = None,
        activities: list[str] | None = None,
    ) -> None:
        """Update the entry in place. Empty notes are stored as ``None``."""
        if mood is not None:
            self.mood = MoodCategory(mood)
        if intensity is not None:
            self.intensity = clamp_intensity(intensity)
        self.notes = notes or None
        if triggers is not None:
            self.triggers = list(triggers)
        if activities is not None:
            self.activities = list(activities)


class HealthDataEntry(SQLModel, table=True):
    """Health metrics for one user and calendar day."""

    __tablename__ = "health_entries"
    __table_args__ = (UniqueConstraint("user_id", "day", name="uq_health_user_day"),)

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID = Field(foreign_key="users.id", index=True)
    day: date = Field(index=True)
    date: datetime = Field(sa_column=_timestamp(index=True))  # start of day

    steps: int | None = None
    calories: float | None = None  # kcal
    sleep_hours: float | None = None
    water_intake: float | None = None  # litres

    # Manual vs. automatic data
    steps_manually_edited: bool = False
    calories_manually_edited: bool = False
    sleep_manually_edited: bool = False
    water_manually_edited: bool = False

    user: Optional["User"] = Relationship(back_populates="health_entries")

    def __init__(self, **data: Any) -> None:
        if "day" not in data and "date" in data:
            data["day"] = data["date"].date()
        super().__init__(**data)

    def get_metric(self, metric: HealthMetric) -> float | int | None:
        return getattr(self, HealthMetric(metric).value_field)

    def is_manually_edited(self, metric: HealthMetric) -> bool:
        return getattr(self, HealthMetric(metric).flag_field)

    def set_metric(self, metric: HealthMetric, value: float | int, manual: bool = False) -> None:
        """Set a metric value. A manual edit locks the metric against sync."""
        metric = HealthMetric(metric)
        if metric is HealthMetric.STEPS:
            value = int(value)
        setattr(self, metric.value_field, value)
        if manual:
            setattr(self, metric.flag_field, True)

    def copy_with(self, **updates: Any) -> "HealthDataEntry":
        """Return a detached copy with ``updates`` applied."""
        data = {name: getattr(self, name) for name in _HEALTH_COLUMNS}
        data.update(updates)
        return HealthDataEntry(**data)


_HEALTH_COLUMNS = (
    "id",
    "user_id",
    "date",
    "day",
    "steps",
    "calories",
    "sleep_hours",
    "water_intake",
    "steps_manually_edited",
    "calories_manually_edited",
    "sleep_manually_edited",
    "water_manually_edited",
)


class AppSettings(SQLModel, table=True):
    """Installation-wide settings. There is a single row."""

    __tablename__ = "app_settings"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)

    # Notifications
    notifications_enabled: bool = True
    daily_reminder_hour: int | None = 20
    daily_reminder_minute: int | None = 0

    # UI
    preferred_language: str = "de"

    # Health sync
    auto_sync_health_data: bool = True
    last_health_sync: datetime | None = Field(default=None, sa_column=_timestamp(nullable=True))

    @property
    def has_reminder_time(self) -> bool:
        return self.daily_reminder_hour is not None and self.daily_reminder_minute is not None


class EntryKind(str, Enum):
    """Per-day entry kinds handled by the record store."""

    MOOD = "mood"
    HEALTH = "health"

    @property
    def model(self) -> type[MoodEntry] | type[HealthDataEntry]:
        return MoodEntry if self is EntryKind.MOOD else HealthDataEntry


Entry = MoodEntry | HealthDataEntry
