"""Tests for the SQLModel entities."""

import uuid
from datetime import date, datetime

import pytest

from moodtrack.db import HealthDataEntry, HealthMetric, MoodCategory, MoodEntry, User


def test_intensity_is_clamped():
    owner = uuid.uuid4()
    assert MoodEntry(user_id=owner, intensity=15).intensity == 10
    assert MoodEntry(user_id=owner, intensity=-3).intensity == 1
    assert MoodEntry(user_id=owner, intensity=7).intensity == 7


def test_mood_entry_day_follows_date():
    entry = MoodEntry(user_id=uuid.uuid4(), date=datetime(2026, 1, 19, 21, 5))
    assert entry.day == date(2026, 1, 19)


def test_apply_updates_in_place_and_drops_empty_notes():
    entry = MoodEntry(user_id=uuid.uuid4(), mood=MoodCategory.SAD, notes="rough")
    entry.apply(mood=MoodCategory.CALM, intensity=42, notes="", triggers=["work"])

    assert entry.mood is MoodCategory.CALM
    assert entry.intensity == 10
    assert entry.notes is None
    assert entry.triggers == ["work"]
    assert entry.activities is None


@pytest.mark.parametrize(
    "mood,score",
    [
        (MoodCategory.VERY_HAPPY, 9.0),
        (MoodCategory.ENERGETIC, 9.0),
        (MoodCategory.HAPPY, 7.0),
        (MoodCategory.CALM, 7.0),
        (MoodCategory.NEUTRAL, 5.0),
        (MoodCategory.TIRED, 4.0),
        (MoodCategory.SAD, 3.0),
        (MoodCategory.ANXIOUS, 3.0),
        (MoodCategory.VERY_SAD, 1.0),
        (MoodCategory.STRESSED, 1.0),
    ],
)
def test_mood_scores(mood, score):
    assert mood.score == score


def test_every_mood_has_label_and_symbol():
    for mood in MoodCategory:
        assert mood.label
        assert mood.symbol


def _health_entry(**values):
    return HealthDataEntry(user_id=uuid.uuid4(), date=datetime(2026, 1, 19), **values)


def test_health_entry_day_from_date():
    assert _health_entry().day == date(2026, 1, 19)


def test_set_metric_manual_sets_flag():
    entry = _health_entry()
    entry.set_metric(HealthMetric.STEPS, 1234.9, manual=True)

    assert entry.steps == 1234
    assert entry.steps_manually_edited is True
    assert entry.is_manually_edited(HealthMetric.STEPS)
    assert not entry.is_manually_edited(HealthMetric.WATER)


def test_set_metric_automatic_keeps_flag():
    entry = _health_entry()
    entry.set_metric(HealthMetric.SLEEP, 6.5)

    assert entry.get_metric(HealthMetric.SLEEP) == 6.5
    assert entry.sleep_manually_edited is False


def test_copy_with_leaves_original_untouched():
    entry = _health_entry(steps=500, steps_manually_edited=True)
    copy = entry.copy_with(calories=300.0)

    assert copy.id == entry.id
    assert copy.steps == 500
    assert copy.steps_manually_edited is True
    assert copy.calories == 300.0
    assert entry.calories is None


def test_update_profile_rejects_unknown_fields():
    user = User(email="a@example.com", name="Anna")
    user.update_profile(age=31, weight=60.5)
    assert user.age == 31
    assert user.weight == 60.5

    with pytest.raises(ValueError):
        user.update_profile(email="other@example.com")


@pytest.mark.parametrize("name", [None, "", "   "])
def test_update_profile_rejects_empty_name(name):
    user = User(email="a@example.com", name="Anna")
    with pytest.raises(ValueError):
        user.update_profile(name=name, age=31)
    assert user.name == "Anna"
    assert user.age is None
