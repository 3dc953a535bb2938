"""Tests for the record store."""

import gc
import threading
from datetime import date, datetime

import pytest
from sqlalchemy.exc import OperationalError

from moodtrack.db import (
    AppSettings,
    EntryKind,
    HealthDataEntry,
    MoodCategory,
    MoodEntry,
    StorageError,
    User,
    create_store,
)

DAY = date(2026, 1, 19)


@pytest.fixture
def user(store):
    return store.create_user(email="anna@example.com", name="Anna")


def test_upsert_creates_once_per_day(store, user):
    first = store.upsert_daily_entry(user.id, DAY, EntryKind.HEALTH)
    second = store.upsert_daily_entry(user.id, DAY, EntryKind.HEALTH)

    assert first.id == second.id
    assert first.date == datetime(2026, 1, 19)
    assert len(store.query(EntryKind.HEALTH, HealthDataEntry.user_id == user.id)) == 1


def test_upsert_mood_updates_in_place(store, user):
    now = datetime(2026, 1, 19, 9, 15)
    first = store.upsert_daily_entry(
        user.id, DAY, EntryKind.MOOD, now=now, mood=MoodCategory.SAD, intensity=3
    )
    second = store.upsert_daily_entry(
        user.id, DAY, EntryKind.MOOD, now=now, mood=MoodCategory.HAPPY, intensity=8
    )

    assert first.id == second.id
    assert first.date == now
    entries = store.query(EntryKind.MOOD, MoodEntry.user_id == user.id)
    assert len(entries) == 1
    assert entries[0].mood is MoodCategory.HAPPY
    assert entries[0].intensity == 8


def test_upsert_mood_for_past_day_uses_start_of_day(store, user):
    entry = store.upsert_daily_entry(
        user.id, date(2026, 1, 10), EntryKind.MOOD, now=datetime(2026, 1, 19, 9, 0)
    )
    assert entry.date == datetime(2026, 1, 10)


def test_upsert_health_applies_values(store, user):
    entry = store.upsert_daily_entry(
        user.id, DAY, EntryKind.HEALTH, steps=500, steps_manually_edited=True
    )
    assert entry.steps == 500
    assert entry.steps_manually_edited is True


def test_query_with_order_and_limit(store, user):
    for day in (date(2026, 1, 17), date(2026, 1, 18), date(2026, 1, 19)):
        store.upsert_daily_entry(user.id, day, EntryKind.MOOD, now=datetime(2026, 1, 19, 12))

    recent = store.recent_mood_entries(user.id, limit=2)
    assert [e.day for e in recent] == [date(2026, 1, 19), date(2026, 1, 18)]

    oldest_first = store.entries_between(
        EntryKind.MOOD, user.id, datetime(2026, 1, 17), datetime(2026, 1, 19, 23)
    )
    assert [e.day for e in oldest_first] == [
        date(2026, 1, 17),
        date(2026, 1, 18),
        date(2026, 1, 19),
    ]
    assert store.mood_days(user.id, since=date(2026, 1, 18)) == {
        date(2026, 1, 18),
        date(2026, 1, 19),
    }


def test_save_and_get(store, user):
    entry = store.upsert_daily_entry(user.id, DAY, EntryKind.HEALTH)
    entry.calories = 321.0
    store.save(entry)

    stored = store.get(HealthDataEntry, entry.id)
    assert stored.calories == 321.0


def test_delete_user_cascades(store, user):
    store.upsert_daily_entry(user.id, DAY, EntryKind.MOOD, now=datetime(2026, 1, 19, 8))
    store.upsert_daily_entry(user.id, DAY, EntryKind.HEALTH)

    store.delete(user)

    assert store.get_user_by_email("anna@example.com") is None
    assert store.query(EntryKind.MOOD) == []
    assert store.query(EntryKind.HEALTH) == []


def test_delete_missing_entity_is_noop(store, user):
    entry = store.upsert_daily_entry(user.id, DAY, EntryKind.HEALTH)
    store.delete(entry)
    store.delete(entry)
    assert store.get(HealthDataEntry, entry.id) is None


def test_entries_are_scoped_to_owner(store, user):
    other = store.create_user(email="ben@example.com", name="Ben")
    store.upsert_daily_entry(user.id, DAY, EntryKind.HEALTH)
    store.upsert_daily_entry(other.id, DAY, EntryKind.HEALTH)

    assert len(store.query(EntryKind.HEALTH)) == 2
    assert len(store.query(EntryKind.HEALTH, HealthDataEntry.user_id == other.id)) == 1


def test_duplicate_email_raises_storage_error(store, user):
    with pytest.raises(StorageError):
        store.create_user(email="anna@example.com", name="Again")


def test_settings_row_is_singleton(store):
    first = store.get_or_create_settings(preferred_language="en")
    second = store.get_or_create_settings(preferred_language="de")

    assert first.id == second.id
    assert second.preferred_language == "en"
    assert second.daily_reminder_hour == 20


def test_invalid_url_raises_storage_error():
    with pytest.raises(StorageError):
        create_store("not a database url")


def test_timestamps_are_stored_without_zone(store, user):
    assert MoodEntry.__table__.c.date.type.timezone is False
    assert AppSettings.__table__.c.last_health_sync.type.timezone is False

    stamp = datetime(2026, 1, 19, 9, 15, 30)
    entry = store.upsert_daily_entry(user.id, DAY, EntryKind.MOOD, now=stamp)
    stored = store.get(MoodEntry, entry.id)
    assert stored.date == stamp
    assert stored.date.tzinfo is None

    settings = store.get_or_create_settings()
    settings.last_health_sync = stamp
    store.save(settings)
    assert store.get_or_create_settings().last_health_sync == stamp

    assert store.get(User, user.id).created_at.tzinfo is None


def test_upsert_applies_merged_values(store, user):
    store.upsert_daily_entry(user.id, DAY, EntryKind.HEALTH, calories=100.0)

    def merge(existing):
        return {"steps": 100, "calories": existing.calories + 50}

    entry = store.upsert_daily_entry(user.id, DAY, EntryKind.HEALTH, merge=merge, steps=300)
    assert entry.steps == 300
    assert entry.calories == 150.0
    assert store.get(HealthDataEntry, entry.id).calories == 150.0


def test_failed_merge_writes_nothing(store, user):
    def merge(existing):
        raise OperationalError("UPDATE health_entries", {}, Exception("disk I/O error"))

    with pytest.raises(StorageError):
        store.upsert_daily_entry(user.id, DAY, EntryKind.HEALTH, merge=merge)
    assert store.query(EntryKind.HEALTH) == []


def _hold_lock(store, owner_id, day, events):
    with store.entry_lock(owner_id, day):
        events.append(day)


def test_entry_lock_serializes_same_day(store, user):
    events = []
    with store.entry_lock(user.id, DAY):
        other_day = threading.Thread(
            target=_hold_lock, args=(store, user.id, date(2026, 1, 20), events)
        )
        other_day.start()
        other_day.join(5)
        assert events == [date(2026, 1, 20)]

        same_day = threading.Thread(target=_hold_lock, args=(store, user.id, DAY, events))
        same_day.start()
        same_day.join(0.2)
        assert same_day.is_alive()
        events.append("released")

    same_day.join(5)
    assert events == [date(2026, 1, 20), "released", DAY]


def test_entry_locks_are_dropped_when_unused(store, user):
    with store.entry_lock(user.id, DAY):
        assert len(store._locks) == 1
    for day in (date(2026, 1, 1), date(2026, 1, 2), date(2026, 1, 3)):
        with store.entry_lock(user.id, day):
            pass

    gc.collect()
    assert len(store._locks) == 0
