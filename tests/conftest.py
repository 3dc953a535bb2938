"""Pytest configuration and fixtures for moodtrack tests."""

from datetime import date, datetime

import pytest

from moodtrack.adapters import (
    DataTypeUnavailable,
    HealthProvider,
    HealthSyncAdapter,
)
from moodtrack.config import Settings
from moodtrack.db import create_store
from moodtrack.reminders import NotificationScheduler
from moodtrack.session import SessionStore
from moodtrack.tracker import Tracker
from moodtrack.widget import WidgetSnapshotWriter

NOW = datetime(2026, 1, 19, 14, 30)


class FakeHealthProvider(HealthProvider):
    """In-memory provider. Metrics listed in ``unsupported`` raise DataTypeUnavailable."""

    name = "fake"

    def __init__(
        self,
        steps=9000,
        calories=450.0,
        sleep_hours=7.5,
        water=2.0,
        available=True,
        unsupported=(),
        error=None,
    ):
        self.values = {
            "steps": steps,
            "calories": calories,
            "sleep": sleep_hours,
            "water": water,
        }
        self.available = available
        self.unsupported = set(unsupported)
        self.error = error
        self.authorization_requests = 0

    @property
    def is_available(self):
        return self.available

    async def request_authorization(self):
        self.authorization_requests += 1
        if self.error is not None:
            raise self.error

    async def _value(self, key):
        if self.error is not None:
            raise self.error
        if key in self.unsupported:
            raise DataTypeUnavailable(self.name, f"{key} not supported")
        return self.values[key]

    async def fetch_steps(self, day):
        return await self._value("steps")

    async def fetch_calories(self, day):
        return await self._value("calories")

    async def fetch_sleep_hours(self, day):
        return await self._value("sleep")

    async def fetch_water(self, day):
        return await self._value("water")

    async def fetch_steps_range(self, start, end):
        days = (end - start).days + 1
        return [(date.fromordinal(start.toordinal() + i), 1000 * i) for i in range(days)]


class FakeNotificationScheduler(NotificationScheduler):
    """Records reminder calls instead of scheduling them."""

    def __init__(self):
        self.daily = None
        self.one_off = {}

    def request_authorization(self):
        return True

    def schedule_daily_reminder(self, hour, minute, language=None):
        self.daily = (hour, minute, language)

    def cancel_daily_reminder(self):
        self.daily = None

    def schedule_notification(self, title, body, at, identifier):
        self.one_off[identifier] = (title, body, at)


class Clock:
    """Settable clock for the tracker."""

    def __init__(self, now=NOW):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def mock_settings(monkeypatch, tmp_path):
    """Settings pointing at a temporary database and data directory."""
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path}/moodtrack.db")
    monkeypatch.setenv("MOODTRACK_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.delenv("GARMIN_EMAIL", raising=False)
    monkeypatch.delenv("GARMIN_PASSWORD", raising=False)
    monkeypatch.delenv("MOODTRACK_LANGUAGE", raising=False)
    return Settings(_env_file=None)


@pytest.fixture
def store(tmp_path):
    return create_store(f"sqlite:///{tmp_path}/test.db")


@pytest.fixture
def provider():
    return FakeHealthProvider()


@pytest.fixture
def notifications():
    return FakeNotificationScheduler()


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def tracker(store, provider, notifications, clock, mock_settings, tmp_path):
    return Tracker(
        store=store,
        health=HealthSyncAdapter(provider),
        notifications=notifications,
        session=SessionStore(tmp_path / "session.json"),
        widget=WidgetSnapshotWriter(tmp_path / "widget.json"),
        settings=mock_settings,
        clock=clock,
    )
