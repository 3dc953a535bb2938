"""Tests for the health sync adapter and merge rules."""

import asyncio
import uuid
from datetime import date, datetime

import pytest
from conftest import FakeHealthProvider

from moodtrack.adapters import (
    AuthorizationDenied,
    DailyMetrics,
    HealthSyncAdapter,
    InvalidDate,
    ProviderUnavailable,
    apply_merge,
)
from moodtrack.db import HealthDataEntry

DAY = date(2026, 1, 19)


def _entry(**values):
    return HealthDataEntry(user_id=uuid.uuid4(), date=datetime(2026, 1, 19), **values)


class TestApplyMerge:
    def test_manual_metric_is_kept(self):
        existing = _entry(steps=500, steps_manually_edited=True)
        merged = apply_merge(existing, DailyMetrics(steps=9000))

        assert merged.steps == 500
        assert merged.steps_manually_edited is True

    def test_automatic_metric_is_overwritten(self):
        existing = _entry(steps=500)
        merged = apply_merge(existing, DailyMetrics(steps=9000))

        assert merged.steps == 9000
        assert merged.steps_manually_edited is False

    def test_missing_value_keeps_stored_value(self):
        existing = _entry(sleep_hours=6.0)
        merged = apply_merge(existing, DailyMetrics(sleep_hours=None, water_intake=1.5))

        assert merged.sleep_hours == 6.0
        assert merged.water_intake == 1.5

    def test_zero_overwrites(self):
        merged = apply_merge(_entry(calories=250.0), DailyMetrics(calories=0.0))
        assert merged.calories == 0.0

    def test_input_is_not_mutated(self):
        existing = _entry(steps=500)
        apply_merge(existing, DailyMetrics(steps=9000, calories=300.0))

        assert existing.steps == 500
        assert existing.calories is None

    def test_result_keeps_identity(self):
        existing = _entry()
        merged = apply_merge(existing, DailyMetrics(steps=1))
        assert merged.id == existing.id
        assert merged.day == existing.day


class TestFetchDailyMetrics:
    def test_all_metrics(self):
        adapter = HealthSyncAdapter(FakeHealthProvider())
        metrics = asyncio.run(adapter.fetch_daily_metrics(DAY))

        assert metrics == DailyMetrics(
            steps=9000, calories=450.0, sleep_hours=7.5, water_intake=2.0
        )

    def test_unsupported_metric_is_skipped(self):
        adapter = HealthSyncAdapter(FakeHealthProvider(unsupported={"water"}))
        metrics = asyncio.run(adapter.fetch_daily_metrics(DAY))

        assert metrics.water_intake is None
        assert metrics.steps == 9000

    def test_authorization_denied_propagates(self):
        provider = FakeHealthProvider(error=AuthorizationDenied("fake", "denied"))
        adapter = HealthSyncAdapter(provider)

        with pytest.raises(AuthorizationDenied):
            asyncio.run(adapter.fetch_daily_metrics(DAY))

    def test_provider_unavailable_propagates(self):
        provider = FakeHealthProvider(error=ProviderUnavailable("fake", "offline"))
        with pytest.raises(ProviderUnavailable):
            asyncio.run(HealthSyncAdapter(provider).fetch_daily_metrics(DAY))


class TestAdapter:
    def test_connect_requests_authorization(self):
        provider = FakeHealthProvider()
        adapter = HealthSyncAdapter(provider)

        assert asyncio.run(adapter.connect()) is True
        assert adapter.is_connected
        assert provider.authorization_requests == 1

    def test_connect_unavailable_provider(self):
        provider = FakeHealthProvider(available=False)
        adapter = HealthSyncAdapter(provider)

        assert asyncio.run(adapter.connect()) is False
        assert provider.authorization_requests == 0

    def test_steps_range_rejects_reversed_dates(self):
        adapter = HealthSyncAdapter(FakeHealthProvider())
        with pytest.raises(InvalidDate):
            asyncio.run(adapter.fetch_steps_range(date(2026, 1, 19), date(2026, 1, 12)))

    def test_fetch_range(self):
        adapter = HealthSyncAdapter(FakeHealthProvider())
        result = asyncio.run(adapter.fetch(date(2026, 1, 18), date(2026, 1, 19)))

        assert result["source"] == "fake"
        assert list(result["days"]) == ["2026-01-18", "2026-01-19"]
        assert result["days"]["2026-01-19"]["steps"] == 9000

    def test_context_manager(self):
        async def run():
            async with HealthSyncAdapter(FakeHealthProvider()) as adapter:
                assert adapter.is_connected
                assert await adapter.health_check()
                today = await adapter.fetch_today()
            return adapter, today

        adapter, today = asyncio.run(run())
        assert not adapter.is_connected
        assert today["source"] == "fake"
        assert len(today["days"]) == 1
