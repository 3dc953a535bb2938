"""Health data sync: provider interface, daily fetch and merge."""

import asyncio
from abc import ABC, abstractmethod
from datetime import date, timedelta
from typing import Any

from pydantic import BaseModel

from moodtrack.adapters.base import (
    BaseAdapter,
    DataTypeUnavailable,
    InvalidDate,
)
from moodtrack.db.models import HealthDataEntry, HealthMetric


class HealthProvider(ABC):
    """External source of per-day health samples."""

    name: str = "provider"

    @property
    @abstractmethod
    def is_available(self) -> bool:
        """Whether the provider can be used on this installation."""

    @abstractmethod
    async def request_authorization(self) -> None:
        """Ask for read access. Raises ``AuthorizationDenied`` on refusal."""

    @abstractmethod
    async def fetch_steps(self, day: date) -> int: ...

    @abstractmethod
    async def fetch_calories(self, day: date) -> float: ...

    @abstractmethod
    async def fetch_sleep_hours(self, day: date) -> float: ...

    @abstractmethod
    async def fetch_water(self, day: date) -> float: ...

    @abstractmethod
    async def fetch_steps_range(self, start: date, end: date) -> list[tuple[date, int]]: ...


class DailyMetrics(BaseModel):
    """Metrics fetched for one day. ``None`` means no data for that metric."""

    steps: int | None = None
    calories: float | None = None
    sleep_hours: float | None = None
    water_intake: float | None = None

    def get(self, metric: HealthMetric) -> float | int | None:
        return getattr(self, HealthMetric(metric).value_field)


def merge_updates(existing: HealthDataEntry, fetched: DailyMetrics) -> dict[str, Any]:
    """Column values that merging ``fetched`` into ``existing`` would change.

    A metric is overwritten only when its manually-edited flag is false and the
    provider returned a value. Flags are never touched.
    """
    updates: dict[str, Any] = {}
    for metric in HealthMetric:
        value = fetched.get(metric)
        if value is None or existing.is_manually_edited(metric):
            continue
        updates[metric.value_field] = int(value) if metric is HealthMetric.STEPS else value
    return updates


def apply_merge(existing: HealthDataEntry, fetched: DailyMetrics) -> HealthDataEntry:
    """Merge fetched metrics into a detached copy of ``existing``."""
    return existing.copy_with(**merge_updates(existing, fetched))


class HealthSyncAdapter(BaseAdapter):
    """Pulls daily metrics from a ``HealthProvider``.

    A metric the provider does not support is skipped; authorization and
    availability errors abort the whole fetch.
    """

    def __init__(self, provider: HealthProvider) -> None:
        super().__init__(f"health:{provider.name}")
        self.provider = provider

    async def connect(self) -> bool:
        """Request authorization from the provider."""
        if not self.provider.is_available:
            self.logger.warning("Health provider not available")
            return False
        await self.provider.request_authorization()
        self._connected = True
        self.logger.info("Health provider authorized")
        return True

    async def disconnect(self) -> None:
        self._connected = False

    async def health_check(self) -> bool:
        return self.provider.is_available

    async def fetch_daily_metrics(self, day: date) -> DailyMetrics:
        """Fetch all four metrics for ``day`` concurrently."""
        results = await asyncio.gather(
            self.provider.fetch_steps(day),
            self.provider.fetch_calories(day),
            self.provider.fetch_sleep_hours(day),
            self.provider.fetch_water(day),
            return_exceptions=True,
        )

        values: dict[str, Any] = {}
        for metric, result in zip(HealthMetric, results):
            if isinstance(result, DataTypeUnavailable):
                self.logger.warning(
                    "Metric unavailable", metric=metric.value, error=result.message
                )
                values[metric.value_field] = None
            elif isinstance(result, BaseException):
                raise result
            else:
                values[metric.value_field] = result

        self.logger.info("Fetched daily metrics", day=day.isoformat())
        return DailyMetrics(**values)

    async def fetch_steps_range(self, start: date, end: date) -> list[tuple[date, int]]:
        if start > end:
            raise InvalidDate(self.name, f"Start {start} is after end {end}")
        return await self.provider.fetch_steps_range(start, end)

    async def fetch(
        self,
        start_date: date,
        end_date: date | None = None,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """Fetch daily metrics for every day in the range.

        Returns:
            Mapping with ``source`` and ``days`` (ISO date -> metrics dict).
        """
        end_date = end_date or start_date
        if start_date > end_date:
            raise InvalidDate(self.name, f"Start {start_date} is after end {end_date}")

        days: dict[str, Any] = {}
        current = start_date
        while current <= end_date:
            metrics = await self.fetch_daily_metrics(current)
            days[current.isoformat()] = metrics.model_dump()
            current += timedelta(days=1)

        return {"source": self.provider.name, "days": days}
