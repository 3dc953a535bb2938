"""Garmin Connect as a health data provider."""

import asyncio
from collections.abc import Callable
from datetime import date
from typing import Any, TypeVar

import structlog
from garminconnect import (
    Garmin,
    GarminConnectAuthenticationError,
    GarminConnectConnectionError,
    GarminConnectTooManyRequestsError,
)

from moodtrack.adapters.base import AuthorizationDenied, InvalidDate, ProviderUnavailable
from moodtrack.adapters.health import HealthProvider
from moodtrack.config.settings import GarminSettings

logger = structlog.get_logger()

T = TypeVar("T")


class GarminHealthProvider(HealthProvider):
    """Reads steps, active calories, sleep and hydration from Garmin Connect.

    The ``garminconnect`` client is synchronous, so each call runs in a worker
    thread. Missing values come back as 0.
    """

    name = "garmin"

    def __init__(self, settings: GarminSettings, client: Garmin | None = None) -> None:
        self.settings = settings
        self._client = client
        self.logger = logger.bind(adapter=self.name)

    @property
    def is_available(self) -> bool:
        return self._client is not None or self.settings.is_configured

    async def request_authorization(self) -> None:
        """Log in to Garmin Connect."""
        if self._client is not None:
            return
        if not self.settings.is_configured:
            raise AuthorizationDenied(self.name, "Garmin credentials not configured")

        client = Garmin(self.settings.email, self.settings.password.get_secret_value())
        await self._call(client.login)
        self._client = client
        self.logger.info("Connected to Garmin Connect")

    async def _call(self, func: Callable[..., T], *args: Any) -> T:
        try:
            return await asyncio.to_thread(func, *args)
        except GarminConnectAuthenticationError as e:
            self.logger.error("Garmin authentication failed", error=str(e))
            raise AuthorizationDenied(self.name, f"Login failed: {e}") from e
        except (GarminConnectConnectionError, GarminConnectTooManyRequestsError) as e:
            self.logger.error("Garmin request failed", error=str(e))
            raise ProviderUnavailable(self.name, f"Request failed: {e}") from e

    def _require_client(self) -> Garmin:
        if self._client is None:
            raise AuthorizationDenied(self.name, "Not connected")
        return self._client

    async def fetch_steps(self, day: date) -> int:
        stats = await self._call(self._require_client().get_stats, day.isoformat())
        return int((stats or {}).get("totalSteps") or 0)

    async def fetch_calories(self, day: date) -> float:
        stats = await self._call(self._require_client().get_stats, day.isoformat())
        return float((stats or {}).get("activeKilocalories") or 0)

    async def fetch_sleep_hours(self, day: date) -> float:
        sleep_data = await self._call(self._require_client().get_sleep_data, day.isoformat())
        daily = (sleep_data or {}).get("dailySleepDTO") or {}
        seconds = daily.get("sleepTimeSeconds") or 0
        return seconds / 3600

    async def fetch_water(self, day: date) -> float:
        hydration = await self._call(
            self._require_client().get_hydration_data, day.isoformat()
        )
        millilitres = (hydration or {}).get("valueInML") or 0
        return millilitres / 1000

    async def fetch_steps_range(self, start: date, end: date) -> list[tuple[date, int]]:
        if start > end:
            raise InvalidDate(self.name, f"Start {start} is after end {end}")

        rows = await self._call(
            self._require_client().get_daily_steps, start.isoformat(), end.isoformat()
        )
        return [
            (date.fromisoformat(row["calendarDate"]), int(row.get("totalSteps") or 0))
            for row in (rows or [])
        ]
