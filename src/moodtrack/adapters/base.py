"""Base adapter interface and errors for external health data sources."""

from abc import ABC, abstractmethod
from datetime import date
from typing import Any

import structlog

logger = structlog.get_logger()


class BaseAdapter(ABC):
    """Common shape of everything that pulls health data from outside.

    Subclasses provide:
    - connect(): Ask the source for read access
    - disconnect(): Drop access again
    - health_check(): Report whether the source can be used
    - fetch(): Per-day data for a date range
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._connected = False
        self.logger = logger.bind(adapter=name)

    @property
    def is_connected(self) -> bool:
        """Whether access has been granted in this process."""
        return self._connected

    @abstractmethod
    async def connect(self) -> bool:
        """Request read access.

        Returns:
            True if access was granted, False if the source is not present.
        """

    @abstractmethod
    async def disconnect(self) -> None:
        """Forget the granted access."""

    @abstractmethod
    async def health_check(self) -> bool:
        """Whether the source is present on this installation."""

    @abstractmethod
    async def fetch(
        self,
        start_date: date,
        end_date: date | None = None,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """Per-day data between two calendar days, both inclusive.

        Args:
            start_date: First day.
            end_date: Last day (defaults to start_date).
            **kwargs: Source-specific options.

        Returns:
            Mapping keyed by source name and ISO day.
        """

    async def fetch_today(self, **kwargs: Any) -> dict[str, Any]:
        today = date.today()
        return await self.fetch(today, today, **kwargs)

    async def __aenter__(self) -> "BaseAdapter":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.disconnect()


class AdapterError(Exception):
    """Base exception for adapter errors."""

    def __init__(self, adapter_name: str, message: str) -> None:
        self.adapter_name = adapter_name
        self.message = message
        super().__init__(f"[{adapter_name}] {message}")


class AuthorizationDenied(AdapterError):
    """Raised when the provider refuses access to health data."""

    pass


class ProviderUnavailable(AdapterError):
    """Raised when the provider cannot be reached."""

    pass


class DataTypeUnavailable(AdapterError):
    """Raised when the provider does not offer a metric."""

    pass


class InvalidDate(AdapterError):
    """Raised for an impossible date or date range."""

    pass
