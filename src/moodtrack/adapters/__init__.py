"""Health data source adapters for moodtrack."""

from moodtrack.adapters.base import (
    AdapterError,
    AuthorizationDenied,
    BaseAdapter,
    DataTypeUnavailable,
    InvalidDate,
    ProviderUnavailable,
)
from moodtrack.adapters.garmin import GarminHealthProvider
from moodtrack.adapters.health import (
    DailyMetrics,
    HealthProvider,
    HealthSyncAdapter,
    apply_merge,
    merge_updates,
)

__all__ = [
    # Base
    "BaseAdapter",
    "AdapterError",
    "AuthorizationDenied",
    "DataTypeUnavailable",
    "InvalidDate",
    "ProviderUnavailable",
    # Health sync
    "DailyMetrics",
    "HealthProvider",
    "HealthSyncAdapter",
    "apply_merge",
    "merge_updates",
    # Providers
    "GarminHealthProvider",
]
