"""Observable application state for UI layers."""

from collections.abc import Callable
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field

from moodtrack.db.models import AppSettings, HealthDataEntry, MoodEntry, User

logger = structlog.get_logger()


class AppState(BaseModel):
    """Snapshot of everything a screen may render.

    Instances are never mutated; ``StateStore.update`` replaces them.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    is_authenticated: bool = False
    current_user: User | None = None
    settings: AppSettings | None = None

    today_mood_entry: MoodEntry | None = None
    recent_mood_entries: list[MoodEntry] = Field(default_factory=list)
    today_health_entry: HealthDataEntry | None = None

    is_loading: bool = False
    is_syncing: bool = False
    error_message: str | None = None


Listener = Callable[[AppState], None]


class StateStore:
    """Holds the current ``AppState`` and notifies subscribers of changes."""

    def __init__(self, initial: AppState | None = None) -> None:
        self._state = initial or AppState()
        self._listeners: list[Listener] = []

    @property
    def state(self) -> AppState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def update(self, **changes: Any) -> AppState:
        self._state = self._state.model_copy(update=changes)
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception as e:
                logger.error("State listener failed", error=str(e))
        return self._state
