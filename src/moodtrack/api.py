"""moodtrack API server for UI clients and integrations."""

import uuid
from contextlib import asynccontextmanager
from typing import Any

import structlog
from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from moodtrack import __version__
from moodtrack.config import configure_logging, get_settings
from moodtrack.db import HealthDataEntry, HealthMetric, MoodCategory, MoodEntry
from moodtrack.reminders import ReminderScheduler
from moodtrack.tracker import Tracker, build_tracker
from moodtrack.widget import REFRESH_MINUTES

logger = structlog.get_logger()


class SignInRequest(BaseModel):
    email: str
    name: str


class MoodRequest(BaseModel):
    mood: MoodCategory
    intensity: int = 5
    notes: str | None = None
    triggers: list[str] | None = None
    activities: list[str] | None = None


class MetricRequest(BaseModel):
    value: float = Field(ge=0)


class ProfileRequest(BaseModel):
    name: str | None = None
    age: int | None = None
    weight: float | None = None
    height: float | None = None
    gender: str | None = None


class SettingsRequest(BaseModel):
    notifications_enabled: bool | None = None
    reminder_hour: int | None = Field(default=None, ge=0, le=23)
    reminder_minute: int | None = Field(default=None, ge=0, le=59)
    language: str | None = None
    auto_sync: bool | None = None


def mood_to_dict(entry: MoodEntry) -> dict[str, Any]:
    data = entry.model_dump(mode="json")
    data.update(label=entry.mood.label, symbol=entry.mood.symbol, score=entry.mood.score)
    return data


def health_to_dict(entry: HealthDataEntry) -> dict[str, Any]:
    return entry.model_dump(mode="json")


def _error(tracker: Tracker) -> dict[str, Any]:
    return {"error": tracker.state.error_message or "Unknown error"}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the tracker on startup unless one was injected."""
    tracker: Tracker | None = getattr(app.state, "tracker", None)
    if tracker is None:
        settings = get_settings()
        configure_logging(settings.log_level)
        # A store that cannot be opened stops the server here.
        tracker = build_tracker(settings)
        app.state.tracker = tracker

    tracker.restore_session()
    if isinstance(tracker.notifications, ReminderScheduler):
        tracker.notifications.start()
    await tracker.auto_sync()
    logger.info("API started")

    yield

    if isinstance(tracker.notifications, ReminderScheduler):
        tracker.notifications.stop()
    logger.info("API stopped")


def create_app(tracker: Tracker | None = None) -> FastAPI:
    app = FastAPI(
        title="moodtrack API",
        description="Personal mood and health tracker",
        version=__version__,
        lifespan=lifespan,
    )
    if tracker is not None:
        app.state.tracker = tracker

    # CORS for local UI development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def get_tracker(request: Request) -> Tracker:
        return request.app.state.tracker

    @app.get("/")
    async def root() -> dict[str, Any]:
        return {"name": "moodtrack", "version": __version__, "docs": "/docs"}

    @app.get("/api/status")
    async def status(request: Request) -> dict[str, Any]:
        tracker = get_tracker(request)
        state = tracker.state
        return {
            "authenticated": state.is_authenticated,
            "email": state.current_user.email if state.current_user else None,
            "health_provider": tracker.health.provider.name,
            "health_available": tracker.health.provider.is_available,
        }

    # Session

    @app.post("/api/session")
    async def sign_in(request: Request, body: SignInRequest) -> dict[str, Any]:
        tracker = get_tracker(request)
        user = await tracker.sign_in(body.email, body.name)
        if user is None:
            return _error(tracker)
        return {"user": user.model_dump(mode="json")}

    @app.delete("/api/session")
    async def sign_out(request: Request) -> dict[str, Any]:
        get_tracker(request).sign_out()
        return {"signed_out": True}

    @app.patch("/api/profile")
    async def update_profile(request: Request, body: ProfileRequest) -> dict[str, Any]:
        tracker = get_tracker(request)
        user = tracker.update_profile(**body.model_dump(exclude_unset=True))
        if user is None:
            return _error(tracker)
        return {"user": user.model_dump(mode="json")}

    # Mood

    @app.get("/api/mood")
    async def recent_moods(
        request: Request, limit: int = Query(30, ge=1, le=365)
    ) -> dict[str, Any]:
        tracker = get_tracker(request)
        tracker.clear_error()
        entries = tracker.load_recent_mood_entries(limit=limit)
        if tracker.state.error_message:
            return _error(tracker)
        return {"entries": [mood_to_dict(e) for e in entries]}

    @app.post("/api/mood")
    async def save_mood(request: Request, body: MoodRequest) -> dict[str, Any]:
        tracker = get_tracker(request)
        entry = tracker.save_mood_entry(**body.model_dump())
        if entry is None:
            return _error(tracker)
        return {"entry": mood_to_dict(entry)}

    @app.delete("/api/mood/{entry_id}")
    async def delete_mood(request: Request, entry_id: uuid.UUID) -> dict[str, Any]:
        tracker = get_tracker(request)
        if not tracker.delete_mood_entry(entry_id):
            return _error(tracker)
        return {"deleted": str(entry_id)}

    @app.get("/api/mood/stats")
    async def mood_stats(
        request: Request, days: int | None = Query(None, ge=1, le=365)
    ) -> dict[str, Any]:
        tracker = get_tracker(request)
        most_frequent = tracker.most_frequent_mood(days)
        return {
            "average": tracker.average_mood(days),
            "most_frequent": most_frequent.value if most_frequent else None,
            "distribution": {
                mood.value: count for mood, count in tracker.mood_distribution(days).items()
            },
            "chart": [
                {"date": ts.isoformat(), "value": value}
                for ts, value in tracker.mood_chart(days)
            ],
        }

    @app.get("/api/insights")
    async def insights(request: Request) -> dict[str, Any]:
        return {"insights": get_tracker(request).insights()}

    # Health

    @app.get("/api/health/today")
    async def today_health(request: Request) -> dict[str, Any]:
        tracker = get_tracker(request)
        entry = tracker.load_today_health()
        if entry is None:
            return _error(tracker)
        return {"entry": health_to_dict(entry)}

    @app.put("/api/health/today/{metric}")
    async def set_metric(
        request: Request, metric: HealthMetric, body: MetricRequest
    ) -> dict[str, Any]:
        tracker = get_tracker(request)
        entry = tracker.update_health_metric(metric, body.value)
        if entry is None:
            return _error(tracker)
        return {"entry": health_to_dict(entry)}

    @app.post("/api/health/sync")
    async def sync_health(request: Request) -> dict[str, Any]:
        tracker = get_tracker(request)
        entry = await tracker.sync_health()
        if entry is None:
            return _error(tracker)
        return {"entry": health_to_dict(entry)}

    @app.get("/api/health/averages")
    async def health_averages(request: Request) -> dict[str, Any]:
        return get_tracker(request).weekly_health_averages().model_dump()

    # Assistant context

    @app.get("/api/context")
    async def context(
        request: Request, days: int | None = Query(None, ge=1, le=365)
    ) -> dict[str, Any]:
        tracker = get_tracker(request)
        text = tracker.build_context(days)
        if text is None:
            return _error(tracker)
        return {"context": text}

    # Settings

    @app.get("/api/settings")
    async def read_settings(request: Request) -> dict[str, Any]:
        tracker = get_tracker(request)
        app_settings = tracker.load_settings()
        if app_settings is None:
            return _error(tracker)
        return {"settings": app_settings.model_dump(mode="json")}

    @app.patch("/api/settings")
    async def update_settings(request: Request, body: SettingsRequest) -> dict[str, Any]:
        tracker = get_tracker(request)
        result = tracker.load_settings()
        if body.notifications_enabled is not None:
            result = tracker.set_notifications_enabled(body.notifications_enabled)
        if result is not None and body.reminder_hour is not None:
            current = tracker.state.settings
            minute = body.reminder_minute
            if minute is None:
                minute = current.daily_reminder_minute or 0
            result = tracker.set_reminder_time(body.reminder_hour, minute)
        if result is not None and body.language is not None:
            result = tracker.set_language(body.language)
        if result is not None and body.auto_sync is not None:
            result = tracker.set_auto_sync(body.auto_sync)
        if result is None:
            return _error(tracker)
        return {"settings": result.model_dump(mode="json")}

    # Widget

    @app.get("/api/widget")
    async def widget(request: Request) -> dict[str, Any]:
        tracker = get_tracker(request)
        snapshot = tracker.refresh_widget() or tracker.widget.load()
        return {
            **snapshot.model_dump(by_alias=True),
            "refreshMinutes": REFRESH_MINUTES,
        }

    return app


def run_server(host: str = "127.0.0.1", port: int = 8000) -> None:
    """Run the API server."""
    import uvicorn

    uvicorn.run(create_app(), host=host, port=port)


if __name__ == "__main__":
    run_server()
