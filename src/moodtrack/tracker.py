"""Application service tying the store, health sync, reminders and widget together.

Every public method is a boundary: failures are logged and turned into a
localized ``error_message`` on the state instead of being raised.
"""

import uuid
from collections.abc import Callable
from datetime import date, datetime, timedelta
from typing import Any

import structlog

from moodtrack.adapters import (
    AdapterError,
    AuthorizationDenied,
    DataTypeUnavailable,
    GarminHealthProvider,
    HealthSyncAdapter,
    InvalidDate,
    merge_updates,
)
from moodtrack.aggregators import (
    HealthAverages,
    average_mood_score,
    generate_insights,
    mood_chart_points,
    mood_distribution,
    most_frequent_mood,
    weekly_health_averages,
)
from moodtrack.assistant import build_context
from moodtrack.config.settings import Settings, get_settings
from moodtrack.db import (
    AppSettings,
    EntryKind,
    HealthDataEntry,
    HealthMetric,
    MoodCategory,
    MoodEntry,
    RecordStore,
    StorageError,
    User,
    create_store,
    day_range,
)
from moodtrack.locale import SUPPORTED_LANGUAGES, resolve_language, translate
from moodtrack.reminders import NotificationError, NotificationScheduler, ReminderScheduler
from moodtrack.session import SessionStore
from moodtrack.state import AppState, StateStore
from moodtrack.widget import WidgetSnapshot, WidgetSnapshotWriter

logger = structlog.get_logger()


class Tracker:
    """Mood and health tracking for the signed-in user."""

    def __init__(
        self,
        store: RecordStore,
        health: HealthSyncAdapter,
        notifications: NotificationScheduler,
        session: SessionStore,
        widget: WidgetSnapshotWriter,
        settings: Settings | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.store = store
        self.health = health
        self.notifications = notifications
        self.session = session
        self.widget = widget
        self.settings = settings or get_settings()
        self.clock = clock
        self.state_store = StateStore()

    # State helpers

    @property
    def state(self) -> AppState:
        return self.state_store.state

    @property
    def language(self) -> str:
        app_settings = self.state.settings
        if app_settings is not None:
            return resolve_language(app_settings.preferred_language)
        return resolve_language(self.settings.language)

    @property
    def today(self) -> date:
        return self.clock().date()

    def clear_error(self) -> None:
        self.state_store.update(error_message=None)

    def _fail(self, key: str, error: Exception | str | None = None) -> None:
        if isinstance(error, AdapterError):
            detail = self._adapter_message(error)
        elif isinstance(error, StorageError):
            detail = translate("error_storage", self.language)
        else:
            detail = str(error) if error is not None else ""
        message = translate(key, self.language, error=detail)
        if isinstance(error, StorageError):
            logger.warning("Operation failed", message=message, error=error.message)
        else:
            logger.warning("Operation failed", message=message)
        self.state_store.update(error_message=message)

    def _adapter_message(self, error: AdapterError) -> str:
        if isinstance(error, AuthorizationDenied):
            return translate("error_authorization_denied", self.language)
        if isinstance(error, DataTypeUnavailable):
            return translate("error_data_type_unavailable", self.language)
        if isinstance(error, InvalidDate):
            return translate("error_invalid_date", self.language)
        return error.message

    def _user(self) -> User | None:
        user = self.state.current_user
        if user is None:
            self.state_store.update(
                error_message=translate("error_not_signed_in", self.language)
            )
        return user

    # Session

    def restore_session(self) -> User | None:
        """Sign the remembered user back in."""
        email = self.session.current_user_email
        if not email:
            return None
        try:
            user = self.store.get_user_by_email(email)
            app_settings = self.store.get_or_create_settings(**self._default_settings())
        except StorageError as e:
            self._fail("error_load", e)
            return None

        if user is None:
            logger.warning("Session user not found", email=email)
            self.session.clear()
            return None

        self.state_store.update(
            is_authenticated=True, current_user=user, settings=app_settings
        )
        # Scheduled jobs do not survive a restart.
        if app_settings.notifications_enabled:
            self._schedule_reminder(app_settings)
        return user

    def _default_settings(self) -> dict[str, Any]:
        return {
            "preferred_language": resolve_language(self.settings.language),
            "daily_reminder_hour": self.settings.reminder.hour,
            "daily_reminder_minute": self.settings.reminder.minute,
        }

    async def sign_in(self, email: str, name: str) -> User | None:
        """Sign in, creating the profile and default settings on first use."""
        self.state_store.update(is_loading=True, error_message=None)
        try:
            user = self.store.get_user_by_email(email)
            if user is None:
                user = self.store.create_user(email=email, name=name)
            app_settings = self.store.get_or_create_settings(**self._default_settings())
        except StorageError as e:
            self._fail("error_sign_in", e)
            self.state_store.update(is_loading=False)
            return None

        self.session.set_current_user(email)
        self.state_store.update(
            is_authenticated=True,
            current_user=user,
            settings=app_settings,
            is_loading=False,
        )
        logger.info("Signed in", user_id=str(user.id))

        await self._request_permissions()
        if app_settings.notifications_enabled:
            self._schedule_reminder(app_settings)
        return user

    async def _request_permissions(self) -> None:
        if self.health.provider.is_available:
            try:
                await self.health.connect()
            except AdapterError as e:
                logger.warning("Health authorization failed", error=e.message)

        try:
            granted = self.notifications.request_authorization()
            if not granted:
                logger.warning("Notification permission not granted")
        except NotificationError as e:
            logger.warning("Notification authorization failed", error=str(e))

    def sign_out(self) -> None:
        self.session.clear()
        self.state_store.update(
            is_authenticated=False,
            current_user=None,
            today_mood_entry=None,
            recent_mood_entries=[],
            today_health_entry=None,
            error_message=None,
        )
        logger.info("Signed out")

    def update_profile(self, **fields: Any) -> User | None:
        """Update name, age, weight, height or gender."""
        user = self._user()
        if user is None:
            return None
        if "name" in fields and not (fields["name"] or "").strip():
            self._fail("error_save", translate("error_name_required", self.language))
            return None

        # Edit a fresh copy; state keeps the old profile until the save commits.
        try:
            profile = self.store.get(User, user.id)
            if profile is None:
                self._fail("error_save", translate("error_not_found", self.language))
                return None
            profile.update_profile(**fields)
            profile = self.store.save(profile)
        except StorageError as e:
            self._fail("error_save", e)
            return None
        except ValueError as e:
            self._fail("error_save", e)
            return None
        self.state_store.update(current_user=profile, error_message=None)
        return profile

    def delete_account(self) -> bool:
        """Delete the user together with all mood and health entries."""
        user = self._user()
        if user is None:
            return False
        try:
            self.store.delete(user)
        except StorageError as e:
            self._fail("error_delete", e)
            return False
        logger.info("Account deleted", user_id=str(user.id))
        self.sign_out()
        return True

    # Mood

    def load_today_mood_entry(self) -> MoodEntry | None:
        user = self._user()
        if user is None:
            return None
        start, end = day_range(self.today)
        try:
            entries = self.store.query(
                EntryKind.MOOD,
                MoodEntry.user_id == user.id,
                MoodEntry.date >= start,
                MoodEntry.date < end,
            )
        except StorageError as e:
            self._fail("error_load", e)
            return None
        entry = entries[0] if entries else None
        self.state_store.update(today_mood_entry=entry)
        return entry

    def load_recent_mood_entries(self, limit: int | None = None) -> list[MoodEntry]:
        """Newest entries first."""
        user = self._user()
        if user is None:
            return []
        limit = limit or self.settings.aggregation.recent_limit
        try:
            entries = self.store.recent_mood_entries(user.id, limit=limit)
        except StorageError as e:
            self._fail("error_load", e)
            return []
        self.state_store.update(recent_mood_entries=entries)
        return entries

    def save_mood_entry(
        self,
        mood: MoodCategory,
        intensity: int = 5,
        notes: str | None = None,
        triggers: list[str] | None = None,
        activities: list[str] | None = None,
    ) -> MoodEntry | None:
        """Create today's mood entry or update it in place."""
        user = self._user()
        if user is None:
            return None

        self.state_store.update(is_loading=True, error_message=None)
        today = self.today
        try:
            with self.store.entry_lock(user.id, today):
                entry = self.store.upsert_daily_entry(
                    user.id,
                    today,
                    EntryKind.MOOD,
                    now=self.clock(),
                    mood=MoodCategory(mood),
                    intensity=intensity,
                    notes=notes,
                    triggers=triggers,
                    activities=activities,
                )
        except StorageError as e:
            self._fail("error_save", e)
            self.state_store.update(is_loading=False)
            return None

        self.state_store.update(today_mood_entry=entry, is_loading=False)
        self.load_recent_mood_entries()
        self.refresh_widget()
        return entry

    def delete_mood_entry(self, entry_id: uuid.UUID) -> bool:
        user = self._user()
        if user is None:
            return False
        try:
            entry = self.store.get(MoodEntry, entry_id)
            if entry is None or entry.user_id != user.id:
                self._fail("error_delete", translate("error_not_found", self.language))
                return False
            with self.store.entry_lock(user.id, entry.day):
                self.store.delete(entry)
        except StorageError as e:
            self._fail("error_delete", e)
            return False

        today_entry = self.state.today_mood_entry
        if today_entry is not None and today_entry.id == entry.id:
            self.state_store.update(today_mood_entry=None)
        self.load_recent_mood_entries()
        self.refresh_widget()
        return True

    def _mood_window(self, days: int) -> list[MoodEntry]:
        user = self._user()
        if user is None:
            return []
        now = self.clock()
        try:
            return self.store.entries_between(
                EntryKind.MOOD, user.id, now - timedelta(days=days), now
            )
        except StorageError as e:
            self._fail("error_load", e)
            return []

    def average_mood(self, days: int | None = None) -> float:
        return average_mood_score(
            self._mood_window(days or self.settings.aggregation.mood_trend_days)
        )

    def most_frequent_mood(self, days: int | None = None) -> MoodCategory | None:
        """Ties go to the mood logged earliest in the window."""
        return most_frequent_mood(
            self._mood_window(days or self.settings.aggregation.mood_trend_days)
        )

    def mood_distribution(self, days: int | None = None) -> dict[MoodCategory, int]:
        return mood_distribution(
            self._mood_window(days or self.settings.aggregation.distribution_days)
        )

    def mood_chart(self, days: int | None = None) -> list[tuple[datetime, float]]:
        return mood_chart_points(
            self._mood_window(days or self.settings.aggregation.mood_trend_days)
        )

    def insights(self) -> list[str]:
        entries = self._mood_window(self.settings.aggregation.mood_trend_days)
        return generate_insights(entries, now=self.clock(), language=self.language)

    # Health

    def load_today_health(self) -> HealthDataEntry | None:
        user = self._user()
        if user is None:
            return None
        today = self.today
        try:
            with self.store.entry_lock(user.id, today):
                entry = self.store.upsert_daily_entry(
                    user.id, today, EntryKind.HEALTH, now=self.clock()
                )
        except StorageError as e:
            self._fail("error_load", e)
            return None
        self.state_store.update(today_health_entry=entry)
        return entry

    def update_health_metric(
        self, metric: HealthMetric, value: float, day: date | None = None
    ) -> HealthDataEntry | None:
        """Record a manual value. The metric is no longer overwritten by sync."""
        user = self._user()
        if user is None:
            return None
        metric = HealthMetric(metric)
        day = day or self.today
        values = {
            metric.value_field: int(value) if metric is HealthMetric.STEPS else float(value),
            metric.flag_field: True,
        }
        try:
            with self.store.entry_lock(user.id, day):
                entry = self.store.upsert_daily_entry(
                    user.id, day, EntryKind.HEALTH, now=self.clock(), **values
                )
        except StorageError as e:
            self._fail("error_save", e)
            return None

        if day == self.today:
            self.state_store.update(today_health_entry=entry)
        return entry

    async def sync_health(self, day: date | None = None) -> HealthDataEntry | None:
        """Pull metrics for ``day`` and merge them into the stored entry.

        Manually edited metrics are kept. On failure the stored entry is left
        untouched.
        """
        user = self._user()
        if user is None:
            return None
        if not self.health.provider.is_available:
            self._fail("error_sync", translate("error_health_unavailable", self.language))
            return None

        day = day or self.today
        self.state_store.update(is_syncing=True, error_message=None)
        try:
            if not self.health.is_connected:
                await self.health.connect()
            metrics = await self.health.fetch_daily_metrics(day)
        except AdapterError as e:
            self._fail("error_sync", e)
            self.state_store.update(is_syncing=False)
            return None

        try:
            with self.store.entry_lock(user.id, day):
                entry = self.store.upsert_daily_entry(
                    user.id,
                    day,
                    EntryKind.HEALTH,
                    now=self.clock(),
                    merge=lambda existing: merge_updates(existing, metrics),
                )
            app_settings = self.store.get_or_create_settings(**self._default_settings())
            app_settings.last_health_sync = self.clock()
            app_settings = self.store.save(app_settings)
        except StorageError as e:
            self._fail("error_save", e)
            self.state_store.update(is_syncing=False)
            return None

        changes: dict[str, Any] = {"is_syncing": False, "settings": app_settings}
        if day == self.today:
            changes["today_health_entry"] = entry
        self.state_store.update(**changes)
        logger.info("Health data synced", day=day.isoformat())
        return entry

    async def auto_sync(self) -> HealthDataEntry | None:
        """Sync today's metrics if auto-sync is enabled."""
        app_settings = self.state.settings
        if app_settings is None or not app_settings.auto_sync_health_data:
            return None
        if not self.health.provider.is_available:
            return None
        return await self.sync_health()

    def load_health_range(self, start: datetime, end: datetime) -> list[HealthDataEntry]:
        user = self._user()
        if user is None:
            return []
        try:
            return self.store.entries_between(EntryKind.HEALTH, user.id, start, end)
        except StorageError as e:
            self._fail("error_load", e)
            return []

    def weekly_health_averages(self) -> HealthAverages:
        now = self.clock()
        return weekly_health_averages(self.load_health_range(now - timedelta(days=7), now))

    async def load_weekly_steps(self) -> list[tuple[date, int]]:
        """Daily step counts for the last week, straight from the provider."""
        today = self.today
        try:
            if not self.health.is_connected:
                await self.health.connect()
            return await self.health.fetch_steps_range(today - timedelta(days=7), today)
        except AdapterError as e:
            self._fail("error_load", e)
            return []

    # Settings

    def load_settings(self) -> AppSettings | None:
        try:
            app_settings = self.store.get_or_create_settings(**self._default_settings())
        except StorageError as e:
            self._fail("error_load", e)
            return None
        self.state_store.update(settings=app_settings)
        return app_settings

    def _save_settings(self, **changes: Any) -> AppSettings | None:
        app_settings = self.state.settings or self.load_settings()
        if app_settings is None:
            return None
        data = {name: getattr(app_settings, name) for name in AppSettings.model_fields}
        updated = AppSettings(**{**data, **changes})
        try:
            updated = self.store.save(updated)
        except StorageError as e:
            self._fail("error_save", e)
            return None
        self.state_store.update(settings=updated, error_message=None)
        return updated

    def _schedule_reminder(self, app_settings: AppSettings) -> None:
        if not app_settings.has_reminder_time:
            return
        try:
            self.notifications.schedule_daily_reminder(
                app_settings.daily_reminder_hour,
                app_settings.daily_reminder_minute,
                language=app_settings.preferred_language,
            )
        except NotificationError as e:
            logger.warning("Reminder could not be scheduled", error=str(e))

    def set_notifications_enabled(self, enabled: bool) -> AppSettings | None:
        app_settings = self._save_settings(notifications_enabled=enabled)
        if app_settings is None:
            return None
        if enabled:
            self._schedule_reminder(app_settings)
        else:
            self.notifications.cancel_daily_reminder()
        return app_settings

    def set_reminder_time(self, hour: int, minute: int) -> AppSettings | None:
        if not (0 <= hour <= 23 and 0 <= minute <= 59):
            raise ValueError(f"Invalid reminder time {hour:02d}:{minute:02d}")
        app_settings = self._save_settings(
            daily_reminder_hour=hour, daily_reminder_minute=minute
        )
        if app_settings is not None and app_settings.notifications_enabled:
            self._schedule_reminder(app_settings)
        return app_settings

    def set_language(self, language: str) -> AppSettings | None:
        code = language.lower()
        if code not in SUPPORTED_LANGUAGES:
            self.state_store.update(
                error_message=translate(
                    "error_unsupported_language", self.language, code=language
                )
            )
            return None
        app_settings = self._save_settings(preferred_language=code)
        if app_settings is not None and app_settings.notifications_enabled:
            # Reminder text follows the language.
            self._schedule_reminder(app_settings)
        return app_settings

    def set_auto_sync(self, enabled: bool) -> AppSettings | None:
        return self._save_settings(auto_sync_health_data=enabled)

    # Assistant context

    def build_context(self, days_back: int | None = None) -> str | None:
        user = self._user()
        if user is None:
            return None
        days_back = days_back or self.settings.aggregation.context_days
        now = self.clock()
        start = now - timedelta(days=days_back)
        try:
            moods = self.store.entries_between(EntryKind.MOOD, user.id, start, now)
            health = self.store.entries_between(EntryKind.HEALTH, user.id, start, now)
        except StorageError as e:
            self._fail("error_load", e)
            return None
        return build_context(
            user, moods, health, days_back=days_back, now=now, language=self.language
        )

    # Widget

    def refresh_widget(self) -> WidgetSnapshot | None:
        """Recompute the streak and write the widget snapshot."""
        user = self.state.current_user
        if user is None:
            return None
        try:
            days = self.store.mood_days(user.id)
            snapshot = WidgetSnapshot.from_days(days, self.today)
            self.widget.write(snapshot)
        except (StorageError, OSError) as e:
            logger.warning("Widget snapshot not updated", error=str(e))
            return None
        return snapshot


def build_tracker(
    settings: Settings | None = None,
    notifications: NotificationScheduler | None = None,
) -> Tracker:
    """Wire up a ``Tracker`` from settings.

    Raises ``StorageError`` if the database cannot be opened.
    """
    settings = settings or get_settings()
    store = create_store(settings.database.database_url)
    health = HealthSyncAdapter(GarminHealthProvider(settings.garmin))
    return Tracker(
        store=store,
        health=health,
        notifications=notifications or ReminderScheduler(),
        session=SessionStore(settings.paths.session_file),
        widget=WidgetSnapshotWriter(settings.paths.widget_file),
        settings=settings,
    )
