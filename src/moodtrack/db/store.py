"""Local record store on top of SQLModel/SQLite."""

import threading
import uuid
import weakref
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import date, datetime, time, timedelta
from pathlib import Path
from typing import Any, TypeVar

import structlog
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import ArgumentError, SQLAlchemyError
from sqlmodel import Session, SQLModel, create_engine, select

from moodtrack.db.models import AppSettings, Entry, EntryKind, MoodEntry, User

logger = structlog.get_logger()

T = TypeVar("T", bound=SQLModel)


class StorageError(Exception):
    """Raised when the local database cannot be read or written."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class _EntryLock:
    """A mutex that can be held in a weak mapping."""

    __slots__ = ("_lock", "__weakref__")

    def __init__(self) -> None:
        self._lock = threading.Lock()

    def __enter__(self) -> None:
        self._lock.acquire()

    def __exit__(self, *exc_info: Any) -> None:
        self._lock.release()


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min)


def day_range(day: date) -> tuple[datetime, datetime]:
    """Half-open interval covering one calendar day."""
    start = start_of_day(day)
    return start, start + timedelta(days=1)


def create_db_engine(database_url: str) -> Engine:
    """Create the engine, expanding ``~`` in SQLite paths."""
    try:
        url = make_url(database_url)
    except ArgumentError as e:
        raise StorageError(f"Invalid database URL: {database_url}") from e

    connect_args: dict[str, Any] = {}
    if url.get_backend_name() == "sqlite":
        connect_args["check_same_thread"] = False
        if url.database and url.database != ":memory:":
            path = Path(url.database).expanduser()
            path.parent.mkdir(parents=True, exist_ok=True)
            url = url.set(database=str(path))

    return create_engine(url, connect_args=connect_args)


def create_store(database_url: str) -> "RecordStore":
    """Open the store and create missing tables.

    Failure here is a setup fault; callers should not continue without a store.
    """
    try:
        engine = create_db_engine(database_url)
        SQLModel.metadata.create_all(engine)
    except (SQLAlchemyError, OSError) as e:
        logger.error("Failed to initialize database", error=str(e))
        raise StorageError(f"Database initialization failed: {e}") from e

    logger.info("Database initialized", url=database_url)
    return RecordStore(engine)


class RecordStore:
    """Synchronous CRUD over users, mood entries, health entries and settings.

    Every public operation runs in its own transaction and either commits
    completely or leaves the database unchanged. Returned objects are detached
    from the session; relationships on them are not loaded.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._locks: weakref.WeakValueDictionary[tuple[uuid.UUID, date], _EntryLock] = (
            weakref.WeakValueDictionary()
        )
        self._locks_guard = threading.Lock()

    @contextmanager
    def _session(self) -> Iterator[Session]:
        session = Session(self.engine, expire_on_commit=False)
        try:
            yield session
        except SQLAlchemyError as e:
            session.rollback()
            logger.error("Database operation failed", error=str(e))
            raise StorageError(str(e)) from e
        finally:
            session.close()

    @contextmanager
    def entry_lock(self, owner_id: uuid.UUID, day: date) -> Iterator[None]:
        """Serialize mutations of one owner's entries for one day."""
        with self._locks_guard:
            lock = self._locks.get((owner_id, day))
            if lock is None:
                lock = self._locks[(owner_id, day)] = _EntryLock()
        with lock:
            yield

    # Generic operations

    def get(self, model: type[T], entity_id: uuid.UUID) -> T | None:
        with self._session() as session:
            return session.get(model, entity_id)

    def save(self, entity: T) -> T:
        """Insert or update ``entity`` and return the stored copy."""
        with self._session() as session:
            stored = session.merge(entity)
            session.commit()
            return stored

    def delete(self, entity: SQLModel) -> None:
        """Delete ``entity``. Deleting a user deletes its entries too."""
        with self._session() as session:
            stored = session.get(type(entity), entity.id)
            if stored is None:
                return
            session.delete(stored)
            session.commit()

    def query(
        self,
        kind: EntryKind,
        *criteria: Any,
        order_by: Any = None,
        limit: int | None = None,
    ) -> list[Entry]:
        """Select entries of ``kind`` matching all SQLAlchemy ``criteria``."""
        model = EntryKind(kind).model
        statement = select(model)
        for criterion in criteria:
            statement = statement.where(criterion)
        if order_by is not None:
            statement = statement.order_by(order_by)
        if limit is not None:
            statement = statement.limit(limit)
        with self._session() as session:
            return list(session.exec(statement).all())

    # Daily entries

    def upsert_daily_entry(
        self,
        owner_id: uuid.UUID,
        day: date,
        kind: EntryKind,
        now: datetime | None = None,
        merge: Callable[[Entry], dict[str, Any]] | None = None,
        **values: Any,
    ) -> Entry:
        """Return the owner's entry for ``day``, creating it if missing.

        ``values`` are applied to the found or created entry in the same
        transaction. ``merge`` is called with that entry and returns further
        values to apply; explicit ``values`` win over merged ones. If ``merge``
        raises, nothing is written, not even a newly created entry.
        """
        kind = EntryKind(kind)
        model = kind.model
        start, end = day_range(day)
        now = now or datetime.now()

        with self._session() as session:
            statement = select(model).where(
                model.user_id == owner_id,
                model.date >= start,
                model.date < end,
            )
            entry = session.exec(statement).first()
            created = entry is None

            if entry is None:
                if kind is EntryKind.MOOD:
                    timestamp = now if now.date() == day else start
                    entry = MoodEntry(user_id=owner_id, date=timestamp, day=day)
                else:
                    entry = model(user_id=owner_id, date=start, day=day)
                session.add(entry)

            if merge is not None:
                values = {**merge(entry), **values}

            if values:
                if kind is EntryKind.MOOD:
                    entry.apply(**values)
                else:
                    for name, value in values.items():
                        setattr(entry, name, value)

            if created or values:
                session.commit()
                session.refresh(entry)

            if created:
                logger.debug("Created daily entry", kind=kind.value, day=day.isoformat())
            return entry

    def entries_between(
        self, kind: EntryKind, owner_id: uuid.UUID, start: datetime, end: datetime
    ) -> list[Entry]:
        """Entries dated within ``[start, end]``, oldest first."""
        model = EntryKind(kind).model
        return self.query(
            kind,
            model.user_id == owner_id,
            model.date >= start,
            model.date <= end,
            order_by=model.date,
        )

    def recent_mood_entries(self, owner_id: uuid.UUID, limit: int = 30) -> list[MoodEntry]:
        """Newest mood entries first."""
        return self.query(
            EntryKind.MOOD,
            MoodEntry.user_id == owner_id,
            order_by=MoodEntry.date.desc(),
            limit=limit,
        )

    def mood_days(self, owner_id: uuid.UUID, since: date | None = None) -> set[date]:
        """Calendar days on which the owner logged a mood."""
        statement = select(MoodEntry.day).where(MoodEntry.user_id == owner_id)
        if since is not None:
            statement = statement.where(MoodEntry.day >= since)
        with self._session() as session:
            return set(session.exec(statement).all())

    # Users

    def get_user_by_email(self, email: str) -> User | None:
        with self._session() as session:
            return session.exec(select(User).where(User.email == email)).first()

    def create_user(self, email: str, name: str) -> User:
        user = User(email=email, name=name)
        with self._session() as session:
            session.add(user)
            session.commit()
            session.refresh(user)
        logger.info("Created user", user_id=str(user.id))
        return user

    # Settings

    def get_or_create_settings(self, **defaults: Any) -> AppSettings:
        """Return the installation's settings row, creating it with ``defaults``."""
        with self._session() as session:
            settings = session.exec(select(AppSettings)).first()
            if settings is None:
                settings = AppSettings(**defaults)
                session.add(settings)
                session.commit()
                session.refresh(settings)
                logger.info("Created default settings")
            return settings
