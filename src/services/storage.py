"""Per-user record store for cycle logs and cycle settings.

Backed by SQLAlchemy's async engine (SQLite via ``aiosqlite`` by default,
any async driver URL works).  The engine is created once at app startup by
``init_database()`` and disposed at shutdown by ``close_database()``.

Repositories hand out plain dicts, not ORM rows.  The prediction core never
touches this module: routers read a snapshot through the repositories below
and pass it in.
"""

from __future__ import annotations

import datetime as dt
import logging
import uuid
from pathlib import Path
from typing import Any

from sqlalchemy import JSON, DateTime, Float, Integer, String, select
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.pool import NullPool

from src.config import Settings, get_settings
from src.cycles.base import PERIOD_LOG_TYPE
from src.cycles.config_loader import get_cycle_config
from src.models.base import utc_now

logger = logging.getLogger("auracycle.store")


class RecordNotFoundError(KeyError):
    """Raised when updating a record id that does not exist."""


def _new_id() -> str:
    return uuid.uuid4().hex


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------


class Base(DeclarativeBase):
    pass


class CycleLogRow(Base):
    """One daily log.  ``date`` keeps the submitted ISO string as-is."""

    __tablename__ = "cycle_logs"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(64), index=True)
    date: Mapped[str] = mapped_column(String(32), index=True)
    log_type: Mapped[str] = mapped_column(String(16), default="note")
    flow_intensity: Mapped[str | None] = mapped_column(String(16), nullable=True)
    symptoms: Mapped[list] = mapped_column(JSON, default=list)
    moods: Mapped[list] = mapped_column(JSON, default=list)
    notes: Mapped[str | None] = mapped_column(String, nullable=True)
    sleep_hours: Mapped[float | None] = mapped_column(Float, nullable=True)
    water_intake: Mapped[int | None] = mapped_column(Integer, nullable=True)
    stress_level: Mapped[int | None] = mapped_column(Integer, nullable=True)
    exercise: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=utc_now)


class CycleSettingsRow(Base):
    """A user's cycle settings; at most one row per user."""

    __tablename__ = "cycle_settings"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(64), unique=True)
    average_cycle_length: Mapped[int | None] = mapped_column(Integer, nullable=True)
    average_period_length: Mapped[int | None] = mapped_column(Integer, nullable=True)
    last_period_start: Mapped[str | None] = mapped_column(String(32), nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=utc_now)


LOG_FIELDS = (
    "date", "log_type", "flow_intensity", "symptoms", "moods", "notes",
    "sleep_hours", "water_intake", "stress_level", "exercise",
)
SETTINGS_FIELDS = ("average_cycle_length", "average_period_length", "last_period_start")

# Columns a log listing may be ordered by
ORDERABLE_LOG_FIELDS = frozenset(
    {"date", "created_at", "log_type", "flow_intensity", "sleep_hours", "water_intake", "stress_level"}
)


def _as_dict(row: Base, fields: tuple[str, ...]) -> dict[str, Any]:
    record: dict[str, Any] = {"id": row.id}
    record.update((name, getattr(row, name)) for name in fields)
    record["created_at"] = row.created_at.isoformat() if row.created_at else None
    return record


def _log_order(order: str):
    """Translate ``-field`` / ``field`` into an ORDER BY clause.

    SQL ordering keeps numbers numeric; NULLs sort first ascending and last
    descending.

    Raises:
        ValueError: If ``field`` is not an orderable log column.
    """
    descending = order.startswith("-")
    name = order.lstrip("-")
    if name not in ORDERABLE_LOG_FIELDS:
        raise ValueError(f"Cannot order logs by {name!r}")
    column = getattr(CycleLogRow, name)
    return column.desc() if descending else column.asc()


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


class Database:
    """Async engine plus session factory for one database URL."""

    def __init__(self, url: str) -> None:
        self.url = url
        # SQLite connections are cheap; a fresh one per session keeps them
        # off whichever event loop opened the previous one.
        engine_kwargs: dict[str, Any] = {"poolclass": NullPool} if url.startswith("sqlite") else {}
        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)
        self.sessions = async_sessionmaker(self.engine, expire_on_commit=False)

    async def create_all(self) -> None:
        database = make_url(self.url).database
        if self.url.startswith("sqlite") and database and database != ":memory:":
            Path(database).parent.mkdir(parents=True, exist_ok=True)
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()


# Module-level database, initialized once at app startup
_database: Database | None = None


async def init_database(settings: Settings | None = None) -> Database:
    """Create the engine and tables.  Call once at app startup."""
    global _database
    s = settings or get_settings()
    database = Database(s.database_url)
    await database.create_all()
    _database = database
    logger.info("Database initialized (%s)", make_url(s.database_url).render_as_string(hide_password=True))
    return database


async def close_database() -> None:
    """Dispose the engine.  Call at app shutdown."""
    global _database
    if _database:
        await _database.dispose()
        _database = None
        logger.info("Database closed")


def get_database() -> Database:
    if _database is None:
        raise RuntimeError("Database not initialized; call init_database() first")
    return _database


# ---------------------------------------------------------------------------
# Repositories
# ---------------------------------------------------------------------------


class LogRepository:
    """Read/write access to one user's cycle logs."""

    def __init__(self, database: Database, user_id: str) -> None:
        self._db = database
        self._user_id = user_id

    def _select(self):
        return select(CycleLogRow).where(CycleLogRow.user_id == self._user_id)

    async def list(self, limit: int = 200, order: str = "-date") -> list[dict]:
        """Return up to ``limit`` logs sorted by ``order``.

        ``order`` is a column name, prefixed with ``-`` for descending.

        Raises:
            ValueError: If the column cannot be ordered by.
        """
        query = self._select().order_by(_log_order(order), CycleLogRow.created_at).limit(limit)
        async with self._db.sessions() as session:
            rows = (await session.scalars(query)).all()
        return [_as_dict(row, LOG_FIELDS) for row in rows]

    async def get(self, log_id: str) -> dict | None:
        async with self._db.sessions() as session:
            row = await session.scalar(self._select().where(CycleLogRow.id == log_id))
        return _as_dict(row, LOG_FIELDS) if row else None

    async def create(self, data: dict[str, Any]) -> dict:
        row = CycleLogRow(
            id=_new_id(),
            user_id=self._user_id,
            created_at=utc_now(),
            **{k: v for k, v in data.items() if k in LOG_FIELDS},
        )
        async with self._db.sessions() as session:
            session.add(row)
            await session.commit()
        logger.debug("Created log %s", row.id)
        return _as_dict(row, LOG_FIELDS)

    async def update(self, log_id: str, data: dict[str, Any]) -> dict:
        """Merge ``data`` into the log with ``log_id``.

        Raises:
            RecordNotFoundError: If the user has no log with that id.
        """
        async with self._db.sessions() as session:
            row = await session.scalar(self._select().where(CycleLogRow.id == log_id))
            if row is None:
                raise RecordNotFoundError(f"Log {log_id} not found")
            for name, value in data.items():
                if name in LOG_FIELDS:
                    setattr(row, name, value)
            await session.commit()
        return _as_dict(row, LOG_FIELDS)

    async def delete(self, log_id: str) -> bool:
        """Delete a log.  Returns False if it did not exist."""
        async with self._db.sessions() as session:
            row = await session.scalar(self._select().where(CycleLogRow.id == log_id))
            if row is None:
                return False
            await session.delete(row)
            await session.commit()
        return True


class SettingsRepository:
    """One user's cycle settings."""

    def __init__(self, database: Database, user_id: str) -> None:
        self._db = database
        self._user_id = user_id

    def _select(self):
        return select(CycleSettingsRow).where(CycleSettingsRow.user_id == self._user_id)

    async def get(self) -> dict | None:
        async with self._db.sessions() as session:
            row = await session.scalar(self._select())
        return _as_dict(row, SETTINGS_FIELDS) if row else None

    async def save(self, data: dict[str, Any]) -> dict:
        """Update the existing settings row or create the first one."""
        fields = {k: v for k, v in data.items() if k in SETTINGS_FIELDS}
        async with self._db.sessions() as session:
            row = await session.scalar(self._select())
            if row is None:
                row = CycleSettingsRow(
                    id=_new_id(), user_id=self._user_id, created_at=utc_now(), **fields
                )
                session.add(row)
            else:
                for name, value in fields.items():
                    setattr(row, name, value)
            await session.commit()
        return _as_dict(row, SETTINGS_FIELDS)


class UserStore:
    """All repositories for one user."""

    def __init__(self, logs: LogRepository, settings: SettingsRepository) -> None:
        self.logs = logs
        self.settings = settings

    async def record_log(self, data: dict[str, Any]) -> dict:
        """Create a log; a period log also moves ``last_period_start``.

        Logging a period day makes it the most recent known period start,
        creating default settings if none exist.
        """
        record = await self.logs.create(data)
        if data.get("log_type") == PERIOD_LOG_TYPE:
            current = await self.settings.get()
            update: dict[str, Any] = {"last_period_start": str(data["date"])}
            if current is None:
                defaults = get_cycle_config().defaults
                update.update(
                    average_cycle_length=defaults.average_cycle_length,
                    average_period_length=defaults.average_period_length,
                )
            await self.settings.save(update)
            logger.info("Set last_period_start to %s", update["last_period_start"])
        return record


def open_user_store(user_id: str, database: Database | None = None) -> UserStore:
    """Open the log and settings repositories for ``user_id``."""
    db = database or get_database()
    return UserStore(logs=LogRepository(db, user_id), settings=SettingsRepository(db, user_id))
