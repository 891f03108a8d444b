"""Shared fixtures and log builders for cycle core and API tests."""

from __future__ import annotations

from datetime import date, timedelta
from pathlib import Path
from typing import AsyncIterator

import pytest
import pytest_asyncio

from src.cycles.base import LogEntry
from src.cycles.config_loader import CycleConfig, load_cycle_config
from src.cycles.predictor import CyclePredictor
from src.services.storage import Database

TEST_USER_ID = "user_test_0001"
TEST_DATE = date(2024, 3, 1)


# ---------------------------------------------------------------------------
# Log builders
# ---------------------------------------------------------------------------


def period_log(d: date, flow: str = "medium", **fields) -> LogEntry:
    return LogEntry(date=d, log_type="period", flow_intensity=flow, **fields)


def period_days(start: date, length: int = 5) -> list[LogEntry]:
    """Consecutive period logs for one episode."""
    return [period_log(start + timedelta(days=i)) for i in range(length)]


def logs_for_starts(starts: list[date], period_length: int = 5) -> list[LogEntry]:
    """Period logs for several episodes, one per start date."""
    logs: list[LogEntry] = []
    for start in starts:
        logs.extend(period_days(start, period_length))
    return logs


# ---------------------------------------------------------------------------
# Config / core fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def cycle_config() -> CycleConfig:
    """Load the bundled cycle config for tests."""
    return load_cycle_config()


@pytest.fixture
def predictor(cycle_config: CycleConfig) -> CyclePredictor:
    return CyclePredictor(cycle_config)


@pytest.fixture
def regular_starts() -> list[date]:
    """Episode starts 28 days apart."""
    return [date(2024, 1, 1), date(2024, 1, 29), date(2024, 2, 26)]


# ---------------------------------------------------------------------------
# Store fixtures
# ---------------------------------------------------------------------------


def sqlite_url(tmp_path: Path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'auracycle.db'}"


@pytest_asyncio.fixture
async def database(tmp_path: Path) -> AsyncIterator[Database]:
    """A fresh SQLite database with all tables created."""
    db = Database(sqlite_url(tmp_path))
    await db.create_all()
    yield db
    await db.dispose()
