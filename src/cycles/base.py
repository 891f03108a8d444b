"""Canonical inputs for the AuraCycle prediction core.

The core reads log entries and cycle settings as immutable snapshots.  Both
types can be built from the plain dict records kept by the log store via
``from_record()``; that is the only place dates are parsed, so an
unparseable date surfaces as ``InvalidInputError`` before any statistics run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Iterable, Mapping

logger = logging.getLogger("auracycle.cycles")

PERIOD_LOG_TYPE = "period"
LOG_TYPES = ("period", "symptom", "mood", "note")
FLOW_INTENSITIES = ("spotting", "light", "medium", "heavy")
MEDICATION_PREFIX = "med:"


class InvalidInputError(ValueError):
    """Raised when a log entry's date is not a valid calendar date."""


def parse_log_date(value: Any) -> date:
    """Coerce a stored date value to a calendar date.

    Accepts ``date``, ``datetime`` (time of day is dropped) and ISO-8601
    strings, either ``YYYY-MM-DD`` or a full timestamp.  The whole string
    must parse; trailing text or an invalid time part is rejected.

    Raises:
        InvalidInputError: If the value is missing or not a valid date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        except ValueError as exc:
            raise InvalidInputError(f"Invalid log date: {value!r}") from exc
    raise InvalidInputError(f"Invalid log date: {value!r}")


# ---------------------------------------------------------------------------
# Log entries
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LogEntry:
    """One daily log record.

    Attributes:
        date:           Calendar day the entry belongs to.
        log_type:       'period', 'symptom', 'mood' or 'note'.
        flow_intensity: 'spotting', 'light', 'medium' or 'heavy' (period logs).
        symptoms:       Symptom ids; ids prefixed ``med:`` are medications.
        moods:          Mood ids.
        notes:          Free text.
        sleep_hours:    Hours slept.
        water_intake:   Glasses of water.
        stress_level:   Self-reported stress, 1-5.
        entry_id:       Store id, when the entry came from the log store.
    """

    date: date
    log_type: str = "note"
    flow_intensity: str | None = None
    symptoms: tuple[str, ...] = ()
    moods: tuple[str, ...] = ()
    notes: str | None = None
    sleep_hours: float | None = None
    water_intake: int | None = None
    stress_level: int | None = None
    entry_id: str | None = None

    @property
    def is_period(self) -> bool:
        return self.log_type == PERIOD_LOG_TYPE

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "LogEntry":
        """Build a LogEntry from a stored record dict."""
        return cls(
            date=parse_log_date(record.get("date")),
            log_type=record.get("log_type") or "note",
            flow_intensity=record.get("flow_intensity") or None,
            symptoms=tuple(record.get("symptoms") or ()),
            moods=tuple(record.get("moods") or ()),
            notes=record.get("notes") or None,
            sleep_hours=record.get("sleep_hours"),
            water_intake=record.get("water_intake"),
            stress_level=record.get("stress_level"),
            entry_id=record.get("id"),
        )


def as_log_entries(logs: Iterable[LogEntry | Mapping[str, Any]]) -> list[LogEntry]:
    """Normalise a mix of LogEntry objects and record dicts."""
    return [
        log if isinstance(log, LogEntry) else LogEntry.from_record(log)
        for log in logs
    ]


def period_dates(logs: Iterable[LogEntry | Mapping[str, Any]]) -> list[date]:
    """Return the dates of period-flagged entries, ascending."""
    return sorted(entry.date for entry in as_log_entries(logs) if entry.is_period)


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CycleSettings:
    """User cycle settings, used as fallbacks when logs are too sparse."""

    average_cycle_length: int = 28
    average_period_length: int = 5
    last_period_start: date | None = None

    @classmethod
    def from_record(
        cls,
        record: Mapping[str, Any] | None,
        default_cycle_length: int = 28,
        default_period_length: int = 5,
    ) -> "CycleSettings":
        """Build settings from a stored record, filling gaps with defaults.

        Missing or zero lengths fall back to the defaults; the fallback is
        logged, never raised.
        """
        record = record or {}
        cycle_length = record.get("average_cycle_length") or None
        period_length = record.get("average_period_length") or None
        if cycle_length is None:
            logger.info("No average_cycle_length saved; using %d-day default", default_cycle_length)
            cycle_length = default_cycle_length
        if period_length is None:
            logger.info("No average_period_length saved; using %d-day default", default_period_length)
            period_length = default_period_length

        last_start = record.get("last_period_start") or None
        return cls(
            average_cycle_length=int(cycle_length),
            average_period_length=int(period_length),
            last_period_start=parse_log_date(last_start) if last_start else None,
        )
