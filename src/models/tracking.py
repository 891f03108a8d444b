"""Pydantic models for manual tracking: daily cycle logs and cycle settings."""

from __future__ import annotations

import datetime as dt
from enum import Enum

from pydantic import Field

from src.models.base import AuraBase


# ---------- Enums ----------

class LogType(str, Enum):
    period = "period"
    symptom = "symptom"
    mood = "mood"
    note = "note"


class FlowIntensity(str, Enum):
    spotting = "spotting"
    light = "light"
    medium = "medium"
    heavy = "heavy"


# ---------- Cycle logs ----------

class CycleLogBase(AuraBase):
    date: dt.date
    log_type: LogType = LogType.note
    flow_intensity: FlowIntensity | None = None
    symptoms: list[str] = Field(default_factory=list)  # "med:" prefix marks medications
    moods: list[str] = Field(default_factory=list)
    notes: str | None = None
    sleep_hours: float | None = Field(default=None, ge=0, le=24)
    water_intake: int | None = Field(default=None, ge=0)
    stress_level: int | None = Field(default=None, ge=1, le=5)
    exercise: str | None = None


class CycleLogCreate(CycleLogBase):
    pass


class CycleLogUpdate(AuraBase):
    date: dt.date | None = None
    log_type: LogType | None = None
    flow_intensity: FlowIntensity | None = None
    symptoms: list[str] | None = None
    moods: list[str] | None = None
    notes: str | None = None
    sleep_hours: float | None = Field(default=None, ge=0, le=24)
    water_intake: int | None = Field(default=None, ge=0)
    stress_level: int | None = Field(default=None, ge=1, le=5)
    exercise: str | None = None


class CycleLogRead(CycleLogBase):
    id: str
    created_at: dt.datetime


# ---------- Cycle settings ----------

class CycleSettingsBase(AuraBase):
    average_cycle_length: int = Field(default=28, ge=20, le=45)
    average_period_length: int = Field(default=5, ge=1, le=10)
    last_period_start: dt.date | None = None


class CycleSettingsUpdate(CycleSettingsBase):
    pass


class CycleSettingsRead(CycleSettingsBase):
    id: str | None = None
