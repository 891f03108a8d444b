"""Pydantic response models for cycle prediction, regularity, status and
log summaries, plus the chat assistant request/response."""

from __future__ import annotations

import datetime as dt
from typing import Literal

from pydantic import Field

from src.cycles.predictor import Confidence
from src.models.base import AuraBase


# ---------- Prediction / regularity ----------

class CyclePredictionRead(AuraBase):
    predicted_date: dt.date
    range_start: dt.date
    range_end: dt.date
    confidence: Confidence
    insight: str
    cycle_length: int
    std_dev: float
    cycles_used: int


class RegularityRead(AuraBase):
    cycle_lengths: list[int]
    average: int | None = None
    min: int | None = None
    max: int | None = None
    is_irregular: bool = False


class CycleStatusRead(AuraBase):
    as_of: dt.date
    cycle_day: int
    next_period_in: int
    next_period_date: dt.date
    cycle_length: int
    period_length: int


# ---------- Log summary ----------

class FrequencyItemRead(AuraBase):
    name: str
    count: int


class LogSummaryRead(AuraBase):
    total_logs: int
    period_days: int
    top_symptoms: list[FrequencyItemRead]
    top_medications: list[FrequencyItemRead]
    top_moods: list[FrequencyItemRead]
    flow_distribution: dict[str, int]
    avg_sleep_hours: float | None = None
    avg_water_intake: int | None = None
    avg_stress_level: float | None = None


# ---------- Chat ----------

class ChatMessage(AuraBase):
    role: Literal["user", "assistant"]
    content: str = Field(min_length=1)


class ChatRequest(AuraBase):
    messages: list[ChatMessage] = Field(min_length=1)
    system_prompt: str | None = Field(default=None, alias="systemPrompt")
    include_context: bool = Field(default=False, alias="includeContext")


class ChatResponse(AuraBase):
    content: str
