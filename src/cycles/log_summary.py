"""Frequency and lifestyle aggregates over a user's logs.

Feeds the insights charts: most frequent symptoms, medications and moods,
the flow intensity distribution, and average sleep / water / stress.
Medications are logged as symptom ids with a ``med:`` prefix and are
counted separately from real symptoms.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from src.cycles.base import FLOW_INTENSITIES, MEDICATION_PREFIX, LogEntry, as_log_entries
from src.cycles.estimator import round_half_up

TOP_SYMPTOMS = 8
TOP_MEDICATIONS = 6
TOP_MOODS = 6


@dataclass(frozen=True)
class FrequencyItem:
    name: str
    count: int


@dataclass
class LogSummary:
    """Aggregates over a snapshot of logs."""

    total_logs: int = 0
    period_days: int = 0
    top_symptoms: list[FrequencyItem] = field(default_factory=list)
    top_medications: list[FrequencyItem] = field(default_factory=list)
    top_moods: list[FrequencyItem] = field(default_factory=list)
    flow_distribution: dict[str, int] = field(default_factory=dict)
    avg_sleep_hours: float | None = None
    avg_water_intake: int | None = None
    avg_stress_level: float | None = None


def _label(identifier: str) -> str:
    return identifier.replace("_", " ")


def _top(counter: Counter, limit: int) -> list[FrequencyItem]:
    # Counter.most_common keeps first-seen order for ties
    return [FrequencyItem(name, count) for name, count in counter.most_common(limit)]


def _mean(values: list[float]) -> float | None:
    return sum(values) / len(values) if values else None


def summarize_logs(logs: Iterable[LogEntry | Mapping[str, Any]]) -> LogSummary:
    """Aggregate symptom, medication, mood, flow and lifestyle data."""
    entries = as_log_entries(logs)

    symptoms: Counter = Counter()
    medications: Counter = Counter()
    moods: Counter = Counter()
    flow: Counter = Counter()

    for entry in entries:
        for item in entry.symptoms:
            if item.startswith(MEDICATION_PREFIX):
                medications[_label(item[len(MEDICATION_PREFIX):])] += 1
            else:
                symptoms[_label(item.split(":")[0])] += 1
        for mood in entry.moods:
            moods[_label(mood)] += 1
        if entry.flow_intensity:
            flow[entry.flow_intensity] += 1

    sleep = [e.sleep_hours for e in entries if e.sleep_hours is not None]
    water = [e.water_intake for e in entries if e.water_intake is not None]
    stress = [e.stress_level for e in entries if e.stress_level]

    avg_sleep = _mean(sleep)
    avg_water = _mean(water)
    avg_stress = _mean(stress)

    return LogSummary(
        total_logs=len(entries),
        period_days=sum(1 for e in entries if e.is_period),
        top_symptoms=_top(symptoms, TOP_SYMPTOMS),
        top_medications=_top(medications, TOP_MEDICATIONS),
        top_moods=_top(moods, TOP_MOODS),
        flow_distribution={
            level: flow[level] for level in FLOW_INTENSITIES if flow[level] > 0
        },
        avg_sleep_hours=round(avg_sleep, 1) if avg_sleep is not None else None,
        avg_water_intake=round_half_up(avg_water) if avg_water is not None else None,
        avg_stress_level=round(avg_stress, 1) if avg_stress is not None else None,
    )
