"""Tests for next-period prediction."""

from __future__ import annotations

import random
from dataclasses import replace
from datetime import date, timedelta

import pytest

from src.cycles.base import CycleSettings, InvalidInputError, LogEntry
from src.cycles.config_loader import CycleConfig
from src.cycles.predictor import Confidence, CyclePredictor, predict
from src.cycles.tests.conftest import logs_for_starts, period_days, period_log


class TestPredictScenarios:
    def test_regular_28_day_cycles(
        self, predictor: CyclePredictor, regular_starts: list[date]
    ) -> None:
        prediction = predictor.predict(logs_for_starts(regular_starts))
        assert prediction is not None
        assert prediction.predicted_date == date(2024, 3, 25)
        assert prediction.cycle_length == 28
        assert prediction.std_dev == 0.0
        assert prediction.confidence is Confidence.high
        assert prediction.range_start == prediction.range_end == date(2024, 3, 25)

    def test_single_period_log_returns_none(self, predictor: CyclePredictor) -> None:
        assert predictor.predict([period_log(date(2024, 1, 1))]) is None

    def test_no_logs_returns_none(self, predictor: CyclePredictor) -> None:
        assert predictor.predict([]) is None

    def test_single_episode_returns_none(self, predictor: CyclePredictor) -> None:
        assert predictor.predict(period_days(date(2024, 1, 1), 5)) is None

    def test_non_period_logs_ignored(self, predictor: CyclePredictor) -> None:
        logs = [
            period_log(date(2024, 1, 1)),
            LogEntry(date=date(2024, 1, 15), log_type="symptom", symptoms=("cramps",)),
            LogEntry(date=date(2024, 1, 20), log_type="mood", moods=("happy",)),
        ]
        assert predictor.predict(logs) is None

    def test_short_gap_falls_back_to_settings_length(self, predictor: CyclePredictor) -> None:
        logs = [period_log(date(2024, 1, 1)), period_log(date(2024, 1, 11))]
        prediction = predictor.predict(logs, CycleSettings(average_cycle_length=30))
        assert prediction is not None
        assert prediction.predicted_date == date(2024, 1, 11) + timedelta(days=30)
        assert prediction.std_dev == 0.0
        assert prediction.cycles_used == 1
        assert prediction.insight == "Based on 1 recorded cycle"

    def test_missing_settings_fall_back_to_28(self, predictor: CyclePredictor) -> None:
        logs = [period_log(date(2024, 1, 1)), period_log(date(2024, 1, 11))]
        prediction = predictor.predict(logs, None)
        assert prediction is not None
        assert prediction.cycle_length == 28


class TestPredictionFields:
    def test_range_uses_ceil_of_std_dev(self, predictor: CyclePredictor) -> None:
        # lengths 26, 30: std 2.0 → ±2; weighted (26 + 60) / 3 = 28.67 → 29
        starts = [date(2024, 1, 1), date(2024, 1, 27), date(2024, 2, 26)]
        prediction = predictor.predict(logs_for_starts(starts))
        assert prediction is not None
        assert prediction.cycle_length == 29
        assert prediction.predicted_date == date(2024, 3, 26)
        assert prediction.range_start == date(2024, 3, 24)
        assert prediction.range_end == date(2024, 3, 28)
        assert prediction.confidence is Confidence.high

    def test_medium_confidence(self, predictor: CyclePredictor) -> None:
        # lengths 24, 32: std 4.0
        starts = [date(2024, 1, 1), date(2024, 1, 25), date(2024, 2, 26)]
        prediction = predictor.predict(logs_for_starts(starts))
        assert prediction is not None
        assert prediction.confidence is Confidence.medium

    def test_low_confidence(self, predictor: CyclePredictor) -> None:
        # lengths 20, 40: std 10.0
        starts = [date(2024, 1, 1), date(2024, 1, 21), date(2024, 3, 1)]
        prediction = predictor.predict(logs_for_starts(starts))
        assert prediction is not None
        assert prediction.confidence is Confidence.low
        assert (prediction.range_end - prediction.range_start).days == 20

    def test_insight_with_three_cycles(self, predictor: CyclePredictor) -> None:
        starts = [date(2024, 1, 1) + timedelta(days=28 * i) for i in range(4)]
        prediction = predictor.predict(logs_for_starts(starts))
        assert prediction is not None
        assert prediction.insight == "28-day average across 3 tracked cycles"

    def test_insight_with_two_cycles_is_plural(
        self, predictor: CyclePredictor, regular_starts: list[date]
    ) -> None:
        prediction = predictor.predict(logs_for_starts(regular_starts))
        assert prediction is not None
        assert prediction.insight == "Based on 2 recorded cycles"


class TestPredictContract:
    def test_idempotent(self, predictor: CyclePredictor, regular_starts: list[date]) -> None:
        logs = logs_for_starts(regular_starts)
        assert predictor.predict(logs) == predictor.predict(logs)

    def test_unsorted_input_matches_sorted(self, predictor: CyclePredictor) -> None:
        starts = [date(2024, 1, 1), date(2024, 1, 30), date(2024, 2, 27), date(2024, 3, 28)]
        logs = logs_for_starts(starts)
        shuffled = list(logs)
        random.Random(7).shuffle(shuffled)
        assert predictor.predict(shuffled) == predictor.predict(logs)

    def test_duplicate_logs_do_not_change_prediction(
        self, predictor: CyclePredictor, regular_starts: list[date]
    ) -> None:
        logs = logs_for_starts(regular_starts)
        assert predictor.predict(logs + logs) == predictor.predict(logs)

    def test_accepts_record_dicts(self, predictor: CyclePredictor) -> None:
        records = [
            {"date": "2024-01-01", "log_type": "period"},
            {"date": "2024-01-29", "log_type": "period"},
            {"date": "2024-02-26", "log_type": "period"},
        ]
        prediction = predictor.predict(records, {"average_cycle_length": 30})
        assert prediction is not None
        assert prediction.predicted_date == date(2024, 3, 25)

    def test_invalid_date_raises(self, predictor: CyclePredictor) -> None:
        records = [
            {"date": "2024-01-01", "log_type": "period"},
            {"date": "not-a-date", "log_type": "period"},
        ]
        with pytest.raises(InvalidInputError):
            predictor.predict(records)

    def test_does_not_mutate_logs(
        self, predictor: CyclePredictor, regular_starts: list[date]
    ) -> None:
        logs = list(reversed(logs_for_starts(regular_starts)))
        snapshot = list(logs)
        predictor.predict(logs)
        assert logs == snapshot

    def test_module_level_predict(self, regular_starts: list[date]) -> None:
        prediction = predict(logs_for_starts(regular_starts))
        assert prediction is not None
        assert prediction.predicted_date == date(2024, 3, 25)

    def test_config_thresholds_respected(
        self, cycle_config: CycleConfig, regular_starts: list[date]
    ) -> None:
        strict = replace(cycle_config, min_cycles_for_average=2)
        prediction = CyclePredictor(strict).predict(logs_for_starts(regular_starts))
        assert prediction is not None
        assert prediction.insight == "28-day average across 2 tracked cycles"
