"""Tests for cycle regularity classification."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from src.cycles.predictor import CyclePredictor, RegularityVerdict, classify_regularity
from src.cycles.tests.conftest import logs_for_starts, period_log


def starts_from_lengths(lengths: list[int], first: date = date(2024, 1, 1)) -> list[date]:
    starts = [first]
    for days in lengths:
        starts.append(starts[-1] + timedelta(days=days))
    return starts


class TestClassifyRegularity:
    def test_wide_spread_is_irregular(self, predictor: CyclePredictor) -> None:
        starts = [date(2024, 1, 1), date(2024, 1, 20), date(2024, 3, 10)]
        verdict = predictor.classify_regularity(logs_for_starts(starts))
        assert verdict.cycle_lengths == (19, 50)
        assert verdict.min == 19
        assert verdict.max == 50
        assert verdict.is_irregular

    def test_single_period_log_is_not_irregular(self, predictor: CyclePredictor) -> None:
        verdict = predictor.classify_regularity([period_log(date(2024, 1, 1))])
        assert verdict == RegularityVerdict()
        assert verdict.cycle_lengths == ()
        assert not verdict.is_irregular

    def test_one_valid_cycle_has_empty_statistics(self, predictor: CyclePredictor) -> None:
        starts = [date(2024, 1, 1), date(2024, 1, 29)]
        verdict = predictor.classify_regularity(logs_for_starts(starts))
        assert verdict.average is None
        assert verdict.min is None
        assert verdict.max is None
        assert not verdict.is_irregular

    def test_regular_cycles(self, predictor: CyclePredictor) -> None:
        verdict = predictor.classify_regularity(logs_for_starts(starts_from_lengths([28, 29, 27])))
        assert verdict.average == 28
        assert verdict.spread == 2
        assert not verdict.is_irregular

    def test_spread_of_exactly_seven_is_regular(self, predictor: CyclePredictor) -> None:
        verdict = predictor.classify_regularity(logs_for_starts(starts_from_lengths([25, 32])))
        assert verdict.spread == 7
        assert not verdict.is_irregular

    def test_spread_of_eight_is_irregular(self, predictor: CyclePredictor) -> None:
        verdict = predictor.classify_regularity(logs_for_starts(starts_from_lengths([25, 33])))
        assert verdict.spread == 8
        assert verdict.is_irregular

    def test_invalid_lengths_excluded(self, predictor: CyclePredictor) -> None:
        # 60-day gap is a missed log, not a cycle
        verdict = predictor.classify_regularity(logs_for_starts(starts_from_lengths([28, 60, 30])))
        assert verdict.cycle_lengths == (28, 30)
        assert not verdict.is_irregular

    def test_average_is_unweighted_and_rounded(self, predictor: CyclePredictor) -> None:
        verdict = predictor.classify_regularity(logs_for_starts(starts_from_lengths([27, 28])))
        assert verdict.average == 28  # 27.5 rounds up

    def test_module_level_shortcut(self) -> None:
        verdict = classify_regularity(logs_for_starts(starts_from_lengths([20, 35])))
        assert verdict.is_irregular


class TestClassifySamples:
    @pytest.mark.parametrize(
        "samples,expected",
        [
            ([28, 35], False),
            ([28, 36], True),
            ([30, 30, 30], False),
            ([18, 50], True),
        ],
    )
    def test_irregular_iff_spread_above_seven(
        self, predictor: CyclePredictor, samples: list[int], expected: bool
    ) -> None:
        assert predictor.classify_samples(samples).is_irregular is expected

    def test_fewer_than_two_samples(self, predictor: CyclePredictor) -> None:
        verdict = predictor.classify_samples([40])
        assert verdict.cycle_lengths == (40,)
        assert verdict.average is None
        assert not verdict.is_irregular
