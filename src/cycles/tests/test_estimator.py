"""Tests for the recency-weighted cycle length estimator."""

from __future__ import annotations

import statistics
from datetime import date, timedelta

import pytest

from src.cycles.config_loader import CycleLengthConfig
from src.cycles.estimator import (
    cycle_lengths,
    estimate,
    round_half_up,
    valid_cycle_lengths,
    weighted_mean,
)


def starts_from_lengths(lengths: list[int], first: date = date(2024, 1, 1)) -> list[date]:
    starts = [first]
    for days in lengths:
        starts.append(starts[-1] + timedelta(days=days))
    return starts


class TestCycleLengths:
    def test_differences_between_consecutive_starts(self) -> None:
        starts = starts_from_lengths([28, 30, 27])
        assert cycle_lengths(starts) == [28, 30, 27]

    def test_single_start_has_no_lengths(self) -> None:
        assert cycle_lengths([date(2024, 1, 1)]) == []

    def test_out_of_window_lengths_discarded(self) -> None:
        starts = starts_from_lengths([10, 28, 51, 50, 18, 17])
        assert valid_cycle_lengths(starts) == [28, 50, 18]

    def test_custom_window(self) -> None:
        starts = starts_from_lengths([20, 28, 40])
        window = CycleLengthConfig(min_valid_days=21, max_valid_days=35)
        assert valid_cycle_lengths(starts, window) == [28]


class TestWeightedMean:
    def test_equal_samples(self) -> None:
        assert weighted_mean([28, 28, 28]) == pytest.approx(28.0)

    def test_recent_samples_weigh_more(self) -> None:
        # (26*1 + 32*2) / 3 = 30
        assert weighted_mean([26, 32]) == pytest.approx(30.0)

    @pytest.mark.parametrize("a,b", [(20, 40), (25, 30), (18, 50)])
    def test_moves_toward_more_recent_sample(self, a: int, b: int) -> None:
        assert weighted_mean([a, b]) > statistics.mean([a, b])
        assert weighted_mean([b, a]) < statistics.mean([a, b])

    def test_round_half_up(self) -> None:
        assert round_half_up(28.5) == 29
        assert round_half_up(27.5) == 28
        assert round_half_up(28.49) == 28


class TestEstimate:
    def test_regular_cycles(self, regular_starts: list[date]) -> None:
        est = estimate(regular_starts, fallback_cycle_length=28)
        assert est.valid_samples == (28, 28)
        assert est.weighted_mean == 28
        assert est.std_dev == 0.0
        assert not est.used_fallback

    def test_weighted_mean_is_rounded(self) -> None:
        # (27*1 + 28*2) / 3 = 27.67 → 28
        est = estimate(starts_from_lengths([27, 28]), fallback_cycle_length=30)
        assert est.weighted_mean == 28

    def test_population_std_dev_unweighted(self) -> None:
        est = estimate(starts_from_lengths([26, 30]), fallback_cycle_length=28)
        assert est.std_dev == pytest.approx(2.0)

    def test_only_invalid_gap_falls_back_to_default(self) -> None:
        starts = [date(2024, 1, 1), date(2024, 1, 11)]  # 10 days
        est = estimate(starts, fallback_cycle_length=28)
        assert est.valid_samples == (28,)
        assert est.weighted_mean == 28
        assert est.std_dev == 0.0
        assert est.used_fallback

    def test_fallback_uses_caller_value(self) -> None:
        starts = [date(2024, 1, 1), date(2024, 4, 1)]  # 91 days
        est = estimate(starts, fallback_cycle_length=32)
        assert est.valid_samples == (32,)
        assert est.weighted_mean == 32

    def test_invalid_samples_do_not_abort(self) -> None:
        est = estimate(starts_from_lengths([28, 5, 30]), fallback_cycle_length=28)
        assert est.valid_samples == (28, 30)
        assert not est.used_fallback

    def test_does_not_mutate_input(self, regular_starts: list[date]) -> None:
        snapshot = list(regular_starts)
        estimate(regular_starts)
        assert regular_starts == snapshot
