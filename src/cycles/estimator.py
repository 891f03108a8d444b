"""Cycle length estimation from consecutive period episode starts.

Recent cycles predict the next one better than old ones, so the estimate is
a linearly recency-weighted mean: the oldest sample has weight 1, the next 2,
and so on.  The spread is the plain population standard deviation of the
same samples.
"""

from __future__ import annotations

import logging
import math
import statistics
from dataclasses import dataclass
from datetime import date
from typing import Sequence

from src.cycles.config_loader import CycleLengthConfig

logger = logging.getLogger("auracycle.cycles.estimator")


@dataclass(frozen=True)
class CycleLengthEstimate:
    """Summary of the usable cycle lengths in a user's history.

    Attributes:
        valid_samples: Cycle lengths inside the plausibility window, oldest
                       first.  Holds only the fallback length when no
                       observed cycle was usable.
        weighted_mean: Recency-weighted mean, rounded to whole days.
        std_dev:       Population standard deviation of ``valid_samples``.
        used_fallback: True when ``valid_samples`` is the fallback alone.
    """

    valid_samples: tuple[int, ...]
    weighted_mean: int
    std_dev: float
    used_fallback: bool = False


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return math.floor(value + 0.5)


def cycle_lengths(episode_starts: Sequence[date]) -> list[int]:
    """Day differences between consecutive episode starts."""
    return [
        (later - earlier).days
        for earlier, later in zip(episode_starts, episode_starts[1:])
    ]


def valid_cycle_lengths(
    episode_starts: Sequence[date], window: CycleLengthConfig | None = None
) -> list[int]:
    """Cycle lengths that fall inside the plausibility window.

    Lengths outside the window are usually mis-logged days; they are dropped
    without affecting the rest of the history.
    """
    window = window or CycleLengthConfig()
    lengths = cycle_lengths(episode_starts)
    valid = [days for days in lengths if window.is_valid(days)]
    if len(valid) < len(lengths):
        logger.debug(
            "Discarded %d of %d cycle lengths outside [%d, %d] days",
            len(lengths) - len(valid),
            len(lengths),
            window.min_valid_days,
            window.max_valid_days,
        )
    return valid


def weighted_mean(samples: Sequence[int]) -> float:
    """Mean with weight ``i + 1`` for the i-th sample (oldest first)."""
    total_weight = sum(range(1, len(samples) + 1))
    return sum(days * (i + 1) for i, days in enumerate(samples)) / total_weight


def estimate(
    episode_starts: Sequence[date],
    fallback_cycle_length: int = 28,
    window: CycleLengthConfig | None = None,
) -> CycleLengthEstimate:
    """Estimate the user's cycle length from episode starts.

    Args:
        episode_starts:        Ascending episode start dates.
        fallback_cycle_length: Sole sample used when no observed cycle length
                               is valid.
        window:                Plausibility window (defaults to 18-50 days).

    Returns:
        CycleLengthEstimate for the valid samples, or for the fallback alone.
    """
    samples = valid_cycle_lengths(episode_starts, window)
    used_fallback = False
    if not samples:
        logger.info(
            "No valid cycle lengths in %d episode(s); falling back to %d days",
            len(episode_starts),
            fallback_cycle_length,
        )
        samples = [fallback_cycle_length]
        used_fallback = True

    return CycleLengthEstimate(
        valid_samples=tuple(samples),
        weighted_mean=round_half_up(weighted_mean(samples)),
        std_dev=statistics.pstdev(samples),
        used_fallback=used_fallback,
    )
