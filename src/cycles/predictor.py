"""Next-period prediction and cycle regularity classification.

Pipeline (one way, recomputed from scratch on every call)::

    logs ─► period dates ─► episode starts ─► cycle lengths ─┬─► CyclePrediction
                                                             └─► RegularityVerdict

Sparse histories never raise: ``predict`` returns ``None`` and
``classify_regularity`` returns an empty, non-irregular verdict.  Only a log
date that cannot be parsed raises (``InvalidInputError``).
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Any, Iterable, Mapping, Sequence

from src.cycles.base import CycleSettings, LogEntry, period_dates
from src.cycles.config_loader import CycleConfig, get_cycle_config
from src.cycles.episodes import reconstruct_episodes
from src.cycles.estimator import estimate, round_half_up, valid_cycle_lengths

logger = logging.getLogger("auracycle.cycles.predictor")

LogsInput = Iterable[LogEntry | Mapping[str, Any]]


class Confidence(str, Enum):
    high = "high"
    medium = "medium"
    low = "low"


@dataclass(frozen=True)
class CyclePrediction:
    """Forecast of the next period start.

    Attributes:
        predicted_date: Best estimate for the next period start.
        range_start:    Earliest expected start (predicted − ceil(std dev)).
        range_end:      Latest expected start (predicted + ceil(std dev)).
        confidence:     high / medium / low, from the cycle length spread.
        insight:        One-line explanation for display.
        cycle_length:   Weighted mean cycle length used for the projection.
        std_dev:        Population std dev of the samples used.
        cycles_used:    Number of cycle length samples behind the forecast.
    """

    predicted_date: date
    range_start: date
    range_end: date
    confidence: Confidence
    insight: str
    cycle_length: int
    std_dev: float
    cycles_used: int


@dataclass(frozen=True)
class RegularityVerdict:
    """Regularity of the observed cycle lengths.

    With fewer than two valid cycle lengths the statistics are empty and
    ``is_irregular`` is False: not enough data is reported as not irregular.
    """

    cycle_lengths: tuple[int, ...] = ()
    average: int | None = None
    min: int | None = None
    max: int | None = None
    is_irregular: bool = False

    @property
    def spread(self) -> int | None:
        if self.min is None or self.max is None:
            return None
        return self.max - self.min


class CyclePredictor:
    """Predict the next period and classify regularity from period logs.

    Usage::

        predictor = CyclePredictor()
        prediction = predictor.predict(logs, settings)
        if prediction is not None:
            print(prediction.predicted_date, prediction.confidence)

        verdict = predictor.classify_regularity(logs)
        print(verdict.is_irregular)
    """

    def __init__(self, config: CycleConfig | None = None) -> None:
        self._config = config or get_cycle_config()

    @property
    def config(self) -> CycleConfig:
        return self._config

    # ------------------------------------------------------------------
    # Episodes
    # ------------------------------------------------------------------

    def episode_starts(self, logs: LogsInput) -> list[date]:
        """Start dates of the period episodes found in ``logs``."""
        return reconstruct_episodes(
            period_dates(logs), max_gap_days=self._config.max_continuation_gap_days
        )

    # ------------------------------------------------------------------
    # Prediction
    # ------------------------------------------------------------------

    def predict(
        self,
        logs: LogsInput,
        settings: CycleSettings | Mapping[str, Any] | None = None,
    ) -> CyclePrediction | None:
        """Forecast the next period start from the full log history.

        Args:
            logs:     Log entries (any type, any order).  Only period logs count.
            settings: User settings; ``average_cycle_length`` is the fallback
                      when no observed cycle length is usable.

        Returns:
            CyclePrediction, or None when there are fewer than two period
            logs or fewer than two episodes.
        """
        dates = period_dates(logs)
        if len(dates) < 2:
            logger.debug("Only %d period log(s); no prediction", len(dates))
            return None

        starts = reconstruct_episodes(
            dates, max_gap_days=self._config.max_continuation_gap_days
        )
        return self.predict_from_starts(starts, self._fallback_cycle_length(settings))

    def predict_from_starts(
        self, episode_starts: Sequence[date], fallback_cycle_length: int
    ) -> CyclePrediction | None:
        """Forecast from already reconstructed episode starts.

        Returns None when fewer than two starts are given.
        """
        if len(episode_starts) < 2:
            logger.debug("Only %d episode(s); no prediction", len(episode_starts))
            return None

        cfg = self._config
        est = estimate(episode_starts, fallback_cycle_length, window=cfg.cycle_length)

        margin = timedelta(days=math.ceil(est.std_dev))
        predicted = episode_starts[-1] + timedelta(days=est.weighted_mean)
        n = len(est.valid_samples)

        if n >= cfg.min_cycles_for_average:
            insight = f"{est.weighted_mean}-day average across {n} tracked cycles"
        else:
            insight = f"Based on {n} recorded cycle{'s' if n > 1 else ''}"

        return CyclePrediction(
            predicted_date=predicted,
            range_start=predicted - margin,
            range_end=predicted + margin,
            confidence=Confidence(cfg.confidence.tier_for(est.std_dev)),
            insight=insight,
            cycle_length=est.weighted_mean,
            std_dev=est.std_dev,
            cycles_used=n,
        )

    def _fallback_cycle_length(
        self, settings: CycleSettings | Mapping[str, Any] | None
    ) -> int:
        defaults = self._config.defaults
        if not isinstance(settings, CycleSettings):
            settings = CycleSettings.from_record(
                settings,
                default_cycle_length=defaults.average_cycle_length,
                default_period_length=defaults.average_period_length,
            )
        return settings.average_cycle_length

    # ------------------------------------------------------------------
    # Regularity
    # ------------------------------------------------------------------

    def classify_regularity(self, logs: LogsInput) -> RegularityVerdict:
        """Classify regularity from the period logs in ``logs``."""
        starts = self.episode_starts(logs)
        return self.classify_samples(valid_cycle_lengths(starts, self._config.cycle_length))

    def classify_samples(self, samples: Sequence[int]) -> RegularityVerdict:
        """Classify regularity from valid cycle lengths (oldest first)."""
        rg = self._config.regularity
        if len(samples) < rg.min_samples:
            return RegularityVerdict(cycle_lengths=tuple(samples))

        shortest, longest = min(samples), max(samples)
        return RegularityVerdict(
            cycle_lengths=tuple(samples),
            average=round_half_up(sum(samples) / len(samples)),
            min=shortest,
            max=longest,
            is_irregular=(longest - shortest) > rg.irregular_spread_days,
        )


# ---------------------------------------------------------------------------
# Module-level shortcuts using the global config
# ---------------------------------------------------------------------------


def predict(
    logs: LogsInput, settings: CycleSettings | Mapping[str, Any] | None = None
) -> CyclePrediction | None:
    return CyclePredictor().predict(logs, settings)


def classify_regularity(logs: LogsInput) -> RegularityVerdict:
    return CyclePredictor().classify_regularity(logs)
