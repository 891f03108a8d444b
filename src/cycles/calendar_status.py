"""Settings-based cycle position for the dashboard.

Unlike the predictor, this does not look at logs at all: it projects the
user's saved cycle length forward from their saved last period start.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta

from src.cycles.base import CycleSettings


@dataclass(frozen=True)
class CycleStatus:
    """Where the user is in their cycle on ``as_of``.

    Attributes:
        as_of:            Reference date.
        cycle_day:        Day within the current cycle (1-indexed).
        next_period_in:   Days until the next expected period (1..cycle length).
        next_period_date: ``as_of`` + ``next_period_in``.
        cycle_length:     Cycle length the projection used.
        period_length:    Period length from settings.
    """

    as_of: date
    cycle_day: int
    next_period_in: int
    next_period_date: date
    cycle_length: int
    period_length: int


def cycle_status(settings: CycleSettings, as_of: date | None = None) -> CycleStatus | None:
    """Return the user's cycle position, or None without a last period start.

    The projection wraps: a last period start several cycles back still lands
    on the right day of the current cycle.
    """
    if settings.last_period_start is None:
        return None

    today = as_of or date.today()
    length = settings.average_cycle_length
    days_since = (today - settings.last_period_start).days
    offset = days_since % length
    next_in = length - offset

    return CycleStatus(
        as_of=today,
        cycle_day=offset + 1,
        next_period_in=next_in,
        next_period_date=today + timedelta(days=next_in),
        cycle_length=length,
        period_length=settings.average_period_length,
    )
