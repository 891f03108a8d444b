"""Reconstruct period episodes from a flat stream of period-flagged days.

Users log each bleeding day separately, sometimes skipping a day or logging
the same day twice.  An episode starts on the first logged day and continues
while consecutive logged days are at most ``max_gap_days`` apart.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable


def reconstruct_episodes(period_dates: Iterable[date], max_gap_days: int = 1) -> list[date]:
    """Return the start date of every period episode, ascending.

    Args:
        period_dates: Dates of period-flagged log entries.  Duplicates are
                      allowed and never open a new episode.
        max_gap_days: Largest gap to the previous logged day that still
                      continues the current episode.

    Returns:
        Strictly ascending episode start dates (empty for empty input).
    """
    starts: list[date] = []
    previous: date | None = None
    for current in sorted(period_dates):
        if previous is None or (current - previous).days > max_gap_days:
            starts.append(current)
        previous = current
    return starts
