"""
Baseline estimation for daily case counts.

Computes population statistics over a group's active days. Deterministic and
recomputed from scratch on every detection run.
"""

from __future__ import annotations

from dataclasses import dataclass
from math import sqrt
from typing import Optional, Sequence

from .schema import BaselineStats


@dataclass
class DailyBaselineEstimator:
    """
    Mean / population standard deviation baseline.

    Warm-up: returns None until min_days values are available.
    """

    min_days: int = 3
    multiplier: float = 2.0

    def estimate(self, counts: Sequence[int]) -> Optional[BaselineStats]:
        if len(counts) < self.min_days or not counts:
            return None
        values = [float(c) for c in counts]
        mean = sum(values) / len(values)
        variance = sum((v - mean) ** 2 for v in values) / len(values)
        std = sqrt(variance)
        return BaselineStats(
            mean=mean,
            variance=variance,
            std=std,
            threshold=mean + self.multiplier * std,
            days=len(values),
        )


def compute_baseline(
    counts: Sequence[int],
    min_days: int = 3,
    multiplier: float = 2.0,
) -> Optional[BaselineStats]:
    """
    Baseline for a sequence of daily counts, or None below min_days.
    """
    return DailyBaselineEstimator(min_days=min_days, multiplier=multiplier).estimate(counts)
