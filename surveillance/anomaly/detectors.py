"""
Threshold detector for daily counts.
"""

from __future__ import annotations

from dataclasses import dataclass
from math import floor

from .schema import BaselineStats


@dataclass
class ThresholdDetector:
    """
    Flags a count strictly above the baseline threshold.

    A zero count never alerts, whatever the threshold.
    """

    def is_outbreak(self, observed: int, baseline: BaselineStats) -> bool:
        return observed > baseline.threshold and observed > 0


def round_threshold(value: float, decimals: int = 2) -> float:
    """
    Round half up for display (4.8284 -> 4.83).

    Only used for the reported value; comparisons use the raw threshold.
    """
    scale = 10 ** decimals
    if value < 0:
        return -floor(-value * scale + 0.5) / scale
    return floor(value * scale + 0.5) / scale
