"""
Schema definitions for outbreak detection.

All detection outputs are deterministic and explainable. Each alert carries
the observed count and the baseline threshold it exceeded.
"""

from __future__ import annotations

import datetime as dt
from typing import Dict, List

from pydantic import BaseModel, Field


class BaselineStats(BaseModel):
    """
    Baseline statistics for one (location, symptom) group.

    Fields:
    - mean: arithmetic mean of the daily counts
    - variance: population variance (divided by the number of days)
    - std: square root of variance
    - threshold: mean + multiplier * std (unrounded)
    - days: number of history days used
    """

    mean: float
    variance: float = Field(ge=0.0)
    std: float = Field(ge=0.0)
    threshold: float
    days: int = Field(ge=0)


class GroupHistory(BaseModel):
    """
    Daily counts for one (location, symptom) group within the window.

    Only days with at least one matching record are present; days without
    activity are not filled with zeros.
    """

    location: str
    symptom: str
    daily_counts: Dict[dt.date, int] = Field(default_factory=dict)

    @property
    def days(self) -> List[dt.date]:
        return sorted(self.daily_counts)

    @property
    def counts(self) -> List[int]:
        """Counts ordered by date."""
        return [self.daily_counts[day] for day in self.days]

    def count_on(self, day: dt.date) -> int:
        return self.daily_counts.get(day, 0)


class OutbreakAlert(BaseModel):
    """
    A symptom spike at one location on the evaluated day.

    Fields:
    - location: location as reported on the case records
    - symptom: vocabulary key (consumers map it to a display label)
    - observed_count: raw count for the evaluated day
    - threshold: baseline boundary, rounded for display
    - date: the evaluated calendar day
    """

    location: str
    symptom: str
    observed_count: int = Field(gt=0)
    threshold: float
    date: dt.date
