"""
Outbreak detection engine.

Consumes a snapshot of case records, builds a daily count history per
(location, symptom) group, estimates a baseline for each group, and emits
an alert when the evaluated day's count exceeds the baseline threshold.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from typing import Dict, Iterable, List, Optional, Tuple

from surveillance.core.config import config
from surveillance.data.aggregation import calendar_day, window_days
from surveillance.data.schema import CaseRecord

from .baselines import DailyBaselineEstimator
from .detectors import ThresholdDetector, round_threshold
from .schema import GroupHistory, OutbreakAlert

logger = logging.getLogger(__name__)

GroupKey = Tuple[str, str]


def build_group_histories(
    records: Iterable[CaseRecord],
    as_of: Optional[datetime] = None,
    days: Optional[int] = None,
    tz: Optional[tzinfo] = None,
) -> Dict[GroupKey, GroupHistory]:
    """
    Group in-window records into per-(location, symptom) daily histories.

    Records missing a timestamp, a location or any symptom contribute
    nothing. Records outside the trailing window are ignored. Days on which
    a group saw no records are absent from its history.
    """
    tz = tz or config.tzinfo
    in_window = set(window_days(as_of, days, tz))
    groups: Dict[GroupKey, GroupHistory] = {}

    for record in records:
        if record.occurred_at is None or not record.location or not record.symptoms:
            continue
        day = calendar_day(record.occurred_at, tz)
        if day not in in_window:
            continue

        for symptom in record.symptoms:
            key = (record.location, symptom)
            history = groups.get(key)
            if history is None:
                history = GroupHistory(location=record.location, symptom=symptom)
                groups[key] = history
            history.daily_counts[day] = history.daily_counts.get(day, 0) + 1

    return groups


def filter_alerts_by_location(
    alerts: Iterable[OutbreakAlert], location: Optional[str]
) -> List[OutbreakAlert]:
    """
    Keep alerts whose location equals `location`, ignoring case.

    Exact match only: "kavali" matches "Kavali", "Kava" matches nothing.
    An empty or missing location returns every alert.
    """
    if not location:
        return list(alerts)
    target = location.lower()
    return [a for a in alerts if a.location.lower() == target]


@dataclass
class OutbreakEngine:
    """
    Stateless outbreak detector.

    Notes:
    - The window, history gate and multiplier default to config values.
    - The evaluated day's own count is part of the group's history.
    - No state is kept between calls; every run recomputes from the input.
    """

    window_days: Optional[int] = None
    min_history_days: Optional[int] = None
    std_multiplier: Optional[float] = None
    threshold_decimals: Optional[int] = None
    tz: Optional[tzinfo] = None

    def __post_init__(self) -> None:
        detection = config.detection
        if self.window_days is None:
            self.window_days = detection.window_days
        if self.min_history_days is None:
            self.min_history_days = detection.min_history_days
        if self.std_multiplier is None:
            self.std_multiplier = detection.std_multiplier
        if self.threshold_decimals is None:
            self.threshold_decimals = detection.threshold_decimals
        if self.tz is None:
            self.tz = config.tzinfo

        self._estimator = DailyBaselineEstimator(
            min_days=self.min_history_days, multiplier=self.std_multiplier
        )
        self._detector = ThresholdDetector()

    def detect(
        self,
        records: Iterable[CaseRecord],
        as_of: Optional[datetime] = None,
        location: Optional[str] = None,
    ) -> List[OutbreakAlert]:
        """
        Evaluate today's counts against each group's baseline.

        Args:
            records: Case records for the trailing window
            as_of: Instant defining "today" (default: now)
            location: Optional exact, case-insensitive location filter

        Returns:
            Alerts ordered by location then symptom
        """
        as_of = as_of or datetime.now(timezone.utc)
        today = calendar_day(as_of, self.tz)
        groups = build_group_histories(records, as_of, self.window_days, self.tz)

        alerts: List[OutbreakAlert] = []
        evaluated = 0
        for key in sorted(groups):
            alert = self._evaluate(groups[key], today)
            if alert is not None:
                alerts.append(alert)
            if len(groups[key].daily_counts) >= self.min_history_days:
                evaluated += 1

        logger.info(
            f"Outbreak check for {today.isoformat()}: {len(groups)} groups, "
            f"{evaluated} with enough history, {len(alerts)} alerts"
        )
        return filter_alerts_by_location(alerts, location)

    def _evaluate(self, history: GroupHistory, today) -> Optional[OutbreakAlert]:
        baseline = self._estimator.estimate(history.counts)
        if baseline is None:
            return None

        today_count = history.count_on(today)
        if not self._detector.is_outbreak(today_count, baseline):
            return None

        return OutbreakAlert(
            location=history.location,
            symptom=history.symptom,
            observed_count=today_count,
            threshold=round_threshold(baseline.threshold, self.threshold_decimals),
            date=today,
        )
