"""
Anomaly module: Statistical outbreak detection.

Implements per-group daily histories, baselines, the threshold detector and
the detection engine.
"""

from .baselines import DailyBaselineEstimator, compute_baseline
from .detectors import ThresholdDetector, round_threshold
from .engine import OutbreakEngine, build_group_histories, filter_alerts_by_location
from .schema import BaselineStats, GroupHistory, OutbreakAlert

__all__ = [
	"OutbreakEngine",
	"OutbreakAlert",
	"BaselineStats",
	"GroupHistory",
	"DailyBaselineEstimator",
	"compute_baseline",
	"ThresholdDetector",
	"round_threshold",
	"build_group_histories",
	"filter_alerts_by_location",
]
