"""Metric dataclasses for analysis inputs and results."""

from ambulatory_profile.metrics.thresholds import RangeBand, RangeThresholds, ThresholdSource
from ambulatory_profile.metrics.profile_data import PatientStatistics, PercentileCurve, Reading
from ambulatory_profile.metrics.classification import (
    BandResult,
    ClassificationResult,
    TargetAssessment,
)
from ambulatory_profile.metrics.analytics_result import AnalyticsResult

__all__ = [
    "RangeBand",
    "RangeThresholds",
    "ThresholdSource",
    "PatientStatistics",
    "PercentileCurve",
    "Reading",
    "BandResult",
    "ClassificationResult",
    "TargetAssessment",
    "AnalyticsResult",
]
