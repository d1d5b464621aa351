"""Pipeline stages for ambulatory profile analysis."""

from ambulatory_profile.analyzers.range_resolver import RangeResolver
from ambulatory_profile.analyzers.artifact_filter import ArtifactFilter
from ambulatory_profile.analyzers.range_classifier import RangeClassifier
from ambulatory_profile.analyzers.metrics_calculator import DerivedMetrics, MetricsCalculator

__all__ = [
    "RangeResolver",
    "ArtifactFilter",
    "RangeClassifier",
    "MetricsCalculator",
    "DerivedMetrics",
]
