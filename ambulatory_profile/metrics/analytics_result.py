"""
Ambulatory profile result dataclass.

This is the only object handed to presentation and export collaborators.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from ambulatory_profile.metrics.classification import ClassificationResult, TargetAssessment
from ambulatory_profile.metrics.profile_data import PercentileCurve
from ambulatory_profile.metrics.thresholds import RangeThresholds, ThresholdSource
from ambulatory_profile.utils.statistics import UNAVAILABLE_DISPLAY, format_threshold


@dataclass(frozen=True)
class AnalyticsResult:
    """Ambulatory Glucose/Cortisol Profile for one patient and period.

    Unavailable scalars are None; percentages are never None.
    """
    biomarker_type: str
    unit: str
    display_name: str
    threshold_source: ThresholdSource
    thresholds: RangeThresholds
    range_bands: ClassificationResult
    cleaned_percentiles: PercentileCurve
    targets: Tuple[TargetAssessment, ...]

    start_at: Optional[pd.Timestamp]
    end_at: Optional[pd.Timestamp]
    cgm_active_percent: Optional[int]
    total_wear_time_minutes: float

    average: Optional[float]
    standard_deviation: Optional[float]
    coefficient_of_variation_percentage: Optional[float]
    a1c: Optional[float] = None
    gmi: Optional[float] = None
    reports_a1c: bool = False

    @property
    def date_range(self) -> str:
        if self.start_at is None or self.end_at is None:
            return "Date range unavailable"
        return f"{self.start_at.strftime('%Y-%m-%d')} - {self.end_at.strftime('%Y-%m-%d')}"

    def summary_rows(self) -> List[Tuple[str, str]]:
        """Metric/value rows for tabular export; unavailable values read 'N/A'."""

        def show(value: Optional[float], suffix: str = '') -> str:
            if value is None:
                return UNAVAILABLE_DISPLAY
            return f"{format_threshold(value)}{suffix}"

        rows = [
            ('Date Range', self.date_range),
            ('CGM Active', show(self.cgm_active_percent, '%')),
            (f'Average {self.display_name}', show(self.average, f' {self.unit}')),
            ('Coefficient of Variation', show(self.coefficient_of_variation_percentage, '%')),
        ]
        if self.reports_a1c:
            rows.append(('Estimated A1C', show(self.a1c, '%')))
            rows.append(('GMI', show(self.gmi, '%')))
        return rows

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        result = {
            'biomarkerType': self.biomarker_type,
            'unit': self.unit,
            'thresholdSource': self.threshold_source.to_dict(),
            'thresholds': self.thresholds.to_dict(),
            'rangeBands': self.range_bands.to_list(),
            'cleanedPercentiles': self.cleaned_percentiles.to_dict(),
            'targets': [t.to_dict() for t in self.targets],
            'startAt': self.start_at.isoformat() if self.start_at is not None else None,
            'endAt': self.end_at.isoformat() if self.end_at is not None else None,
            'cgmActivePercent': self.cgm_active_percent,
            'totalWearTimeMinutes': self.total_wear_time_minutes,
            'average': self.average,
            'standardDeviation': self.standard_deviation,
            'coefficientOfVariationPercentage': self.coefficient_of_variation_percentage,
        }
        if self.reports_a1c:
            result['a1c'] = self.a1c
            result['gmi'] = self.gmi
        return result
