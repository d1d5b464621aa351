"""
Metrics Calculator - Wear-time coverage and externally computed scalars.

Average, SD, CV%, A1C and GMI are computed upstream and passed through; this
module only range-checks them. Invalid values become None (unavailable).
"""

from dataclasses import dataclass
from typing import Any, Optional

import pandas as pd

from ambulatory_profile.metrics.profile_data import PatientStatistics
from ambulatory_profile.utils.statistics import calculate_active_percentage, parse_instant


@dataclass(frozen=True)
class DerivedMetrics:
    """Scalars derived for one report period."""
    start_at: Optional[pd.Timestamp]
    end_at: Optional[pd.Timestamp]
    active_percentage: Optional[int]
    total_wear_time_minutes: float
    average: Optional[float]
    standard_deviation: Optional[float]
    coefficient_of_variation_percentage: Optional[float]
    a1c: Optional[float]
    gmi: Optional[float]


class MetricsCalculator:
    """Derive coverage and validate passthrough metrics."""

    PASSTHROUGH = {
        'average': 'average',
        'standard_deviation': 'standardDeviation',
        'coefficient_of_variation_percentage': 'coefficientOfVariationPercentage',
        'a1c': 'a1c',
        'gmi': 'gmi',
    }

    @staticmethod
    def active_percentage(
        start_at: Any,
        end_at: Any,
        total_wear_time_minutes: Any
    ) -> Optional[int]:
        """CGM/ACM active percentage; None when the period is unusable."""
        return calculate_active_percentage(start_at, end_at, total_wear_time_minutes)

    def calculate(
        self,
        start_at: Any,
        end_at: Any,
        statistics: PatientStatistics
    ) -> DerivedMetrics:
        """Compute derived metrics for a report period.

        Args:
            start_at: Period start (datetime, ISO string or epoch ms).
            end_at: Period end.
            statistics: Patient statistics for the period.

        Returns:
            DerivedMetrics; temporal problems only affect active_percentage.
        """
        wear = statistics.total_wear_time_minutes
        return DerivedMetrics(
            start_at=parse_instant(start_at),
            end_at=parse_instant(end_at),
            active_percentage=self.active_percentage(start_at, end_at, wear),
            total_wear_time_minutes=wear,
            **{
                field: statistics.scalar(key)
                for field, key in self.PASSTHROUGH.items()
            },
        )
