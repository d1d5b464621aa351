"""
Range Classifier - Time in range from cumulative statistics.

The statistics service reports cumulative figures (percent below X, above Y,
between X and Y). Bands are derived by subtraction:

    very_low  = below(low.min)
    low       = max(0, below(middle.min) - very_low)
    middle    = between(middle.min, middle.max)
    high      = max(0, above(middle.max) - above(high.max))
    very_high = above(high.max)

The cumulative figures are computed upstream independently of the resolved
thresholds, so the five bands can sum to more or less than 100. That sum is
reported as-is.
"""

import logging
import math
from typing import Optional, Tuple

from ambulatory_profile.config import (
    MINUTES_PER_DAY,
    AnalysisConfig,
    ClinicalTarget,
    get_default_config,
)
from ambulatory_profile.metrics.classification import (
    BandResult,
    ClassificationResult,
    TargetAssessment,
)
from ambulatory_profile.metrics.profile_data import PatientStatistics
from ambulatory_profile.metrics.thresholds import BAND_LABELS, RangeThresholds

logger = logging.getLogger(__name__)


class RangeClassifier:
    """Convert cumulative statistics into five named bands."""

    def __init__(self, config: Optional[AnalysisConfig] = None):
        self.config = config or get_default_config()

    def classify(
        self,
        statistics: PatientStatistics,
        thresholds: RangeThresholds
    ) -> ClassificationResult:
        """Classify statistics against resolved thresholds.

        Args:
            statistics: Cumulative percentages and wear-time minutes.
            thresholds: Resolved range bands.

        Returns:
            ClassificationResult with five non-negative bands, lowest first.
        """
        t = thresholds
        very_low = statistics.percent_below(t.low.min)
        low = statistics.percent_below(t.middle.min) - very_low
        middle = statistics.percent_between(t.middle.min, t.middle.max)
        high = statistics.percent_above(t.middle.max) - statistics.percent_above(t.high.max)
        very_high = statistics.percent_above(t.high.max)

        percentages = [max(0.0, p) for p in (very_low, low, middle, high, very_high)]

        bands = []
        for (key, band), percentage in zip(t.bands(), percentages):
            minutes = statistics.band_minutes(key)
            if minutes is None:
                minutes = percentage * MINUTES_PER_DAY / 100
            bands.append(BandResult(
                key=key,
                label=BAND_LABELS[key],
                percentage=percentage,
                minutes_per_day=minutes,
                lower=band.min,
                upper=band.max,
            ))

        result = ClassificationResult(tuple(bands))
        total = result.total_percentage
        if total and not math.isclose(total, 100.0):
            logger.debug(
                "%s band percentages sum to %.1f%%", t.biomarker_type, total
            )
        return result

    def assess_targets(
        self,
        classification: ClassificationResult,
        biomarker_type: str,
        total_wear_time_minutes: float
    ) -> Tuple[TargetAssessment, ...]:
        """Check the biomarker's clinical targets against classified bands.

        Goal minutes are the goal percentage of total wear time. When no
        band holds any time, met is None rather than True or False.
        """
        profile = self.config.biomarker(biomarker_type)
        return tuple(
            self._assess(target, classification, total_wear_time_minutes)
            for target in profile.targets
        )

    @staticmethod
    def _assess(
        target: ClinicalTarget,
        classification: ClassificationResult,
        total_wear_time_minutes: float
    ) -> TargetAssessment:
        actual = classification.percentage_of(target.bands)
        if not classification.total_percentage:
            # Nothing classified, so no goal can be judged
            met = None
        elif target.comparison == "gt":
            met = actual > target.goal
        elif target.comparison == "between":
            met = target.goal <= actual <= target.goal_high
        else:
            met = actual < target.goal

        return TargetAssessment(
            name=target.name,
            comparison=target.comparison,
            goal=target.goal,
            goal_high=target.goal_high,
            actual=actual,
            met=met,
            goal_minutes=total_wear_time_minutes * target.goal / 100,
        )
