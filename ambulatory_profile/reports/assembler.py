"""
Report Assembler - Builds the immutable AnalyticsResult.

Merges resolved thresholds, cleaned curves, band classification and derived
metrics, and fills defaults so consumers never branch on missing fields:
percentages default to 0, scalars to None (displayed as 'N/A').
"""

import logging
from typing import Optional

from ambulatory_profile.analyzers.metrics_calculator import DerivedMetrics
from ambulatory_profile.analyzers.range_classifier import RangeClassifier
from ambulatory_profile.config import AnalysisConfig, get_default_config
from ambulatory_profile.metrics.analytics_result import AnalyticsResult
from ambulatory_profile.metrics.classification import ClassificationResult
from ambulatory_profile.metrics.profile_data import PercentileCurve
from ambulatory_profile.metrics.thresholds import RangeThresholds, ThresholdSource

logger = logging.getLogger(__name__)


class ReportAssembler:
    """Assemble pipeline outputs into one AnalyticsResult."""

    def __init__(self, config: Optional[AnalysisConfig] = None):
        """Initialize report assembler.

        Args:
            config: Optional configuration.
        """
        self.config = config or get_default_config()
        self.classifier = RangeClassifier(self.config)

    def assemble(
        self,
        biomarker_type: str,
        thresholds: RangeThresholds,
        source: ThresholdSource,
        cleaned_percentiles: Optional[PercentileCurve],
        classification: ClassificationResult,
        metrics: DerivedMetrics,
    ) -> AnalyticsResult:
        """Create the final result.

        Args:
            biomarker_type: 'glucose' or 'cortisol'.
            thresholds: Thresholds chosen by the RangeResolver.
            source: Provenance of the thresholds.
            cleaned_percentiles: Output of the ArtifactFilter; None gives an
                all-None curve.
            classification: Output of the RangeClassifier.
            metrics: Output of the MetricsCalculator.

        Returns:
            A frozen AnalyticsResult.
        """
        profile = self.config.biomarker(biomarker_type)
        if cleaned_percentiles is None:
            cleaned_percentiles = PercentileCurve.empty()

        wear = metrics.total_wear_time_minutes or 0.0
        targets = self.classifier.assess_targets(classification, biomarker_type, wear)

        result = AnalyticsResult(
            biomarker_type=profile.name,
            unit=profile.unit,
            display_name=profile.display_name,
            threshold_source=source,
            thresholds=thresholds,
            range_bands=classification,
            cleaned_percentiles=cleaned_percentiles,
            targets=targets,
            start_at=metrics.start_at,
            end_at=metrics.end_at,
            cgm_active_percent=metrics.active_percentage,
            total_wear_time_minutes=wear,
            average=metrics.average,
            standard_deviation=metrics.standard_deviation,
            coefficient_of_variation_percentage=metrics.coefficient_of_variation_percentage,
            a1c=metrics.a1c if profile.reports_a1c else None,
            gmi=metrics.gmi if profile.reports_a1c else None,
            reports_a1c=profile.reports_a1c,
        )
        logger.debug(
            "Assembled %s profile (source=%s, active=%s)",
            profile.name, source.kind, metrics.active_percentage,
        )
        return result
