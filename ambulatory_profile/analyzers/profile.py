"""
Profile Analyzer - Runs the full ambulatory profile pipeline.

RangeResolver -> ArtifactFilter -> RangeClassifier -> MetricsCalculator
-> ReportAssembler, for one patient, one biomarker and one period.

The pipeline holds no per-request state, so one analyzer can serve
concurrent requests.
"""

from typing import Any, Iterable, Mapping, Optional, Union

from ambulatory_profile.analyzers.artifact_filter import ArtifactFilter
from ambulatory_profile.analyzers.metrics_calculator import MetricsCalculator
from ambulatory_profile.analyzers.range_classifier import RangeClassifier
from ambulatory_profile.analyzers.range_resolver import RangeResolver
from ambulatory_profile.config import AnalysisConfig, get_default_config
from ambulatory_profile.loaders.payload import BiomarkerPayload, RangeConfigPayload
from ambulatory_profile.metrics.analytics_result import AnalyticsResult
from ambulatory_profile.reports.assembler import ReportAssembler


class ProfileAnalyzer:
    """Produce an AnalyticsResult from external payloads.

    Usage::

        analyzer = ProfileAnalyzer()
        result = analyzer.analyze(payload, "glucose", detected_conditions=["pregnancy"])
        result.range_bands.percentages
    """

    def __init__(self, config: Optional[AnalysisConfig] = None):
        self.config = config or get_default_config()
        self.resolver = RangeResolver(self.config)
        self.classifier = RangeClassifier(self.config)
        self.calculator = MetricsCalculator()
        self.assembler = ReportAssembler(self.config)

    def analyze(
        self,
        payload: Union[BiomarkerPayload, Mapping[str, Any], None],
        biomarker_type: str,
        custom_ranges: Optional[Mapping[str, Any]] = None,
        detected_conditions: Optional[Iterable[str]] = None,
        range_config: Union[RangeConfigPayload, Mapping[str, Any], None] = None,
    ) -> AnalyticsResult:
        """Run the pipeline.

        Args:
            payload: PatientBiomarkerPayload (mapping or parsed).
            biomarker_type: 'glucose' or 'cortisol'.
            custom_ranges: Optional patient-specific bands.
            detected_conditions: Optional detected clinical conditions.
            range_config: Optional RangeConfigPayload from the range store.
                Used only when custom_ranges and detected_conditions give
                no valid thresholds.

        Returns:
            AnalyticsResult. Data problems degrade to zero/None values.

        Raises:
            ContractViolation: On structurally invalid input.
        """
        if not isinstance(payload, BiomarkerPayload):
            payload = BiomarkerPayload.from_dict(payload)

        thresholds, source = self.resolver.resolve(
            biomarker_type, custom_ranges, detected_conditions
        )
        if source.is_default and range_config is not None:
            thresholds, source = self.resolver.resolve_from_config_payload(
                biomarker_type, range_config
            )

        cleaned = ArtifactFilter(biomarker_type, self.config).clean_curve(payload.percentiles)
        classification = self.classifier.classify(payload.statistics, thresholds)
        metrics = self.calculator.calculate(payload.start_at, payload.end_at, payload.statistics)

        return self.assembler.assemble(
            biomarker_type, thresholds, source, cleaned, classification, metrics
        )


def build_profile(
    payload: Union[BiomarkerPayload, Mapping[str, Any], None],
    biomarker_type: str,
    custom_ranges: Optional[Mapping[str, Any]] = None,
    detected_conditions: Optional[Iterable[str]] = None,
    range_config: Union[RangeConfigPayload, Mapping[str, Any], None] = None,
    config: Optional[AnalysisConfig] = None,
) -> AnalyticsResult:
    """Convenience wrapper around ProfileAnalyzer.analyze."""
    return ProfileAnalyzer(config).analyze(
        payload,
        biomarker_type,
        custom_ranges=custom_ranges,
        detected_conditions=detected_conditions,
        range_config=range_config,
    )
