"""
Ambulatory Profile - Biomarker AGP/ACP analytics engine.

This package turns aggregated continuous sensor statistics (glucose,
cortisol) into an Ambulatory Profile result:
- Resolving clinical range thresholds (custom, condition-specific, default)
- Cleaning hourly percentile curves of sensor artifacts
- Classifying time in range into five named bands
- Deriving wear-time coverage and validating passthrough metrics
"""

from ambulatory_profile.config import AnalysisConfig, load_config
from ambulatory_profile.exceptions import ContractViolation
from ambulatory_profile.analyzers.profile import ProfileAnalyzer, build_profile
from ambulatory_profile.metrics.analytics_result import AnalyticsResult

__version__ = "1.0.0"
__all__ = [
    "AnalysisConfig",
    "load_config",
    "ContractViolation",
    "ProfileAnalyzer",
    "build_profile",
    "AnalyticsResult",
]
