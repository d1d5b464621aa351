"""
Range Resolver - Selects the active clinical thresholds.

Tiers, first valid one wins:
1. Custom ranges supplied for the patient
2. The highest-priority detected clinical condition with a configured set
3. The biomarker default

Invalid ranges are rejected whole and never partially applied.
"""

import logging
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from ambulatory_profile.config import AnalysisConfig, BiomarkerProfile, get_default_config
from ambulatory_profile.exceptions import ContractViolation, InvalidThresholdConfig
from ambulatory_profile.loaders.payload import RangeConfigPayload
from ambulatory_profile.metrics.thresholds import (
    SOURCE_CONDITION,
    SOURCE_CUSTOM,
    SOURCE_DEFAULT,
    RangeThresholds,
    ThresholdSource,
)

logger = logging.getLogger(__name__)


class RangeResolver:
    """Resolve thresholds and their provenance for one biomarker.

    Condition precedence is taken from each biomarker's configured
    condition_priority list, not from the order conditions were detected in.
    """

    def __init__(self, config: Optional[AnalysisConfig] = None):
        self.config = config or get_default_config()

    def resolve(
        self,
        biomarker_type: str,
        custom_ranges: Optional[Mapping[str, Any]] = None,
        detected_conditions: Optional[Iterable[str]] = None,
        message: Optional[str] = None,
    ) -> Tuple[RangeThresholds, ThresholdSource]:
        """Pick the thresholds for a request.

        Args:
            biomarker_type: 'glucose' or 'cortisol'.
            custom_ranges: Optional camelCase band mapping for this patient.
            detected_conditions: Names of clinical conditions detected for
                the patient, in any order.
            message: Free-text note from the range store, carried into the
                ThresholdSource.

        Returns:
            Tuple of (RangeThresholds, ThresholdSource).
        """
        profile = self.config.biomarker(biomarker_type)

        if custom_ranges:
            thresholds = self._try_parse(profile, custom_ranges, "custom ranges")
            if thresholds is not None:
                return thresholds, ThresholdSource(SOURCE_CUSTOM, message=message)

        valid = []
        for name in self.match_conditions(profile, detected_conditions):
            condition = profile.conditions[name]
            thresholds = self._try_parse(profile, condition.ranges, f"condition {name!r}")
            if thresholds is not None:
                valid.append((name, thresholds))
        if valid:
            names = tuple(name for name, _ in valid)
            return valid[0][1], ThresholdSource(SOURCE_CONDITION, names, message)

        return self.default_thresholds(biomarker_type), ThresholdSource(
            SOURCE_DEFAULT, message=message
        )

    def resolve_from_config_payload(
        self,
        biomarker_type: str,
        payload: Any,
    ) -> Tuple[RangeThresholds, ThresholdSource]:
        """Resolve from the range store's {useDefault, ranges, configsUsed, message}.

        Ranges listed with configsUsed were auto-detected from patient
        conditions on the store side; ranges without them are custom.
        """
        if not isinstance(payload, RangeConfigPayload):
            payload = RangeConfigPayload.from_dict(payload)
        profile = self.config.biomarker(biomarker_type)

        if not payload.use_default and payload.ranges is not None:
            thresholds = self._try_parse(profile, payload.ranges, "range config payload")
            if thresholds is not None:
                if payload.configs_used:
                    source = ThresholdSource(
                        SOURCE_CONDITION, payload.configs_used, payload.message
                    )
                else:
                    source = ThresholdSource(SOURCE_CUSTOM, message=payload.message)
                return thresholds, source

        return self.default_thresholds(biomarker_type), ThresholdSource(
            SOURCE_DEFAULT, message=payload.message
        )

    def default_thresholds(self, biomarker_type: str) -> RangeThresholds:
        """Configured default thresholds for a biomarker.

        Raises:
            ContractViolation: If the configured default is itself invalid.
        """
        profile = self.config.biomarker(biomarker_type)
        try:
            return RangeThresholds.from_mapping(
                profile.name, profile.default_ranges, profile.middle_band
            )
        except InvalidThresholdConfig as exc:
            raise ContractViolation(
                f"Default ranges for {profile.name} are invalid: {exc}"
            ) from exc

    @staticmethod
    def match_conditions(
        profile: BiomarkerProfile,
        detected_conditions: Optional[Iterable[str]]
    ) -> List[str]:
        """Detected conditions that have a configured set, in priority order.

        Configured conditions missing from the priority list are never
        auto-selected.
        """
        if not detected_conditions:
            return []
        if isinstance(detected_conditions, str):
            detected_conditions = [detected_conditions]
        detected = set(detected_conditions)
        return [
            name for name in profile.condition_priority
            if name in detected and name in profile.conditions
        ]

    @staticmethod
    def _try_parse(
        profile: BiomarkerProfile,
        ranges: Any,
        origin: str
    ) -> Optional[RangeThresholds]:
        try:
            return RangeThresholds.from_mapping(profile.name, ranges, profile.middle_band)
        except InvalidThresholdConfig as exc:
            logger.warning("Rejected %s for %s: %s", origin, profile.name, exc)
            return None
