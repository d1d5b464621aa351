"""
Configuration management for the ambulatory profile engine.

This module holds the single data-driven threshold table for every supported
biomarker: default range bands, condition-specific range sets with their
priority order, plausibility floors and clinical targets. Values can be
overridden from a YAML file; the resulting config is frozen and shared.
"""

import logging
from dataclasses import dataclass, field, fields, is_dataclass, replace
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Optional, Dict, Any, Mapping, Tuple

import yaml

from ambulatory_profile.exceptions import ContractViolation

logger = logging.getLogger(__name__)

GLUCOSE = "glucose"
CORTISOL = "cortisol"
BIOMARKER_TYPES = (GLUCOSE, CORTISOL)

MINUTES_PER_DAY = 1440
HOURS_PER_DAY = 24


@dataclass(frozen=True)
class ClinicalTarget:
    """A consensus goal for time spent in one or more bands.

    comparison is one of 'gt', 'lt' or 'between' (inclusive, uses goal_high).
    """
    name: str
    bands: Tuple[str, ...]
    comparison: str
    goal: float
    goal_high: Optional[float] = None


def _freeze_ranges(ranges: Any) -> Any:
    """Read-only view of a band mapping, bands included.

    Anything that is not a mapping is returned unchanged so that
    RangeThresholds.from_mapping can reject it later.
    """
    if not isinstance(ranges, Mapping):
        return ranges
    return MappingProxyType({
        name: MappingProxyType(dict(band)) if isinstance(band, Mapping) else band
        for name, band in ranges.items()
    })


def _thaw(value: Any) -> Any:
    """Plain dicts and tuples from frozen config values."""
    if is_dataclass(value):
        return {f.name: _thaw(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Mapping):
        return {key: _thaw(item) for key, item in value.items()}
    if isinstance(value, tuple):
        return tuple(_thaw(item) for item in value)
    return value


@dataclass(frozen=True)
class ConditionRanges:
    """Threshold set that applies when a clinical condition is detected."""
    name: str
    ranges: Mapping[str, Mapping[str, float]]
    description: str = ""

    def __post_init__(self):
        object.__setattr__(self, 'ranges', _freeze_ranges(self.ranges))


def _glucose_targets() -> Tuple[ClinicalTarget, ...]:
    # International Consensus on Time in Range (Battelino 2019)
    return (
        ClinicalTarget("Time in Target", ("target",), "gt", 70.0),
        ClinicalTarget("Time Below Target", ("very_low", "low"), "lt", 4.0),
        ClinicalTarget("Time Very Low", ("very_low",), "lt", 1.0),
        ClinicalTarget("Time Above Target", ("high", "very_high"), "lt", 25.0),
        ClinicalTarget("Time Very High", ("very_high",), "lt", 5.0),
    )


def _cortisol_targets() -> Tuple[ClinicalTarget, ...]:
    return (
        ClinicalTarget("Time in Normal", ("normal",), "between", 60.0, 80.0),
        ClinicalTarget("Time Below Normal", ("very_low", "low"), "lt", 10.0),
        ClinicalTarget("Time Very Low", ("very_low",), "lt", 2.0),
        ClinicalTarget("Time Above Normal", ("high", "very_high"), "lt", 20.0),
        ClinicalTarget("Time Very High", ("very_high",), "lt", 5.0),
    )


@dataclass(frozen=True)
class BiomarkerProfile:
    """Everything the pipeline needs to know about one biomarker.

    Ranges use the camelCase band names of the range store payload
    (veryLow, low, target|normal, high, veryHigh), so configured sets go
    through the same validation as custom ones.
    """
    name: str
    unit: str
    display_name: str
    middle_band: str  # 'target' for glucose, 'normal' for cortisol
    plausibility_floor: float
    default_ranges: Mapping[str, Mapping[str, float]]
    conditions: Mapping[str, ConditionRanges] = field(default_factory=dict)
    condition_priority: Tuple[str, ...] = ()
    targets: Tuple[ClinicalTarget, ...] = ()
    reports_a1c: bool = False

    def __post_init__(self):
        object.__setattr__(self, 'default_ranges', _freeze_ranges(self.default_ranges))
        object.__setattr__(self, 'conditions', MappingProxyType(dict(self.conditions)))


def _glucose_profile() -> BiomarkerProfile:
    return BiomarkerProfile(
        name=GLUCOSE,
        unit="mg/dL",
        display_name="Glucose",
        middle_band="target",
        plausibility_floor=20.0,
        default_ranges={
            "veryLow": {"min": 0, "max": 54},    # Level 2 hypoglycemia
            "low": {"min": 54, "max": 70},       # Level 1 hypoglycemia
            "target": {"min": 70, "max": 180},   # Standard TIR
            "high": {"min": 180, "max": 250},
            "veryHigh": {"min": 250, "max": 400},
        },
        conditions={
            "pregnancy": ConditionRanges(
                name="pregnancy",
                description="Pregnancy target range 63-140 mg/dL",
                ranges={
                    "veryLow": {"min": 0, "max": 54},
                    "low": {"min": 54, "max": 63},
                    "target": {"min": 63, "max": 140},
                    "high": {"min": 140, "max": 250},
                    "veryHigh": {"min": 250, "max": 400},
                },
            ),
        },
        condition_priority=("pregnancy",),
        targets=_glucose_targets(),
        reports_a1c=True,
    )


def _cortisol_profile() -> BiomarkerProfile:
    return BiomarkerProfile(
        name=CORTISOL,
        unit="ng/mL",
        display_name="Cortisol",
        middle_band="normal",
        plausibility_floor=0.5,
        default_ranges={
            "veryLow": {"min": 0, "max": 5},
            "low": {"min": 5, "max": 10},
            "normal": {"min": 10, "max": 30},
            "high": {"min": 30, "max": 50},
            "veryHigh": {"min": 50, "max": 100},
        },
        targets=_cortisol_targets(),
    )


@dataclass(frozen=True)
class ArtifactSettings:
    """Settings for percentile curve cleaning."""
    # Runs of this many identical hourly values are treated as sensor stalls
    min_flat_run: int = 6
    track_length: int = HOURS_PER_DAY


@dataclass(frozen=True)
class AnalysisConfig:
    """Master configuration container."""
    biomarkers: Mapping[str, BiomarkerProfile] = field(default_factory=lambda: {
        GLUCOSE: _glucose_profile(),
        CORTISOL: _cortisol_profile(),
    })
    artifacts: ArtifactSettings = field(default_factory=ArtifactSettings)

    def __post_init__(self):
        object.__setattr__(self, 'biomarkers', MappingProxyType(dict(self.biomarkers)))

    def biomarker(self, biomarker_type: str) -> BiomarkerProfile:
        """Return the profile for a biomarker type.

        Raises:
            ContractViolation: If the biomarker type is not configured.
        """
        try:
            return self.biomarkers[biomarker_type]
        except (KeyError, TypeError):
            raise ContractViolation(
                f"Unsupported biomarker type {biomarker_type!r}; "
                f"expected one of {sorted(self.biomarkers)}"
            ) from None

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return _thaw(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AnalysisConfig':
        """Create config from dictionary, layered over the built-in defaults."""
        return _apply_overrides(cls(), data)


def _profile_with_overrides(
    profile: BiomarkerProfile,
    data: Dict[str, Any]
) -> BiomarkerProfile:
    changes: Dict[str, Any] = {}
    for key, value in data.items():
        if key == "name":
            continue
        if key == "conditions":
            conditions = dict(profile.conditions)
            for name, spec in (value or {}).items():
                spec = spec or {}
                conditions[name] = ConditionRanges(
                    name=name,
                    ranges=spec.get("ranges", {}),
                    description=spec.get("description", ""),
                )
            changes["conditions"] = conditions
        elif key == "condition_priority":
            changes[key] = tuple(value or ())
        elif key == "targets":
            changes[key] = tuple(
                ClinicalTarget(
                    name=t["name"],
                    bands=tuple(t["bands"]),
                    comparison=t["comparison"],
                    goal=float(t["goal"]),
                    goal_high=t.get("goal_high"),
                )
                for t in (value or ())
            )
        elif hasattr(profile, key):
            changes[key] = value
        else:
            logger.warning("Ignoring unknown setting %r for %s", key, profile.name)
    return replace(profile, **changes)


def _apply_overrides(config: AnalysisConfig, data: Dict[str, Any]) -> AnalysisConfig:
    biomarkers = dict(config.biomarkers)
    for name, values in (data.get("biomarkers") or {}).items():
        if name not in biomarkers:
            logger.warning("Ignoring settings for unsupported biomarker %r", name)
            continue
        biomarkers[name] = _profile_with_overrides(biomarkers[name], values or {})

    artifacts = config.artifacts
    for key, value in (data.get("artifacts") or {}).items():
        if hasattr(artifacts, key):
            artifacts = replace(artifacts, **{key: value})

    return replace(config, biomarkers=biomarkers, artifacts=artifacts)


def load_config(config_path: Optional[Path] = None) -> AnalysisConfig:
    """Load configuration from YAML file.

    Args:
        config_path: Path to config.yaml. If None, looks for config.yaml
                    in the ambulatory_profile package directory.

    Returns:
        AnalysisConfig with values from file merged with defaults.
    """
    if config_path is None:
        config_path = Path(__file__).parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        return AnalysisConfig()

    with open(config_path, 'r') as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ContractViolation(f"{config_path} must contain a YAML mapping")

    return AnalysisConfig.from_dict(data)


def save_config(config: AnalysisConfig, config_path: Path) -> None:
    """Save configuration to YAML file."""
    data = config.to_dict()
    # to_dict keeps tuples, which safe_load cannot read back
    for profile in data["biomarkers"].values():
        profile["condition_priority"] = list(profile["condition_priority"])
        profile["targets"] = [
            dict(t, bands=list(t["bands"])) for t in profile["targets"]
        ]
        for condition in profile["conditions"].values():
            condition.pop("name", None)
    with open(config_path, 'w') as f:
        yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)


@lru_cache(maxsize=1)
def get_default_config() -> AnalysisConfig:
    """Process-wide configuration, loaded once on first use."""
    return load_config()
