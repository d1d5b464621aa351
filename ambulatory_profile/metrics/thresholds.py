"""
Range threshold dataclasses.

A RangeThresholds set splits [0, inf) into five contiguous named bands.
The middle band is 'target' for glucose and 'normal' for cortisol.
"""

import math
import numbers
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ambulatory_profile.exceptions import InvalidThresholdConfig

SOURCE_DEFAULT = "default"
SOURCE_CUSTOM = "custom"
SOURCE_CONDITION = "conditionAutoDetected"

MIDDLE_BAND_NAMES = ("target", "normal")

# (band key, payload key) lowest first; None marks the middle band
_BAND_LAYOUT = (
    ("very_low", "veryLow"),
    ("low", "low"),
    (None, None),
    ("high", "high"),
    ("very_high", "veryHigh"),
)

BAND_LABELS = {
    "very_low": "Very Low",
    "low": "Low",
    "target": "Target",
    "normal": "Normal",
    "high": "High",
    "very_high": "Very High",
}


@dataclass(frozen=True)
class RangeBand:
    """One threshold band; max of the top band is a display ceiling."""
    min: float
    max: float

    def to_dict(self) -> Dict[str, Optional[float]]:
        return {'min': self.min, 'max': None if math.isinf(self.max) else self.max}


@dataclass(frozen=True)
class RangeThresholds:
    """Five contiguous bands for one biomarker."""
    biomarker_type: str
    middle_band: str
    very_low: RangeBand
    low: RangeBand
    middle: RangeBand
    high: RangeBand
    very_high: RangeBand

    def band_keys(self) -> Tuple[str, ...]:
        """Band keys lowest first, using this set's middle band name."""
        return ("very_low", "low", self.middle_band, "high", "very_high")

    def bands(self) -> List[Tuple[str, RangeBand]]:
        """(key, band) pairs ordered lowest first."""
        return list(zip(
            self.band_keys(),
            (self.very_low, self.low, self.middle, self.high, self.very_high),
        ))

    def to_dict(self) -> Dict[str, Dict[str, Optional[float]]]:
        """Convert to the camelCase mapping used by the range store."""
        result = {}
        for (_, payload_key), (_, band) in zip(_BAND_LAYOUT, self.bands()):
            result[payload_key or self.middle_band] = band.to_dict()
        return result

    @classmethod
    def from_mapping(
        cls,
        biomarker_type: str,
        ranges: Any,
        middle_band: str
    ) -> 'RangeThresholds':
        """Validate a camelCase range mapping and build a threshold set.

        The middle band may be spelled 'target' or 'normal' regardless of
        biomarker; the biomarker's own name wins if both are present.

        Raises:
            InvalidThresholdConfig: If any band is missing or malformed, or
                the bands do not partition [0, inf) without gaps.
        """
        if not isinstance(ranges, Mapping) or not ranges:
            raise InvalidThresholdConfig("ranges must be a non-empty mapping")

        middle_key = middle_band
        if middle_key not in ranges:
            middle_key = next((k for k in MIDDLE_BAND_NAMES if k in ranges), None)
            if middle_key is None:
                raise InvalidThresholdConfig(f"missing band {middle_band!r}")

        bands = []
        for index, (_, payload_key) in enumerate(_BAND_LAYOUT):
            payload_key = payload_key or middle_key
            if payload_key not in ranges:
                raise InvalidThresholdConfig(f"missing band {payload_key!r}")
            is_top = index == len(_BAND_LAYOUT) - 1
            bands.append(_parse_band(payload_key, ranges[payload_key], is_top))

        if bands[0].min != 0:
            raise InvalidThresholdConfig(
                f"lowest band must start at 0, got {bands[0].min}"
            )
        for lower, upper in zip(bands, bands[1:]):
            if lower.max != upper.min:
                raise InvalidThresholdConfig(
                    f"bands are not contiguous: {lower.max} != {upper.min}"
                )

        return cls(biomarker_type, middle_band, *bands)


def _parse_band(name: str, band: Any, is_top: bool) -> RangeBand:
    if not isinstance(band, Mapping):
        raise InvalidThresholdConfig(f"band {name!r} must be a mapping")

    lower = _parse_bound(name, "min", band.get("min"), allow_open=False)
    upper = _parse_bound(name, "max", band.get("max"), allow_open=is_top)
    if lower > upper:
        raise InvalidThresholdConfig(f"band {name!r} has min > max")
    return RangeBand(lower, upper)


def _parse_bound(band: str, bound: str, value: Any, allow_open: bool) -> float:
    if value is None and allow_open:
        return math.inf
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidThresholdConfig(f"band {band!r} {bound} is not numeric")
    try:
        value = float(value)
    except OverflowError:
        raise InvalidThresholdConfig(f"band {band!r} {bound} is out of range") from None
    if math.isnan(value) or (math.isinf(value) and not allow_open):
        raise InvalidThresholdConfig(f"band {band!r} {bound} is not finite")
    return value


@dataclass(frozen=True)
class ThresholdSource:
    """Where the active thresholds came from."""
    kind: str
    conditions: Tuple[str, ...] = ()
    message: Optional[str] = None

    @property
    def is_default(self) -> bool:
        return self.kind == SOURCE_DEFAULT

    def describe(self) -> str:
        """Short human-readable provenance, as shown next to the bands."""
        if self.kind == SOURCE_CONDITION:
            return "Auto-detected: " + ", ".join(self.conditions)
        if self.kind == SOURCE_CUSTOM:
            return "Custom ranges"
        return "Default ranges"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.kind,
            'conditions': list(self.conditions),
            'message': self.message,
        }
