"""
Input dataclasses: readings, hourly percentile curves and patient statistics.
"""

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from ambulatory_profile.config import HOURS_PER_DAY
from ambulatory_profile.exceptions import ContractViolation
from ambulatory_profile.utils.statistics import (
    calculate_quantiles,
    clean_scalar,
    format_threshold,
)

TRACK_NAMES = ("p5", "p25", "p50", "p75", "p95")
TRACK_PAYLOAD_KEYS = {
    "p5": "percentile_5",
    "p25": "percentile_25",
    "p50": "percentile_50",
    "p75": "percentile_75",
    "p95": "percentile_95",
}
TRACK_QUANTILES = (0.05, 0.25, 0.50, 0.75, 0.95)

# Band key -> wear-time minutes field in the statistics payload
MINUTES_FIELDS = {
    "very_low": "timeVeryLowMinutes",
    "low": "timeLowMinutes",
    "target": "timeTargetMinutes",
    "normal": "timeNormalMinutes",
    "high": "timeHighMinutes",
    "very_high": "timeVeryHighMinutes",
}


@dataclass(frozen=True)
class Reading:
    """A single raw sensor measurement."""
    timestamp: datetime
    value: float
    sensor_id: Optional[str] = None


Track = Tuple[Optional[float], ...]


def validate_track(name: str, values: Any, length: int) -> Tuple[Any, ...]:
    """Check that values is one hourly track and return it as a tuple.

    Lists, tuples, 1-D numpy arrays and pandas Series are accepted.

    Raises:
        ContractViolation: If values is not a flat sequence of length values.
    """
    if isinstance(values, (np.ndarray, pd.Series)):
        if values.ndim != 1:
            raise ContractViolation(f"track {name!r} must be one-dimensional")
        values = values.tolist()
    if isinstance(values, (str, bytes, Mapping)) or not isinstance(values, Sequence):
        raise ContractViolation(f"track {name!r} must be a sequence, got {type(values).__name__}")
    if len(values) != length:
        raise ContractViolation(
            f"track {name!r} must have {length} hourly values, got {len(values)}"
        )
    return tuple(values)


@dataclass(frozen=True)
class PercentileCurve:
    """Five hourly percentile tracks (hour 0-23); None means no reliable value."""
    p5: Track
    p25: Track
    p50: Track
    p75: Track
    p95: Track

    def __post_init__(self):
        for name in TRACK_NAMES:
            object.__setattr__(
                self, name, self._track_or_empty(name, getattr(self, name))
            )

    @staticmethod
    def _track_or_empty(name: str, values: Any) -> Track:
        if values is None:
            return (None,) * HOURS_PER_DAY
        return validate_track(name, values, HOURS_PER_DAY)

    @classmethod
    def empty(cls) -> 'PercentileCurve':
        return cls(*([None] * HOURS_PER_DAY for _ in TRACK_NAMES))

    @classmethod
    def from_payload(cls, percentages: Optional[Mapping[str, Any]]) -> 'PercentileCurve':
        """Build a curve from the 'percentages' block of a biomarker payload.

        Missing tracks become all-None; tracks of the wrong length raise.
        """
        if percentages is None:
            return cls.empty()
        if not isinstance(percentages, Mapping):
            raise ContractViolation("percentages must be a mapping of tracks")
        return cls(**{
            name: percentages.get(TRACK_PAYLOAD_KEYS[name], percentages.get(name))
            for name in TRACK_NAMES
        })

    @classmethod
    def from_readings(cls, readings: Iterable[Reading]) -> 'PercentileCurve':
        """Aggregate raw readings into hour-of-day percentiles.

        Hours without readings get None in every track.
        """
        df = pd.DataFrame(
            [(r.timestamp, r.value) for r in readings],
            columns=['timestamp', 'value'],
        )
        tracks: Dict[str, List[Optional[float]]] = {
            name: [None] * HOURS_PER_DAY for name in TRACK_NAMES
        }
        if df.empty:
            return cls(**tracks)

        df['timestamp'] = pd.to_datetime(df['timestamp'])
        df['hour'] = df['timestamp'].dt.hour
        df['value'] = pd.to_numeric(df['value'], errors='coerce')

        for hour, group in df.groupby('hour'):
            quantiles = calculate_quantiles(group['value'], list(TRACK_QUANTILES))
            for name in TRACK_NAMES:
                tracks[name][int(hour)] = quantiles[name]
        return cls(**tracks)

    def tracks(self) -> Dict[str, Track]:
        return {name: getattr(self, name) for name in TRACK_NAMES}

    def to_dict(self) -> Dict[str, List[Optional[float]]]:
        return {name: list(values) for name, values in self.tracks().items()}

    def to_frame(self) -> pd.DataFrame:
        """Hour-indexed DataFrame with one column per percentile track."""
        df = pd.DataFrame(self.to_dict(), index=pd.RangeIndex(HOURS_PER_DAY, name='hour'))
        return df.astype(float)


@dataclass(frozen=True)
class PatientStatistics:
    """Cumulative range percentages, scalar metrics and wear-time fields.

    Keys follow the statistics service: percentBelow54,
    percentBetween70And180, percentAbove250, totalWearTimeMinutes, ...
    Missing percentages read as 0.
    """
    values: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not isinstance(self.values, Mapping):
            raise ContractViolation("statistics must be a mapping")
        object.__setattr__(self, 'values', MappingProxyType(dict(self.values)))

    @classmethod
    def from_payload(cls, statistics: Optional[Mapping[str, Any]]) -> 'PatientStatistics':
        # The comparison endpoint nests the block one level deeper
        if isinstance(statistics, Mapping) and isinstance(statistics.get('statistics'), Mapping):
            statistics = statistics['statistics']
        return cls(statistics or {})

    @property
    def is_empty(self) -> bool:
        return len(self.values) == 0

    def _percent(self, key: str) -> float:
        return clean_scalar(self.values.get(key)) or 0.0

    def percent_below(self, threshold: float) -> float:
        return self._percent(f"percentBelow{format_threshold(threshold)}")

    def percent_above(self, threshold: float) -> float:
        return self._percent(f"percentAbove{format_threshold(threshold)}")

    def percent_between(self, lower: float, upper: float) -> float:
        return self._percent(
            f"percentBetween{format_threshold(lower)}And{format_threshold(upper)}"
        )

    def band_minutes(self, band_key: str) -> Optional[float]:
        """Wear-time weighted minutes for a band, None when not reported."""
        return clean_scalar(self.values.get(MINUTES_FIELDS[band_key]))

    def scalar(self, name: str) -> Optional[float]:
        return clean_scalar(self.values.get(name))

    @property
    def total_wear_time_minutes(self) -> float:
        return self.scalar('totalWearTimeMinutes') or 0.0
