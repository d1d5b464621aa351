"""
Time-in-range classification dataclasses.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from ambulatory_profile.utils.statistics import format_minutes, format_threshold


@dataclass(frozen=True)
class BandResult:
    """Percentage and time per day spent in one band."""
    key: str
    label: str
    percentage: float
    minutes_per_day: float
    lower: float
    upper: float

    @property
    def display_label(self) -> str:
        """Label with bounds, e.g. 'Very Low <54', 'Low 54-70', 'Very High >250'."""
        if self.key == "very_low":
            return f"{self.label} <{format_threshold(self.upper)}"
        if self.key == "very_high" or math.isinf(self.upper):
            return f"{self.label} >{format_threshold(self.lower)}"
        return f"{self.label} {format_threshold(self.lower)}-{format_threshold(self.upper)}"

    @property
    def time_per_day(self) -> str:
        return format_minutes(self.minutes_per_day)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'key': self.key,
            'label': self.label,
            'displayLabel': self.display_label,
            'percentage': self.percentage,
            'minutesPerDay': self.minutes_per_day,
            'min': self.lower,
            'max': None if math.isinf(self.upper) else self.upper,
        }


@dataclass(frozen=True)
class ClassificationResult:
    """Five band results ordered from lowest to highest band.

    Percentages are derived from cumulative statistics and may not sum to
    exactly 100.
    """
    bands: Tuple[BandResult, ...]

    def __iter__(self):
        return iter(self.bands)

    def __len__(self) -> int:
        return len(self.bands)

    def __getitem__(self, key: str) -> BandResult:
        for band in self.bands:
            if band.key == key:
                return band
        raise KeyError(key)

    @property
    def percentages(self) -> List[float]:
        return [band.percentage for band in self.bands]

    @property
    def total_percentage(self) -> float:
        return sum(self.percentages)

    def percentage_of(self, keys: Tuple[str, ...]) -> float:
        """Summed percentage over several bands."""
        return sum(self[key].percentage for key in keys)

    def to_list(self) -> List[Dict[str, Any]]:
        return [band.to_dict() for band in self.bands]


@dataclass(frozen=True)
class TargetAssessment:
    """Result of checking one clinical target against the classified bands."""
    name: str
    comparison: str
    goal: float
    goal_high: Optional[float]
    actual: float
    met: Optional[bool]
    goal_minutes: float

    @property
    def goal_text(self) -> str:
        """Goal as shown in the targets table, e.g. 'Less than 4% (0h 58min)'."""
        time = format_minutes(self.goal_minutes)
        goal = format_threshold(self.goal)
        if self.comparison == "gt":
            return f"Greater than {goal}% ({time})"
        if self.comparison == "between":
            return f"{goal}-{format_threshold(self.goal_high)}% ({time})"
        return f"Less than {goal}% ({time})"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'comparison': self.comparison,
            'goal': self.goal,
            'goalHigh': self.goal_high,
            'actual': self.actual,
            'met': self.met,
            'goalMinutes': self.goal_minutes,
        }
