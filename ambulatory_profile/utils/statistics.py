"""
Statistical utilities for ambulatory profile analysis.

Provides the scalar validation, percentile and wear-time coverage
calculations shared across analyzers.
"""

import math
import numbers
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

import numpy as np
import pandas as pd

from ambulatory_profile.config import MINUTES_PER_DAY

UNAVAILABLE_DISPLAY = "N/A"


def clean_scalar(value: Any) -> Optional[float]:
    """Return value as a float if it is a finite, non-negative number.

    Externally computed metrics (average, SD, CV, A1C, GMI) can arrive as
    NaN, negative sentinels or strings; all of those map to None.

    Args:
        value: Raw value from a statistics payload.

    Returns:
        The value as float, or None when it is unusable.
    """
    if value is None or isinstance(value, bool):
        return None
    if not isinstance(value, (str, numbers.Real)):
        return None
    try:
        value = float(value)
    except (ValueError, OverflowError):
        # Non-numeric strings, or integers too large for a float
        return None

    if not math.isfinite(value) or value < 0:
        return None
    return value


def coerce_number(value: Any) -> float:
    """Convert a raw track entry to float, using NaN for anything non-numeric or infinite."""
    if value is None or isinstance(value, bool):
        return np.nan
    if not isinstance(value, (str, numbers.Real)):
        return np.nan
    try:
        value = float(value)
    except (ValueError, OverflowError):
        return np.nan
    return value if math.isfinite(value) else np.nan


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up (50.5 -> 51)."""
    return int(math.floor(value + 0.5))


def format_threshold(value: float) -> str:
    """Format a threshold the way statistics keys spell it.

    54.0 -> '54', 0.5 -> '0.5'.
    """
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def format_minutes(minutes: Any) -> str:
    """Convert minutes to a human-readable 'Xh Ymin' string.

    Missing, invalid or negative input gives '0h 0min'.
    """
    minutes = clean_scalar(minutes)
    if not minutes:
        return "0h 0min"
    hours = int(minutes // 60)
    mins = round_half_up(minutes % 60)
    if mins == 60:
        hours, mins = hours + 1, 0
    return f"{hours}h {mins}min"


def parse_instant(value: Any) -> Optional[pd.Timestamp]:
    """Parse a payload timestamp into a UTC pandas Timestamp.

    Accepts datetimes, ISO-8601 strings and epoch milliseconds. Returns None
    for missing or unparseable input.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        if isinstance(value, numbers.Real):
            ts = pd.to_datetime(value, unit='ms', utc=True)
        elif isinstance(value, (str, datetime, pd.Timestamp)):
            ts = pd.to_datetime(value, utc=True, errors='coerce')
        else:
            return None
    except (ValueError, OverflowError):
        return None
    if ts is None or pd.isna(ts):
        return None
    return ts


def calculate_active_percentage(
    start_at: Any,
    end_at: Any,
    total_wear_time_minutes: Any
) -> Optional[int]:
    """Calculate sensor wear-time coverage over the report period.

    The period is rounded up to whole days:

        active % = wear minutes / (ceil(days) × 1440) × 100

    Args:
        start_at: Start of the report period.
        end_at: End of the report period.
        total_wear_time_minutes: Minutes the sensor was reporting.

    Returns:
        Coverage percentage rounded to an integer, or None when the period
        is missing, empty or reversed.
    """
    start = parse_instant(start_at)
    end = parse_instant(end_at)
    if start is None or end is None or end <= start:
        return None

    total_days = math.ceil((end - start) / pd.Timedelta(days=1))
    total_possible_minutes = total_days * MINUTES_PER_DAY
    if total_possible_minutes <= 0:
        return None

    wear = clean_scalar(total_wear_time_minutes) or 0.0
    return round_half_up((wear / total_possible_minutes) * 100)


def calculate_quantiles(
    values: Union[np.ndarray, pd.Series, List[float]],
    quantiles: List[float] = [0.05, 0.25, 0.50, 0.75, 0.95]
) -> Dict[str, Optional[float]]:
    """Calculate multiple quantiles for a dataset.

    Args:
        values: Array of values.
        quantiles: List of quantiles to calculate (0-1).

    Returns:
        Dictionary mapping quantile names (e.g., 'p5', 'p50') to values.
    """
    values = np.asarray(values, dtype=float)
    values = values[~np.isnan(values)]

    if len(values) == 0:
        return {f"p{round(q * 100)}": None for q in quantiles}

    return {
        f"p{round(q * 100)}": float(np.percentile(values, q * 100))
        for q in quantiles
    }
