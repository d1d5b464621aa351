"""Utility functions for ambulatory profile analysis."""

from ambulatory_profile.utils.statistics import (
    UNAVAILABLE_DISPLAY,
    calculate_active_percentage,
    calculate_quantiles,
    clean_scalar,
    coerce_number,
    format_minutes,
    format_threshold,
    parse_instant,
    round_half_up,
)

__all__ = [
    "UNAVAILABLE_DISPLAY",
    "calculate_active_percentage",
    "calculate_quantiles",
    "clean_scalar",
    "coerce_number",
    "format_minutes",
    "format_threshold",
    "parse_instant",
    "round_half_up",
]
