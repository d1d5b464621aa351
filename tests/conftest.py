"""Shared test fixtures for ambulatory profile tests."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import pytest

# Allow running tests without `pip install -e .`
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

from ambulatory_profile.config import AnalysisConfig  # noqa: E402


def flat_track(value: float | None = None) -> list[Any]:
    return [value] * 24


def varied_track(base: float, step: float = 1.0) -> list[float]:
    """24 strictly increasing values, so no flat lines."""
    return [base + i * step for i in range(24)]


@pytest.fixture
def config() -> AnalysisConfig:
    return AnalysisConfig()


@pytest.fixture
def glucose_statistics() -> dict[str, Any]:
    return {
        "percentBelow54": 2,
        "percentBelow70": 6,
        "percentBetween70And180": 80,
        "percentAbove180": 20,
        "percentAbove250": 5,
        "average": 142.5,
        "standardDeviation": 41.2,
        "coefficientOfVariationPercentage": 28.9,
        "a1c": 6.6,
        "gmi": 6.7,
        "totalWearTimeMinutes": 2880,
    }


@pytest.fixture
def cortisol_statistics() -> dict[str, Any]:
    return {
        "percentBelow5": 1,
        "percentBelow10": 9,
        "percentBetween10And30": 70,
        "percentAbove30": 21,
        "percentAbove50": 4,
        "average": 18.4,
        "standardDeviation": 6.1,
        "coefficientOfVariationPercentage": 33.2,
        "totalWearTimeMinutes": 1440,
    }


@pytest.fixture
def glucose_payload(glucose_statistics: dict[str, Any]) -> dict[str, Any]:
    return {
        "startAt": "2024-01-01T00:00:00Z",
        "endAt": "2024-01-03T00:00:00Z",
        "statistics": glucose_statistics,
        "percentages": {
            "percentile_5": varied_track(60),
            "percentile_25": varied_track(90),
            "percentile_50": [50] * 7 + varied_track(120)[7:],
            "percentile_75": varied_track(160),
            "percentile_95": [15] + varied_track(220)[1:],
        },
    }


@pytest.fixture
def custom_glucose_ranges() -> dict[str, Any]:
    return {
        "veryLow": {"min": 0, "max": 54},
        "low": {"min": 54, "max": 70},
        "target": {"min": 70, "max": 140},
        "high": {"min": 140, "max": 250},
        "veryHigh": {"min": 250, "max": 400},
    }
