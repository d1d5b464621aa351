"""Tests for time-in-range band classification."""

from __future__ import annotations

from typing import Any

import pytest

from ambulatory_profile.analyzers.range_classifier import RangeClassifier
from ambulatory_profile.analyzers.range_resolver import RangeResolver
from ambulatory_profile.metrics.profile_data import PatientStatistics


@pytest.fixture
def classifier() -> RangeClassifier:
    return RangeClassifier()


def _thresholds(biomarker: str, **kwargs: Any):
    thresholds, _ = RangeResolver().resolve(biomarker, **kwargs)
    return thresholds


class TestGlucoseBands:
    def test_documented_overcount_is_preserved(
        self, classifier: RangeClassifier, glucose_statistics: dict[str, Any]
    ) -> None:
        result = classifier.classify(
            PatientStatistics(glucose_statistics), _thresholds("glucose")
        )
        assert result.percentages == [2, 4, 80, 15, 5]
        assert result.total_percentage == 106

    def test_labels_and_order(
        self, classifier: RangeClassifier, glucose_statistics: dict[str, Any]
    ) -> None:
        result = classifier.classify(
            PatientStatistics(glucose_statistics), _thresholds("glucose")
        )
        assert [b.label for b in result] == ["Very Low", "Low", "Target", "High", "Very High"]
        assert [b.display_label for b in result] == [
            "Very Low <54", "Low 54-70", "Target 70-180", "High 180-250", "Very High >250",
        ]

    def test_subtraction_is_clamped(self, classifier: RangeClassifier) -> None:
        stats = PatientStatistics({
            "percentBelow54": 8,
            "percentBelow70": 5,
            "percentBetween70And180": 70,
            "percentAbove180": 3,
            "percentAbove250": 6,
        })
        result = classifier.classify(stats, _thresholds("glucose"))
        assert result["low"].percentage == 0
        assert result["high"].percentage == 0
        assert all(b.percentage >= 0 for b in result)

    def test_negative_or_garbage_inputs_never_go_negative(self, classifier: RangeClassifier) -> None:
        stats = PatientStatistics({
            "percentBelow54": -3,
            "percentBelow70": "abc",
            "percentBetween70And180": float("nan"),
            "percentAbove180": None,
            "percentAbove250": -1,
        })
        result = classifier.classify(stats, _thresholds("glucose"))
        assert result.percentages == [0, 0, 0, 0, 0]

    def test_empty_statistics(self, classifier: RangeClassifier) -> None:
        result = classifier.classify(PatientStatistics(), _thresholds("glucose"))
        assert result.percentages == [0, 0, 0, 0, 0]
        assert [b.minutes_per_day for b in result] == [0, 0, 0, 0, 0]

    def test_custom_thresholds_read_matching_keys(
        self, classifier: RangeClassifier, custom_glucose_ranges: dict[str, Any]
    ) -> None:
        stats = PatientStatistics({
            "percentBelow54": 1,
            "percentBelow70": 3,
            "percentBetween70And140": 60,
            "percentAbove140": 36,
            "percentAbove250": 4,
        })
        result = classifier.classify(
            stats, _thresholds("glucose", custom_ranges=custom_glucose_ranges)
        )
        assert result.percentages == [1, 2, 60, 32, 4]

    def test_custom_thresholds_missing_keys_read_zero(
        self,
        classifier: RangeClassifier,
        glucose_statistics: dict[str, Any],
        custom_glucose_ranges: dict[str, Any],
    ) -> None:
        # Statistics computed against 70-180 while thresholds say 70-140
        result = classifier.classify(
            PatientStatistics(glucose_statistics),
            _thresholds("glucose", custom_ranges=custom_glucose_ranges),
        )
        assert result["target"].percentage == 0
        assert result["very_low"].percentage == 2
        assert result["very_high"].percentage == 5


class TestCortisolBands:
    def test_default_cortisol(
        self, classifier: RangeClassifier, cortisol_statistics: dict[str, Any]
    ) -> None:
        result = classifier.classify(
            PatientStatistics(cortisol_statistics), _thresholds("cortisol")
        )
        assert result.percentages == [1, 8, 70, 17, 4]
        assert result["normal"].label == "Normal"

    def test_fractional_threshold_keys(self, classifier: RangeClassifier) -> None:
        custom = {
            "veryLow": {"min": 0, "max": 2.5},
            "low": {"min": 2.5, "max": 5},
            "normal": {"min": 5, "max": 15},
            "high": {"min": 15, "max": 20},
            "veryHigh": {"min": 20, "max": None},
        }
        stats = PatientStatistics({
            "percentBelow2.5": 3,
            "percentBelow5": 10,
            "percentBetween5And15": 75,
            "percentAbove15": 15,
            "percentAbove20": 5,
        })
        result = classifier.classify(stats, _thresholds("cortisol", custom_ranges=custom))
        assert result.percentages == [3, 7, 75, 10, 5]
        assert result["very_high"].display_label == "Very High >20"


class TestMinutesPerDay:
    def test_explicit_minutes_are_authoritative(
        self, classifier: RangeClassifier, glucose_statistics: dict[str, Any]
    ) -> None:
        glucose_statistics.update({
            "timeVeryLowMinutes": 30,
            "timeTargetMinutes": 1100,
        })
        result = classifier.classify(
            PatientStatistics(glucose_statistics), _thresholds("glucose")
        )
        assert result["very_low"].minutes_per_day == 30
        assert result["target"].minutes_per_day == 1100
        # Fallback for bands without explicit minutes
        assert result["low"].minutes_per_day == pytest.approx(4 * 1440 / 100)
        assert result["high"].minutes_per_day == pytest.approx(216)

    def test_cortisol_uses_normal_minutes(
        self, classifier: RangeClassifier, cortisol_statistics: dict[str, Any]
    ) -> None:
        cortisol_statistics["timeNormalMinutes"] = 900
        cortisol_statistics["timeTargetMinutes"] = 1
        result = classifier.classify(
            PatientStatistics(cortisol_statistics), _thresholds("cortisol")
        )
        assert result["normal"].minutes_per_day == 900

    def test_time_per_day_text(
        self, classifier: RangeClassifier, glucose_statistics: dict[str, Any]
    ) -> None:
        result = classifier.classify(
            PatientStatistics(glucose_statistics), _thresholds("glucose")
        )
        # 80% of a day
        assert result["target"].time_per_day == "19h 12min"


class TestTargets:
    def test_glucose_targets(
        self, classifier: RangeClassifier, glucose_statistics: dict[str, Any]
    ) -> None:
        bands = classifier.classify(
            PatientStatistics(glucose_statistics), _thresholds("glucose")
        )
        targets = {t.name: t for t in classifier.assess_targets(bands, "glucose", 2880)}

        assert targets["Time in Target"].met is True
        assert targets["Time in Target"].actual == 80
        assert targets["Time Below Target"].actual == 6
        assert targets["Time Below Target"].met is False
        assert targets["Time Very Low"].met is False
        assert targets["Time Above Target"].actual == 20
        assert targets["Time Above Target"].met is True
        assert targets["Time Very High"].met is False
        assert targets["Time Below Target"].goal_minutes == pytest.approx(115.2)
        assert targets["Time Below Target"].goal_text == "Less than 4% (1h 55min)"

    def test_cortisol_between_target(
        self, classifier: RangeClassifier, cortisol_statistics: dict[str, Any]
    ) -> None:
        bands = classifier.classify(
            PatientStatistics(cortisol_statistics), _thresholds("cortisol")
        )
        targets = {t.name: t for t in classifier.assess_targets(bands, "cortisol", 1440)}
        normal = targets["Time in Normal"]
        assert normal.comparison == "between"
        assert normal.met is True
        assert normal.goal_text == "60-80% (14h 24min)"

    @pytest.mark.parametrize("biomarker", ["glucose", "cortisol"])
    def test_no_data_judges_no_target(self, classifier: RangeClassifier, biomarker: str) -> None:
        bands = classifier.classify(PatientStatistics({}), _thresholds(biomarker))
        targets = classifier.assess_targets(bands, biomarker, 0)

        assert len(targets) == 5
        assert all(t.met is None for t in targets)
        assert all(t.actual == 0 for t in targets)
        assert targets[0].to_dict()["met"] is None
