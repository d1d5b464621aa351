"""Tests for threshold resolution and its fallbacks."""

from __future__ import annotations

import logging
import math
from typing import Any

import pytest

from ambulatory_profile.analyzers.range_resolver import RangeResolver
from ambulatory_profile.config import AnalysisConfig
from ambulatory_profile.exceptions import ContractViolation, InvalidThresholdConfig
from ambulatory_profile.metrics.thresholds import (
    SOURCE_CONDITION,
    SOURCE_CUSTOM,
    SOURCE_DEFAULT,
    RangeThresholds,
)


def _multi_condition_config() -> AnalysisConfig:
    return AnalysisConfig.from_dict({
        "biomarkers": {
            "glucose": {
                "conditions": {
                    "older_adult": {
                        "ranges": {
                            "veryLow": {"min": 0, "max": 54},
                            "low": {"min": 54, "max": 70},
                            "target": {"min": 70, "max": 200},
                            "high": {"min": 200, "max": 250},
                            "veryHigh": {"min": 250, "max": 400},
                        },
                    },
                    "broken": {"ranges": {"veryLow": {"min": 0, "max": 54}}},
                },
                "condition_priority": ["broken", "pregnancy", "older_adult"],
            },
        },
    })


class TestResolve:
    def test_default_when_nothing_supplied(self) -> None:
        thresholds, source = RangeResolver().resolve("glucose")
        assert source.kind == SOURCE_DEFAULT
        assert source.conditions == ()
        assert (thresholds.middle.min, thresholds.middle.max) == (70, 180)
        assert thresholds.middle_band == "target"

    def test_cortisol_default_uses_normal_band(self) -> None:
        thresholds, source = RangeResolver().resolve("cortisol")
        assert source.kind == SOURCE_DEFAULT
        assert thresholds.middle_band == "normal"
        assert thresholds.band_keys() == ("very_low", "low", "normal", "high", "very_high")

    def test_custom_ranges_win(self, custom_glucose_ranges: dict[str, Any]) -> None:
        thresholds, source = RangeResolver().resolve(
            "glucose", custom_ranges=custom_glucose_ranges
        )
        assert source.kind == SOURCE_CUSTOM
        assert thresholds.middle.max == 140

    def test_custom_beats_detected_condition(self, custom_glucose_ranges: dict[str, Any]) -> None:
        _, source = RangeResolver().resolve(
            "glucose",
            custom_ranges=custom_glucose_ranges,
            detected_conditions=["pregnancy"],
        )
        assert source.kind == SOURCE_CUSTOM

    def test_detected_condition(self) -> None:
        thresholds, source = RangeResolver().resolve(
            "glucose", detected_conditions=["pregnancy"]
        )
        assert source.kind == SOURCE_CONDITION
        assert source.conditions == ("pregnancy",)
        assert (thresholds.middle.min, thresholds.middle.max) == (63, 140)

    def test_unconfigured_condition_falls_back_to_default(self) -> None:
        _, source = RangeResolver().resolve("glucose", detected_conditions=["unknown"])
        assert source.kind == SOURCE_DEFAULT

    def test_priority_order_not_detection_order(self) -> None:
        resolver = RangeResolver(_multi_condition_config())
        thresholds, source = resolver.resolve(
            "glucose", detected_conditions=["older_adult", "pregnancy"]
        )
        assert source.kind == SOURCE_CONDITION
        assert source.conditions == ("pregnancy", "older_adult")
        assert thresholds.middle.max == 140

    def test_invalid_condition_set_is_skipped(self) -> None:
        resolver = RangeResolver(_multi_condition_config())
        thresholds, source = resolver.resolve(
            "glucose", detected_conditions=["broken", "older_adult"]
        )
        assert source.conditions[0] == "older_adult"
        assert thresholds.middle.max == 200

    def test_malformed_custom_falls_through_to_condition(
        self, custom_glucose_ranges: dict[str, Any], caplog: pytest.LogCaptureFixture
    ) -> None:
        del custom_glucose_ranges["high"]
        with caplog.at_level(logging.WARNING):
            thresholds, source = RangeResolver().resolve(
                "glucose",
                custom_ranges=custom_glucose_ranges,
                detected_conditions=["pregnancy"],
            )
        assert source.kind == SOURCE_CONDITION
        assert thresholds.middle.min == 63
        assert "Rejected custom ranges" in caplog.text

    @pytest.mark.parametrize("mutate", [
        lambda r: r["low"].update(min="54"),            # non-numeric
        lambda r: r["target"].update(min=200),          # min > max
        lambda r: r["high"].update(min=150),            # gap
        lambda r: r["veryLow"].update(min=10),          # does not start at 0
        lambda r: r["low"].update(max=float("nan")),    # NaN
        lambda r: r["target"].update(max=True),         # bool is not a number
        lambda r: r.update(low=[54, 70]),               # band not a mapping
    ])
    def test_malformed_custom_is_rejected_whole(
        self, custom_glucose_ranges: dict[str, Any], mutate
    ) -> None:
        mutate(custom_glucose_ranges)
        thresholds, source = RangeResolver().resolve(
            "glucose", custom_ranges=custom_glucose_ranges
        )
        assert source.kind == SOURCE_DEFAULT
        assert thresholds.middle.max == 180

    def test_empty_custom_is_ignored(self) -> None:
        _, source = RangeResolver().resolve("glucose", custom_ranges={})
        assert source.kind == SOURCE_DEFAULT

    def test_message_is_carried(self) -> None:
        _, source = RangeResolver().resolve("glucose", message="No patient ranges")
        assert source.message == "No patient ranges"

    def test_unknown_biomarker(self) -> None:
        with pytest.raises(ContractViolation):
            RangeResolver().resolve("lactate")


class TestResolveFromConfigPayload:
    def test_use_default(self) -> None:
        _, source = RangeResolver().resolve_from_config_payload(
            "glucose", {"useDefault": True, "message": "Using default ranges"}
        )
        assert source.kind == SOURCE_DEFAULT
        assert source.message == "Using default ranges"

    def test_condition_ranges_from_store(self, custom_glucose_ranges: dict[str, Any]) -> None:
        thresholds, source = RangeResolver().resolve_from_config_payload("glucose", {
            "useDefault": False,
            "ranges": custom_glucose_ranges,
            "configsUsed": ["Type 2 Diabetes", "Older Adult"],
            "message": "Applied condition ranges",
        })
        assert source.kind == SOURCE_CONDITION
        assert source.conditions == ("Type 2 Diabetes", "Older Adult")
        assert source.describe() == "Auto-detected: Type 2 Diabetes, Older Adult"
        assert thresholds.middle.max == 140

    def test_ranges_without_configs_are_custom(self, custom_glucose_ranges: dict[str, Any]) -> None:
        _, source = RangeResolver().resolve_from_config_payload(
            "glucose", {"useDefault": False, "ranges": custom_glucose_ranges}
        )
        assert source.kind == SOURCE_CUSTOM

    def test_invalid_store_ranges_fall_back(self) -> None:
        _, source = RangeResolver().resolve_from_config_payload(
            "glucose", {"useDefault": False, "ranges": {"target": {"min": 70, "max": 180}}}
        )
        assert source.kind == SOURCE_DEFAULT

    def test_none_payload_means_default(self) -> None:
        _, source = RangeResolver().resolve_from_config_payload("cortisol", None)
        assert source.kind == SOURCE_DEFAULT


class TestRangeThresholds:
    def test_normal_alias_accepted_for_glucose(self, custom_glucose_ranges: dict[str, Any]) -> None:
        custom_glucose_ranges["normal"] = custom_glucose_ranges.pop("target")
        thresholds = RangeThresholds.from_mapping("glucose", custom_glucose_ranges, "target")
        assert thresholds.middle.max == 140
        assert "target" in thresholds.to_dict()

    def test_open_top_band(self, custom_glucose_ranges: dict[str, Any]) -> None:
        custom_glucose_ranges["veryHigh"]["max"] = None
        thresholds = RangeThresholds.from_mapping("glucose", custom_glucose_ranges, "target")
        assert math.isinf(thresholds.very_high.max)
        assert thresholds.to_dict()["veryHigh"] == {"min": 250, "max": None}

    def test_only_top_band_may_be_open(self, custom_glucose_ranges: dict[str, Any]) -> None:
        custom_glucose_ranges["high"]["max"] = None
        with pytest.raises(InvalidThresholdConfig):
            RangeThresholds.from_mapping("glucose", custom_glucose_ranges, "target")

    @pytest.mark.parametrize("band, bound, value", [
        ("veryLow", "min", 10),     # does not start at 0
        ("target", "min", 75),      # gap after low
        ("high", "min", 130),       # overlap with target
        ("low", "max", 50),         # min > max
        ("target", "max", "180"),   # not numeric
        ("low", "min", True),
        ("target", "max", float("nan")),
    ])
    def test_rejects_malformed_sets(
        self, custom_glucose_ranges: dict[str, Any], band: str, bound: str, value: Any
    ) -> None:
        custom_glucose_ranges[band][bound] = value
        with pytest.raises(InvalidThresholdConfig):
            RangeThresholds.from_mapping("glucose", custom_glucose_ranges, "target")

    @pytest.mark.parametrize("ranges", [None, {}, [1, 2], {"target": {"min": 70, "max": 180}}])
    def test_rejects_missing_bands(self, ranges: Any) -> None:
        with pytest.raises(InvalidThresholdConfig):
            RangeThresholds.from_mapping("glucose", ranges, "target")
