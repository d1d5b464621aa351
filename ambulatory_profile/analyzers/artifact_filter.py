"""
Artifact Filter - Cleans hourly percentile tracks.

Two rules, applied per track independently:
1. Plausibility floor: values below the biomarker's physiological minimum
   (glucose 20 mg/dL, cortisol 0.5 ng/mL) are nulled.
2. Flat lines: a run of 6 or more identical consecutive values is treated
   as a sensor stall or carried-forward placeholder. The first and last
   points of the run are kept as anchors and the interior is nulled.

Gaps are never interpolated; None always means "no data".
"""

import logging
from typing import Any, List, Optional, Sequence

import numpy as np

from ambulatory_profile.config import AnalysisConfig, get_default_config
from ambulatory_profile.exceptions import ContractViolation
from ambulatory_profile.metrics.profile_data import PercentileCurve, validate_track
from ambulatory_profile.utils.statistics import coerce_number

logger = logging.getLogger(__name__)


class ArtifactFilter:
    """Null out implausible and flat-line points in percentile tracks."""

    def __init__(
        self,
        biomarker_type: str,
        config: Optional[AnalysisConfig] = None
    ):
        """Initialize artifact filter.

        Args:
            biomarker_type: 'glucose' or 'cortisol'.
            config: Optional configuration. Uses defaults if None.
        """
        self.config = config or get_default_config()
        self.profile = self.config.biomarker(biomarker_type)
        self.floor = self.profile.plausibility_floor
        self.min_run = self.config.artifacts.min_flat_run
        self.track_length = self.config.artifacts.track_length

    def clean_track(self, track: Sequence[Any]) -> List[Optional[float]]:
        """Clean one 24-value track.

        Args:
            track: Hourly values; None or non-numeric entries mean no data.

        Returns:
            New list of the same length with artifacts replaced by None.

        Raises:
            ContractViolation: If track is not a sequence of track_length values.
        """
        if track is None:
            raise ContractViolation("track must be a sequence, got NoneType")
        track = validate_track("track", track, self.track_length)

        values = np.array([coerce_number(v) for v in track], dtype=float)

        # NaN compares False, so missing points are left alone here
        with np.errstate(invalid='ignore'):
            values[values < self.floor] = np.nan

        self._null_flat_runs(values)

        return [None if np.isnan(v) else float(v) for v in values]

    def _null_flat_runs(self, values: np.ndarray) -> None:
        n = len(values)
        i = 0
        while i < n:
            if np.isnan(values[i]):
                i += 1
                continue

            j = i + 1
            while j < n and values[j] == values[i]:
                j += 1

            run_length = j - i
            if run_length >= self.min_run:
                logger.debug(
                    "Flat line of %d identical values (%s) from hour %d to %d",
                    run_length, values[i], i, j - 1,
                )
                values[i + 1:j - 1] = np.nan
            i = j

    def clean_curve(self, curve: PercentileCurve) -> PercentileCurve:
        """Clean all five tracks of a percentile curve."""
        return PercentileCurve(**{
            name: self.clean_track(track) for name, track in curve.tracks().items()
        })
