"""
Payload loaders.

Parses the JSON payloads delivered by the data-access collaborator into
typed inputs. Only structural problems raise; missing data does not.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from ambulatory_profile.exceptions import ContractViolation
from ambulatory_profile.metrics.profile_data import PatientStatistics, PercentileCurve


@dataclass(frozen=True)
class BiomarkerPayload:
    """PatientBiomarkerPayload: period, statistics and percentile tracks.

    start_at/end_at are kept raw; the MetricsCalculator parses them so that
    an unparseable date only marks coverage as unavailable.
    """
    start_at: Any
    end_at: Any
    statistics: PatientStatistics
    percentiles: PercentileCurve

    @classmethod
    def from_dict(cls, data: Any) -> 'BiomarkerPayload':
        """Parse a payload mapping.

        Accepts 'percentiles' as an alias for 'percentages' and a nested
        statistics.statistics block.

        Raises:
            ContractViolation: If data or its blocks have the wrong type,
                or a percentile track is not 24 values long.
        """
        if data is None:
            data = {}
        if not isinstance(data, Mapping):
            raise ContractViolation(
                f"biomarker payload must be a mapping, got {type(data).__name__}"
            )

        statistics = data.get('statistics')
        if statistics is not None and not isinstance(statistics, Mapping):
            raise ContractViolation("statistics must be a mapping")

        percentages = data.get('percentages')
        if percentages is None:
            percentages = data.get('percentiles')

        return cls(
            start_at=data.get('startAt'),
            end_at=data.get('endAt'),
            statistics=PatientStatistics.from_payload(statistics),
            percentiles=PercentileCurve.from_payload(percentages),
        )


@dataclass(frozen=True)
class RangeConfigPayload:
    """RangeConfigPayload from the range configuration store."""
    use_default: bool = True
    ranges: Optional[Mapping[str, Any]] = None
    configs_used: Tuple[str, ...] = ()
    message: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> 'RangeConfigPayload':
        """Parse a range config mapping; None means 'use the default'."""
        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            raise ContractViolation(
                f"range config payload must be a mapping, got {type(data).__name__}"
            )
        configs_used = data.get('configsUsed') or ()
        if isinstance(configs_used, str):
            configs_used = (configs_used,)
        elif not isinstance(configs_used, (list, tuple)):
            raise ContractViolation("configsUsed must be a list of condition names")
        use_default = data.get('useDefault')
        if use_default is None:
            use_default = True
        elif not isinstance(use_default, bool):
            raise ContractViolation(
                f"useDefault must be a boolean, got {type(use_default).__name__}"
            )
        message = data.get('message')
        return cls(
            use_default=use_default,
            ranges=data.get('ranges'),
            configs_used=tuple(str(c) for c in configs_used),
            message=str(message) if message is not None else None,
        )


def load_json(path: Union[str, Path]) -> Dict[str, Any]:
    """Read a JSON payload file."""
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)
