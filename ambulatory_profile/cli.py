"""
Command-line interface for ambulatory profile analysis.

Usage:
    ambulatory-profile payload.json --biomarker glucose
    ambulatory-profile payload.json --ranges ranges.json --output json
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

import yaml

from ambulatory_profile.analyzers.profile import ProfileAnalyzer
from ambulatory_profile.config import BIOMARKER_TYPES, load_config
from ambulatory_profile.exceptions import ContractViolation
from ambulatory_profile.loaders.payload import load_json
from ambulatory_profile.metrics.analytics_result import AnalyticsResult

logger = logging.getLogger(__name__)


def format_text(result: AnalyticsResult) -> str:
    """Plain-text summary of a result."""
    lines = []
    lines.append("=" * 60)
    title = "GLUCOSE" if result.biomarker_type == "glucose" else "CORTISOL"
    lines.append(f"AMBULATORY {title} PROFILE")
    lines.append("=" * 60)
    lines.append(f"Ranges: {result.threshold_source.describe()}")
    if result.threshold_source.message:
        lines.append(f"  {result.threshold_source.message}")
    lines.append("")

    for metric, value in result.summary_rows():
        lines.append(f"  {metric}: {value}")
    lines.append("")

    lines.append("Time in Ranges:")
    for band in reversed(result.range_bands.bands):
        lines.append(
            f"  {band.display_label} {result.unit}: "
            f"{band.percentage:g}% ({band.time_per_day})"
        )
    lines.append(f"  Total: {result.range_bands.total_percentage:g}%")
    lines.append("")

    lines.append("Targets:")
    for target in result.targets:
        if target.met is None:
            status = "no data"
        else:
            status = "met" if target.met else "not met"
        lines.append(f"  {target.name}: {target.actual:g}%, goal {target.goal_text} [{status}]")

    return "\n".join(lines)


def main(argv: Optional[List[str]] = None) -> int:
    """Command-line interface for ambulatory profile analysis."""
    parser = argparse.ArgumentParser(
        description='Build an ambulatory glucose/cortisol profile from a statistics payload'
    )
    parser.add_argument(
        'payload',
        type=str,
        help='Path to PatientBiomarkerPayload JSON'
    )
    parser.add_argument(
        '--biomarker', '-b',
        choices=list(BIOMARKER_TYPES),
        default='glucose',
        help='Biomarker type (default: glucose)'
    )
    parser.add_argument(
        '--ranges', '-r',
        type=str,
        help='Path to RangeConfigPayload JSON from the range store'
    )
    parser.add_argument(
        '--condition', '-c',
        action='append',
        default=[],
        help='Detected clinical condition (repeatable)'
    )
    parser.add_argument(
        '--config',
        type=str,
        help='Path to YAML threshold configuration'
    )
    parser.add_argument(
        '--output', '-o',
        type=str,
        choices=['text', 'json'],
        default='text',
        help='Output format (default: text)'
    )
    parser.add_argument(
        '--save', '-s',
        type=str,
        help='Save output to file'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable debug logging'
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    try:
        config = load_config(Path(args.config)) if args.config else None
        analyzer = ProfileAnalyzer(config)
        payload = load_json(args.payload)
        range_config = load_json(args.ranges) if args.ranges else None
        result = analyzer.analyze(
            payload,
            args.biomarker,
            detected_conditions=args.condition,
            range_config=range_config,
        )
    except (OSError, json.JSONDecodeError, yaml.YAMLError, ContractViolation) as exc:
        logger.error("Could not build profile: %s", exc)
        return 1

    if args.output == 'json':
        output_str = json.dumps(result.to_dict(), indent=2)
    else:
        output_str = format_text(result)

    if args.save:
        with open(args.save, 'w') as f:
            f.write(output_str)
        logger.info("Output saved to %s", args.save)
    else:
        print(output_str)
    return 0


if __name__ == '__main__':
    sys.exit(main())
