"""Build command wiring for Shelter CLI.

This module registers the generic and per-shelter build subcommands
and renders build summaries as ``key=value`` lines.
"""

from __future__ import annotations

import argparse
from typing import Any

from core.constants import SUPPORTED_OUTPUT_FORMATS
from core.run_spec import AUTO_DETECT_SACRAMENTO, SUPPORTED_SOURCE_SCHEMAS
from core.types import SourceSchema, SourceSpec
from store.shelter_sdk import BuildSummary, ShelterClient


def add_build_commands(subparsers: Any) -> None:
    """Register build, austin and sacramento subcommands."""
    build_parser = subparsers.add_parser(
        "build",
        help="Build Animal and Impound tables from cleaned extracts",
    )
    build_parser.add_argument(
        "--source",
        dest="sources",
        action="append",
        required=True,
        type=parse_source_argument,
        metavar="SCHEMA=PATH",
        help=f"Cleaned extract, schema one of: {', '.join(SUPPORTED_SOURCE_SCHEMAS)}",
    )
    _add_output_arguments(build_parser)

    austin_parser = subparsers.add_parser(
        "austin",
        help="Build from Austin intake and outcome extracts",
    )
    austin_parser.add_argument("intake_file", help="Cleaned Austin intake CSV")
    austin_parser.add_argument("outcome_file", help="Cleaned Austin outcome CSV")
    _add_output_arguments(austin_parser)

    sacramento_parser = subparsers.add_parser(
        "sacramento",
        help="Build from a Sacramento open-data or CPRA extract",
    )
    sacramento_parser.add_argument("impounds_file", help="Cleaned Sacramento impounds CSV")
    _add_output_arguments(sacramento_parser)


def parse_source_argument(raw_value: str) -> SourceSpec:
    """Parse one ``SCHEMA=PATH`` source argument.

    Args:
        raw_value: Raw CLI value.

    Returns:
        Parsed source request.

    Raises:
        argparse.ArgumentTypeError: If the value is malformed.
    """
    schema_name, separator, path = raw_value.partition("=")
    schema_name = schema_name.strip()
    path = path.strip()
    if not separator or not schema_name or not path:
        raise argparse.ArgumentTypeError(
            f"Invalid source '{raw_value}'. Use SCHEMA=PATH, e.g. austin_intake=intake.csv."
        )
    if schema_name not in SUPPORTED_SOURCE_SCHEMAS:
        raise argparse.ArgumentTypeError(
            f"Unsupported schema '{schema_name}'. "
            f"Use one of: {', '.join(SUPPORTED_SOURCE_SCHEMAS)}."
        )
    schema = None if schema_name == AUTO_DETECT_SACRAMENTO else SourceSchema(schema_name)
    return SourceSpec(schema=schema, path=path)


def run_build_command(client: ShelterClient, args: argparse.Namespace) -> int:
    """Handle build command invocation."""
    summary = client.build(
        args.sources,
        output_dir=args.output_dir,
        output_format=args.format,
    )
    print_build_summary(summary, args.show_warnings)
    return 0


def run_austin_command(client: ShelterClient, args: argparse.Namespace) -> int:
    """Handle austin command invocation."""
    summary = client.build_austin(
        args.intake_file,
        args.outcome_file,
        output_dir=args.output_dir,
        output_format=args.format,
    )
    print_build_summary(summary, args.show_warnings)
    return 0


def run_sacramento_command(client: ShelterClient, args: argparse.Namespace) -> int:
    """Handle sacramento command invocation."""
    summary = client.build_sacramento(
        args.impounds_file,
        output_dir=args.output_dir,
        output_format=args.format,
    )
    print_build_summary(summary, args.show_warnings)
    return 0


def print_build_summary(summary: BuildSummary, show_warnings: bool = False) -> None:
    """Print build summary lines, then optionally every warning."""
    for line in summary.summary_lines():
        print(line)
    if not show_warnings:
        return
    for warning in summary.result.warnings:
        print(
            f"warning\tanimal_id={warning.animal_id}\tcode={warning.code}\t"
            f"discarded={warning.discarded_count}\t{warning.message}"
        )


def _add_output_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--output-dir", help="Output directory, defaults under the output root")
    parser.add_argument(
        "--format",
        choices=SUPPORTED_OUTPUT_FORMATS,
        help="Table file format, defaults to SHELTER_OUTPUT_FORMAT",
    )
    parser.add_argument(
        "--show-warnings",
        action="store_true",
        help="Print every reconciliation warning after the summary",
    )
