"""Run-spec CLI command wiring.

This module registers the run-spec subcommand and delegates execution to the
same SDK build path used by the other build commands.
"""

from __future__ import annotations

import argparse
from typing import Any

from cli.build_command import print_build_summary
from store.shelter_sdk import ShelterClient


def add_run_spec_command(subparsers: Any) -> None:
    """Register run-spec subcommand."""
    parser = subparsers.add_parser(
        "run-spec",
        help="Run a declarative YAML build spec",
    )
    parser.add_argument("spec_file", help="Path to YAML build-spec file")
    parser.add_argument(
        "--show-warnings",
        action="store_true",
        help="Print every reconciliation warning after the summary",
    )


def run_run_spec_command(client: ShelterClient, args: argparse.Namespace) -> int:
    """Handle run-spec command invocation."""
    summary = client.run_spec(args.spec_file)
    print_build_summary(summary, args.show_warnings)
    return 0
