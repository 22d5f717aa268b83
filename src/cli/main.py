"""Shelter CLI entry points.
This module exposes build commands for cleaned shelter extracts.
It maps argparse commands onto SDK calls.
"""

from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path
from typing import Sequence

from cli.build_command import (
    add_build_commands,
    run_austin_command,
    run_build_command,
    run_sacramento_command,
)
from cli.run_spec_command import add_run_spec_command, run_run_spec_command
from core.config import ShelterConfig
from store.shelter_sdk import ShelterClient


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(
        prog="shelter",
        description="Reconcile shelter intakes and outcomes into normalized tables",
    )
    parser.add_argument("--output-root", help="Override SHELTER_OUTPUT_ROOT for this command")
    subparsers = parser.add_subparsers(dest="command", required=True)
    add_build_commands(subparsers)
    add_run_spec_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the Shelter CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    client = _build_client(args.output_root)
    if args.command == "build":
        return run_build_command(client, args)
    if args.command == "austin":
        return run_austin_command(client, args)
    if args.command == "sacramento":
        return run_sacramento_command(client, args)
    if args.command == "run-spec":
        return run_run_spec_command(client, args)
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_client(output_root: str | None) -> ShelterClient:
    """Build SDK client with optional output-root override.

    Args:
        output_root: Optional override path.

    Returns:
        Configured SDK client.
    """
    config = ShelterConfig.from_env()
    if output_root:
        config = replace(config, output_root=Path(output_root).expanduser().resolve())
    return ShelterClient(config)
