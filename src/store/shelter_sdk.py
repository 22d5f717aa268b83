"""Python SDK for shelter builds.

This module exposes high-level APIs that ingest cleaned extracts,
reconcile every animal and persist the normalized relations.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Sequence

from core.config import ShelterConfig, parse_output_format
from core.run_spec import load_build_spec
from core.types import SourceSchema, SourceSpec
from ingest.pipeline import BuildResult, build_tables
from store.table_export import TableExportRequest, write_tables

_DEFAULT_BUILD_NAME = "build"


@dataclass(frozen=True)
class BuildSummary:
    """Persisted outputs of one SDK build.

    Attributes:
        result: In-memory relations, warnings and ingest reports.
        output_dir: Directory holding every written file.
        manifest_path: Path to the written build manifest.
    """

    result: BuildResult
    output_dir: Path
    manifest_path: Path

    def summary_lines(self) -> tuple[str, ...]:
        """Render the build as ``key=value`` lines."""
        return (
            f"animals={self.result.tables.animal.num_rows}",
            f"impounds={self.result.tables.impound.num_rows}",
            f"warnings={len(self.result.warnings)}",
            f"rows_skipped={self.result.rows_skipped}",
            f"output_dir={self.output_dir}",
        )


class ShelterClient:
    """Primary SDK entry point for shelter builds."""

    def __init__(self, config: ShelterConfig | None = None) -> None:
        """Create SDK client.

        Args:
            config: Optional runtime configuration.
        """
        self._config = config or ShelterConfig.from_env()

    @property
    def config(self) -> ShelterConfig:
        """Return the client's runtime configuration."""
        return self._config

    def with_output_root(self, output_root: str) -> "ShelterClient":
        """Clone the client with a different output root.

        Args:
            output_root: New output root path.

        Returns:
            New SDK client instance.
        """
        resolved_root = Path(output_root).expanduser().resolve()
        return ShelterClient(replace(self._config, output_root=resolved_root))

    def build(
        self,
        sources: Sequence[SourceSpec],
        output_dir: str | Path | None = None,
        output_format: str | None = None,
    ) -> BuildSummary:
        """Build and persist both relations from cleaned extracts.

        Args:
            sources: Cleaned source files, in any order.
            output_dir: Optional output directory, defaults under the output root.
            output_format: Optional ``csv`` or ``parquet`` override.

        Returns:
            Build outputs and written paths.

        Raises:
            ShelterConfigError: If the output format is unsupported.
            ShelterIngestError: If a source cannot be read.
            ShelterSchemaError: If a source lacks a required column.
            ShelterExportError: If outputs cannot be written.
        """
        resolved_format = (
            parse_output_format(output_format)
            if output_format is not None
            else self._config.output_format
        )
        target_dir = self._resolve_output_dir(output_dir)
        result = build_tables(sources, self._config)
        manifest_path = write_tables(
            TableExportRequest(
                tables=result.tables,
                warnings=result.warnings,
                ingest_reports=result.ingest_reports,
                output_dir=target_dir,
                output_format=resolved_format,
                na_marker=self._config.na_marker,
            )
        )
        return BuildSummary(result=result, output_dir=target_dir, manifest_path=manifest_path)

    def build_austin(
        self,
        intake_path: str,
        outcome_path: str,
        output_dir: str | Path | None = None,
        output_format: str | None = None,
    ) -> BuildSummary:
        """Build from one Austin intake extract and one Austin outcome extract."""
        sources = (
            SourceSpec(schema=SourceSchema.AUSTIN_INTAKE, path=intake_path),
            SourceSpec(schema=SourceSchema.AUSTIN_OUTCOME, path=outcome_path),
        )
        return self.build(sources, output_dir=output_dir, output_format=output_format)

    def build_sacramento(
        self,
        impounds_path: str,
        output_dir: str | Path | None = None,
        output_format: str | None = None,
    ) -> BuildSummary:
        """Build from one Sacramento extract, detecting open data versus CPRA."""
        sources = (SourceSpec(schema=None, path=impounds_path),)
        return self.build(sources, output_dir=output_dir, output_format=output_format)

    def run_spec(self, spec_file: str) -> BuildSummary:
        """Execute a YAML build-spec.

        Args:
            spec_file: Path to YAML build-spec file.

        Returns:
            Build outputs and written paths.

        Raises:
            ShelterRunSpecError: If the build spec is invalid.
        """
        build_spec = load_build_spec(spec_file)
        return self.build(
            build_spec.sources,
            output_dir=build_spec.output_dir,
            output_format=build_spec.output_format,
        )

    def _resolve_output_dir(self, output_dir: str | Path | None) -> Path:
        if output_dir is None:
            return self._config.output_root / _DEFAULT_BUILD_NAME
        return Path(output_dir).expanduser().resolve()
