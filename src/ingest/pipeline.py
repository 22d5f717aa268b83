"""Build orchestration from cleaned sources to normalized relations.

This module coordinates source ingestion, per-animal reconciliation
and table materialization for one registry lifetime.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Sequence

from core.config import ShelterConfig
from core.errors import ShelterRegistryError
from core.logging_config import get_logger
from core.types import IngestReport, ReconciliationWarning, SourceSchema, SourceSpec
from ingest.source_adapters import ingest_rows
from ingest.source_reader import ingest_source_file
from reconcile.engine import reconcile_registry
from registry.animal_registry import AnimalRegistry
from store.table_materializer import ShelterTables, materialize_tables

_LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class BuildResult:
    """Outputs of one build run.

    Attributes:
        tables: Animal and Impound relations.
        warnings: Structured reconciliation warnings.
        ingest_reports: Row accounting per ingested source, in ingest order.
    """

    tables: ShelterTables
    warnings: tuple[ReconciliationWarning, ...]
    ingest_reports: tuple[IngestReport, ...]

    @property
    def rows_skipped(self) -> int:
        """Return skipped rows summed over every source."""
        return sum(report.rows_skipped for report in self.ingest_reports)


class ShelterBuildRunner:
    """Single-use runner: ingest every source, then reconcile once."""

    def __init__(self, config: ShelterConfig) -> None:
        self._config = config
        self._registry = AnimalRegistry()
        self._reports: list[IngestReport] = []
        self._completed = False

    @property
    def registry(self) -> AnimalRegistry:
        """Registry accumulated so far."""
        return self._registry

    def add_source(self, source: SourceSpec) -> IngestReport:
        """Read and ingest one cleaned extract from disk."""
        self._ensure_open()
        report = ingest_source_file(self._registry, source, self._config.na_marker)
        self._reports.append(report)
        return report

    def add_rows(self, schema: SourceSchema, rows: Sequence[Mapping[str, object]]) -> IngestReport:
        """Ingest in-memory cleaned rows of one source."""
        self._ensure_open()
        report = ingest_rows(self._registry, schema, rows)
        self._reports.append(report)
        return report

    def run(self) -> BuildResult:
        """Reconcile every animal and materialize both relations."""
        self._ensure_open()
        self._completed = True
        sort_by_id = self._config.sort_by_id
        reconciliation = reconcile_registry(self._registry, sort_by_id=sort_by_id)
        tables = materialize_tables(self._registry, reconciliation, sort_by_id=sort_by_id)
        _LOGGER.info(
            "build_completed",
            source_count=len(self._reports),
            animal_count=tables.animal.num_rows,
            impound_count=tables.impound.num_rows,
            warning_count=len(reconciliation.warnings),
        )
        return BuildResult(
            tables=tables,
            warnings=reconciliation.warnings,
            ingest_reports=tuple(self._reports),
        )

    def _ensure_open(self) -> None:
        if self._completed:
            raise ShelterRegistryError(
                "Build runner already reconciled its registry. "
                "Create a new runner for another build."
            )


def build_tables(sources: Sequence[SourceSpec], config: ShelterConfig) -> BuildResult:
    """Build both relations from cleaned extracts on disk.

    Args:
        sources: Cleaned source files, in any order.
        config: Runtime configuration.

    Returns:
        Relations, warnings and per-source row accounting.

    Raises:
        ShelterIngestError: If a source cannot be read.
        ShelterSchemaError: If a source lacks a required column.
    """
    runner = ShelterBuildRunner(config)
    for source in sources:
        runner.add_source(source)
    return runner.run()


def build_tables_from_rows(
    row_sets: Sequence[tuple[SourceSchema, Sequence[Mapping[str, object]]]],
    config: ShelterConfig,
) -> BuildResult:
    """Build both relations from in-memory cleaned rows.

    Args:
        row_sets: Pairs of source schema and that source's rows.
        config: Runtime configuration.

    Returns:
        Relations, warnings and per-source row accounting.
    """
    runner = ShelterBuildRunner(config)
    for schema, rows in row_sets:
        runner.add_rows(schema, rows)
    return runner.run()
