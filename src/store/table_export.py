"""Output writers for materialized relations.

This module persists the Animal and Impound relations, the warning
trail and a run manifest into one output directory.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path

import pyarrow as pa
import pyarrow.compute as pc
import pyarrow.csv as pa_csv
import pyarrow.parquet as pq

from core.constants import (
    ANIMAL_FILE_STEM,
    IMPOUND_FILE_STEM,
    MANIFEST_FILE_NAME,
    WARNINGS_FILE_NAME,
)
from core.errors import ShelterExportError
from core.logging_config import get_logger
from core.types import IngestReport, ReconciliationWarning
from store.table_materializer import ShelterTables

_LOGGER = get_logger(__name__)
_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
_MICROSECONDS_PER_SECOND = 1_000_000


@dataclass(frozen=True)
class TableExportRequest:
    """Request payload for writing one build's outputs.

    Attributes:
        tables: Materialized Animal and Impound relations.
        warnings: Reconciliation warnings for the build.
        ingest_reports: Row accounting for every ingested source.
        output_dir: Destination directory, created when absent.
        output_format: ``csv`` or ``parquet``.
        na_marker: Missing-value marker rendered into CSV cells.
    """

    tables: ShelterTables
    warnings: tuple[ReconciliationWarning, ...]
    ingest_reports: tuple[IngestReport, ...]
    output_dir: Path
    output_format: str
    na_marker: str


def write_tables(request: TableExportRequest) -> Path:
    """Write relations, warnings and manifest for one build.

    Args:
        request: Export request.

    Returns:
        Path to the written manifest file.

    Raises:
        ShelterExportError: If any output file cannot be written.
    """
    output_dir = request.output_dir
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        animal_path = _write_table(request, request.tables.animal, ANIMAL_FILE_STEM)
        impound_path = _write_table(request, request.tables.impound, IMPOUND_FILE_STEM)
        _write_warnings(output_dir / WARNINGS_FILE_NAME, request.warnings)
        manifest_path = _write_manifest(request, animal_path, impound_path)
    except (OSError, pa.ArrowException) as error:
        raise ShelterExportError(
            f"Failed to write build outputs to {output_dir}: {error}. "
            "Check write permissions and available disk space."
        ) from error
    _LOGGER.info(
        "tables_written",
        output_dir=str(output_dir),
        output_format=request.output_format,
        animal_rows=request.tables.animal.num_rows,
        impound_rows=request.tables.impound.num_rows,
    )
    return manifest_path


def render_csv_table(table: pa.Table, na_marker: str) -> pa.Table:
    """Render every column as text with nulls replaced by the NA marker.

    Timestamps render as ``YYYY-MM-DD HH:MM:SS`` and durations as whole
    seconds, matching the cleaned input format.
    """
    columns = [_render_column(table.column(name), na_marker) for name in table.column_names]
    return pa.table(columns, names=table.column_names)


def _render_column(column: pa.ChunkedArray, na_marker: str) -> pa.ChunkedArray:
    if pa.types.is_timestamp(column.type):
        # %S renders fractional digits for sub-second units.
        whole_seconds = pc.cast(column, pa.timestamp("s"), safe=False)
        rendered = pc.strftime(whole_seconds, format=_TIMESTAMP_FORMAT)
    elif pa.types.is_duration(column.type):
        microseconds = pc.cast(column, pa.int64())
        seconds = pc.divide(microseconds, _MICROSECONDS_PER_SECOND)
        rendered = pc.cast(seconds, pa.string())
    else:
        rendered = pc.cast(column, pa.string())
    return pc.fill_null(rendered, na_marker)


def _write_table(request: TableExportRequest, table: pa.Table, stem: str) -> Path:
    path = request.output_dir / f"{stem}.{request.output_format}"
    if request.output_format == "parquet":
        pq.write_table(table, path)
    else:
        pa_csv.write_csv(render_csv_table(table, request.na_marker), path)
    return path


def _write_warnings(path: Path, warnings: tuple[ReconciliationWarning, ...]) -> None:
    lines = [json.dumps(asdict(warning), sort_keys=True) for warning in warnings]
    path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")


def _write_manifest(request: TableExportRequest, animal_path: Path, impound_path: Path) -> Path:
    manifest = {
        "created_at": datetime.now(timezone.utc).isoformat(),
        "output_format": request.output_format,
        "animal_path": animal_path.name,
        "impound_path": impound_path.name,
        "animal_count": request.tables.animal.num_rows,
        "impound_count": request.tables.impound.num_rows,
        "warning_count": len(request.warnings),
        "sources": [_report_payload(report) for report in request.ingest_reports],
    }
    manifest_path = request.output_dir / MANIFEST_FILE_NAME
    manifest_path.write_text(json.dumps(manifest, indent=2) + "\n", encoding="utf-8")
    return manifest_path


def _report_payload(report: IngestReport) -> dict[str, object]:
    payload = asdict(report)
    payload["schema"] = report.schema.value
    return payload
