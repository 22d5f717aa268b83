"""Cleaned source extract readers.

This module loads cleaned per-source CSV extracts from local disk
into typed Arrow tables and folds them into the animal registry.
"""

from __future__ import annotations

from pathlib import Path

import pyarrow as pa
import pyarrow.csv as pa_csv

from core.constants import DATE_COLUMNS, INTEGER_COLUMNS, SOURCE_TIMESTAMP_FORMATS
from core.errors import ShelterIngestError
from core.types import IngestReport, SourceSchema, SourceSpec
from ingest.source_adapters import (
    detect_sacramento_schema,
    ingest_rows,
    required_columns,
    validate_columns,
)
from registry.animal_registry import AnimalRegistry

_SACRAMENTO_SCHEMAS = (SourceSchema.SAC_OPEN, SourceSchema.SAC_CPRA)


def read_source_table(
    source_path: str | Path,
    schema: SourceSchema | None,
    na_marker: str,
) -> tuple[SourceSchema, pa.Table]:
    """Read one cleaned CSV extract.

    Only the configured NA marker reads as missing; empty cells stay
    empty strings.

    Args:
        source_path: Local CSV path.
        schema: Source schema, or None to auto-detect a Sacramento extract.
        na_marker: Missing-value marker used in the file.

    Returns:
        Resolved schema and the typed table.

    Raises:
        ShelterIngestError: If the file is missing or cannot be parsed.
        ShelterSchemaError: If a required column is absent.
    """
    path = Path(source_path).expanduser()
    if not path.is_file():
        raise ShelterIngestError(
            f"Failed to read source at {path}: file does not exist. "
            "Provide an existing cleaned CSV extract."
        )
    candidate_schemas = (schema,) if schema is not None else _SACRAMENTO_SCHEMAS
    convert_options = pa_csv.ConvertOptions(
        column_types=_column_types(candidate_schemas),
        null_values=[na_marker],
        strings_can_be_null=True,
        timestamp_parsers=[pa_csv.ISO8601, *SOURCE_TIMESTAMP_FORMATS],
    )
    try:
        table = pa_csv.read_csv(path, convert_options=convert_options)
    except (pa.ArrowInvalid, OSError) as error:
        raise ShelterIngestError(
            f"Failed to parse source extract at {path}: {error}. "
            "Fix the malformed values and retry."
        ) from error
    resolved_schema = schema
    if resolved_schema is None:
        resolved_schema = detect_sacramento_schema(table.column_names)
    validate_columns(resolved_schema, table.column_names)
    return resolved_schema, table


def ingest_table(
    registry: AnimalRegistry,
    schema: SourceSchema,
    table: pa.Table,
) -> IngestReport:
    """Validate an Arrow table's columns and fold its rows into the registry."""
    validate_columns(schema, table.column_names)
    return ingest_rows(registry, schema, table.to_pylist())


def ingest_source_file(
    registry: AnimalRegistry,
    source: SourceSpec,
    na_marker: str,
) -> IngestReport:
    """Read one cleaned extract from disk and ingest it.

    Args:
        registry: Registry receiving animals and events.
        source: Requested schema and path.
        na_marker: Missing-value marker used in the file.

    Returns:
        Row accounting for the source.
    """
    schema, table = read_source_table(source.path, source.schema, na_marker)
    return ingest_table(registry, schema, table)


def _column_types(schemas: tuple[SourceSchema, ...]) -> dict[str, pa.DataType]:
    """Map every required column to its Arrow type; other columns are inferred."""
    column_types: dict[str, pa.DataType] = {}
    for schema in schemas:
        for name in required_columns(schema):
            if name in DATE_COLUMNS:
                column_types[name] = pa.timestamp("s")
            elif name in INTEGER_COLUMNS:
                column_types[name] = pa.int64()
            else:
                column_types[name] = pa.string()
    return column_types
