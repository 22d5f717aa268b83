"""Per-schema adapters from cleaned rows to snapshots and events.

Each supported source shape maps one cleaned row onto an animal
snapshot plus zero, one or two events. All adapters share a single
row-building signature and are selected by ``SourceSchema``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable, Iterable, Mapping, Sequence

from core.constants import (
    ANIMAL_IDENTITY_COLUMNS,
    COL_ANIMAL_ID,
    COL_BREED_1,
    COL_BREED_2,
    COL_COLOR_1,
    COL_COLOR_2,
    COL_GENDER,
    COL_INTAKE_AGE,
    COL_INTAKE_AGE_COUNT,
    COL_INTAKE_AGE_UNITS,
    COL_INTAKE_CONDITION,
    COL_INTAKE_DATE,
    COL_INTAKE_LOCATION,
    COL_INTAKE_SPAY_NEUTER,
    COL_INTAKE_SUBTYPE,
    COL_INTAKE_TYPE,
    COL_KENNEL,
    COL_KIND,
    COL_NAME,
    COL_OUTCOME_CONDITION,
    COL_OUTCOME_DATE,
    COL_OUTCOME_SPAY_NEUTER,
    COL_OUTCOME_SUBTYPE,
    COL_OUTCOME_TYPE,
    COL_REC_SOURCE,
    COL_SPAY_NEUTER,
)
from core.errors import ShelterIngestError, ShelterSchemaError
from core.logging_config import get_logger
from core.types import (
    AnimalSnapshot,
    IngestReport,
    IntakeEvent,
    OutcomeEvent,
    SourceSchema,
    as_naive_utc,
)
from registry.animal_registry import AnimalRegistry

_LOGGER = get_logger(__name__)

SourceRow = Mapping[str, object]


@dataclass(frozen=True)
class SourceRowEvents:
    """Snapshot and events extracted from one cleaned row."""

    snapshot: AnimalSnapshot
    intake: IntakeEvent | None = None
    outcome: OutcomeEvent | None = None


RowBuilder = Callable[[SourceRow, str, datetime], SourceRowEvents]


@dataclass(frozen=True)
class SourceAdapter:
    """Column contract and row builder for one source schema.

    Attributes:
        schema: Source schema tag.
        required_columns: Columns every row must expose.
        primary_date_column: Column that timestamps the row's snapshot.
        build_row: Maps a validated row to its snapshot and events.
    """

    schema: SourceSchema
    required_columns: tuple[str, ...]
    primary_date_column: str
    build_row: RowBuilder


def adapter_for(schema: SourceSchema) -> SourceAdapter:
    """Return the adapter registered for a source schema."""
    return _ADAPTERS[SourceSchema(schema)]


def required_columns(schema: SourceSchema) -> tuple[str, ...]:
    """Return the column names a source schema requires."""
    return adapter_for(schema).required_columns


def validate_columns(schema: SourceSchema, column_names: Iterable[str]) -> None:
    """Ensure a record set exposes every column its schema requires.

    Args:
        schema: Source schema of the record set.
        column_names: Available column names.

    Raises:
        ShelterSchemaError: If any required column is absent.
    """
    available = set(column_names)
    missing = [name for name in required_columns(schema) if name not in available]
    if missing:
        raise ShelterSchemaError(
            f"Source with schema '{SourceSchema(schema).value}' is missing required "
            f"columns: {', '.join(missing)}. Add the columns to the cleaned extract and retry."
        )


def detect_sacramento_schema(column_names: Iterable[str]) -> SourceSchema:
    """Tell CPRA extracts from open-data extracts by their record-source column."""
    if COL_REC_SOURCE in set(column_names):
        return SourceSchema.SAC_CPRA
    return SourceSchema.SAC_OPEN


def ingest_rows(
    registry: AnimalRegistry,
    schema: SourceSchema,
    rows: Sequence[SourceRow],
) -> IngestReport:
    """Fold cleaned rows of one source into the registry.

    Rows missing an identifier or primary timestamp are skipped and
    counted. Column presence is checked for every row before the
    registry is touched.

    Args:
        registry: Registry to upsert animals and append events into.
        schema: Source schema of every row.
        rows: Cleaned rows keyed by column name.

    Returns:
        Row accounting for the source.

    Raises:
        ShelterSchemaError: If any row lacks a required column.
        ShelterIngestError: If a present value cannot be interpreted.
    """
    adapter = adapter_for(schema)
    for row in rows:
        validate_columns(adapter.schema, row.keys())
    ingested = skipped = intakes = outcomes = 0
    for row_number, row in enumerate(rows, 1):
        animal_id = _optional_text(row[COL_ANIMAL_ID])
        observed_at = _optional_datetime(row[adapter.primary_date_column], row_number)
        has_id = animal_id is not None and bool(animal_id.strip())
        if animal_id is None or not has_id or observed_at is None:
            skipped += 1
            _LOGGER.debug(
                "row_skipped",
                schema=adapter.schema.value,
                row_number=row_number,
                reason="missing animal_id" if not has_id else "missing timestamp",
            )
            continue
        events = _build_row_events(adapter, row, animal_id, observed_at, row_number)
        record = registry.upsert(events.snapshot)
        if events.intake is not None:
            registry.add_intake(record.animal_id, events.intake)
            intakes += 1
        if events.outcome is not None:
            registry.add_outcome(record.animal_id, events.outcome)
            outcomes += 1
        ingested += 1
    report = IngestReport(
        schema=adapter.schema,
        rows_read=len(rows),
        rows_ingested=ingested,
        rows_skipped=skipped,
        intakes_added=intakes,
        outcomes_added=outcomes,
    )
    _LOGGER.info(
        "source_ingested",
        schema=adapter.schema.value,
        rows_read=report.rows_read,
        rows_ingested=report.rows_ingested,
        rows_skipped=report.rows_skipped,
    )
    return report


def _build_row_events(
    adapter: SourceAdapter,
    row: SourceRow,
    animal_id: str,
    observed_at: datetime,
    row_number: int,
) -> SourceRowEvents:
    try:
        return adapter.build_row(row, animal_id, observed_at)
    except (TypeError, ValueError) as error:
        raise ShelterIngestError(
            f"Failed to read {adapter.schema.value} row {row_number} for animal "
            f"{animal_id}: {error}. Fix the cleaned value and retry."
        ) from error


def _austin_intake_row(row: SourceRow, animal_id: str, observed_at: datetime) -> SourceRowEvents:
    intake = IntakeEvent(
        intake_date=observed_at,
        intake_type=_optional_text(row[COL_INTAKE_TYPE]),
        intake_condition=_optional_text(row[COL_INTAKE_CONDITION]),
        intake_location=_optional_text(row[COL_INTAKE_LOCATION]),
        intake_age_count=_optional_int(row[COL_INTAKE_AGE_COUNT]),
        intake_age_units=_optional_text(row[COL_INTAKE_AGE_UNITS]),
        intake_age=_optional_duration(row[COL_INTAKE_AGE]),
        intake_spay_neuter=_optional_text(row[COL_INTAKE_SPAY_NEUTER]),
    )
    return SourceRowEvents(snapshot=_full_snapshot(row, animal_id, observed_at), intake=intake)


def _austin_outcome_row(row: SourceRow, animal_id: str, observed_at: datetime) -> SourceRowEvents:
    outcome = OutcomeEvent(
        outcome_date=observed_at,
        outcome_type=_optional_text(row[COL_OUTCOME_TYPE]),
        outcome_subtype=_optional_text(row[COL_OUTCOME_SUBTYPE]),
        outcome_spay_neuter=_optional_text(row[COL_OUTCOME_SPAY_NEUTER]),
    )
    return SourceRowEvents(snapshot=_full_snapshot(row, animal_id, observed_at), outcome=outcome)


def _sac_open_row(row: SourceRow, animal_id: str, observed_at: datetime) -> SourceRowEvents:
    snapshot = AnimalSnapshot(
        animal_id=animal_id,
        observed_at=observed_at,
        kind=_optional_text(row[COL_KIND]),
        name=_optional_text(row[COL_NAME]),
    )
    intake = IntakeEvent(
        intake_date=observed_at,
        intake_type=_optional_text(row[COL_INTAKE_TYPE]),
        intake_location=_optional_text(row[COL_INTAKE_LOCATION]),
    )
    outcome = OutcomeEvent(
        outcome_date=_optional_datetime(row[COL_OUTCOME_DATE]),
        outcome_type=_optional_text(row[COL_OUTCOME_TYPE]),
    )
    return SourceRowEvents(snapshot=snapshot, intake=intake, outcome=_populated(outcome))


def _sac_cpra_row(row: SourceRow, animal_id: str, observed_at: datetime) -> SourceRowEvents:
    intake = IntakeEvent(
        intake_date=observed_at,
        intake_type=_optional_text(row[COL_INTAKE_TYPE]),
        intake_subtype=_optional_text(row[COL_INTAKE_SUBTYPE]),
        intake_condition=_optional_text(row[COL_INTAKE_CONDITION]),
        intake_location=_optional_text(row[COL_INTAKE_LOCATION]),
        intake_spay_neuter=_optional_text(row[COL_SPAY_NEUTER]),
        kennel=_optional_text(row[COL_KENNEL]),
    )
    outcome = OutcomeEvent(
        outcome_date=_optional_datetime(row[COL_OUTCOME_DATE]),
        outcome_type=_optional_text(row[COL_OUTCOME_TYPE]),
        outcome_subtype=_optional_text(row[COL_OUTCOME_SUBTYPE]),
        outcome_condition=_optional_text(row[COL_OUTCOME_CONDITION]),
    )
    return SourceRowEvents(
        snapshot=_full_snapshot(row, animal_id, observed_at),
        intake=intake,
        outcome=_populated(outcome),
    )


def _populated(outcome: OutcomeEvent) -> OutcomeEvent | None:
    """Drop an outcome whose columns are all missing; the animal is still in custody."""
    return None if outcome.is_missing else outcome


def _full_snapshot(row: SourceRow, animal_id: str, observed_at: datetime) -> AnimalSnapshot:
    return AnimalSnapshot(
        animal_id=animal_id,
        observed_at=observed_at,
        kind=_optional_text(row[COL_KIND]),
        gender=_optional_text(row[COL_GENDER]),
        name=_optional_text(row[COL_NAME]),
        color_1=_optional_text(row[COL_COLOR_1]),
        color_2=_optional_text(row[COL_COLOR_2]),
        breed_1=_optional_text(row[COL_BREED_1]),
        breed_2=_optional_text(row[COL_BREED_2]),
    )


def _optional_text(value: object) -> str | None:
    """Return a string value, keeping empty strings distinct from missing."""
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return str(value)


def _optional_datetime(value: object, row_number: int | None = None) -> datetime | None:
    """Interpret a timestamp cell as a datetime.

    Args:
        value: Typed cell value or ISO-8601 text.
        row_number: Optional one-based row number for error context.

    Returns:
        Parsed datetime with aware values shifted to naive UTC, or None
        for the missing marker.

    Raises:
        ShelterIngestError: If text cannot be parsed as ISO-8601.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return as_naive_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        try:
            return as_naive_utc(datetime.fromisoformat(value.strip()))
        except ValueError as error:
            location = f" in row {row_number}" if row_number is not None else ""
            raise ShelterIngestError(
                f"Invalid timestamp '{value}'{location}: expected ISO-8601 text. "
                "Normalize timestamps in the cleaned extract and retry."
            ) from error
    raise ShelterIngestError(
        f"Unsupported timestamp value of type {type(value).__name__}. "
        "Provide datetimes or ISO-8601 text."
    )


def _optional_int(value: object) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool):
        raise TypeError("boolean is not a valid age count")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        return int(value.strip())
    raise TypeError(f"unsupported integer value of type {type(value).__name__}")


def _optional_duration(value: object) -> timedelta | None:
    """Interpret an age-as-duration cell given in whole seconds."""
    if value is None or isinstance(value, timedelta):
        return value
    seconds = _optional_int(value)
    return None if seconds is None else timedelta(seconds=seconds)


_ADAPTERS: dict[SourceSchema, SourceAdapter] = {
    SourceSchema.AUSTIN_INTAKE: SourceAdapter(
        schema=SourceSchema.AUSTIN_INTAKE,
        required_columns=ANIMAL_IDENTITY_COLUMNS
        + (
            COL_INTAKE_DATE,
            COL_INTAKE_TYPE,
            COL_INTAKE_CONDITION,
            COL_INTAKE_LOCATION,
            COL_INTAKE_AGE_COUNT,
            COL_INTAKE_AGE_UNITS,
            COL_INTAKE_AGE,
            COL_INTAKE_SPAY_NEUTER,
        ),
        primary_date_column=COL_INTAKE_DATE,
        build_row=_austin_intake_row,
    ),
    SourceSchema.AUSTIN_OUTCOME: SourceAdapter(
        schema=SourceSchema.AUSTIN_OUTCOME,
        required_columns=ANIMAL_IDENTITY_COLUMNS
        + (COL_OUTCOME_DATE, COL_OUTCOME_TYPE, COL_OUTCOME_SUBTYPE, COL_OUTCOME_SPAY_NEUTER),
        primary_date_column=COL_OUTCOME_DATE,
        build_row=_austin_outcome_row,
    ),
    SourceSchema.SAC_OPEN: SourceAdapter(
        schema=SourceSchema.SAC_OPEN,
        required_columns=(
            COL_ANIMAL_ID,
            COL_KIND,
            COL_NAME,
            COL_INTAKE_DATE,
            COL_INTAKE_TYPE,
            COL_INTAKE_LOCATION,
            COL_OUTCOME_DATE,
            COL_OUTCOME_TYPE,
        ),
        primary_date_column=COL_INTAKE_DATE,
        build_row=_sac_open_row,
    ),
    SourceSchema.SAC_CPRA: SourceAdapter(
        schema=SourceSchema.SAC_CPRA,
        required_columns=ANIMAL_IDENTITY_COLUMNS
        + (
            COL_KENNEL,
            COL_SPAY_NEUTER,
            COL_INTAKE_DATE,
            COL_INTAKE_TYPE,
            COL_INTAKE_SUBTYPE,
            COL_INTAKE_CONDITION,
            COL_INTAKE_LOCATION,
            COL_OUTCOME_DATE,
            COL_OUTCOME_TYPE,
            COL_OUTCOME_SUBTYPE,
            COL_OUTCOME_CONDITION,
        ),
        primary_date_column=COL_INTAKE_DATE,
        build_row=_sac_cpra_row,
    ),
}
