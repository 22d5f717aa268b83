"""Normalized Animal and Impound relation builders.

This module walks the reconciled registry and materializes the two
output relations as Arrow tables with explicit, null-capable schemas.
"""

from __future__ import annotations

from dataclasses import dataclass

import pyarrow as pa

from core.constants import (
    ANIMAL_TABLE_COLUMNS,
    COL_ANIMAL_ID,
    COL_INTAKE_AGE,
    COL_INTAKE_AGE_COUNT,
    COL_INTAKE_DATE,
    COL_OUTCOME_DATE,
    IMPOUND_TABLE_COLUMNS,
)
from core.types import ImpoundEpisode
from reconcile.engine import ReconciliationResult
from registry.animal_registry import AnimalRecord, AnimalRegistry

ANIMAL_SCHEMA = pa.schema([(name, pa.string()) for name in ANIMAL_TABLE_COLUMNS])


def _impound_field_type(name: str) -> pa.DataType:
    if name in (COL_INTAKE_DATE, COL_OUTCOME_DATE):
        return pa.timestamp("us")
    if name == COL_INTAKE_AGE_COUNT:
        return pa.int64()
    if name == COL_INTAKE_AGE:
        return pa.duration("us")
    return pa.string()


IMPOUND_SCHEMA = pa.schema([(name, _impound_field_type(name)) for name in IMPOUND_TABLE_COLUMNS])


@dataclass(frozen=True)
class ShelterTables:
    """Materialized output relations.

    Attributes:
        animal: One row per registry animal.
        impound: One row per reconciled episode.
    """

    animal: pa.Table
    impound: pa.Table


def materialize_tables(
    registry: AnimalRegistry,
    reconciliation: ReconciliationResult,
    sort_by_id: bool = True,
) -> ShelterTables:
    """Emit the Animal and Impound relations for a reconciled registry.

    Args:
        registry: Registry after every animal was reconciled.
        reconciliation: Episodes keyed by animal id.
        sort_by_id: Emit rows in identifier order for reproducible output.

    Returns:
        Animal and Impound tables with missing values as nulls.
    """
    records = registry.records(sort_by_id=sort_by_id)
    animal_rows = [animal_row(record) for record in records]
    impound_rows = [
        impound_row(episode)
        for record in records
        for episode in reconciliation.episodes.get(record.animal_id, ())
    ]
    return ShelterTables(
        animal=pa.Table.from_pylist(animal_rows, schema=ANIMAL_SCHEMA),
        impound=pa.Table.from_pylist(impound_rows, schema=IMPOUND_SCHEMA),
    )


def animal_row(record: AnimalRecord) -> dict[str, object]:
    """Build one Animal relation row from merged attributes."""
    return {name: getattr(record, name) for name in ANIMAL_TABLE_COLUMNS}


def impound_row(episode: ImpoundEpisode) -> dict[str, object]:
    """Build one Impound relation row from an episode's two sides."""
    row: dict[str, object] = {COL_ANIMAL_ID: episode.animal_id}
    for name in IMPOUND_TABLE_COLUMNS[1:]:
        side = episode.outcome if name.startswith("outcome_") else episode.intake
        row[name] = getattr(side, name)
    return row
