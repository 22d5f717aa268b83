"""Unit tests for Animal and Impound relation materialization."""

from __future__ import annotations

from datetime import datetime, timedelta

import pyarrow as pa

from core.types import AnimalSnapshot, IntakeEvent, OutcomeEvent
from reconcile.engine import reconcile_registry
from registry.animal_registry import AnimalRegistry
from store.table_materializer import IMPOUND_SCHEMA, materialize_tables


def _registry() -> AnimalRegistry:
    registry = AnimalRegistry()
    registry.upsert(
        AnimalSnapshot(animal_id="B2", observed_at=datetime(2016, 1, 1), kind="Cat", name="Tom")
    )
    registry.upsert(AnimalSnapshot(animal_id="B1", observed_at=datetime(2016, 1, 1), kind="Dog"))
    registry.add_intake(
        "B1",
        IntakeEvent(
            intake_date=datetime(2016, 1, 1, 9, 0),
            intake_type="Stray",
            intake_age_count=2,
            intake_age=timedelta(days=730),
            kennel="K1",
        ),
    )
    registry.add_outcome(
        "B1",
        OutcomeEvent(outcome_date=datetime(2016, 1, 3, 11, 0), outcome_type="Adoption"),
    )
    registry.add_intake("B2", IntakeEvent(intake_date=datetime(2016, 1, 1)))
    registry.add_intake("B2", IntakeEvent(intake_date=datetime(2016, 1, 2)))
    return registry


def test_materialize_tables_emits_one_animal_row_per_record() -> None:
    """Every registry animal should appear once, discrepancies included."""
    registry = _registry()

    tables = materialize_tables(registry, reconcile_registry(registry), sort_by_id=True)

    assert tables.animal.column("animal_id").to_pylist() == ["B1", "B2"]
    assert tables.animal.column_names == [
        "animal_id",
        "kind",
        "name",
        "gender",
        "color_1",
        "color_2",
        "breed_1",
        "breed_2",
    ]
    assert tables.animal.column("name").to_pylist() == [None, "Tom"]


def test_materialize_tables_builds_typed_impound_rows() -> None:
    """Impound rows should carry both sides with nulls for missing values."""
    registry = _registry()

    tables = materialize_tables(registry, reconcile_registry(registry), sort_by_id=True)

    rows = tables.impound.to_pylist()
    assert tables.impound.schema == IMPOUND_SCHEMA
    assert tables.impound.schema.field("intake_age").type == pa.duration("us")
    assert [row["animal_id"] for row in rows] == ["B1", "B2"]
    assert (rows[0]["kennel"], rows[0]["outcome_type"]) == ("K1", "Adoption")
    assert rows[0]["intake_age"] == timedelta(days=730)
    assert rows[1]["intake_date"] == datetime(2016, 1, 2) and rows[1]["outcome_date"] is None


def test_materialize_tables_follows_insertion_order_when_unsorted() -> None:
    """Without identifier sorting, rows should follow registry order."""
    registry = _registry()

    tables = materialize_tables(registry, reconcile_registry(registry), sort_by_id=False)

    assert tables.animal.column("animal_id").to_pylist() == ["B2", "B1"]
