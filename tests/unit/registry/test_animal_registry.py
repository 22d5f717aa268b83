"""Unit tests for the keyed animal registry."""

from __future__ import annotations

from datetime import datetime, timezone
from itertools import permutations

import pytest

from core.errors import ShelterRegistryError
from core.types import AnimalSnapshot, IntakeEvent, OutcomeEvent
from registry.animal_registry import AnimalRegistry


def _snapshot(day: int, **attributes: str | None) -> AnimalSnapshot:
    return AnimalSnapshot(animal_id="A1", observed_at=datetime(2016, 1, day), **attributes)


def test_upsert_creates_record_on_first_sighting() -> None:
    """First snapshot should seed a record with its attributes."""
    registry = AnimalRegistry()

    record = registry.upsert(_snapshot(1, kind="Dog", name="Rex"))

    assert len(registry) == 1 and "A1" in registry
    assert (record.kind, record.name, record.gender) == ("Dog", "Rex", None)


def test_upsert_newer_snapshot_overwrites_populated_fields_only() -> None:
    """Newer snapshot should overwrite fields it carries and keep the rest."""
    registry = AnimalRegistry()
    registry.upsert(_snapshot(1, kind="Dog", name="Rex", color_1="Black"))

    record = registry.upsert(_snapshot(5, name="Max", color_1=None))

    assert (record.kind, record.name, record.color_1) == ("Dog", "Max", "Black")
    assert record.observed_at == datetime(2016, 1, 5)


def test_upsert_older_or_same_time_snapshot_is_ignored() -> None:
    """Snapshots that are not strictly newer should not change attributes."""
    registry = AnimalRegistry()
    registry.upsert(_snapshot(5, name="Rex"))

    registry.upsert(_snapshot(1, name="Old", gender="Male"))
    record = registry.upsert(_snapshot(5, name="Tie"))

    assert (record.name, record.gender) == ("Rex", None)


def test_upsert_without_overwrite_keeps_record_timestamp() -> None:
    """An all-missing newer snapshot should not advance the record timestamp."""
    registry = AnimalRegistry()
    registry.upsert(_snapshot(1, name="Rex"))

    record = registry.upsert(_snapshot(9))

    assert record.observed_at == datetime(2016, 1, 1)


def test_populated_fields_grow_monotonically_in_every_upsert_order() -> None:
    """Populated attributes should never shrink, whatever the sighting order."""
    snapshots = (
        _snapshot(1, kind="Dog", name="Rex"),
        _snapshot(2, gender="Male", name=None),
        _snapshot(3, color_1="Black", breed_1="Labrador"),
        _snapshot(4, kind=None, color_2="White"),
    )

    for ordering in permutations(snapshots):
        registry = AnimalRegistry()
        populated: frozenset[str] = frozenset()
        for snapshot in ordering:
            record = registry.upsert(snapshot)
            assert populated <= record.populated_fields()
            populated = record.populated_fields()


def test_add_events_append_without_deduplication() -> None:
    """Identical events should both be kept."""
    registry = AnimalRegistry()
    registry.upsert(_snapshot(1))
    intake = IntakeEvent(intake_date=datetime(2016, 1, 1), intake_type="Stray")

    registry.add_intake("A1", intake)
    registry.add_intake("A1", intake)
    registry.add_outcome("A1", OutcomeEvent(outcome_date=datetime(2016, 1, 3)))

    record = registry.lookup("A1")
    assert record is not None
    assert (len(record.intakes), len(record.outcomes)) == (2, 1)


def test_add_intake_for_unknown_animal_raises_error() -> None:
    """Events for unregistered animals should be rejected."""
    registry = AnimalRegistry()

    with pytest.raises(ShelterRegistryError):
        registry.add_intake("missing", IntakeEvent(intake_type="Stray"))


def test_lookup_unknown_animal_returns_none() -> None:
    """Lookup should signal absence with None."""
    assert AnimalRegistry().lookup("missing") is None


def test_records_sort_by_id_orders_identifiers() -> None:
    """Identifier-sorted iteration should ignore insertion order."""
    registry = AnimalRegistry()
    for animal_id in ("A3", "A1", "A2"):
        registry.upsert(AnimalSnapshot(animal_id=animal_id, observed_at=datetime(2016, 1, 1)))

    inserted = [record.animal_id for record in registry.records()]
    ordered = [record.animal_id for record in registry.records(sort_by_id=True)]

    assert inserted == ["A3", "A1", "A2"] and ordered == ["A1", "A2", "A3"]


def test_sort_events_is_stable_and_puts_undated_events_last() -> None:
    """Equal timestamps should keep insertion order, undated events trail."""
    registry = AnimalRegistry()
    record = registry.upsert(_snapshot(1))
    same_time = datetime(2016, 1, 10, 8, 0)
    for intake in (
        IntakeEvent(intake_type="Undated"),
        IntakeEvent(intake_date=same_time, intake_type="First"),
        IntakeEvent(intake_date=datetime(2016, 1, 2), intake_type="Earliest"),
        IntakeEvent(intake_date=same_time, intake_type="Second"),
    ):
        registry.add_intake("A1", intake)

    record.sort_events()

    assert [intake.intake_type for intake in record.intakes] == [
        "Earliest",
        "First",
        "Second",
        "Undated",
    ]


def test_upsert_compares_aware_and_naive_timestamps_in_utc() -> None:
    """Mixing offset-aware and naive sightings should merge instead of failing."""
    registry = AnimalRegistry()
    registry.upsert(_snapshot(7, name="Rex"))

    record = registry.upsert(
        AnimalSnapshot(
            animal_id="A1",
            observed_at=datetime(2016, 1, 8, 14, 0, tzinfo=timezone.utc),
            name="Max",
        )
    )
    registry.upsert(_snapshot(8, name="Stale"))

    assert record.name == "Max"
