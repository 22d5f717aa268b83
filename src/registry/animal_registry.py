"""Keyed store of canonical animal records.

This module merges repeated sightings of one animal with an
update-if-newer rule and accumulates its events for reconciliation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterator

from core.errors import ShelterRegistryError
from core.types import (
    ANIMAL_ATTRIBUTE_FIELDS,
    AnimalSnapshot,
    IntakeEvent,
    OutcomeEvent,
    as_naive_utc,
)


@dataclass
class AnimalRecord:
    """Registry entry owning merged attributes and event lists.

    Attributes:
        animal_id: External animal identifier.
        observed_at: Timestamp of the newest snapshot merged so far.
        intakes: Intake events in ingestion order until sorted.
        outcomes: Outcome events in ingestion order until sorted.
    """

    animal_id: str
    observed_at: datetime
    kind: str | None = None
    gender: str | None = None
    name: str | None = None
    color_1: str | None = None
    color_2: str | None = None
    breed_1: str | None = None
    breed_2: str | None = None
    intakes: list[IntakeEvent] = field(default_factory=list)
    outcomes: list[OutcomeEvent] = field(default_factory=list)

    @classmethod
    def from_snapshot(cls, snapshot: AnimalSnapshot) -> "AnimalRecord":
        """Create a record seeded with a first sighting."""
        attributes = {name: getattr(snapshot, name) for name in ANIMAL_ATTRIBUTE_FIELDS}
        return cls(animal_id=snapshot.animal_id, observed_at=snapshot.observed_at, **attributes)

    def update_if_newer(self, snapshot: AnimalSnapshot) -> bool:
        """Merge a later snapshot field by field.

        Older or same-time snapshots are ignored. Missing incoming values
        never replace populated ones. Aware and naive timestamps compare
        in UTC.

        Args:
            snapshot: Incoming sighting of this animal.

        Returns:
            Whether any attribute was overwritten.
        """
        if as_naive_utc(snapshot.observed_at) <= as_naive_utc(self.observed_at):
            return False
        updated = False
        for name in ANIMAL_ATTRIBUTE_FIELDS:
            value = getattr(snapshot, name)
            if value is None:
                continue
            setattr(self, name, value)
            updated = True
        if updated:
            self.observed_at = snapshot.observed_at
        return updated

    def populated_fields(self) -> frozenset[str]:
        """Return attribute names currently holding a value."""
        return frozenset(
            name for name in ANIMAL_ATTRIBUTE_FIELDS if getattr(self, name) is not None
        )

    def snapshot(self) -> AnimalSnapshot:
        """Return the merged attributes as an immutable snapshot."""
        attributes = {name: getattr(self, name) for name in ANIMAL_ATTRIBUTE_FIELDS}
        return AnimalSnapshot(animal_id=self.animal_id, observed_at=self.observed_at, **attributes)

    def sort_events(self) -> None:
        """Stable-sort both event lists by timestamp, undated events last."""
        self.intakes.sort(key=lambda event: _date_sort_key(event.intake_date))
        self.outcomes.sort(key=lambda event: _date_sort_key(event.outcome_date))


class AnimalRegistry:
    """Arena of animal records keyed by external identifier."""

    def __init__(self) -> None:
        self._records: dict[str, AnimalRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, animal_id: object) -> bool:
        return animal_id in self._records

    def __iter__(self) -> Iterator[AnimalRecord]:
        return iter(self._records.values())

    def upsert(self, snapshot: AnimalSnapshot) -> AnimalRecord:
        """Add a new animal or merge a sighting into the existing one.

        Args:
            snapshot: Attributes observed in one source record.

        Returns:
            The registry-owned record for the snapshot's identifier.
        """
        record = self._records.get(snapshot.animal_id)
        if record is None:
            record = AnimalRecord.from_snapshot(snapshot)
            self._records[snapshot.animal_id] = record
            return record
        record.update_if_newer(snapshot)
        return record

    def lookup(self, animal_id: str) -> AnimalRecord | None:
        """Return the record for an identifier, or None when absent."""
        return self._records.get(animal_id)

    def add_intake(self, animal_id: str, intake: IntakeEvent) -> None:
        """Append an intake event to an existing animal."""
        self._require(animal_id).intakes.append(intake)

    def add_outcome(self, animal_id: str, outcome: OutcomeEvent) -> None:
        """Append an outcome event to an existing animal."""
        self._require(animal_id).outcomes.append(outcome)

    def records(self, sort_by_id: bool = False) -> list[AnimalRecord]:
        """Return records in insertion order or sorted by identifier."""
        if sort_by_id:
            return [self._records[key] for key in sorted(self._records)]
        return list(self._records.values())

    def _require(self, animal_id: str) -> AnimalRecord:
        record = self._records.get(animal_id)
        if record is None:
            raise ShelterRegistryError(
                f"Animal {animal_id} is not in the registry. "
                "Upsert the animal snapshot before appending its events."
            )
        return record


def _date_sort_key(value: datetime | None) -> tuple[bool, datetime]:
    if value is None:
        return (True, datetime.min)
    return (False, as_naive_utc(value))
