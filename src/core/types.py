"""Shared typed models.

This module defines immutable value types exchanged between ingestion,
the animal registry, reconciliation and table materialization.
``None`` is the missing marker for every optional field.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Literal

EpisodeKind = Literal["intake-outcome", "solitary-intake", "solitary-outcome"]
WarningCode = Literal[
    "unmatched_intakes",
    "outcome_out_of_order",
    "extra_outcomes",
    "empty_event",
]

ANIMAL_ATTRIBUTE_FIELDS = (
    "kind",
    "gender",
    "name",
    "color_1",
    "color_2",
    "breed_1",
    "breed_2",
)


class SourceSchema(str, Enum):
    """Closed set of supported cleaned-record source shapes."""

    AUSTIN_INTAKE = "austin_intake"
    AUSTIN_OUTCOME = "austin_outcome"
    SAC_OPEN = "sac_open"
    SAC_CPRA = "sac_cpra"


@dataclass(frozen=True)
class AnimalSnapshot:
    """Animal attributes observed in one source record.

    Attributes:
        animal_id: External identifier, stable across sources.
        observed_at: Timestamp of the record the attributes came from.
        kind: Species, e.g. Dog or Cat.
        gender: Gender, e.g. Male or Female.
        name: Animal name.
        color_1: Primary color or coat.
        color_2: Secondary color or coat.
        breed_1: Primary breed designation.
        breed_2: Secondary breed designation.
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


@dataclass(frozen=True)
class IntakeEvent:
    """One animal entering shelter custody.

    Attributes:
        intake_date: Intake timestamp.
        intake_type: Type of intake, e.g. Stray or Owner Surrender.
        intake_subtype: Sub-type of the intake type.
        intake_condition: Condition at intake, e.g. Normal or Injured.
        intake_location: Place where the animal was found or surrendered.
        intake_age_count: Integer age.
        intake_age_units: Units of the integer age, e.g. dy, mo or yr.
        intake_age: Age expressed as a duration.
        intake_spay_neuter: Sterilization status, e.g. Intact or Altered.
        kennel: Kennel assignment.
    """

    intake_date: datetime | None = None
    intake_type: str | None = None
    intake_subtype: str | None = None
    intake_condition: str | None = None
    intake_location: str | None = None
    intake_age_count: int | None = None
    intake_age_units: str | None = None
    intake_age: timedelta | None = None
    intake_spay_neuter: str | None = None
    kennel: str | None = None

    @property
    def is_missing(self) -> bool:
        """Return whether every field carries the missing marker."""
        return _all_missing(self)


@dataclass(frozen=True)
class OutcomeEvent:
    """One animal leaving shelter custody.

    Attributes:
        outcome_date: Outcome timestamp.
        outcome_type: Type of outcome, e.g. Adoption or Transfer.
        outcome_subtype: Sub-type of the outcome type.
        outcome_condition: Condition at discharge.
        outcome_spay_neuter: Sterilization status at discharge.
    """

    outcome_date: datetime | None = None
    outcome_type: str | None = None
    outcome_subtype: str | None = None
    outcome_condition: str | None = None
    outcome_spay_neuter: str | None = None

    @property
    def is_missing(self) -> bool:
        """Return whether every field carries the missing marker."""
        return _all_missing(self)


MISSING_INTAKE = IntakeEvent()
MISSING_OUTCOME = OutcomeEvent()


@dataclass(frozen=True)
class ImpoundEpisode:
    """One reconciled intake/outcome pairing for an animal.

    Either side may be all-missing for solitary episodes, never both.
    """

    animal_id: str
    intake: IntakeEvent = MISSING_INTAKE
    outcome: OutcomeEvent = MISSING_OUTCOME

    def __post_init__(self) -> None:
        if self.intake.is_missing and self.outcome.is_missing:
            raise ValueError(
                f"Impound episode for animal {self.animal_id} has neither intake nor outcome."
            )

    @property
    def episode_kind(self) -> EpisodeKind:
        """Classify the episode by which sides are present."""
        if self.outcome.is_missing:
            return "solitary-intake"
        if self.intake.is_missing:
            return "solitary-outcome"
        return "intake-outcome"


@dataclass(frozen=True)
class ReconciliationWarning:
    """Discrepancy detected while pairing one animal's events.

    Attributes:
        animal_id: Animal the discrepancy belongs to.
        code: Stable discrepancy category.
        message: Human-readable description.
        discarded_count: Number of events dropped by the discrepancy rule.
    """

    animal_id: str
    code: WarningCode
    message: str
    discarded_count: int = 0


@dataclass(frozen=True)
class IngestReport:
    """Row accounting for one ingested source.

    Attributes:
        schema: Source schema the rows were read with.
        rows_read: Total rows presented to the adapter.
        rows_ingested: Rows folded into the registry.
        rows_skipped: Rows rejected for a missing identifier or timestamp.
        intakes_added: Intake events appended to the registry.
        outcomes_added: Outcome events appended to the registry.
    """

    schema: SourceSchema
    rows_read: int
    rows_ingested: int
    rows_skipped: int
    intakes_added: int
    outcomes_added: int


@dataclass(frozen=True)
class SourceSpec:
    """One cleaned source file requested for a build.

    Attributes:
        schema: Source schema, or None to auto-detect a Sacramento extract.
        path: Local CSV path.
    """

    schema: SourceSchema | None
    path: str


def _all_missing(event: IntakeEvent | OutcomeEvent) -> bool:
    return all(getattr(event, item.name) is None for item in fields(event))


def as_naive_utc(value: datetime) -> datetime:
    """Return a timestamp comparable with naive source timestamps.

    Aware values are converted to UTC and stripped of their offset;
    naive values are returned unchanged.
    """
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
