"""Greedy chronological pairing of intake and outcome events.

This module turns each animal's sorted event lists into impound
episodes. Data-quality defects never abort the run: they shape the
emitted episodes and produce structured warnings instead.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Mapping

from core.constants import (
    WARNING_EMPTY_EVENT,
    WARNING_EXTRA_OUTCOMES,
    WARNING_OUTCOME_OUT_OF_ORDER,
    WARNING_UNMATCHED_INTAKES,
)
from core.logging_config import get_logger
from core.types import (
    ImpoundEpisode,
    IntakeEvent,
    OutcomeEvent,
    ReconciliationWarning,
    WarningCode,
    as_naive_utc,
)
from registry.animal_registry import AnimalRecord, AnimalRegistry

_LOGGER = get_logger(__name__)


class DayRelation(Enum):
    """Calendar-day ordering of one timestamp relative to another."""

    EARLIER = "earlier"
    SAME = "same"
    LATER = "later"


@dataclass(frozen=True)
class AnimalReconciliation:
    """Episodes and warnings produced for one animal."""

    animal_id: str
    episodes: tuple[ImpoundEpisode, ...]
    warnings: tuple[ReconciliationWarning, ...]


@dataclass(frozen=True)
class ReconciliationResult:
    """Episodes for every animal plus the flat warning trail.

    Attributes:
        episodes: Episodes keyed by animal id, in reconciliation order.
        warnings: All warnings across animals.
    """

    episodes: Mapping[str, tuple[ImpoundEpisode, ...]]
    warnings: tuple[ReconciliationWarning, ...]

    @property
    def episode_count(self) -> int:
        """Return the total number of episodes across animals."""
        return sum(len(rows) for rows in self.episodes.values())


def compare_by_day(first: datetime, second: datetime) -> DayRelation:
    """Compare two timestamps by year, month and day only.

    Aware timestamps are compared on their UTC calendar day.

    Args:
        first: Timestamp being classified.
        second: Reference timestamp.

    Returns:
        Whether ``first`` falls on an earlier, the same, or a later day.
    """
    first_day = as_naive_utc(first).date()
    second_day = as_naive_utc(second).date()
    if first_day < second_day:
        return DayRelation.EARLIER
    if first_day > second_day:
        return DayRelation.LATER
    return DayRelation.SAME


def reconcile_animal(record: AnimalRecord) -> AnimalReconciliation:
    """Pair one animal's intakes and outcomes into impound episodes.

    Both event lists are stable-sorted in place first, so running this
    twice on the same record yields the same episodes.

    Args:
        record: Registry record with its accumulated events.

    Returns:
        Emitted episodes and discrepancy warnings for the animal.
    """
    record.sort_events()
    pairing = _EventPairing(record)
    pairing.run()
    return AnimalReconciliation(
        animal_id=record.animal_id,
        episodes=tuple(pairing.episodes),
        warnings=tuple(pairing.warnings),
    )


def reconcile_registry(
    registry: AnimalRegistry, sort_by_id: bool = False
) -> ReconciliationResult:
    """Reconcile every animal in a fully-populated registry.

    Args:
        registry: Registry after all sources were ingested.
        sort_by_id: Visit animals in identifier order instead of insertion order.

    Returns:
        Episodes keyed by animal id and all warnings.
    """
    episodes: dict[str, tuple[ImpoundEpisode, ...]] = {}
    warnings: list[ReconciliationWarning] = []
    for record in registry.records(sort_by_id=sort_by_id):
        outcome = reconcile_animal(record)
        episodes[record.animal_id] = outcome.episodes
        warnings.extend(outcome.warnings)
    result = ReconciliationResult(episodes=episodes, warnings=tuple(warnings))
    _LOGGER.info(
        "reconciliation_completed",
        animal_count=len(episodes),
        episode_count=result.episode_count,
        warning_count=len(warnings),
    )
    return result


class _EventPairing:
    """Two-cursor walk over one animal's sorted event lists."""

    def __init__(self, record: AnimalRecord) -> None:
        self._animal_id = record.animal_id
        self._intakes = record.intakes
        self._outcomes = record.outcomes
        self._next_intake = 0
        self._next_outcome = 0
        self.episodes: list[ImpoundEpisode] = []
        self.warnings: list[ReconciliationWarning] = []

    def run(self) -> None:
        while self._next_intake < len(self._intakes):
            if self._next_outcome >= len(self._outcomes):
                self._finish_unmatched_intakes()
                continue
            self._pair_next()
        self._finish_remaining_outcomes()

    def _finish_unmatched_intakes(self) -> None:
        remaining = len(self._intakes) - self._next_intake
        if remaining > 1:
            # Only the latest intake can describe current custody.
            self._warn("unmatched_intakes", WARNING_UNMATCHED_INTAKES, remaining - 1)
            self._emit(intake=self._intakes[-1])
            self._next_intake = len(self._intakes)
            return
        self._emit(intake=self._intakes[self._next_intake])
        self._next_intake += 1

    def _pair_next(self) -> None:
        intake = self._intakes[self._next_intake]
        outcome = self._outcomes[self._next_outcome]
        self._next_outcome += 1
        if not _outcome_precedes_intake(outcome, intake):
            self._emit(intake=intake, outcome=outcome)
            self._next_intake += 1
            return
        if self._next_intake == 0:
            # Intake happened before the observed window.
            self._emit(outcome=outcome)
            return
        self._warn("outcome_out_of_order", WARNING_OUTCOME_OUT_OF_ORDER, 1)

    def _finish_remaining_outcomes(self) -> None:
        remaining = self._outcomes[self._next_outcome :]
        if not remaining:
            return
        if not self._intakes:
            for outcome in remaining:
                self._emit(outcome=outcome)
        else:
            self._warn("extra_outcomes", WARNING_EXTRA_OUTCOMES, len(remaining))
        self._next_outcome = len(self._outcomes)

    def _emit(
        self,
        intake: IntakeEvent | None = None,
        outcome: OutcomeEvent | None = None,
    ) -> None:
        discarded = (intake is not None) + (outcome is not None)
        intake = intake if intake is not None else IntakeEvent()
        outcome = outcome if outcome is not None else OutcomeEvent()
        if intake.is_missing and outcome.is_missing:
            self._warn("empty_event", WARNING_EMPTY_EVENT, discarded)
            return
        self.episodes.append(
            ImpoundEpisode(animal_id=self._animal_id, intake=intake, outcome=outcome)
        )

    def _warn(self, code: WarningCode, message: str, discarded_count: int) -> None:
        warning = ReconciliationWarning(
            animal_id=self._animal_id,
            code=code,
            message=message,
            discarded_count=discarded_count,
        )
        self.warnings.append(warning)
        _LOGGER.warning(
            "reconciliation_warning",
            animal_id=self._animal_id,
            code=code,
            message=message,
            discarded_count=discarded_count,
        )


def _outcome_precedes_intake(outcome: OutcomeEvent, intake: IntakeEvent) -> bool:
    """Return whether the outcome falls on a strictly earlier day.

    Undated events cannot be ordered and are treated as pairable.
    """
    if outcome.outcome_date is None or intake.intake_date is None:
        return False
    return compare_by_day(outcome.outcome_date, intake.intake_date) is DayRelation.EARLIER
