"""Unit tests for per-animal intake and outcome reconciliation."""

from __future__ import annotations

from datetime import datetime, timezone

from core.types import AnimalSnapshot, IntakeEvent, OutcomeEvent
from reconcile.engine import DayRelation, compare_by_day, reconcile_animal, reconcile_registry
from registry.animal_registry import AnimalRecord, AnimalRegistry


def _record(
    animal_id: str,
    intake_dates: tuple[datetime, ...] = (),
    outcome_dates: tuple[datetime, ...] = (),
) -> AnimalRecord:
    record = AnimalRecord.from_snapshot(
        AnimalSnapshot(animal_id=animal_id, observed_at=datetime(2016, 1, 1))
    )
    record.intakes.extend(IntakeEvent(intake_date=value) for value in intake_dates)
    record.outcomes.extend(OutcomeEvent(outcome_date=value) for value in outcome_dates)
    return record


def test_single_intake_without_outcome_is_solitary_intake() -> None:
    """Lone intake should become a solitary-intake episode without warnings."""
    result = reconcile_animal(_record("A1", intake_dates=(datetime(2016, 1, 10),)))

    assert [episode.episode_kind for episode in result.episodes] == ["solitary-intake"]
    assert result.episodes[0].outcome.is_missing and result.warnings == ()


def test_single_outcome_without_intake_is_solitary_outcome() -> None:
    """Lone outcome should become a solitary-outcome episode without warnings."""
    result = reconcile_animal(_record("A2", outcome_dates=(datetime(2016, 1, 5),)))

    assert [episode.episode_kind for episode in result.episodes] == ["solitary-outcome"]
    assert result.episodes[0].intake.is_missing and result.warnings == ()


def test_outcome_before_first_intake_splits_into_two_episodes() -> None:
    """Earlier outcome before the first intake should stand alone."""
    result = reconcile_animal(
        _record(
            "A3",
            intake_dates=(datetime(2016, 1, 10),),
            outcome_dates=(datetime(2016, 1, 9),),
        )
    )

    assert [episode.episode_kind for episode in result.episodes] == [
        "solitary-outcome",
        "solitary-intake",
    ]
    assert result.episodes[0].outcome.outcome_date == datetime(2016, 1, 9)
    assert result.warnings == ()


def test_multiple_unmatched_intakes_keep_only_latest() -> None:
    """Surplus intakes should warn once and keep the latest intake."""
    result = reconcile_animal(
        _record("A4", intake_dates=(datetime(2016, 2, 1), datetime(2016, 1, 1)))
    )

    assert len(result.episodes) == 1
    assert result.episodes[0].intake.intake_date == datetime(2016, 2, 1)
    assert [warning.message for warning in result.warnings] == ["Intake not matched with outcome"]
    assert result.warnings[0].discarded_count == 1


def test_surplus_outcomes_are_discarded_with_warning() -> None:
    """Outcomes left after the last intake should warn and not be emitted."""
    result = reconcile_animal(
        _record(
            "A5",
            intake_dates=(datetime(2016, 1, 1),),
            outcome_dates=(datetime(2016, 1, 5), datetime(2016, 1, 10)),
        )
    )

    assert [episode.episode_kind for episode in result.episodes] == ["intake-outcome"]
    assert result.episodes[0].outcome.outcome_date == datetime(2016, 1, 5)
    assert [warning.code for warning in result.warnings] == ["extra_outcomes"]
    assert result.warnings[0].message == "Extra outcomes remaining"


def test_in_order_pair_yields_one_episode_without_warnings() -> None:
    """One intake followed by one outcome should pair cleanly."""
    result = reconcile_animal(
        _record(
            "A6",
            intake_dates=(datetime(2016, 3, 1, 9, 0),),
            outcome_dates=(datetime(2016, 3, 4, 17, 0),),
        )
    )

    assert [episode.episode_kind for episode in result.episodes] == ["intake-outcome"]
    assert result.warnings == ()


def test_same_day_outcome_pairs_regardless_of_time_of_day() -> None:
    """Outcome earlier in the day than its intake should still pair."""
    result = reconcile_animal(
        _record(
            "A7",
            intake_dates=(datetime(2016, 3, 1, 15, 0),),
            outcome_dates=(datetime(2016, 3, 1, 8, 0),),
        )
    )

    assert [episode.episode_kind for episode in result.episodes] == ["intake-outcome"]


def test_outcome_out_of_order_after_first_intake_is_discarded() -> None:
    """Outcome earlier than a later intake should warn and be dropped."""
    result = reconcile_animal(
        _record(
            "A8",
            intake_dates=(datetime(2016, 1, 1), datetime(2016, 2, 10)),
            outcome_dates=(datetime(2016, 1, 5), datetime(2016, 2, 1), datetime(2016, 2, 20)),
        )
    )

    assert [episode.episode_kind for episode in result.episodes] == [
        "intake-outcome",
        "intake-outcome",
    ]
    assert result.episodes[1].outcome.outcome_date == datetime(2016, 2, 20)
    assert [warning.code for warning in result.warnings] == ["outcome_out_of_order"]


def test_multiple_outcomes_without_intakes_are_all_emitted() -> None:
    """Animals with no intakes should keep every outcome as its own episode."""
    result = reconcile_animal(
        _record("A9", outcome_dates=(datetime(2016, 1, 9), datetime(2016, 1, 2)))
    )

    assert [episode.outcome.outcome_date for episode in result.episodes] == [
        datetime(2016, 1, 2),
        datetime(2016, 1, 9),
    ]
    assert result.warnings == ()


def test_reconcile_animal_is_idempotent() -> None:
    """Reconciling the same record twice should produce identical output."""
    record = _record(
        "A10",
        intake_dates=(datetime(2016, 2, 1), datetime(2016, 1, 1)),
        outcome_dates=(datetime(2016, 2, 3), datetime(2016, 1, 4)),
    )

    first = reconcile_animal(record)
    second = reconcile_animal(record)

    assert first == second and len(first.episodes) == 2


def test_reconcile_animal_keeps_insertion_order_for_equal_timestamps() -> None:
    """Same-time intakes should pair in the order they were ingested."""
    same_time = datetime(2016, 1, 1, 9, 0)
    record = _record("A11")
    record.intakes.extend(
        (
            IntakeEvent(intake_date=same_time, intake_type="First"),
            IntakeEvent(intake_date=same_time, intake_type="Second"),
        )
    )
    record.outcomes.extend(
        (
            OutcomeEvent(outcome_date=datetime(2016, 1, 2), outcome_type="Transfer"),
            OutcomeEvent(outcome_date=datetime(2016, 1, 3), outcome_type="Adoption"),
        )
    )

    result = reconcile_animal(record)

    assert [
        (episode.intake.intake_type, episode.outcome.outcome_type) for episode in result.episodes
    ] == [("First", "Transfer"), ("Second", "Adoption")]


def test_reconcile_registry_collects_episodes_and_warnings() -> None:
    """Registry reconciliation should key episodes by animal id."""
    registry = AnimalRegistry()
    for animal_id in ("B2", "B1"):
        registry.upsert(AnimalSnapshot(animal_id=animal_id, observed_at=datetime(2016, 1, 1)))
    registry.add_intake("B1", IntakeEvent(intake_date=datetime(2016, 1, 1)))
    registry.add_intake("B2", IntakeEvent(intake_date=datetime(2016, 1, 1)))
    registry.add_intake("B2", IntakeEvent(intake_date=datetime(2016, 1, 2)))

    result = reconcile_registry(registry, sort_by_id=True)

    assert list(result.episodes) == ["B1", "B2"]
    assert result.episode_count == 2
    assert [warning.animal_id for warning in result.warnings] == ["B2"]


def test_compare_by_day_ignores_time_of_day() -> None:
    """Calendar-day comparison should only look at the date."""
    morning = datetime(2016, 1, 10, 1, 0)

    assert compare_by_day(morning, datetime(2016, 1, 10, 23, 0)) is DayRelation.SAME
    assert compare_by_day(morning, datetime(2016, 1, 11)) is DayRelation.EARLIER
    assert compare_by_day(morning, datetime(2016, 1, 9, 23, 59)) is DayRelation.LATER


def test_empty_intake_is_dropped_with_warning() -> None:
    """An intake with no values should leave a warning instead of an episode."""
    record = _record("A12")
    record.intakes.append(IntakeEvent())

    result = reconcile_animal(record)

    assert result.episodes == ()
    assert [(warning.code, warning.discarded_count) for warning in result.warnings] == [
        ("empty_event", 1)
    ]


def test_emitted_episodes_never_have_two_missing_sides() -> None:
    """Empty events should never surface as all-missing episodes."""
    record = _record("A13", intake_dates=(datetime(2016, 1, 1),))
    record.intakes.append(IntakeEvent())
    record.outcomes.extend((OutcomeEvent(), OutcomeEvent()))

    result = reconcile_animal(record)

    assert result.episodes
    assert all(
        not (episode.intake.is_missing and episode.outcome.is_missing)
        for episode in result.episodes
    )


def test_compare_by_day_mixes_aware_and_naive_timestamps() -> None:
    """Aware timestamps should compare on their UTC calendar day."""
    late_evening_utc = datetime(2016, 1, 10, 23, 30, tzinfo=timezone.utc)

    assert compare_by_day(late_evening_utc, datetime(2016, 1, 10, 8, 0)) is DayRelation.SAME
    assert compare_by_day(datetime(2016, 1, 9), late_evening_utc) is DayRelation.EARLIER
