"""Tests for pedometer step sync."""

import pytest

from getfit.domain.entries import ExerciseEntry
from getfit.domain.errors import ValidationError
from getfit.services.context import TrackerContext
from getfit.services.steps import (
    StepSyncService,
    calories_from_steps,
    minutes_from_steps,
)
from tests.conftest import at


def test_step_heuristics() -> None:
    assert calories_from_steps(2500) == 100
    assert calories_from_steps(1012) == 40
    assert minutes_from_steps(2500) == 25
    assert minutes_from_steps(2501) == 26


def test_sync_logs_only_the_delta(context: TrackerContext) -> None:
    service = StepSyncService(context)

    first = service.sync_steps(3000, now=at(2024, 5, 1, 9))
    second = service.sync_steps(4250, now=at(2024, 5, 1, 18))

    assert first is not None
    assert first.steps == 3000
    assert second is not None
    assert second.steps == 1250
    assert second.calories_burned == 50
    assert second.duration_minutes == 13
    assert second.name == "Walking (Steps)"
    assert service.logged_steps(at(2024, 5, 1).date()) == 4250


def test_sync_rejects_totals_not_above_logged(context: TrackerContext) -> None:
    service = StepSyncService(context)
    service.sync_steps(5000, now=at(2024, 5, 1, 9))

    assert service.sync_steps(5000, now=at(2024, 5, 1, 10)) is None
    assert service.sync_steps(4000, now=at(2024, 5, 1, 11)) is None
    assert len(context.exercises.list()) == 1


def test_sync_counts_steps_per_day(context: TrackerContext) -> None:
    service = StepSyncService(context)
    service.sync_steps(8000, now=at(2024, 5, 1, 20))

    entry = service.sync_steps(1200, now=at(2024, 5, 2, 8))

    assert entry is not None
    assert entry.steps == 1200


def test_manual_exercises_without_steps_are_ignored(context: TrackerContext) -> None:
    context.log_exercise(
        ExerciseEntry(
            name="Yoga",
            duration_minutes=45,
            calories_burned=150,
            logged_at=at(2024, 5, 1),
        )
    )

    entry = StepSyncService(context).sync_steps(100, now=at(2024, 5, 1, 13))

    assert entry is not None
    assert entry.steps == 100


def test_negative_total_is_rejected(context: TrackerContext) -> None:
    with pytest.raises(ValidationError):
        StepSyncService(context).sync_steps(-1)
