"""Tests for stored row parsing."""

from datetime import UTC, datetime, timedelta, timezone

import pytest

from getfit.domain.profiles import Gender
from getfit.services.serialization import (
    EXERCISE_CODEC,
    format_timestamp,
    parse_timestamp,
    profile_from_dict,
)


def test_timestamps_are_normalized_to_utc() -> None:
    naive = parse_timestamp("2024-01-01T08:00:00")
    offset = datetime(2024, 1, 1, 10, 30, tzinfo=timezone(timedelta(hours=2)))

    assert naive == datetime(2024, 1, 1, 8, tzinfo=UTC)
    assert format_timestamp(offset) == "2024-01-01T08:30:00.000Z"
    with pytest.raises(ValueError):
        parse_timestamp(None)


def test_exercise_rows_from_older_clients() -> None:
    entry = EXERCISE_CODEC.decode(
        {
            "id": 1700000000000,
            "date": "2024-01-01T08:00:00.000Z",
            "name": "Walking (Steps)",
            "durationMinutes": "25",
            "caloriesBurned": 100,
            "steps": 2500,
        }
    )

    assert entry.id == "1700000000000"
    assert entry.duration_minutes == 25
    assert entry.steps == 2500


def test_profile_rows_fill_missing_fields() -> None:
    profile = profile_from_dict({"id": "p1", "name": "Mo", "gender": "male"})

    assert profile.gender == Gender.MALE
    assert profile.age == 0
    assert profile.target_weight is None
    assert profile.reminders == ()
