"""JSON row codecs for stored records.

Rows use the camelCase keys of the exported backup format so files written by
older clients import unchanged.
"""

import json
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Generic, TypeVar

from getfit.domain.entries import (
    BodyMeasurements,
    ExerciseEntry,
    FoodEntry,
    Macros,
    MeasurementEntry,
    WeightEntry,
)
from getfit.domain.profiles import Gender, Profile, Reminder

T = TypeVar("T")

_MEASUREMENT_FIELDS = {
    "bust": "bust",
    "waist": "waist",
    "tummy": "tummy",
    "hips": "hips",
    "thigh_left": "thighLeft",
    "thigh_right": "thighRight",
    "arm_left": "armLeft",
    "arm_right": "armRight",
    "calf_left": "calfLeft",
    "calf_right": "calfRight",
}


@dataclass(frozen=True)
class RowCodec(Generic[T]):
    """Pair of functions converting a record to and from a JSON row."""

    encode: Callable[[T], dict[str, object]]
    decode: Callable[[dict[str, object]], T]


def parse_timestamp(raw: object) -> datetime:
    """Parse an ISO timestamp, treating naive values as UTC."""
    if not isinstance(raw, str) or not raw:
        raise ValueError(f"Invalid timestamp: {raw!r}")
    parsed = datetime.fromisoformat(raw)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def format_timestamp(value: datetime) -> str:
    """Format a timestamp as ISO 8601 in UTC with a ``Z`` suffix."""
    utc = value.astimezone(UTC)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _optional_float(raw: object) -> float | None:
    if raw is None or raw == "":
        return None
    return float(raw)


def _encode_food(entry: FoodEntry) -> dict[str, object]:
    row: dict[str, object] = {
        "id": entry.id,
        "date": format_timestamp(entry.logged_at),
        "name": entry.name,
        "calories": entry.calories,
    }
    if entry.macros is not None:
        row["macros"] = {
            "protein": entry.macros.protein,
            "carbs": entry.macros.carbs,
            "fat": entry.macros.fat,
        }
    if entry.image_url is not None:
        row["imageUrl"] = entry.image_url
    if entry.type is not None:
        row["type"] = entry.type
    return row


def _decode_food(row: dict[str, object]) -> FoodEntry:
    macros_raw = row.get("macros")
    macros = None
    if isinstance(macros_raw, dict):
        macros = Macros(
            protein=float(macros_raw.get("protein") or 0.0),
            carbs=float(macros_raw.get("carbs") or 0.0),
            fat=float(macros_raw.get("fat") or 0.0),
        )
    return FoodEntry(
        id=str(row["id"]),
        logged_at=parse_timestamp(row.get("date")),
        name=str(row.get("name", "")),
        calories=float(row.get("calories") or 0.0),
        macros=macros,
        image_url=row.get("imageUrl"),
        type=row.get("type"),
    )


def _encode_exercise(entry: ExerciseEntry) -> dict[str, object]:
    row: dict[str, object] = {
        "id": entry.id,
        "date": format_timestamp(entry.logged_at),
        "name": entry.name,
        "durationMinutes": entry.duration_minutes,
        "caloriesBurned": entry.calories_burned,
    }
    if entry.steps is not None:
        row["steps"] = entry.steps
    return row


def _decode_exercise(row: dict[str, object]) -> ExerciseEntry:
    steps = row.get("steps")
    return ExerciseEntry(
        id=str(row["id"]),
        logged_at=parse_timestamp(row.get("date")),
        name=str(row.get("name", "")),
        duration_minutes=float(row.get("durationMinutes") or 0.0),
        calories_burned=float(row.get("caloriesBurned") or 0.0),
        steps=int(steps) if steps is not None else None,
    )


def _encode_weight(entry: WeightEntry) -> dict[str, object]:
    return {
        "id": entry.id,
        "date": format_timestamp(entry.logged_at),
        "weight": entry.weight,
    }


def _decode_weight(row: dict[str, object]) -> WeightEntry:
    return WeightEntry(
        id=str(row["id"]),
        logged_at=parse_timestamp(row.get("date")),
        weight=float(row["weight"]),
    )


def _encode_measurement(entry: MeasurementEntry) -> dict[str, object]:
    row: dict[str, object] = {
        "id": entry.id,
        "date": format_timestamp(entry.logged_at),
        "measurements": {
            wire: getattr(entry.measurements, attr)
            for attr, wire in _MEASUREMENT_FIELDS.items()
        },
    }
    if entry.synced_weight is not None:
        row["syncedWeight"] = entry.synced_weight
    return row


def _decode_measurement(row: dict[str, object]) -> MeasurementEntry:
    raw = row.get("measurements")
    values = raw if isinstance(raw, dict) else {}
    measurements = BodyMeasurements(
        **{
            attr: float(values.get(wire) or 0.0)
            for attr, wire in _MEASUREMENT_FIELDS.items()
        }
    )
    return MeasurementEntry(
        id=str(row["id"]),
        logged_at=parse_timestamp(row.get("date")),
        measurements=measurements,
        synced_weight=_optional_float(row.get("syncedWeight")),
    )


FOOD_CODEC: RowCodec[FoodEntry] = RowCodec(_encode_food, _decode_food)
EXERCISE_CODEC: RowCodec[ExerciseEntry] = RowCodec(_encode_exercise, _decode_exercise)
WEIGHT_CODEC: RowCodec[WeightEntry] = RowCodec(_encode_weight, _decode_weight)
MEASUREMENT_CODEC: RowCodec[MeasurementEntry] = RowCodec(
    _encode_measurement, _decode_measurement
)


COLLECTION_CODECS: dict[str, RowCodec] = {
    "foods": FOOD_CODEC,
    "exercises": EXERCISE_CODEC,
    "weights": WEIGHT_CODEC,
    "measurements": MEASUREMENT_CODEC,
}


def decode_rows(raw: str, decode: Callable[[dict[str, object]], T]) -> list[T]:
    """Parse a stored JSON array of row objects.

    Raises ``ValueError`` when the text is not a JSON array of objects or a row
    cannot be decoded.
    """
    rows = json.loads(raw)
    if not isinstance(rows, list) or not all(isinstance(row, dict) for row in rows):
        raise ValueError("Expected a JSON array of objects")
    try:
        return [decode(row) for row in rows]
    except (TypeError, KeyError, AttributeError) as exc:
        raise ValueError(f"Undecodable row: {exc!r}") from exc


def reminder_to_dict(reminder: Reminder) -> dict[str, object]:
    """Serialize a reminder row."""
    return {
        "id": reminder.id,
        "time": reminder.time,
        "days": list(reminder.days),
        "enabled": reminder.enabled,
    }


def reminder_from_dict(row: dict[str, object]) -> Reminder:
    """Parse a reminder row."""
    days = row.get("days")
    return Reminder(
        id=str(row["id"]),
        time=str(row.get("time", "08:00")),
        days=tuple(sorted(int(day) for day in days)) if isinstance(days, list) else (),
        enabled=bool(row.get("enabled", True)),
    )


def profile_to_dict(profile: Profile) -> dict[str, object]:
    """Serialize a profile row."""
    row: dict[str, object] = {
        "id": profile.id,
        "name": profile.name,
        "gender": profile.gender.value,
        "age": profile.age,
        "heightCm": profile.height_cm,
        "reminders": [reminder_to_dict(reminder) for reminder in profile.reminders],
    }
    if profile.target_weight is not None:
        row["targetWeight"] = profile.target_weight
    return row


def profile_from_dict(row: dict[str, object]) -> Profile:
    """Parse a profile row."""
    reminders = row.get("reminders")
    return Profile(
        id=str(row["id"]),
        name=str(row.get("name", "User")),
        gender=Gender(str(row.get("gender", Gender.FEMALE.value))),
        age=int(row.get("age") or 0),
        height_cm=int(row.get("heightCm") or 0),
        target_weight=_optional_float(row.get("targetWeight")),
        reminders=tuple(
            reminder_from_dict(item) for item in reminders if isinstance(item, dict)
        )
        if isinstance(reminders, list)
        else (),
    )
