"""Domain models for logged entries."""

from dataclasses import dataclass, field
from datetime import UTC, datetime


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(frozen=True)
class Macros:
    """Macronutrients in grams."""

    protein: float
    carbs: float
    fat: float


@dataclass(frozen=True)
class FoodEntry:
    """A logged food item."""

    name: str
    calories: float
    macros: Macros | None = None
    image_url: str | None = None
    type: str | None = None
    logged_at: datetime = field(default_factory=_utcnow)
    id: str = ""


@dataclass(frozen=True)
class ExerciseEntry:
    """A logged exercise session or pedometer delta."""

    name: str
    duration_minutes: float
    calories_burned: float
    steps: int | None = None
    logged_at: datetime = field(default_factory=_utcnow)
    id: str = ""


@dataclass(frozen=True)
class WeightEntry:
    """A body weight sample in kilograms."""

    weight: float
    logged_at: datetime = field(default_factory=_utcnow)
    id: str = ""


@dataclass(frozen=True)
class BodyMeasurements:
    """Body circumferences in centimetres."""

    bust: float = 0.0
    waist: float = 0.0
    tummy: float = 0.0
    hips: float = 0.0
    thigh_left: float = 0.0
    thigh_right: float = 0.0
    arm_left: float = 0.0
    arm_right: float = 0.0
    calf_left: float = 0.0
    calf_right: float = 0.0


@dataclass(frozen=True)
class MeasurementEntry:
    """A set of body measurements with the weight current at the time."""

    measurements: BodyMeasurements
    synced_weight: float | None = None
    logged_at: datetime = field(default_factory=_utcnow)
    id: str = ""
