"""Domain models for derived statistics."""

from dataclasses import dataclass
from datetime import date
from enum import StrEnum


@dataclass(frozen=True)
class DailyStats:
    """Calorie balance for one local calendar day.

    ``net`` is always ``intake - (bmr + burned)``: negative is a deficit.
    """

    day: date
    intake: float
    burned: float
    bmr: float
    net: float
    exercise_minutes: float
    protein: float | None = None
    carbs: float | None = None
    fat: float | None = None


class Granularity(StrEnum):
    """Bucket size for chart aggregation."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"


class Period(StrEnum):
    """Look-back window for entry lists."""

    DAILY = "daily"
    MONTHLY = "monthly"
    ANNUAL = "annual"


@dataclass(frozen=True)
class Bucket:
    """Aggregated value for one chart slot."""

    start: date
    label: str
    value: float
