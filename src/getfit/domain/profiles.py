"""Domain models for user profiles and reminders."""

from dataclasses import dataclass, field
from enum import StrEnum


class Gender(StrEnum):
    """Gender used by the BMR formula."""

    MALE = "male"
    FEMALE = "female"


@dataclass(frozen=True)
class Reminder:
    """Exercise reminder fired at a wall-clock time on selected weekdays.

    Weekdays follow the Sunday-first convention: 0 is Sunday, 6 is Saturday.
    """

    id: str
    time: str
    days: tuple[int, ...] = (0, 1, 2, 3, 4, 5, 6)
    enabled: bool = True


@dataclass(frozen=True)
class Profile:
    """One tracked individual and their settings."""

    id: str
    name: str
    gender: Gender
    age: int
    height_cm: int
    target_weight: float | None = None
    reminders: tuple[Reminder, ...] = field(default_factory=tuple)
