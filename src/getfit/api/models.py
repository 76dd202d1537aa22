"""Request bodies for the tracker API."""

from datetime import datetime

from pydantic import BaseModel, Field

from getfit.domain.profiles import Gender


class MacrosIn(BaseModel):
    protein: float = Field(default=0.0, ge=0.0)
    carbs: float = Field(default=0.0, ge=0.0)
    fat: float = Field(default=0.0, ge=0.0)


class FoodIn(BaseModel):
    name: str = Field(min_length=1)
    calories: float = Field(ge=0.0)
    macros: MacrosIn | None = None
    image_url: str | None = None
    type: str | None = None
    date: datetime | None = None


class ExerciseIn(BaseModel):
    name: str = Field(min_length=1)
    duration_minutes: float = Field(gt=0.0)
    calories_burned: float = Field(ge=0.0)
    steps: int | None = Field(default=None, ge=0)
    date: datetime | None = None


class WeightIn(BaseModel):
    weight: float = Field(gt=0.0)
    date: datetime | None = None


class MeasurementIn(BaseModel):
    bust: float = Field(default=0.0, ge=0.0)
    waist: float = Field(default=0.0, ge=0.0)
    tummy: float = Field(default=0.0, ge=0.0)
    hips: float = Field(default=0.0, ge=0.0)
    thigh_left: float = Field(default=0.0, ge=0.0)
    thigh_right: float = Field(default=0.0, ge=0.0)
    arm_left: float = Field(default=0.0, ge=0.0)
    arm_right: float = Field(default=0.0, ge=0.0)
    calf_left: float = Field(default=0.0, ge=0.0)
    calf_right: float = Field(default=0.0, ge=0.0)


class StepsIn(BaseModel):
    total_steps: int = Field(ge=0)


class ProfileIn(BaseModel):
    name: str = Field(min_length=1)
    gender: Gender
    age: int = Field(gt=0)
    height_cm: int = Field(gt=0)
    target_weight: float | None = Field(default=None, gt=0.0)


class ReminderIn(BaseModel):
    time: str = "08:00"
    days: list[int] = Field(default_factory=lambda: [0, 1, 2, 3, 4, 5, 6])
    enabled: bool = True


class FoodEstimateIn(BaseModel):
    description: str | None = None
    image_base64: str | None = None


class ExerciseEstimateIn(BaseModel):
    activity: str
    duration_minutes: float
