"""Models for AI calorie estimates."""

from pydantic import BaseModel, ConfigDict, Field


class EstimatedMacros(BaseModel):
    """Macronutrient estimate in grams."""

    protein: float = Field(default=0.0, ge=0.0)
    carbs: float = Field(default=0.0, ge=0.0)
    fat: float = Field(default=0.0, ge=0.0)


class FoodEstimate(BaseModel):
    """Structured food estimate returned by the model."""

    model_config = ConfigDict(populate_by_name=True)

    food_name: str = Field(alias="foodName")
    calories: float = Field(ge=0.0)
    macros: EstimatedMacros | None = None
    confidence: str = "low"
    serving_size: str | None = Field(default=None, alias="servingSize")


class ExerciseEstimate(BaseModel):
    """Calories burned estimate for an activity."""

    calories: float = Field(ge=0.0)
