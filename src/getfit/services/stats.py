"""BMR and daily calorie balance derivation."""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta, tzinfo
from typing import Any

from getfit.domain.entries import ExerciseEntry, FoodEntry, WeightEntry
from getfit.domain.errors import ValidationError
from getfit.domain.profiles import Gender, Profile
from getfit.domain.stats import Bucket, DailyStats, Granularity
from getfit.services.aggregation import aggregate, local_date
from getfit.services.context import DEFAULT_WEIGHT_KG, TrackerContext

MALE_OFFSET = 5
FEMALE_OFFSET = -161


def compute_bmr(profile: Profile, weight_kg: float) -> float:
    """Return basal metabolic rate in kcal/day (Mifflin-St Jeor)."""
    bmr = 10 * weight_kg + 6.25 * profile.height_cm - 5 * profile.age
    if profile.gender == Gender.MALE:
        return bmr + MALE_OFFSET
    return bmr + FEMALE_OFFSET


def weight_for_date(
    weights: Sequence[WeightEntry],
    day: date,
    tz: tzinfo = UTC,
    default_kg: float = DEFAULT_WEIGHT_KG,
) -> float:
    """Return the weight that applies on a local calendar day.

    The latest sample logged on or before the end of ``day`` wins. Days before
    the first sample use the earliest known weight, and ``default_kg`` is used
    when no weight was ever logged.
    """
    if not weights:
        return default_kg
    ordered = sorted(weights, key=lambda entry: entry.logged_at)
    end_of_day = datetime.combine(day, time.max, tzinfo=tz)
    applicable = ordered[0].weight
    for entry in ordered:
        if entry.logged_at > end_of_day:
            break
        applicable = entry.weight
    return applicable


def compute_daily_stats(
    profile: Profile,
    weight_kg: float,
    foods: Sequence[FoodEntry],
    exercises: Sequence[ExerciseEntry],
    day: date,
) -> DailyStats:
    """Combine one day's entries with the BMR into a calorie balance."""
    intake = sum(food.calories for food in foods)
    burned = sum(exercise.calories_burned for exercise in exercises)
    bmr = compute_bmr(profile, weight_kg)
    macros = [food.macros for food in foods if food.macros is not None]
    return DailyStats(
        day=day,
        intake=intake,
        burned=burned,
        bmr=bmr,
        net=intake - (bmr + burned),
        exercise_minutes=sum(exercise.duration_minutes for exercise in exercises),
        protein=sum(macro.protein for macro in macros) if macros else None,
        carbs=sum(macro.carbs for macro in macros) if macros else None,
        fat=sum(macro.fat for macro in macros) if macros else None,
    )


CHART_METRICS: dict[
    str, tuple[Callable[[TrackerContext], list[Any]], Callable[[Any], float]]
] = {
    "intake": (
        lambda context: context.foods.list(),
        lambda food: food.calories,
    ),
    "burned": (
        lambda context: context.exercises.list(),
        lambda exercise: exercise.calories_burned,
    ),
    "exercise_minutes": (
        lambda context: context.exercises.list(),
        lambda exercise: exercise.duration_minutes,
    ),
    "steps": (
        lambda context: context.exercises.list(),
        lambda exercise: float(exercise.steps or 0),
    ),
}


@dataclass
class StatsService:
    """Daily stats and chart series for the context's active profile."""

    context: TrackerContext

    def today(self) -> date:
        return local_date(datetime.now(tz=UTC), self.context.tz)

    def weight_for(self, day: date) -> float:
        return weight_for_date(
            self.context.weights.list(),
            day,
            self.context.tz,
            self.context.default_weight_kg,
        )

    def get_daily(self, day: date) -> DailyStats:
        """Return the calorie balance for a local calendar day."""
        context = self.context
        return compute_daily_stats(
            context.active_profile,
            self.weight_for(day),
            context.on_day(context.foods.list(), day),
            context.on_day(context.exercises.list(), day),
            day,
        )

    def get_history(self, start: date, end: date) -> list[DailyStats]:
        """Return daily stats for every day in the inclusive range."""
        if end < start:
            raise ValidationError(f"Range end {end} is before start {start}")
        return [
            self.get_daily(start + timedelta(days=offset))
            for offset in range((end - start).days + 1)
        ]

    def get_chart(
        self,
        metric: str,
        start: date,
        end: date,
        granularity: Granularity = Granularity.DAY,
    ) -> list[Bucket]:
        """Return a bucketed series for one of ``CHART_METRICS``."""
        series = CHART_METRICS.get(metric)
        if series is None:
            raise ValidationError(f"Unknown chart metric: {metric}")
        entries, selector = series
        return aggregate(
            entries(self.context),
            selector,
            start,
            end,
            granularity,
            self.context.tz,
        )
