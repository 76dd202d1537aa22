"""Food, exercise, weight and measurement endpoints."""

from __future__ import annotations

from datetime import UTC, date, datetime

from fastapi import APIRouter, Request

from getfit.api.helpers import as_aware, get_container, saved
from getfit.api.models import ExerciseIn, FoodIn, MeasurementIn, StepsIn, WeightIn
from getfit.domain.entries import (
    BodyMeasurements,
    ExerciseEntry,
    FoodEntry,
    Macros,
    WeightEntry,
)
from getfit.domain.stats import Period
from getfit.services.aggregation import filter_by_period
from getfit.services.entries import T
from getfit.services.serialization import (
    EXERCISE_CODEC,
    FOOD_CODEC,
    MEASUREMENT_CODEC,
    WEIGHT_CODEC,
)

router = APIRouter(tags=["entries"])


def _select(
    request: Request, entries: list[T], period: Period, day: date | None
) -> list[T]:
    context = get_container(request).context
    if day is not None:
        return context.on_day(entries, day)
    return filter_by_period(entries, period, datetime.now(tz=UTC))


@router.get("/foods")
async def list_foods(
    request: Request, period: Period = Period.ANNUAL, day: date | None = None
) -> dict[str, object]:
    """Return food entries for a day or look-back period, newest first."""
    context = get_container(request).context
    entries = _select(request, context.foods.list(), period, day)
    return {"entries": [FOOD_CODEC.encode(entry) for entry in entries]}


@router.post("/foods")
async def add_food(body: FoodIn, request: Request) -> dict[str, object]:
    container = get_container(request)
    context = container.context
    logged_at = as_aware(body.date, context.tz) if body.date else datetime.now(tz=UTC)
    created = context.log_food(
        FoodEntry(
            name=body.name,
            calories=body.calories,
            macros=Macros(**body.macros.model_dump()) if body.macros else None,
            image_url=body.image_url,
            type=body.type,
            logged_at=logged_at,
        )
    )
    return saved(container, {"entry": FOOD_CODEC.encode(created)})


@router.delete("/foods/{entry_id}")
async def delete_food(entry_id: str, request: Request) -> dict[str, object]:
    container = get_container(request)
    container.context.delete_food(entry_id)
    return saved(container, {"status": "ok"})


@router.get("/exercises")
async def list_exercises(
    request: Request, period: Period = Period.ANNUAL, day: date | None = None
) -> dict[str, object]:
    """Return exercise entries for a day or look-back period, newest first."""
    context = get_container(request).context
    entries = _select(request, context.exercises.list(), period, day)
    return {"entries": [EXERCISE_CODEC.encode(entry) for entry in entries]}


@router.post("/exercises")
async def add_exercise(body: ExerciseIn, request: Request) -> dict[str, object]:
    container = get_container(request)
    context = container.context
    logged_at = as_aware(body.date, context.tz) if body.date else datetime.now(tz=UTC)
    created = context.log_exercise(
        ExerciseEntry(
            name=body.name,
            duration_minutes=body.duration_minutes,
            calories_burned=body.calories_burned,
            steps=body.steps,
            logged_at=logged_at,
        )
    )
    return saved(container, {"entry": EXERCISE_CODEC.encode(created)})


@router.post("/exercises/steps")
async def sync_steps(body: StepsIn, request: Request) -> dict[str, object]:
    """Log the steps added since the last sync today."""
    container = get_container(request)
    created = container.step_sync_service.sync_steps(body.total_steps)
    if created is None:
        return {"accepted": False, "entry": None}
    return saved(
        container, {"accepted": True, "entry": EXERCISE_CODEC.encode(created)}
    )


@router.delete("/exercises/{entry_id}")
async def delete_exercise(entry_id: str, request: Request) -> dict[str, object]:
    container = get_container(request)
    container.context.delete_exercise(entry_id)
    return saved(container, {"status": "ok"})


@router.get("/weights")
async def list_weights(
    request: Request, period: Period = Period.ANNUAL
) -> dict[str, object]:
    """Return weight entries and the current weight."""
    context = get_container(request).context
    entries = filter_by_period(context.weights.list(), period, datetime.now(tz=UTC))
    return {
        "entries": [WEIGHT_CODEC.encode(entry) for entry in entries],
        "current_weight": context.latest_weight(),
    }


@router.post("/weights")
async def add_weight(body: WeightIn, request: Request) -> dict[str, object]:
    container = get_container(request)
    context = container.context
    logged_at = as_aware(body.date, context.tz) if body.date else datetime.now(tz=UTC)
    created = context.log_weight(WeightEntry(weight=body.weight, logged_at=logged_at))
    return saved(container, {"entry": WEIGHT_CODEC.encode(created)})


@router.delete("/weights/{entry_id}")
async def delete_weight(entry_id: str, request: Request) -> dict[str, object]:
    container = get_container(request)
    container.context.delete_weight(entry_id)
    return saved(container, {"status": "ok"})


@router.get("/measurements")
async def list_measurements(
    request: Request, period: Period = Period.ANNUAL
) -> dict[str, object]:
    context = get_container(request).context
    entries = filter_by_period(
        context.measurements.list(), period, datetime.now(tz=UTC)
    )
    return {"entries": [MEASUREMENT_CODEC.encode(entry) for entry in entries]}


@router.post("/measurements")
async def add_measurement(body: MeasurementIn, request: Request) -> dict[str, object]:
    """Log measurements stamped with the current weight."""
    container = get_container(request)
    created = container.context.log_measurement(
        BodyMeasurements(**body.model_dump())
    )
    return saved(container, {"entry": MEASUREMENT_CODEC.encode(created)})


@router.delete("/measurements/{entry_id}")
async def delete_measurement(entry_id: str, request: Request) -> dict[str, object]:
    container = get_container(request)
    container.context.delete_measurement(entry_id)
    return saved(container, {"status": "ok"})
