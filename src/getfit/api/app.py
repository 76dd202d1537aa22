"""FastAPI application factory."""

import asyncio
import base64
import binascii
import contextlib
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import asdict
from datetime import date

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from getfit.api.entries import router as entries_router
from getfit.api.helpers import get_container
from getfit.api.models import ExerciseEstimateIn, FoodEstimateIn
from getfit.api.profiles import router as profiles_router
from getfit.app_logging import configure_logging
from getfit.containers import AppContainer
from getfit.domain.errors import PersistenceError, RemoteServiceError, ValidationError
from getfit.domain.stats import Bucket, DailyStats, Granularity


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        state_container: AppContainer = app.state.container
        reminder_task = asyncio.create_task(
            state_container.reminder_service.run(
                state_container.settings.reminder_poll_seconds
            )
        )
        yield
        reminder_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await reminder_task
        await state_container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(ValidationError)
    async def validation_error(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.exception_handler(RemoteServiceError)
    async def remote_error(request: Request, exc: RemoteServiceError) -> JSONResponse:
        return JSONResponse(status_code=502, content={"detail": str(exc)})

    @app.exception_handler(PersistenceError)
    async def persistence_error(
        request: Request, exc: PersistenceError
    ) -> JSONResponse:
        logger.error("Storage unavailable: %s", exc)
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    app.include_router(profiles_router)
    app.include_router(entries_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/stats/daily")
    async def daily_stats(
        request: Request, day: date | None = None
    ) -> dict[str, object]:
        """Return the calorie balance for a day, today by default."""
        stats_service = get_container(request).stats_service
        return _format_daily(stats_service.get_daily(day or stats_service.today()))

    @app.get("/stats/history")
    async def stats_history(
        request: Request, start: date, end: date
    ) -> dict[str, object]:
        stats_service = get_container(request).stats_service
        return {
            "days": [
                _format_daily(stats) for stats in stats_service.get_history(start, end)
            ]
        }

    @app.get("/stats/chart")
    async def stats_chart(
        request: Request,
        metric: str,
        start: date,
        end: date,
        granularity: Granularity = Granularity.DAY,
    ) -> dict[str, object]:
        """Return a bucketed series for a chart metric."""
        stats_service = get_container(request).stats_service
        buckets = stats_service.get_chart(metric, start, end, granularity)
        return {
            "metric": metric,
            "granularity": str(granularity),
            "buckets": [_format_bucket(bucket) for bucket in buckets],
        }

    @app.post("/estimate/food")
    async def estimate_food(
        body: FoodEstimateIn, request: Request
    ) -> dict[str, object]:
        """Estimate calories from a base64 photo and/or a description."""
        image_bytes = _decode_image(body.image_base64) if body.image_base64 else None
        estimate = await get_container(request).estimation_service.estimate_food(
            image_bytes=image_bytes, description=body.description
        )
        return estimate.model_dump(by_alias=True)

    @app.post("/estimate/exercise")
    async def estimate_exercise(
        body: ExerciseEstimateIn, request: Request
    ) -> dict[str, object]:
        estimate = await get_container(request).estimation_service.estimate_exercise(
            body.activity, body.duration_minutes
        )
        return estimate.model_dump()

    @app.get("/backup")
    async def export_backup(request: Request) -> JSONResponse:
        """Download every tracker key as a JSON backup file."""
        container = get_container(request)
        backup_service = container.backup_service
        filename = backup_service.filename(container.stats_service.today())
        return JSONResponse(
            content=backup_service.export(),
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    @app.post("/backup")
    async def import_backup(request: Request) -> dict[str, object]:
        """Replace all tracker data with an uploaded backup file."""
        result = get_container(request).backup_service.import_backup(
            await request.body()
        )
        return {
            "imported": result.imported,
            "meta": result.meta.model_dump(by_alias=True) if result.meta else None,
        }

    @app.post("/reset")
    async def reset(request: Request) -> dict[str, str]:
        """Delete all tracker data."""
        get_container(request).backup_service.reset()
        return {"status": "ok"}

    return app


def _format_daily(stats: DailyStats) -> dict[str, object]:
    payload = asdict(stats)
    payload["day"] = stats.day.isoformat()
    return payload


def _format_bucket(bucket: Bucket) -> dict[str, object]:
    return {
        "start": bucket.start.isoformat(),
        "label": bucket.label,
        "value": bucket.value,
    }


def _decode_image(encoded: str) -> bytes:
    """Decode base64 image data, accepting a ``data:`` URL prefix."""
    if encoded.startswith("data:") and "," in encoded:
        encoded = encoded.split(",", 1)[1]
    try:
        return base64.b64decode(encoded, validate=True)
    except binascii.Error as exc:
        raise ValidationError("Image data is not valid base64.") from exc
