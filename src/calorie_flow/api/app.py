"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from calorie_flow.api.models import FoodCreate, ProfileUpdate, WaterAdd, WeightUpdate
from calorie_flow.app_logging import configure_logging
from calorie_flow.containers import AppContainer
from calorie_flow.domain.backup import Rejected
from calorie_flow.domain.metrics import Progress
from calorie_flow.services.backup import backup_filename, document_to_dict
from calorie_flow.services.codec import log_to_dict, profile_to_dict
from calorie_flow.services.tracker import (
    NoPendingImportError,
    NotReadyError,
    TrackerController,
)


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await app.state.container.tracker.load()
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(NotReadyError)
    async def not_ready(_request: Request, exc: NotReadyError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": str(exc)},
        )

    @app.get("/health")
    async def health(request: Request) -> dict[str, str]:
        """Simple health check endpoint."""
        tracker = _tracker(request)
        return {"status": "ok" if tracker.ready else "initializing"}

    @app.get("/profile")
    async def get_profile(request: Request) -> dict[str, object]:
        """Return the current profile and its daily target."""
        tracker = _tracker(request)
        return {
            "profile": profile_to_dict(tracker.state.profile),
            "target": tracker.daily_target(),
        }

    @app.patch("/profile")
    async def update_profile(
        payload: ProfileUpdate, request: Request
    ) -> dict[str, object]:
        """Merge partial profile fields."""
        tracker = _tracker(request)
        profile = tracker.update_profile(**payload.to_changes())
        return {"profile": profile_to_dict(profile), "target": tracker.daily_target()}

    @app.get("/today")
    async def today(request: Request) -> dict[str, object]:
        """Return today's log, target and progress."""
        tracker = _tracker(request)
        return {
            "date": tracker.today(),
            "log": log_to_dict(tracker.today_log()),
            "progress": _progress_to_dict(tracker.progress()),
        }

    @app.get("/logs/{day}")
    async def log_for_day(day: date, request: Request) -> dict[str, object]:
        """Return the log recorded on a date."""
        log = _tracker(request).log_for(day.isoformat())
        if log is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return {"log": log_to_dict(log)}

    @app.get("/history")
    async def history(
        request: Request, year: int | None = None, month: int | None = None
    ) -> dict[str, object]:
        """Return the dates of a month that have a log."""
        tracker = _tracker(request)
        current = tracker.now()
        resolved_year = year or current.year
        resolved_month = month or current.month
        if not 1 <= resolved_month <= 12:  # noqa: PLR2004
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY)
        return {
            "year": resolved_year,
            "month": resolved_month,
            "dates": tracker.history(resolved_year, resolved_month),
        }

    @app.get("/stats/weekly")
    async def weekly(request: Request) -> dict[str, object]:
        """Return the last seven days of calories against the target."""
        series = _tracker(request).weekly_calories()
        return {
            "days": [
                {"date": day.date, "calories": day.calories, "target": day.target}
                for day in series
            ]
        }

    @app.post("/foods", status_code=status.HTTP_201_CREATED)
    async def add_food(payload: FoodCreate, request: Request) -> dict[str, object]:
        """Log a food for today."""
        try:
            log = _tracker(request).add_food(payload.name, payload.calories)
        except ValueError as exc:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
            ) from exc
        return {"log": log_to_dict(log)}

    @app.delete("/foods/{food_id}")
    async def delete_food(food_id: str, request: Request) -> dict[str, object]:
        """Remove a food from today's log."""
        log = _tracker(request).delete_food(food_id)
        return {"log": log_to_dict(log)}

    @app.post("/weight")
    async def update_weight(
        payload: WeightUpdate, request: Request
    ) -> dict[str, object]:
        """Record today's weight."""
        tracker = _tracker(request)
        state = tracker.update_weight(payload.weight)
        return {
            "profile": profile_to_dict(state.profile),
            "log": log_to_dict(tracker.today_log()),
        }

    @app.post("/water")
    async def add_water(payload: WaterAdd, request: Request) -> dict[str, object]:
        """Add to today's water intake."""
        log = _tracker(request).add_water(payload.amount_ml)
        return {"log": log_to_dict(log)}

    @app.get("/export")
    async def export(request: Request) -> JSONResponse:
        """Download a backup of the full state."""
        container: AppContainer = request.app.state.container
        tracker = container.tracker
        document = tracker.export_snapshot()
        filename = backup_filename(tracker.today(), container.settings.backup_suffix)
        return JSONResponse(
            content=document_to_dict(document),
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    @app.post("/import")
    async def import_document(request: Request) -> JSONResponse:
        """Normalize an uploaded backup and stage it for confirmation."""
        tracker = _tracker(request)
        body = await request.body()
        try:
            raw_text = body.decode("utf-8")
        except UnicodeDecodeError:
            logger.warning("Rejected import: body is not UTF-8 text")
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content={"error": "parse", "detail": "Backup is not UTF-8 text"},
            )
        result = tracker.import_document(raw_text)
        if isinstance(result, Rejected):
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content={"error": result.kind.value, "detail": result.reason},
            )
        return JSONResponse(content={"ok": True, "preview": result.preview()})

    @app.post("/import/confirm")
    async def confirm_import(request: Request) -> dict[str, object]:
        """Replace the live state with the staged backup."""
        try:
            profile = _tracker(request).confirm_import()
        except NoPendingImportError as exc:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT, detail=str(exc)
            ) from exc
        return {"profile": profile_to_dict(profile)}

    @app.delete("/import")
    async def cancel_import(request: Request) -> dict[str, str]:
        """Discard a staged backup."""
        _tracker(request).cancel_import()
        return {"status": "ok"}

    return app


def _tracker(request: Request) -> TrackerController:
    container: AppContainer = request.app.state.container
    return container.tracker


def _progress_to_dict(progress: Progress) -> dict[str, object]:
    return {
        "target": progress.target,
        "consumed": progress.consumed,
        "remaining": progress.remaining,
        "percent": progress.percent,
        "rawPercent": progress.raw_percent,
        "overTarget": progress.over_target,
    }
