"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import asdict
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import Depends, FastAPI, File, Form, HTTPException, Request, UploadFile
from pydantic import ValidationError

from calorie_tracker.api.auth import require_user
from calorie_tracker.api.errors import DOMAIN_ERRORS, to_http_error
from calorie_tracker.api.goals import router as goals_router
from calorie_tracker.api.schemas import BodyMetricsRequest
from calorie_tracker.app_logging import configure_logging
from calorie_tracker.containers import AppContainer
from calorie_tracker.domain.analysis import MealAnalysis
from calorie_tracker.domain.meals import MealRecord
from calorie_tracker.domain.stats import NutritionSummary
from calorie_tracker.services.calories import calculate
from calorie_tracker.services.stats import Period, macro_energy_split


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        try:
            await app.state.container.close_resources()
        except Exception:
            logger.exception("Failed to close application resources")

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(goals_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/calculator")
    async def calculator(body: BodyMetricsRequest) -> dict[str, object]:
        """Return BMR, TDEE and goal calorie levels for body metrics."""
        try:
            result = calculate(body.to_metrics())
        except DOMAIN_ERRORS as exc:
            raise to_http_error(exc) from exc
        return asdict(result)

    @app.post("/meals/analyze")
    async def analyze_meal(
        request: Request, image: UploadFile = File(...)
    ) -> dict[str, object]:
        """Analyze a meal photo without saving it."""
        state_container: AppContainer = request.app.state.container
        content = await image.read()
        try:
            analysis = await state_container.meal_service.analyze(
                content, image.filename or "meal.jpg", image.content_type
            )
        except DOMAIN_ERRORS as exc:
            logger.warning("Meal analysis failed: %s", exc)
            raise to_http_error(exc) from exc
        return _analysis_payload(analysis)

    @app.post("/meals", status_code=201)
    async def save_meal(
        request: Request,
        image: UploadFile = File(...),
        analysis: str = Form(...),
        user_id: str = Depends(require_user),
    ) -> dict[str, object]:
        """Save an analyzed meal and its photo to the user's history."""
        state_container: AppContainer = request.app.state.container
        try:
            parsed = MealAnalysis.model_validate_json(analysis)
        except ValidationError as exc:
            raise HTTPException(status_code=400, detail="Invalid analysis") from exc
        content = await image.read()
        try:
            meal = state_container.meal_service.save_to_history(
                user_id, content, image.content_type, parsed
            )
        except DOMAIN_ERRORS as exc:
            raise to_http_error(exc) from exc
        except Exception as exc:
            logger.exception("Failed to save meal for user %s", user_id)
            raise HTTPException(
                status_code=502, detail="Failed to save to history"
            ) from exc
        return {"meal": _meal_payload(meal)}

    @app.get("/meals")
    async def list_meals(
        request: Request, user_id: str = Depends(require_user)
    ) -> dict[str, object]:
        """Return the user's saved meals, most recent first."""
        state_container: AppContainer = request.app.state.container
        meals = state_container.meal_service.list_history(user_id)
        return {"meals": [_meal_payload(meal) for meal in meals]}

    @app.get("/summary")
    async def summary(
        request: Request,
        timezone: str | None = None,
        user_id: str = Depends(require_user),
    ) -> dict[str, object]:
        """Return day, month and year nutrition compared to the current goal."""
        state_container: AppContainer = request.app.state.container
        timezone_name = timezone or state_container.settings.default_timezone
        try:
            ZoneInfo(timezone_name)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise HTTPException(status_code=400, detail="Unknown timezone") from exc
        overview = state_container.stats_service.get_overview(user_id, timezone_name)
        return {
            "timezone": timezone_name,
            **{
                period.value: _summary_payload(overview[period])
                for period in Period
            },
        }

    return app


def _analysis_payload(analysis: MealAnalysis) -> dict[str, object]:
    split = macro_energy_split(
        analysis.total.protein, analysis.total.carbs, analysis.total.fat
    )
    return {
        "analysis": analysis.model_dump(),
        "macro_split": asdict(split),
    }


def _meal_payload(meal: MealRecord) -> dict[str, object]:
    payload = asdict(meal)
    payload["analyzed_at"] = meal.analyzed_at.isoformat()
    return payload


def _summary_payload(summary: NutritionSummary) -> dict[str, object]:
    return asdict(summary)
