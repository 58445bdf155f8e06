"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import asdict
from datetime import date

from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from health_vitals.api.models import (
    ActiveDateRequest,
    EntryPayload,
    EntryRequest,
    EstimateCaloriesRequest,
    FoodLogsRequest,
    MetricsRequest,
    RoutineRequest,
    SleepHoursRequest,
    WeeklyInsightsRequest,
)
from health_vitals.app_logging import configure_logging
from health_vitals.containers import AppContainer
from health_vitals.domain.entries import DailyEntry
from health_vitals.services.entries import EntryNotFoundError
from health_vitals.services.insights import analyze_fruit_intake, build_food_guidance
from health_vitals.services.llm import (
    LlmNotConfiguredError,
    LlmUpstreamError,
    RateLimitExceededError,
)
from health_vitals.services.metrics import calculate_metrics, calculate_sleep_hours
from health_vitals.services.scheduling import RequestSupersededError


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        state_container: AppContainer = app.state.container
        await state_container.autosave_service.shutdown()
        await state_container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container
    _register_error_handlers(app)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/api/metrics")
    async def metrics(body: MetricsRequest) -> dict[str, object]:
        """Derive intake, burn, deficit and trend for a day."""
        result = calculate_metrics(body.food_logs, body.activity)
        return {"metrics": result.model_dump()}

    @app.post("/api/sleep-hours")
    async def sleep_hours(body: SleepHoursRequest) -> dict[str, float]:
        return {"hours": calculate_sleep_hours(body.wake_time, body.sleep_time)}

    @app.post("/api/insights/fruit")
    async def fruit_insights(body: FoodLogsRequest) -> dict[str, object]:
        return asdict(analyze_fruit_intake(body.food_logs))

    @app.post("/api/insights/food-guidance")
    async def heuristic_food_guidance(body: FoodLogsRequest) -> dict[str, object]:
        """Rule-based guidance that needs no LLM."""
        guidance = build_food_guidance(body.food_logs, veg_mode=body.veg_mode)
        return {"guidance": asdict(guidance)}

    @app.post("/api/estimate-calories")
    async def estimate_calories(
        body: EstimateCaloriesRequest, request: Request
    ) -> dict[str, object]:
        """Estimate calories, protein and sodium for a food portion."""
        state_container = _container(request)
        estimate = await state_container.nutrition_service.estimate(
            body.food_name, body.amount, body.unit, stream=body.stream
        )
        return estimate.model_dump()

    @app.post("/api/calculate-food-quality")
    async def calculate_food_quality(
        body: FoodLogsRequest, request: Request
    ) -> dict[str, object]:
        state_container = _container(request)
        result = await state_container.coach_service.score_food_quality(
            body.food_logs, stream=body.stream
        )
        return result.model_dump()

    @app.post("/api/get-daily-recommendations")
    async def daily_recommendations(
        body: EntryRequest, request: Request
    ) -> dict[str, object]:
        """Recommendations for a day, enriched with the stored week."""
        state_container = _container(request)
        entry = _with_metrics(body.entry)
        context = state_container.entry_service.get_weekly_context(
            entry.user_id, entry.date
        )
        recommendations = await state_container.coach_service.daily_recommendations(
            entry, context
        )
        return {"recommendations": [item.model_dump() for item in recommendations]}

    @app.post("/api/get-food-guidance")
    async def food_guidance(body: EntryRequest, request: Request) -> dict[str, object]:
        state_container = _container(request)
        entry = _with_metrics(body.entry)
        veg_mode = (
            body.veg_mode if body.veg_mode is not None else entry.health.veg_mode
        )
        guidance = await state_container.coach_service.food_guidance(
            entry, veg_mode=veg_mode
        )
        return {"guidance": asdict(guidance)}

    @app.post("/api/get-weekly-insights")
    async def weekly_insights(
        body: WeeklyInsightsRequest, request: Request
    ) -> dict[str, object]:
        state_container = _container(request)
        insights = await state_container.coach_service.weekly_insights(body.data)
        return insights.model_dump()

    @app.post("/api/evaluate-skincare-routine")
    async def evaluate_skincare_routine(
        body: RoutineRequest, request: Request
    ) -> dict[str, object]:
        state_container = _container(request)
        evaluation = await state_container.coach_service.evaluate_routine(body.steps)
        return evaluation.model_dump()

    @app.get("/users/{user_id}/entries/{day}")
    async def get_entry(user_id: str, day: date, request: Request) -> dict[str, object]:
        entry = _container(request).entry_service.require_entry(user_id, day)
        return entry.model_dump(mode="json")

    @app.put("/users/{user_id}/entries/{day}")
    async def save_entry(
        user_id: str, day: date, payload: EntryPayload, request: Request
    ) -> dict[str, object]:
        """Save a day immediately, recomputing its metrics."""
        entry_service = _container(request).entry_service
        saved = entry_service.save_entry(payload.to_entry(user_id, day))
        return saved.model_dump(mode="json")

    @app.delete("/users/{user_id}/entries/{day}/recommendations")
    async def clear_recommendations(
        user_id: str, day: date, request: Request
    ) -> dict[str, str]:
        _container(request).entry_service.clear_recommendations(user_id, day)
        return {"status": "cleared"}

    @app.post("/users/{user_id}/entries/{day}/recommendations")
    async def refresh_recommendations(
        user_id: str, day: date, request: Request
    ) -> dict[str, object]:
        """Clear stored recommendations and generate a fresh set."""
        state_container = _container(request)
        entry_service = state_container.entry_service
        entry_service.clear_recommendations(user_id, day)
        entry = _with_metrics(entry_service.require_entry(user_id, day))
        context = entry_service.get_weekly_context(user_id, day)
        recommendations = await state_container.coach_service.daily_recommendations(
            entry, context
        )
        entry_service.set_recommendations(user_id, day, recommendations)
        return {"recommendations": [item.model_dump() for item in recommendations]}

    @app.post("/users/{user_id}/entries/{day}/draft")
    async def stage_draft(
        user_id: str, day: date, payload: EntryPayload, request: Request
    ) -> dict[str, str]:
        """Queue a debounced save for the day."""
        autosave = _container(request).autosave_service
        return {"status": autosave.stage(payload.to_entry(user_id, day))}

    @app.get("/users/{user_id}/entries/{day}/save-status")
    async def save_status(user_id: str, day: date, request: Request) -> dict[str, str]:
        return {"status": _container(request).autosave_service.status(user_id, day)}

    @app.put("/users/{user_id}/active-date")
    async def set_active_date(
        user_id: str, body: ActiveDateRequest, request: Request
    ) -> dict[str, str]:
        _container(request).autosave_service.set_active_date(user_id, body.date)
        return {"user_id": user_id, "date": body.date.isoformat()}

    @app.get("/users/{user_id}/weekly-context")
    async def weekly_context(
        user_id: str, request: Request, day: date | None = None
    ) -> dict[str, object]:
        """Rolling seven-day context ending on ``day`` (today by default)."""
        context = _container(request).entry_service.get_weekly_context(
            user_id, day or date.today()
        )
        return {"context": asdict(context) if context else None}

    @app.get("/users/{user_id}/weekly")
    async def weekly_summary(
        user_id: str, week_start: date, request: Request
    ) -> dict[str, object]:
        summary = _container(request).stats_service.get_week(user_id, week_start)
        return {"summary": asdict(summary) if summary else None}

    @app.get("/users/{user_id}/monthly")
    async def monthly_summary(
        user_id: str,
        request: Request,
        year: int = Query(ge=1, le=9999),
        month: int = Query(ge=1, le=12),
    ) -> dict[str, object]:
        summary = _container(request).stats_service.get_month(user_id, year, month)
        return {"summary": asdict(summary) if summary else None}

    @app.get("/users/{user_id}/entries")
    async def list_entries(
        user_id: str,
        request: Request,
        start: date | None = None,
        end: date | None = None,
    ) -> dict[str, object]:
        """Entries for a user, oldest first, optionally within a date range."""
        entry_service = _container(request).entry_service
        if start is None and end is None:
            entries = entry_service.get_all_entries(user_id)
        else:
            entries = entry_service.get_entries_in_range(
                user_id, start or date.min, end or date.max
            )
        return {"entries": [entry.model_dump(mode="json") for entry in entries]}

    return app


def _register_error_handlers(app: FastAPI) -> None:
    logger = logging.getLogger(__name__)

    @app.exception_handler(RequestValidationError)
    async def invalid_request(
        _: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return _error(400, _first_validation_message(exc))

    @app.exception_handler(EntryNotFoundError)
    async def entry_not_found(_: Request, exc: EntryNotFoundError) -> JSONResponse:
        return _error(404, str(exc))

    @app.exception_handler(LlmNotConfiguredError)
    async def llm_not_configured(
        _: Request, exc: LlmNotConfiguredError
    ) -> JSONResponse:
        logger.error("LLM request without credentials")
        return _error(500, str(exc))

    @app.exception_handler(RateLimitExceededError)
    async def rate_limited(_: Request, exc: RateLimitExceededError) -> JSONResponse:
        return _error(
            429,
            "Rate limit exceeded. Please try again in a moment.",
            retry_after=True,
        )

    @app.exception_handler(LlmUpstreamError)
    async def upstream_failed(_: Request, exc: LlmUpstreamError) -> JSONResponse:
        logger.warning("LLM upstream failure: %s", exc)
        return _error(502, str(exc))

    @app.exception_handler(RequestSupersededError)
    async def superseded(_: Request, exc: RequestSupersededError) -> JSONResponse:
        return _error(409, "Superseded by a newer request", superseded=True)


def _container(request: Request) -> AppContainer:
    return request.app.state.container


def _with_metrics(entry: DailyEntry) -> DailyEntry:
    return entry.model_copy(
        update={"metrics": calculate_metrics(entry.food_logs, entry.activity)}
    )


def _error(status_code: int, message: str, **extra: object) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


def _first_validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = str(first.get("msg", "Invalid value"))
    return f"{location}: {message}" if location else message
