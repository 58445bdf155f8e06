"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from health_vitals.adapters.openai_llm_client import OpenAILlmClient
from health_vitals.adapters.supabase_daily_entry_repository import (
    SupabaseDailyEntryRepository,
)
from health_vitals.config import Settings
from health_vitals.services.autosave import AutosaveService
from health_vitals.services.cache import InMemoryCache
from health_vitals.services.coach import CoachService
from health_vitals.services.entries import DailyEntryService
from health_vitals.services.llm import LlmService
from health_vitals.services.nutrition import NutritionService
from health_vitals.services.stats import StatsService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    llm_service: LlmService
    nutrition_service: NutritionService
    coach_service: CoachService
    entry_service: DailyEntryService
    stats_service: StatsService
    autosave_service: AutosaveService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    entry_service = DailyEntryService(SupabaseDailyEntryRepository(supabase_client))

    llm_client: OpenAILlmClient | None = None
    if resolved_settings.llm_configured:
        llm_client = OpenAILlmClient.create(
            resolved_settings.openai_api_key or "",
            timeout_seconds=resolved_settings.openai_timeout_seconds,
            reasoning_effort=resolved_settings.openai_reasoning_effort,
            store=resolved_settings.openai_store,
        )
    llm_service = LlmService(
        client=llm_client,
        model=resolved_settings.openai_model,
        max_retries=resolved_settings.llm_max_retries,
        backoff_base_seconds=resolved_settings.llm_backoff_base_seconds,
    )
    nutrition_service = NutritionService(
        llm=llm_service,
        cache=InMemoryCache(),
        estimate_ttl_seconds=resolved_settings.estimate_cache_ttl_seconds,
    )
    coach_service = CoachService(llm=llm_service)
    autosave_service = AutosaveService(
        entries=entry_service,
        coach=coach_service,
        save_delay_seconds=resolved_settings.autosave_delay_seconds,
        food_quality_delay_seconds=resolved_settings.food_quality_delay_seconds,
    )

    async def close_resources() -> None:
        if llm_client is not None:
            await llm_client.close()

    return AppContainer(
        settings=resolved_settings,
        llm_service=llm_service,
        nutrition_service=nutrition_service,
        coach_service=coach_service,
        entry_service=entry_service,
        stats_service=StatsService(entry_service),
        autosave_service=autosave_service,
        close_resources=close_resources,
    )
