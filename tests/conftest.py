"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field
from datetime import date

import pytest

from health_vitals.config import Settings
from health_vitals.containers import AppContainer
from health_vitals.domain.entries import (
    ActivityRecord,
    CustomFood,
    DailyEntry,
    FoodLogEntry,
    HealthInputs,
    Recommendation,
    entry_id,
)
from health_vitals.services.autosave import AutosaveService
from health_vitals.services.cache import InMemoryCache
from health_vitals.services.coach import CoachService
from health_vitals.services.entries import DailyEntryRepository, DailyEntryService
from health_vitals.services.llm import LlmClient, LlmService
from health_vitals.services.nutrition import NutritionService
from health_vitals.services.stats import StatsService


@dataclass
class InMemoryDailyEntryRepository(DailyEntryRepository):
    """In-memory daily entry repository for tests."""

    entries: dict[str, DailyEntry] = field(default_factory=dict)
    saves: int = 0
    fail_saves: bool = False

    def get_entry(self, user_id: str, day: date) -> DailyEntry | None:
        return self.entries.get(entry_id(user_id, day))

    def save_entry(self, entry: DailyEntry) -> None:
        if self.fail_saves:
            raise RuntimeError("storage unavailable")
        self.saves += 1
        self.entries[entry.id] = entry

    def replace_recommendations(
        self, user_id: str, day: date, recommendations: list[Recommendation] | None
    ) -> None:
        key = entry_id(user_id, day)
        stored = self.entries.get(key)
        if stored is not None:
            self.entries[key] = stored.model_copy(
                update={"recommendations": recommendations}
            )

    def list_entries(self, user_id: str) -> list[DailyEntry]:
        return [entry for entry in self.entries.values() if entry.user_id == user_id]


@dataclass
class FakeLlmClient(LlmClient):
    """Fake LLM client returning queued replies and recording prompts."""

    replies: list[str | Exception] = field(default_factory=list)
    default_reply: str = "{}"
    delay_seconds: float = 0.0
    prompts: list[str] = field(default_factory=list)
    calls: list[dict[str, object]] = field(default_factory=list)

    async def complete(
        self,
        *,
        model: str,
        prompt: str,
        temperature: float,
        max_output_tokens: int,
    ) -> str:
        self.prompts.append(prompt)
        self.calls.append(
            {
                "model": model,
                "temperature": temperature,
                "max_output_tokens": max_output_tokens,
            }
        )
        reply = self.replies.pop(0) if self.replies else self.default_reply
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)
        if isinstance(reply, Exception):
            raise reply
        return reply


def food(name: str, calories: int = 0, **values: object) -> CustomFood:
    return CustomFood(name=name, calories=calories, **values)


def make_entry(  # noqa: PLR0913
    day: date = date(2024, 3, 4),
    *,
    user_id: str = "user-1",
    foods: dict[str, list[CustomFood]] | None = None,
    active: int = 0,
    resting: int = 0,
    **health: object,
) -> DailyEntry:
    """Build an entry with foods grouped by meal type."""
    return DailyEntry(
        user_id=user_id,
        date=day,
        food_logs=[
            FoodLogEntry(meal_type=meal, custom_foods=items)
            for meal, items in (foods or {}).items()
        ],
        activity=ActivityRecord(active_calories=active, resting_calories=resting),
        health=HealthInputs(**health),
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="service.key.token",
        openai_api_key="openai-key",
        llm_backoff_base_seconds=0.0,
        autosave_delay_seconds=0.01,
        food_quality_delay_seconds=0.02,
    )


@pytest.fixture
def entry_repository() -> InMemoryDailyEntryRepository:
    return InMemoryDailyEntryRepository()


@pytest.fixture
def llm_client() -> FakeLlmClient:
    return FakeLlmClient()


@pytest.fixture
def container(
    settings: Settings,
    entry_repository: InMemoryDailyEntryRepository,
    llm_client: FakeLlmClient,
) -> AppContainer:
    llm_service = LlmService(
        client=llm_client,
        model=settings.openai_model,
        max_retries=settings.llm_max_retries,
        backoff_base_seconds=settings.llm_backoff_base_seconds,
    )
    entry_service = DailyEntryService(entry_repository)
    coach_service = CoachService(llm=llm_service)

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        llm_service=llm_service,
        nutrition_service=NutritionService(llm=llm_service, cache=InMemoryCache()),
        coach_service=coach_service,
        entry_service=entry_service,
        stats_service=StatsService(entry_service),
        autosave_service=AutosaveService(
            entries=entry_service,
            coach=coach_service,
            save_delay_seconds=settings.autosave_delay_seconds,
            food_quality_delay_seconds=settings.food_quality_delay_seconds,
        ),
        close_resources=close_resources,
    )
