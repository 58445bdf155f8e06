"""Tests for debounced autosave and food-quality re-scoring."""

import asyncio
from datetime import date

from health_vitals.services.autosave import AutosaveService, food_signature
from health_vitals.services.coach import CoachService
from health_vitals.services.entries import DailyEntryService
from health_vitals.services.llm import LlmService, LlmUpstreamError
from tests.conftest import FakeLlmClient, InMemoryDailyEntryRepository, food, make_entry

DAY = date(2024, 3, 4)


def _autosave(
    repository: InMemoryDailyEntryRepository, client: FakeLlmClient
) -> AutosaveService:
    return AutosaveService(
        entries=DailyEntryService(repository),
        coach=CoachService(llm=LlmService(client=client, model="m")),
        save_delay_seconds=0.01,
        food_quality_delay_seconds=0.03,
    )


def test_rapid_edits_save_once_with_latest_draft(
    entry_repository: InMemoryDailyEntryRepository, llm_client: FakeLlmClient
) -> None:
    autosave = _autosave(entry_repository, llm_client)

    async def run() -> list[str]:
        statuses = []
        for water in (1, 2, 3):
            autosave.stage(make_entry(DAY, water_intake=water))
            statuses.append(autosave.status("user-1", DAY))
        await asyncio.sleep(0.1)
        statuses.append(autosave.status("user-1", DAY))
        return statuses

    statuses = asyncio.run(run())

    assert statuses == ["pending", "pending", "pending", "saved"]
    assert entry_repository.saves == 1
    assert entry_repository.entries["user-1_2024-03-04"].health.water_intake == 3


def test_timer_for_inactive_date_does_not_write(
    entry_repository: InMemoryDailyEntryRepository, llm_client: FakeLlmClient
) -> None:
    autosave = _autosave(entry_repository, llm_client)

    async def run() -> None:
        autosave.stage(make_entry(DAY, foods={"lunch": [food("Dal", 300)]}))
        autosave.set_active_date("user-1", date(2024, 3, 5))
        await asyncio.sleep(0.1)

    asyncio.run(run())

    assert entry_repository.entries == {}
    assert autosave.status("user-1", DAY) == "skipped"
    assert autosave.active_date("user-1") == date(2024, 3, 5)
    assert llm_client.prompts == []


def test_persistence_failure_reports_unsaved(
    entry_repository: InMemoryDailyEntryRepository, llm_client: FakeLlmClient
) -> None:
    entry_repository.fail_saves = True
    autosave = _autosave(entry_repository, llm_client)

    async def run() -> None:
        autosave.stage(make_entry(DAY))
        await asyncio.sleep(0.1)

    asyncio.run(run())

    assert autosave.status("user-1", DAY) == "unsaved"


def test_food_change_triggers_rescore_once(
    entry_repository: InMemoryDailyEntryRepository, llm_client: FakeLlmClient
) -> None:
    llm_client.replies = ['{"score": 5, "reasoning": "Whole foods"}']
    autosave = _autosave(entry_repository, llm_client)
    entry = make_entry(DAY, foods={"lunch": [food("Sprouts salad", 250)]})

    async def run() -> None:
        autosave.stage(entry)
        await asyncio.sleep(0.15)
        wetter = entry.health.model_copy(update={"water_intake": 5})
        autosave.stage(entry.model_copy(update={"health": wetter}))
        await asyncio.sleep(0.15)

    asyncio.run(run())

    stored = entry_repository.entries["user-1_2024-03-04"]
    assert stored.health.food_quality_score == 5
    assert stored.health.water_intake == 5
    assert len(llm_client.prompts) == 1


def test_rescore_failure_keeps_previous_score(
    entry_repository: InMemoryDailyEntryRepository, llm_client: FakeLlmClient
) -> None:
    llm_client.replies = [LlmUpstreamError("down", status_code=503)]
    autosave = _autosave(entry_repository, llm_client)

    async def run() -> None:
        autosave.stage(make_entry(DAY, foods={"dinner": [food("Pizza", 900)]}))
        await asyncio.sleep(0.15)

    asyncio.run(run())

    assert entry_repository.entries["user-1_2024-03-04"].health.food_quality_score == 3
    assert autosave.status("user-1", DAY) == "saved"


def test_shutdown_flushes_pending_drafts(
    entry_repository: InMemoryDailyEntryRepository, llm_client: FakeLlmClient
) -> None:
    autosave = AutosaveService(
        entries=DailyEntryService(entry_repository),
        coach=CoachService(llm=LlmService(client=llm_client, model="m")),
        save_delay_seconds=60,
        food_quality_delay_seconds=60,
    )

    async def run() -> None:
        autosave.stage(make_entry(DAY, water_intake=4))
        await autosave.shutdown()

    asyncio.run(run())

    assert entry_repository.entries["user-1_2024-03-04"].health.water_intake == 4
    assert autosave.status("user-1", DAY) == "saved"


def test_food_signature_ignores_calorie_edits() -> None:
    before = make_entry(foods={"lunch": [food("Rice", 200, amount=1, unit="cup")]})
    after = make_entry(foods={"lunch": [food(" rice ", 250, amount=1, unit="cup")]})
    more = make_entry(foods={"lunch": [food("Rice", 400, amount=2, unit="cup")]})

    assert food_signature(before.food_logs) == food_signature(after.food_logs)
    assert food_signature(before.food_logs) != food_signature(more.food_logs)
