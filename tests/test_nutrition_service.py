"""Tests for nutrition estimates."""

import asyncio
from datetime import UTC, datetime, timedelta

import pytest

from health_vitals.services.cache import InMemoryCache
from health_vitals.services.llm import LlmService
from health_vitals.services.nutrition import NutritionService, parse_estimate
from health_vitals.services.scheduling import RequestSupersededError
from tests.conftest import FakeLlmClient


def _service(
    client: FakeLlmClient, cache: InMemoryCache | None = None
) -> NutritionService:
    return NutritionService(
        llm=LlmService(client=client, model="m"),
        cache=cache or InMemoryCache(),
    )


def test_parse_estimate_from_json() -> None:
    estimate = parse_estimate('{"calories": 105.6, "protein": 1.3, "sodium": 1}')

    assert estimate.calories == 105
    assert estimate.protein == 1.3
    assert estimate.sodium == 1
    assert estimate.method == "ai"


def test_parse_estimate_reads_numbers_inside_strings() -> None:
    estimate = parse_estimate('{"calories": "about 250 kcal", "protein": "8g"}')

    assert estimate.calories == 250
    assert estimate.protein == 8
    assert estimate.sodium is None


def test_parse_estimate_regex_fallback() -> None:
    estimate = parse_estimate("calories: 320, Protein: 12.5 and sodium: 410 roughly")

    assert estimate.calories == 320
    assert estimate.protein == 12.5
    assert estimate.sodium == 410


def test_parse_estimate_unavailable_when_nothing_parses() -> None:
    estimate = parse_estimate("I cannot estimate that.")

    assert estimate.method == "unavailable"
    assert estimate.calories is None


def test_estimate_is_cached(llm_client: FakeLlmClient) -> None:
    llm_client.replies = ['{"calories": 95, "protein": 0.5, "sodium": 2}']
    service = _service(llm_client)

    async def run():
        first = await service.estimate("Apple", 1, "pc")
        second = await service.estimate("  APPLE ", 1, "pc")
        return first, second

    first, second = asyncio.run(run())

    assert first == second
    assert first.calories == 95
    assert len(llm_client.prompts) == 1
    assert "1 pc of Apple" in llm_client.prompts[0]


def test_cache_key_includes_amount(llm_client: FakeLlmClient) -> None:
    llm_client.replies = ['{"calories": 95}', '{"calories": 190}']
    service = _service(llm_client)

    async def run():
        return (
            await service.estimate("Apple", 1, "pc"),
            await service.estimate("Apple", 2, "pc"),
        )

    one, two = asyncio.run(run())

    assert (one.calories, two.calories) == (95, 190)
    assert len(llm_client.prompts) == 2


def test_cached_estimate_expires(llm_client: FakeLlmClient) -> None:
    now = datetime(2024, 3, 4, 12, tzinfo=UTC)
    cache = InMemoryCache(clock=lambda: now)
    llm_client.replies = ['{"calories": 95}', '{"calories": 96}']
    service = _service(llm_client, cache)

    first = asyncio.run(service.estimate("Apple"))
    now += timedelta(seconds=301)
    second = asyncio.run(service.estimate("Apple"))

    assert (first.calories, second.calories) == (95, 96)


def test_unavailable_estimates_are_not_cached(llm_client: FakeLlmClient) -> None:
    llm_client.replies = ["no idea", '{"calories": 120}']
    service = _service(llm_client)

    async def run():
        return await service.estimate("Mystery stew"), await service.estimate(
            "Mystery stew"
        )

    first, second = asyncio.run(run())

    assert first.method == "unavailable"
    assert second.calories == 120


def test_newer_estimate_supersedes_older_on_same_stream(
    llm_client: FakeLlmClient,
) -> None:
    llm_client.replies = ['{"calories": 50}', '{"calories": 100}']
    llm_client.delay_seconds = 0.05
    service = _service(llm_client)

    async def run():
        older = asyncio.create_task(service.estimate("Rice", 50, "g", stream="food-1"))
        await asyncio.sleep(0.01)
        newer = await service.estimate("Rice", 100, "g", stream="food-1")
        with pytest.raises(RequestSupersededError):
            await older
        return newer

    newer = asyncio.run(run())

    assert newer.calories == 100
