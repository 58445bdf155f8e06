"""Tests for LLM retry behaviour."""

import asyncio

import pytest

from health_vitals.services import llm as llm_module
from health_vitals.services.llm import (
    LlmNotConfiguredError,
    LlmService,
    LlmUpstreamError,
    RateLimitExceededError,
    backoff_delay,
)
from tests.conftest import FakeLlmClient


def test_backoff_delay_doubles() -> None:
    assert [backoff_delay(attempt, 1.0) for attempt in range(3)] == [1.0, 2.0, 4.0]


def test_generate_strips_text(llm_client: FakeLlmClient) -> None:
    llm_client.replies = ["  {\"ok\": true}\n"]
    service = LlmService(client=llm_client, model="test-model")

    text = asyncio.run(
        service.generate("prompt", temperature=0.5, max_output_tokens=42)
    )

    assert text == '{"ok": true}'
    assert llm_client.calls == [
        {"model": "test-model", "temperature": 0.5, "max_output_tokens": 42}
    ]


def test_generate_without_client_raises() -> None:
    service = LlmService(client=None, model="test-model")

    assert service.configured is False
    with pytest.raises(LlmNotConfiguredError):
        asyncio.run(service.generate("prompt"))


def test_rate_limit_retried_with_backoff(
    monkeypatch, llm_client: FakeLlmClient
) -> None:
    delays: list[float] = []

    async def fake_sleep(delay: float) -> None:
        delays.append(delay)

    monkeypatch.setattr(llm_module.asyncio, "sleep", fake_sleep)
    llm_client.replies = [RateLimitExceededError(), RateLimitExceededError(), "done"]
    service = LlmService(client=llm_client, model="m", backoff_base_seconds=1.0)

    assert asyncio.run(service.generate("prompt")) == "done"
    assert delays == [1.0, 2.0]
    assert len(llm_client.prompts) == 3


def test_rate_limit_surfaces_after_three_retries(
    monkeypatch, llm_client: FakeLlmClient
) -> None:
    delays: list[float] = []

    async def fake_sleep(delay: float) -> None:
        delays.append(delay)

    monkeypatch.setattr(llm_module.asyncio, "sleep", fake_sleep)
    llm_client.replies = [RateLimitExceededError() for _ in range(5)]
    service = LlmService(client=llm_client, model="m", max_retries=3)

    with pytest.raises(RateLimitExceededError):
        asyncio.run(service.generate("prompt"))
    assert delays == [1.0, 2.0, 4.0]
    assert len(llm_client.prompts) == 4


def test_upstream_errors_are_not_retried(llm_client: FakeLlmClient) -> None:
    llm_client.replies = [LlmUpstreamError("boom", status_code=500), "late"]
    service = LlmService(client=llm_client, model="m")

    with pytest.raises(LlmUpstreamError) as exc_info:
        asyncio.run(service.generate("prompt"))
    assert exc_info.value.status_code == 500
    assert len(llm_client.prompts) == 1
