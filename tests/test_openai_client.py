"""Tests for the OpenAI LLM client."""

import asyncio

import httpx
import pytest
from openai import APIConnectionError, APIStatusError, RateLimitError

from health_vitals.adapters.openai_llm_client import OpenAILlmClient
from health_vitals.services.llm import LlmUpstreamError, RateLimitExceededError

_REQUEST = httpx.Request("POST", "https://api.openai.com/v1/responses")


class _FakeResponse:
    def __init__(self, output_text: str) -> None:
        self.output_text = output_text


class _FakeResponses:
    def __init__(self, result: object) -> None:
        self.result = result
        self.last_payload: dict[str, object] | None = None

    async def create(self, **kwargs):  # type: ignore[no-untyped-def]
        self.last_payload = kwargs
        if isinstance(self.result, Exception):
            raise self.result
        return _FakeResponse(str(self.result))


class _FakeOpenAI:
    def __init__(self, result: object) -> None:
        self.responses = _FakeResponses(result)
        self.closed = False

    async def close(self) -> None:
        self.closed = True


def _complete(client: OpenAILlmClient) -> str:
    return asyncio.run(
        client.complete(
            model="gpt-4.1-mini",
            prompt="Rate foods",
            temperature=0.3,
            max_output_tokens=200,
        )
    )


def test_complete_sends_prompt_with_temperature() -> None:
    fake = _FakeOpenAI('{"score": 4}')
    client = OpenAILlmClient(client=fake)

    assert _complete(client) == '{"score": 4}'
    assert fake.responses.last_payload == {
        "model": "gpt-4.1-mini",
        "input": "Rate foods",
        "max_output_tokens": 200,
        "store": False,
        "temperature": 0.3,
    }


def test_reasoning_effort_replaces_temperature() -> None:
    fake = _FakeOpenAI("ok")
    client = OpenAILlmClient(client=fake, reasoning_effort="low", store=True)

    _complete(client)

    payload = fake.responses.last_payload
    assert payload is not None
    assert payload["reasoning"] == {"effort": "low"}
    assert payload["store"] is True
    assert "temperature" not in payload


def test_rate_limit_maps_to_domain_error() -> None:
    error = RateLimitError(
        "slow down", response=httpx.Response(429, request=_REQUEST), body=None
    )

    with pytest.raises(RateLimitExceededError):
        _complete(OpenAILlmClient(client=_FakeOpenAI(error)))


def test_status_error_maps_to_upstream_error() -> None:
    error = APIStatusError(
        "bad gateway", response=httpx.Response(503, request=_REQUEST), body=None
    )

    with pytest.raises(LlmUpstreamError) as exc_info:
        _complete(OpenAILlmClient(client=_FakeOpenAI(error)))
    assert exc_info.value.status_code == 503


def test_connection_error_maps_to_upstream_error() -> None:
    error = APIConnectionError(request=_REQUEST)

    with pytest.raises(LlmUpstreamError):
        _complete(OpenAILlmClient(client=_FakeOpenAI(error)))


def test_empty_output_is_returned_as_empty_text() -> None:
    assert _complete(OpenAILlmClient(client=_FakeOpenAI(""))) == ""


def test_create_and_close() -> None:
    client = OpenAILlmClient.create("sk-test", timeout_seconds=5, store=True)

    assert client.client.max_retries == 0
    assert client.store is True
    asyncio.run(client.close())
