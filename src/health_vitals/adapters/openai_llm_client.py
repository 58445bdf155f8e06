"""OpenAI Responses API client for text completions."""

from dataclasses import dataclass

import httpx
from openai import APIConnectionError, APIStatusError, AsyncOpenAI, RateLimitError

from health_vitals.services.llm import (
    LlmClient,
    LlmUpstreamError,
    RateLimitExceededError,
)


@dataclass
class OpenAILlmClient(LlmClient):
    """LLM client backed by the OpenAI Responses API.

    SDK retries are disabled; ``LlmService`` owns the backoff policy.
    """

    client: AsyncOpenAI
    reasoning_effort: str | None = None
    store: bool = False

    @classmethod
    def create(
        cls,
        api_key: str,
        *,
        timeout_seconds: float = 30.0,
        reasoning_effort: str | None = None,
        store: bool = False,
    ) -> "OpenAILlmClient":
        """Create an OpenAI client with its own HTTP connection pool."""
        client = AsyncOpenAI(
            api_key=api_key,
            max_retries=0,
            http_client=httpx.AsyncClient(timeout=timeout_seconds),
        )
        return cls(client=client, reasoning_effort=reasoning_effort, store=store)

    async def complete(
        self,
        *,
        model: str,
        prompt: str,
        temperature: float,
        max_output_tokens: int,
    ) -> str:
        """Call the Responses API and return its output text."""
        request_payload: dict[str, object] = {
            "model": model,
            "input": prompt,
            "max_output_tokens": max_output_tokens,
            "store": self.store,
        }
        if self.reasoning_effort:
            # Reasoning models reject a sampling temperature.
            request_payload["reasoning"] = {"effort": self.reasoning_effort}
        else:
            request_payload["temperature"] = temperature

        try:
            response = await self.client.responses.create(**request_payload)
        except RateLimitError as exc:
            raise RateLimitExceededError("OpenAI rate limit exceeded") from exc
        except APIStatusError as exc:
            raise LlmUpstreamError(
                f"OpenAI request failed with status {exc.status_code}",
                status_code=exc.status_code,
            ) from exc
        except APIConnectionError as exc:
            raise LlmUpstreamError("Could not reach OpenAI") from exc

        # An empty reply is handed on; callers fall back to their defaults.
        return response.output_text or ""

    async def close(self) -> None:
        await self.client.close()
