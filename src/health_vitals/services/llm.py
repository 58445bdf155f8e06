"""Text generation through an external LLM with rate-limit backoff."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

_logger = logging.getLogger(__name__)


class LlmError(Exception):
    """Base class for LLM failures."""


class LlmNotConfiguredError(LlmError):
    """Raised when no API credentials are configured."""


class RateLimitExceededError(LlmError):
    """Raised when the provider keeps answering with HTTP 429."""


class LlmUpstreamError(LlmError):
    """Raised for non rate-limit provider failures."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class LlmClient(Protocol):
    """Interface for a text completion provider."""

    async def complete(
        self,
        *,
        model: str,
        prompt: str,
        temperature: float,
        max_output_tokens: int,
    ) -> str:
        """Return the raw text produced for a prompt."""


def backoff_delay(attempt: int, base_seconds: float) -> float:
    """Delay before retry number ``attempt`` (0-based): 1s, 2s, 4s for base 1."""
    return base_seconds * (2**attempt)


@dataclass
class LlmService:
    """Sends prompts and retries rate-limited calls."""

    client: LlmClient | None
    model: str
    max_retries: int = 3
    backoff_base_seconds: float = 1.0

    @property
    def configured(self) -> bool:
        return self.client is not None

    async def generate(
        self, prompt: str, *, temperature: float = 0.3, max_output_tokens: int = 500
    ) -> str:
        """Return the model's text for a prompt, stripped of surrounding space."""
        if self.client is None:
            raise LlmNotConfiguredError("OPENAI_API_KEY is not configured")
        attempt = 0
        while True:
            try:
                text = await self.client.complete(
                    model=self.model,
                    prompt=prompt,
                    temperature=temperature,
                    max_output_tokens=max_output_tokens,
                )
                return text.strip()
            except RateLimitExceededError:
                if attempt >= self.max_retries:
                    _logger.warning(
                        "LLM rate limit persisted after %s retries", self.max_retries
                    )
                    raise
                delay = backoff_delay(attempt, self.backoff_base_seconds)
                _logger.info(
                    "LLM rate limited (attempt %s/%s), retrying in %.1fs",
                    attempt + 1,
                    self.max_retries + 1,
                    delay,
                )
                attempt += 1
                await asyncio.sleep(delay)
