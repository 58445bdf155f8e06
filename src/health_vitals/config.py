"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    openai_api_key: str | None = None
    openai_model: str = "gpt-4.1-mini"
    openai_reasoning_effort: str | None = None
    openai_store: bool = False
    openai_timeout_seconds: float = 30.0
    estimate_cache_ttl_seconds: int = 300
    autosave_delay_seconds: float = 3.0
    food_quality_delay_seconds: float = 15.0
    llm_max_retries: int = 3
    llm_backoff_base_seconds: float = 1.0
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def llm_configured(self) -> bool:
        """Return True when an LLM API key is present."""
        return bool(self.openai_api_key and self.openai_api_key.strip())
