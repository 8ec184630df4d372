"""
Settings - Application configuration using Pydantic Settings.

Loads from environment variables and .env files. Plan tiers and model rates
are read-only once loaded; they are validated here so a misconfigured
deployment fails at startup instead of on the first request.
"""

from __future__ import annotations

from decimal import Decimal
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dinnerwise.domains.inference.models import ModelId, Plan

DEFAULT_PLAN_TIERS: dict[Plan, list[ModelId]] = {
    Plan.FREE: [ModelId.GPT_4O_MINI],
    Plan.PRO: [ModelId.GPT_4O, ModelId.GPT_4O_MINI],
    Plan.TEAM: [ModelId.GPT_4O, ModelId.GPT_4O_MINI],
}

# Blended USD per 1K tokens (prompt and completion priced alike)
DEFAULT_MODEL_RATES: dict[ModelId, Decimal] = {
    ModelId.GPT_4O: Decimal("0.010"),
    ModelId.GPT_4O_MINI: Decimal("0.0004"),
}


class Settings(BaseSettings):
    """Application settings."""

    # OpenAI
    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"
    openai_temperature: float = 0.7
    openai_max_tokens: int = 2000

    # Response cache
    cache_ttl_seconds: float = 900.0
    cache_max_entries: int = 1000

    # Retry / fallback
    max_retries: int = 3
    per_attempt_timeout_seconds: float = 10.0
    backoff_base_seconds: float = 0.5
    backoff_max_seconds: float = 8.0

    # Usage ledger
    ledger_timeout_seconds: float = 0.5

    # Plan -> model tier, richest first
    plan_tiers: dict[Plan, list[ModelId]] = DEFAULT_PLAN_TIERS
    model_rates: dict[ModelId, Decimal] = DEFAULT_MODEL_RATES

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_debug: bool = False

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("plan_tiers")
    @classmethod
    def _tiers_non_empty(cls, value: dict[Plan, list[ModelId]]) -> dict[Plan, list[ModelId]]:
        missing = [plan.value for plan in Plan if not value.get(plan)]
        if missing:
            raise ValueError(f"plan tiers missing or empty for: {', '.join(missing)}")
        return value

    @field_validator("model_rates")
    @classmethod
    def _rates_non_negative(cls, value: dict[ModelId, Decimal]) -> dict[ModelId, Decimal]:
        for model, rate in value.items():
            if rate < 0:
                raise ValueError(f"negative rate for {model.value}: {rate}")
        return value

    @field_validator("max_retries")
    @classmethod
    def _at_least_one_attempt(cls, value: int) -> int:
        if value < 1:
            raise ValueError("max_retries must be >= 1")
        return value


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
