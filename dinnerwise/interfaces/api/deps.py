"""
API Dependencies - Dependency injection for FastAPI routes.

Provides singleton instances of the transport, ledger and orchestrator.
"""

from __future__ import annotations

from functools import lru_cache

from dinnerwise.adapters import LoggingUsageLedger, OpenAIConfig, OpenAITransport
from dinnerwise.config import get_settings
from dinnerwise.domains.inference import InferenceOrchestrator, UsageLedger


@lru_cache
def get_transport() -> OpenAITransport:
    """Get OpenAI transport singleton."""
    settings = get_settings()
    return OpenAITransport(
        OpenAIConfig(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            temperature=settings.openai_temperature,
            max_tokens=settings.openai_max_tokens,
        )
    )


@lru_cache
def get_usage_ledger() -> UsageLedger:
    """Get usage ledger singleton."""
    return LoggingUsageLedger()


@lru_cache
def get_orchestrator() -> InferenceOrchestrator:
    """Get inference orchestrator singleton."""
    return InferenceOrchestrator.from_settings(
        get_settings(),
        get_transport(),
        get_usage_ledger(),
    )


async def init_services() -> None:
    """
    Build services on startup so configuration errors surface immediately.

    This should be called from the FastAPI lifespan handler.
    """
    get_orchestrator()


async def cleanup_services() -> None:
    """Cleanup services on shutdown."""
    await get_transport().aclose()
