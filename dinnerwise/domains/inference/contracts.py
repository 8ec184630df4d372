"""
Inference Contracts - Interfaces for the inference domain.
"""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import Any, Protocol, runtime_checkable

from .models import CostRecord, InferenceResult, TransportResponse


@runtime_checkable
class Transport(Protocol):
    """Contract for the raw language-model call."""

    async def call(self, model: str, prompt: str, timeout: float) -> TransportResponse:
        """
        Send a prompt to a model.

        Args:
            model: Model identifier
            prompt: Fully rendered prompt
            timeout: Seconds the provider may take

        Returns:
            Completion text with token and latency figures

        Raises:
            TransientError: Timeout, rate limit, connection failure
            PermanentError: Malformed response, auth failure, rejected content
        """
        ...


@runtime_checkable
class UsageLedger(Protocol):
    """Contract for the external usage/billing ledger."""

    async def append(self, record: CostRecord) -> None:
        """
        Append a cost record.

        Raises:
            LedgerWriteError: Record could not be stored
        """
        ...


@runtime_checkable
class ResponseCache(Protocol):
    """Contract for result caching with in-flight deduplication."""

    async def get(self, fingerprint: str) -> InferenceResult | None:
        """Get a fresh cached result."""
        ...

    async def put(
        self,
        fingerprint: str,
        result: InferenceResult,
        ttl: float | None = None,
    ) -> None:
        """Cache a result, replacing any existing entry."""
        ...

    async def begin_in_flight(self, fingerprint: str) -> bool:
        """Claim a fingerprint. Returns True if someone else already holds it."""
        ...

    async def await_in_flight(
        self, fingerprint: str, timeout: float
    ) -> InferenceResult | None:
        """Wait for the holder to finish, then re-check the cache."""
        ...

    def end_in_flight(self, fingerprint: str) -> None:
        """Release a claim and wake waiters."""
        ...

    def claim(self, fingerprint: str) -> AbstractAsyncContextManager[bool]:
        """Scoped claim yielding True for the owner; released on every exit path."""
        ...

    def is_in_flight(self, fingerprint: str) -> bool:
        """True while some caller holds the claim."""
        ...

    def stats(self) -> dict[str, Any]:
        """Cache statistics."""
        ...
