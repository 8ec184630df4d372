"""
Inference Orchestrator - Cached, deduplicated, plan-aware model calls.

Coordinates:
- Fingerprinting and the response cache fast path
- In-flight deduplication of concurrent identical requests
- Per-model retries with exponential backoff on transient failures
- Fallback down the plan's model tier on permanent failures or exhaustion
- Cost accounting for every successful upstream call
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from dinnerwise.config.errors import (
    ErrorCode,
    ExhaustedError,
    InvalidRequestError,
    PermanentError,
    TransientError,
)

from .accounting import CostAccountant
from .cache import ResponseCacheImpl
from .contracts import ResponseCache, Transport, UsageLedger
from .fingerprint import RequestFingerprinter
from .models import (
    FailureKind,
    InferenceRequest,
    InferenceResult,
    ModelFailure,
    ModelId,
    OrchestratorOptions,
    Recipe,
    TransportResponse,
)
from .prompts import build_prompt, parse_recipes
from .selector import ModelSelector

if TYPE_CHECKING:
    from dinnerwise.config.settings import Settings

logger = logging.getLogger(__name__)

__all__ = ["InferenceOrchestrator"]


class InferenceOrchestrator:
    """
    Turns a recipe request into one reliable, cost-bounded model call.

    Holds no mutable state of its own; everything shared lives in the cache.

    Example:
        >>> orchestrator = InferenceOrchestrator.from_settings(settings, transport, ledger)
        >>> result = await orchestrator.resolve(request)
        >>> result.model_used, result.cost_usd, result.cached
    """

    def __init__(
        self,
        transport: Transport,
        cache: ResponseCache,
        selector: ModelSelector,
        accountant: CostAccountant,
        fingerprinter: RequestFingerprinter | None = None,
        options: OrchestratorOptions | None = None,
    ) -> None:
        """
        Initialize orchestrator.

        Args:
            transport: Raw language-model call
            cache: Result cache with in-flight registry
            selector: Plan to model tier lookup
            accountant: Pricing and ledger writes
            fingerprinter: Cache key derivation
            options: Defaults for resolve() calls that pass none
        """
        self._transport = transport
        self._cache = cache
        self._selector = selector
        self._accountant = accountant
        self._fingerprinter = fingerprinter or RequestFingerprinter()
        self._options = options or OrchestratorOptions()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: Transport,
        ledger: UsageLedger,
    ) -> InferenceOrchestrator:
        """
        Build the orchestrator and its collaborators from configuration.

        Raises:
            ConfigurationError: Empty tier or a tiered model without a rate
        """
        selector = ModelSelector(settings.plan_tiers)
        accountant = CostAccountant(
            settings.model_rates,
            ledger,
            ledger_timeout=settings.ledger_timeout_seconds,
            required_models=selector.models,
        )
        cache = ResponseCacheImpl(
            max_size=settings.cache_max_entries,
            default_ttl=settings.cache_ttl_seconds,
        )
        options = OrchestratorOptions(
            max_retries=settings.max_retries,
            per_attempt_timeout=settings.per_attempt_timeout_seconds,
            cache_ttl=settings.cache_ttl_seconds,
            backoff_base=settings.backoff_base_seconds,
            backoff_max=settings.backoff_max_seconds,
        )
        return cls(transport, cache, selector, accountant, options=options)

    @property
    def options(self) -> OrchestratorOptions:
        return self._options

    @property
    def cache(self) -> ResponseCache:
        return self._cache

    async def resolve(
        self,
        request: InferenceRequest,
        options: OrchestratorOptions | None = None,
    ) -> InferenceResult:
        """
        Resolve a request to recipes.

        Args:
            request: Ingredients, preferences, tenant and plan
            options: Overrides for retries, timeouts and TTL

        Returns:
            InferenceResult, with ``cached`` set when no upstream call was made

        Raises:
            InvalidRequestError: No ingredients and no preferences
            ExhaustedError: Every model in the plan's tier failed
        """
        options = options or self._options

        if not request.has_content:
            raise InvalidRequestError(
                "Request needs at least one ingredient or some preferences",
                {"tenant_id": request.tenant_id},
            )

        fp = self._fingerprinter.fingerprint(request)

        cached = await self._cache.get(fp)
        if cached is not None:
            logger.debug("Cache hit for tenant=%s fp=%s", request.tenant_id, fp[:16])
            return cached.model_copy(update={"cached": True})

        loop = asyncio.get_running_loop()
        deadline = loop.time() + options.effective_in_flight_wait

        while True:
            async with self._cache.claim(fp) as owner:
                if owner:
                    return await self._resolve_and_store(fp, request, options)

            remaining = deadline - loop.time()
            if remaining <= 0:
                # Holder outlived the whole wait budget
                logger.info("Resolving %s independently of a stuck peer", fp[:16])
                return await self._resolve_and_store(fp, request, options)

            logger.debug("Request %s already in flight, waiting up to %.1fs", fp[:16], remaining)
            peer_result = await self._cache.await_in_flight(fp, remaining)
            if peer_result is not None:
                return peer_result.model_copy(update={"cached": True})
            # Holder finished without a result (or we timed out): race for the claim again

    async def _resolve_and_store(
        self,
        fp: str,
        request: InferenceRequest,
        options: OrchestratorOptions,
    ) -> InferenceResult:
        result = await self._resolve_upstream(request, options)
        await self._cache.put(fp, result, options.cache_ttl)
        return result

    async def _resolve_upstream(
        self,
        request: InferenceRequest,
        options: OrchestratorOptions,
    ) -> InferenceResult:
        """Walk the plan's tier in order until one model succeeds."""
        models = self._selector.models_for(request.plan)
        prompt = build_prompt(request)
        failures: list[ModelFailure] = []

        for model in models:
            outcome = await self._try_model(model, prompt, options)
            if isinstance(outcome, ModelFailure):
                failures.append(outcome)
                logger.warning(
                    "Model %s failed (%s after %d attempt(s)): %s",
                    model.value,
                    outcome.kind.value,
                    outcome.attempts,
                    outcome.reason,
                )
                continue

            response, recipes, latency_ms = outcome
            cost = self._accountant.cost(model, response.tokens)
            await self._accountant.record(request.tenant_id, model, response.tokens, cost)

            if failures:
                logger.info(
                    "Fell back to %s for tenant=%s after %d failed model(s)",
                    model.value,
                    request.tenant_id,
                    len(failures),
                )

            return InferenceResult(
                text=response.text,
                recipes=recipes,
                model_used=model,
                tokens_consumed=response.tokens,
                latency_ms=latency_ms,
                cost_usd=cost,
                cached=False,
            )

        logger.error(
            "All %d model(s) failed for tenant=%s plan=%s",
            len(models),
            request.tenant_id,
            request.plan.value,
        )
        raise ExhaustedError(
            f"All {len(models)} model(s) failed for plan '{request.plan.value}'",
            failures,
        )

    async def _try_model(
        self,
        model: ModelId,
        prompt: str,
        options: OrchestratorOptions,
    ) -> tuple[TransportResponse, list[Recipe], float] | ModelFailure:
        """
        Call one model with retries on transient failures.

        Returns:
            (response, recipes, latency_ms) on success, ModelFailure otherwise
        """
        attempts = 0
        retrying = AsyncRetrying(
            retry=retry_if_exception_type(TransientError),
            stop=stop_after_attempt(options.max_retries),
            wait=wait_exponential(multiplier=options.backoff_base, max=options.backoff_max),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    attempts = attempt.retry_state.attempt_number
                    start = time.perf_counter()
                    response = await self._call(model, prompt, options.per_attempt_timeout)
                    measured_ms = (time.perf_counter() - start) * 1000
            # A successful call with a malformed payload is not worth retrying
            recipes = parse_recipes(response.text)
        except TransientError as e:
            return ModelFailure(
                model=model, kind=FailureKind.TRANSIENT, attempts=attempts, reason=e.message
            )
        except PermanentError as e:
            return ModelFailure(
                model=model, kind=FailureKind.PERMANENT, attempts=attempts, reason=e.message
            )

        return response, recipes, response.latency_ms or measured_ms

    async def _call(self, model: ModelId, prompt: str, timeout: float) -> TransportResponse:
        """Single transport call, normalized to Transient/PermanentError."""
        try:
            return await asyncio.wait_for(
                self._transport.call(model.value, prompt, timeout),
                timeout,
            )
        except asyncio.TimeoutError as e:
            raise TransientError(
                f"{model.value} timed out after {timeout:.1f}s",
                code=ErrorCode.LLM_TIMEOUT,
            ) from e
        except (TransientError, PermanentError):
            raise
        except Exception as e:
            logger.exception("Unexpected transport failure on %s", model.value)
            raise PermanentError(
                f"Unexpected transport failure: {e}",
                code=ErrorCode.LLM_REJECTED,
            ) from e
