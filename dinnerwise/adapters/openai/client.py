"""
OpenAI Transport - Chat completions over httpx.

Implements the inference domain's Transport contract. It makes exactly one
HTTP call per invocation; retries and fallback belong to the orchestrator.

Failure classes:
- 408, 409, 429, 5xx, connection errors, timeouts -> TransientError
- other 4xx, empty or unparseable bodies -> PermanentError
"""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx
from pydantic import BaseModel, Field

from dinnerwise.config.errors import ErrorCode, PermanentError, TransientError
from dinnerwise.domains.inference.models import TransportResponse
from dinnerwise.domains.inference.prompts import SYSTEM_PROMPT

logger = logging.getLogger(__name__)

__all__ = ["OpenAIConfig", "OpenAITransport"]

_TRANSIENT_STATUS = {408, 409, 429}


class OpenAIConfig(BaseModel):
    """Configuration for the OpenAI transport."""

    api_key: str = ""
    base_url: str = Field(default="https://api.openai.com/v1")
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=2000, gt=0)
    system_prompt: str = SYSTEM_PROMPT

    model_config = {"frozen": True}


class OpenAITransport:
    """
    Chat-completions client speaking the Transport contract.

    Example:
        >>> transport = OpenAITransport(OpenAIConfig(api_key="sk-..."))
        >>> response = await transport.call("gpt-4o-mini", prompt, timeout=10.0)
        >>> response.text, response.tokens
    """

    def __init__(
        self,
        config: OpenAIConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize transport.

        Args:
            config: Client configuration. Uses defaults if None.
            client: Shared HTTP client (connection pooling). Created if None.
        """
        self.config = config or OpenAIConfig()
        self._client = client or httpx.AsyncClient(base_url=self.config.base_url)
        self._owns_client = client is None

    async def call(self, model: str, prompt: str, timeout: float) -> TransportResponse:
        """Send one chat completion request."""
        body = {
            "model": model,
            "messages": [
                {"role": "system", "content": self.config.system_prompt},
                {"role": "user", "content": prompt},
            ],
            "temperature": self.config.temperature,
            "max_tokens": self.config.max_tokens,
        }

        start = time.perf_counter()
        try:
            response = await self._client.post(
                "/chat/completions",
                headers={
                    "Authorization": f"Bearer {self.config.api_key}",
                    "Content-Type": "application/json",
                },
                json=body,
                timeout=timeout,
            )
        except httpx.TimeoutException as e:
            raise TransientError(
                f"OpenAI request timed out: {e}", {"model": model}, code=ErrorCode.LLM_TIMEOUT
            ) from e
        except httpx.TransportError as e:
            raise TransientError(f"OpenAI connection failed: {e}", {"model": model}) from e
        latency_ms = (time.perf_counter() - start) * 1000

        self._raise_for_status(response, model)

        try:
            data = response.json()
        except ValueError as e:
            raise PermanentError("OpenAI returned a non-JSON body", {"model": model}) from e

        text = self._extract_text(data)
        if not text:
            raise PermanentError("No content received from OpenAI", {"model": model})

        usage = data.get("usage") or {}
        tokens = usage.get("total_tokens") or (
            usage.get("prompt_tokens", 0) + usage.get("completion_tokens", 0)
        )

        logger.debug("OpenAI %s: %d tokens in %.0fms", model, tokens, latency_ms)
        return TransportResponse(text=text, tokens=tokens, latency_ms=latency_ms)

    @staticmethod
    def _raise_for_status(response: httpx.Response, model: str) -> None:
        status = response.status_code
        if status < 400:
            return

        details = {"model": model, "status": status, "body": response.text[:500]}
        if status == 429:
            raise TransientError("OpenAI rate limit exceeded", details, code=ErrorCode.LLM_RATE_LIMITED)
        if status in _TRANSIENT_STATUS or status >= 500:
            raise TransientError(f"OpenAI API error: {status}", details)
        if status in (401, 403):
            raise PermanentError("OpenAI authentication failed", details, code=ErrorCode.LLM_AUTH_FAILED)

        logger.error("OpenAI error: %s %s", status, response.text[:200])
        raise PermanentError(f"OpenAI rejected request: {status}", details, code=ErrorCode.LLM_REJECTED)

    @staticmethod
    def _extract_text(data: dict[str, Any]) -> str:
        choices = data.get("choices") or []
        if not choices:
            return ""
        message = choices[0].get("message") or {}
        return message.get("content") or ""

    async def aclose(self) -> None:
        """Close the HTTP client if this transport created it."""
        if self._owns_client:
            await self._client.aclose()
