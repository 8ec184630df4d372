"""
Error Taxonomy - Consistent error codes across the application.

Usage:
    from dinnerwise.config.errors import ErrorCode, DinnerwiseError

    raise DinnerwiseError(ErrorCode.VALIDATION_ERROR, "Request has no content")
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from dinnerwise.domains.inference.models import ModelFailure


class ErrorCode(str, Enum):
    """Standardized error codes for machine-readable error responses."""

    # Request errors
    INFERENCE_INVALID_REQUEST = "INFERENCE_INVALID_REQUEST"

    # Inference errors
    INFERENCE_EXHAUSTED = "INFERENCE_EXHAUSTED"

    # LLM/Model errors
    LLM_UNAVAILABLE = "LLM_UNAVAILABLE"
    LLM_RATE_LIMITED = "LLM_RATE_LIMITED"
    LLM_TIMEOUT = "LLM_TIMEOUT"
    LLM_INVALID_RESPONSE = "LLM_INVALID_RESPONSE"
    LLM_AUTH_FAILED = "LLM_AUTH_FAILED"
    LLM_REJECTED = "LLM_REJECTED"

    # Ledger errors
    LEDGER_WRITE_FAILED = "LEDGER_WRITE_FAILED"

    # Configuration errors
    CONFIG_INVALID = "CONFIG_INVALID"

    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"


class DinnerwiseError(Exception):
    """Base exception with error code support."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(f"[{code.value}] {message}")

    def to_dict(self) -> dict[str, Any]:
        """Convert to API-friendly dictionary."""
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
        }


class InvalidRequestError(DinnerwiseError):
    """Caller sent a request with nothing to cook from."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.INFERENCE_INVALID_REQUEST, message, details)


class TransientError(DinnerwiseError):
    """Retryable provider failure (timeout, rate limit, connection)."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        code: ErrorCode = ErrorCode.LLM_UNAVAILABLE,
    ) -> None:
        super().__init__(code, message, details)


class PermanentError(DinnerwiseError):
    """Provider failure that will not succeed on the same model."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        code: ErrorCode = ErrorCode.LLM_INVALID_RESPONSE,
    ) -> None:
        super().__init__(code, message, details)


class ExhaustedError(DinnerwiseError):
    """Every model in the plan's tier failed."""

    def __init__(self, message: str, failures: list[ModelFailure]) -> None:
        self.failures = list(failures)
        super().__init__(
            ErrorCode.INFERENCE_EXHAUSTED,
            message,
            {"failures": [f.model_dump(mode="json") for f in self.failures]},
        )


class LedgerWriteError(DinnerwiseError):
    """Usage ledger rejected a cost record."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.LEDGER_WRITE_FAILED, message, details)


class ConfigurationError(DinnerwiseError):
    """Static configuration (plan tiers, rate table) is inconsistent."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.CONFIG_INVALID, message, details)
