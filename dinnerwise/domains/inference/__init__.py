"""
Inference Domain - Turning pantry prompts into paid model calls, reliably.

This domain handles:
- Request fingerprinting and response caching
- In-flight deduplication of concurrent duplicates
- Plan-based model tier selection with fallback
- Retry with exponential backoff on transient provider failures
- Cost accounting against the usage ledger
"""

from .accounting import CostAccountant
from .cache import ResponseCacheImpl
from .contracts import ResponseCache, Transport, UsageLedger
from .fingerprint import RequestFingerprinter, fingerprint
from .models import (
    CacheEntry,
    CostRecord,
    FailureKind,
    InferenceRequest,
    InferenceResult,
    ModelFailure,
    ModelId,
    OrchestratorOptions,
    Plan,
    Recipe,
    TransportResponse,
)
from .orchestrator import InferenceOrchestrator
from .prompts import build_prompt, parse_recipes
from .selector import ModelSelector

__all__ = [
    # Contracts
    "Transport",
    "UsageLedger",
    "ResponseCache",
    # Models
    "Plan",
    "ModelId",
    "FailureKind",
    "InferenceRequest",
    "InferenceResult",
    "Recipe",
    "TransportResponse",
    "CacheEntry",
    "CostRecord",
    "ModelFailure",
    "OrchestratorOptions",
    # Implementations
    "RequestFingerprinter",
    "fingerprint",
    "ResponseCacheImpl",
    "ModelSelector",
    "CostAccountant",
    "InferenceOrchestrator",
    "build_prompt",
    "parse_recipes",
]
