"""
Inference Models - Data types for the inference domain.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field, field_validator


class Plan(str, Enum):
    """Subscription plans, resolved by the caller before inference."""

    FREE = "free"
    PRO = "pro"
    TEAM = "team"


class ModelId(str, Enum):
    """Language models the orchestrator may call."""

    GPT_4O = "gpt-4o"  # premium
    GPT_4O_MINI = "gpt-4o-mini"  # cheap, most available


class FailureKind(str, Enum):
    """Failure classes the retry loop distinguishes."""

    TRANSIENT = "transient"
    PERMANENT = "permanent"


class InferenceRequest(BaseModel):
    """A pantry prompt to turn into recipes."""

    ingredients: tuple[str, ...] = ()
    preferences: str = ""
    tenant_id: str
    plan: Plan

    model_config = {"frozen": True}

    @field_validator("ingredients", mode="before")
    @classmethod
    def _coerce_ingredients(cls, value: object) -> object:
        if isinstance(value, list):
            return tuple(value)
        return value

    @property
    def has_content(self) -> bool:
        """True if there is at least one ingredient or some preference text."""
        return any(i.strip() for i in self.ingredients) or bool(self.preferences.strip())


class Recipe(BaseModel):
    """Single recipe suggested by the model."""

    title: str = Field(..., min_length=1)
    cook_time: str = Field(..., min_length=1, alias="cookTime")
    calories: int = Field(..., gt=0)
    ingredients: list[str] = Field(..., min_length=1)
    steps: list[str] = Field(..., min_length=1)
    nutritional_highlights: list[str] = Field(default_factory=list)
    difficulty: str | None = None

    model_config = {"frozen": True, "populate_by_name": True}


class TransportResponse(BaseModel):
    """Raw completion returned by a transport."""

    text: str
    tokens: int = Field(default=0, ge=0)
    latency_ms: float = Field(default=0.0, ge=0.0)


class InferenceResult(BaseModel):
    """Outcome of a resolved request."""

    text: str
    recipes: list[Recipe] = Field(default_factory=list)
    model_used: ModelId
    tokens_consumed: int = 0
    latency_ms: float = 0.0
    cost_usd: Decimal = Decimal("0")
    cached: bool = False

    model_config = {"frozen": True}


class CacheEntry(BaseModel):
    """Cached inference result. Replaced or evicted, never mutated."""

    fingerprint: str
    result: InferenceResult
    stored_at: float
    ttl: float

    model_config = {"frozen": True}

    def is_fresh(self, now: float) -> bool:
        return now - self.stored_at < self.ttl


class CostRecord(BaseModel):
    """Write-once usage record appended to the ledger."""

    tenant_id: str
    model_used: ModelId
    tokens_consumed: int
    cost_usd: Decimal
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = {"frozen": True}


class ModelFailure(BaseModel):
    """Why one model in the tier gave up."""

    model: ModelId
    kind: FailureKind
    attempts: int
    reason: str


class OrchestratorOptions(BaseModel):
    """Per-call knobs for resolve()."""

    max_retries: int = Field(default=3, ge=1)
    per_attempt_timeout: float = Field(default=10.0, gt=0)
    cache_ttl: float = Field(default=900.0, gt=0)
    in_flight_wait: float | None = Field(default=None, gt=0)
    backoff_base: float = Field(default=0.5, ge=0)
    backoff_max: float = Field(default=8.0, ge=0)

    model_config = {"frozen": True}

    @property
    def effective_in_flight_wait(self) -> float:
        """How long a duplicate caller waits for the owner before going alone."""
        if self.in_flight_wait is not None:
            return self.in_flight_wait
        return self.per_attempt_timeout * self.max_retries
