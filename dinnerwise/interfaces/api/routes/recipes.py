"""
Recipe Routes - Recipe suggestions from ingredients and preferences.

The plan arrives already resolved by the gateway (subscription lookup
happens upstream); unknown plans are rejected by validation.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from dinnerwise.domains.inference import (
    InferenceOrchestrator,
    InferenceRequest,
    Plan,
    Recipe,
)
from dinnerwise.interfaces.api.deps import get_orchestrator

router = APIRouter()


class RecipeRequest(BaseModel):
    """Recipe suggestion request body."""

    ingredients: list[str] = Field(default_factory=list, max_length=50)
    preferences: str = Field(default="", max_length=500)
    tenant_id: str = Field(..., min_length=1)
    plan: Plan = Plan.FREE


class RecipeResponse(BaseModel):
    """Recipe suggestion response."""

    recipes: list[Recipe]
    model_used: str
    tokens_consumed: int
    cost_usd: float
    cached: bool


@router.post("", response_model=RecipeResponse)
async def suggest_recipes(
    request: RecipeRequest,
    orchestrator: InferenceOrchestrator = Depends(get_orchestrator),
) -> RecipeResponse:
    """
    Suggest recipes for what's in the pantry.

    - **ingredients**: Ingredients on hand (order kept in the prompt)
    - **preferences**: Free-text dietary preferences
    - **tenant_id**: Account the usage is billed to
    - **plan**: Subscription plan (free, pro, team)

    Cached responses report ``cached: true``; their cost was already
    recorded by the call that produced them.
    """
    result = await orchestrator.resolve(
        InferenceRequest(
            ingredients=request.ingredients,
            preferences=request.preferences,
            tenant_id=request.tenant_id,
            plan=request.plan,
        )
    )

    return RecipeResponse(
        recipes=result.recipes,
        model_used=result.model_used.value,
        tokens_consumed=result.tokens_consumed,
        cost_usd=float(result.cost_usd),
        cached=result.cached,
    )
