"""
Health Routes - System health and status endpoints.
"""

from typing import Any

from fastapi import APIRouter, Depends

from dinnerwise import __version__
from dinnerwise.domains.inference import InferenceOrchestrator
from dinnerwise.interfaces.api.deps import get_orchestrator

router = APIRouter()


@router.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy", "service": "dinnerwise"}


@router.get("/api")
async def api_info() -> dict[str, Any]:
    """API info endpoint."""
    return {
        "name": "Dinnerwise API",
        "version": __version__,
        "description": "AI recipe suggestions from your pantry",
        "docs": "/docs",
    }


@router.get("/api/cache/stats")
async def cache_stats(
    orchestrator: InferenceOrchestrator = Depends(get_orchestrator),
) -> dict[str, Any]:
    """Response cache statistics."""
    return orchestrator.cache.stats()
