"""
FastAPI Main Application - Unified API entry point.

Run with: uvicorn dinnerwise.interfaces.api.main:app --reload
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dinnerwise import __version__
from dinnerwise.config import get_settings

from .deps import cleanup_services, init_services
from .middleware import ErrorHandlerMiddleware, RequestContextMiddleware
from .routes import health, recipes

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings = get_settings()
    logger.info("Starting Dinnerwise API...")
    logger.info(
        "  Cache: ttl=%.0fs max_entries=%d",
        settings.cache_ttl_seconds,
        settings.cache_max_entries,
    )
    logger.info(
        "  Retries: %d per model, %.1fs per attempt",
        settings.max_retries,
        settings.per_attempt_timeout_seconds,
    )

    await init_services()
    logger.info("  Services initialized")

    yield

    logger.info("Shutting down Dinnerwise API...")
    await cleanup_services()


def create_app() -> FastAPI:
    """Create FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Dinnerwise API",
        description="AI recipe suggestions from your pantry",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(RequestContextMiddleware)

    allowed_origins = [
        "http://localhost:3000",
        "http://localhost:8000",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:8000",
    ]
    if settings.api_debug:
        allowed_origins.append("http://localhost:*")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
    )

    app.include_router(health.router, tags=["Health"])
    app.include_router(recipes.router, prefix="/api/recipes", tags=["Recipes"])

    return app


app = create_app()
