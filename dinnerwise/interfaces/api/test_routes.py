"""Tests for API Routes."""

from collections.abc import Generator
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from dinnerwise.config.errors import ExhaustedError, InvalidRequestError
from dinnerwise.domains.inference import (
    FailureKind,
    InferenceResult,
    ModelFailure,
    ModelId,
    Plan,
    Recipe,
)

from .deps import get_orchestrator
from .main import create_app

RECIPE = Recipe(
    title="Egg Fried Rice",
    cook_time="20 minutes",
    calories=450,
    ingredients=["rice", "eggs"],
    steps=["Scramble eggs", "Fry rice with eggs"],
    difficulty="Easy",
)


@pytest.fixture
def mock_orchestrator() -> AsyncMock:
    """Create a mock inference orchestrator."""
    mock = AsyncMock()
    mock.resolve.return_value = InferenceResult(
        text="[...]",
        recipes=[RECIPE],
        model_used=ModelId.GPT_4O_MINI,
        tokens_consumed=800,
        latency_ms=120.0,
        cost_usd=Decimal("0.000320"),
    )
    mock.cache = MagicMock()
    mock.cache.stats.return_value = {"size": 1, "max_size": 1000, "hits": 2}
    return mock


@pytest.fixture
def client(mock_orchestrator: AsyncMock) -> Generator[TestClient, None, None]:
    """Create a test client with mocked dependencies."""
    app = create_app()
    app.dependency_overrides[get_orchestrator] = lambda: mock_orchestrator

    yield TestClient(app)

    app.dependency_overrides.clear()


def test_health_endpoint(client: TestClient) -> None:
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == "dinnerwise"


def test_api_info(client: TestClient) -> None:
    response = client.get("/api")
    assert response.status_code == 200
    assert response.json()["name"] == "Dinnerwise API"


def test_cache_stats(client: TestClient) -> None:
    response = client.get("/api/cache/stats")
    assert response.status_code == 200
    assert response.json()["hits"] == 2


def test_suggest_recipes(client: TestClient, mock_orchestrator: AsyncMock) -> None:
    """Test recipe suggestion returns recipes and usage."""
    response = client.post(
        "/api/recipes",
        json={
            "ingredients": ["rice", "eggs"],
            "preferences": "quick",
            "tenant_id": "tenant-1",
            "plan": "pro",
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["model_used"] == "gpt-4o-mini"
    assert data["tokens_consumed"] == 800
    assert data["cost_usd"] == pytest.approx(0.00032)
    assert data["cached"] is False
    assert data["recipes"][0]["title"] == "Egg Fried Rice"
    assert data["recipes"][0]["cookTime"] == "20 minutes"

    (request,), _ = mock_orchestrator.resolve.call_args
    assert request.ingredients == ("rice", "eggs")
    assert request.plan == Plan.PRO
    assert request.tenant_id == "tenant-1"


def test_suggest_defaults_to_free_plan(
    client: TestClient, mock_orchestrator: AsyncMock
) -> None:
    response = client.post("/api/recipes", json={"ingredients": ["beans"], "tenant_id": "t"})
    assert response.status_code == 200

    (request,), _ = mock_orchestrator.resolve.call_args
    assert request.plan == Plan.FREE


def test_suggest_unknown_plan(client: TestClient) -> None:
    """Test unknown plans fail validation."""
    response = client.post(
        "/api/recipes",
        json={"ingredients": ["rice"], "tenant_id": "t", "plan": "enterprise"},
    )
    assert response.status_code == 422


def test_suggest_missing_tenant(client: TestClient) -> None:
    response = client.post("/api/recipes", json={"ingredients": ["rice"]})
    assert response.status_code == 422


def test_suggest_empty_request(client: TestClient, mock_orchestrator: AsyncMock) -> None:
    """Test an empty request maps to 400 with the error taxonomy."""
    mock_orchestrator.resolve.side_effect = InvalidRequestError("Nothing to cook with")

    response = client.post(
        "/api/recipes", json={"tenant_id": "t"}, headers={"X-Request-ID": "req-42"}
    )

    assert response.status_code == 400
    body = response.json()
    assert body["error"]["code"] == "INFERENCE_INVALID_REQUEST"
    assert body["request_id"] == "req-42"


def test_suggest_exhausted(client: TestClient, mock_orchestrator: AsyncMock) -> None:
    """Test exhausting every model maps to 503 with per-model failures."""
    mock_orchestrator.resolve.side_effect = ExhaustedError(
        "All 1 model(s) failed",
        [
            ModelFailure(
                model=ModelId.GPT_4O_MINI,
                kind=FailureKind.TRANSIENT,
                attempts=3,
                reason="OpenAI rate limit exceeded",
            )
        ],
    )

    response = client.post("/api/recipes", json={"ingredients": ["rice"], "tenant_id": "t"})

    assert response.status_code == 503
    body = response.json()
    assert body["error"]["code"] == "INFERENCE_EXHAUSTED"
    assert body["error"]["details"]["failures"][0]["attempts"] == 3
    assert "request_id" in body
    assert response.headers["Retry-After"] == "30"


def test_suggest_exhausted_permanently_has_no_retry_hint(
    client: TestClient, mock_orchestrator: AsyncMock
) -> None:
    mock_orchestrator.resolve.side_effect = ExhaustedError(
        "All 1 model(s) failed",
        [
            ModelFailure(
                model=ModelId.GPT_4O_MINI,
                kind=FailureKind.PERMANENT,
                attempts=1,
                reason="OpenAI authentication failed",
            )
        ],
    )

    response = client.post("/api/recipes", json={"ingredients": ["rice"], "tenant_id": "t"})

    assert response.status_code == 503
    assert "Retry-After" not in response.headers


def test_request_id_echoed(client: TestClient) -> None:
    response = client.get("/api", headers={"X-Request-ID": "abc-123"})
    assert response.headers["X-Request-ID"] == "abc-123"
    assert "X-Response-Time-Ms" in response.headers
