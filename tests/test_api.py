"""Tests for the HTTP surface."""

import pytest
from fastapi.testclient import TestClient

from memory_recall.api import dependencies
from memory_recall.api.dependencies import get_recall_service
from memory_recall.core.base import ErrorCode
from memory_recall.core.errors import ConfigurationError, InvalidQueryError, RetrievalError
from memory_recall.domain.models import ScoredMemory
from memory_recall.main import app
from memory_recall.services.recall_service import FallbackReason, RecallResult

SEARCH_URL = "/api/v1/memory/search"


class StubRecallService:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = []

    async def recall(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def stub_service():
    stub = StubRecallService()
    app.dependency_overrides[get_recall_service] = lambda: stub
    yield stub
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    return TestClient(app)


def test_health_does_not_need_a_database(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_search_returns_strategy_and_results(client, stub_service, make_row, user_id):
    memory = ScoredMemory.model_validate(make_row("A", embedding=[0.6, 0.8], similarity=0.97))
    stub_service.result = RecallResult(query="", strategy="semantic", memories=[memory])

    response = client.post(
        SEARCH_URL,
        json={"user_id": user_id, "embedding": [0.6, 0.8], "limit": 5, "threshold": 0.8},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["strategy"] == "semantic"
    assert body["fallback"] is False
    assert body["count"] == 1
    result = body["results"][0]
    assert result["content"] == "A"
    assert result["similarity"] == 0.97
    assert "embedding" not in result
    assert stub_service.calls == [
        {
            "user_id": user_id,
            "text": "",
            "embedding": [0.6, 0.8],
            "limit": 5,
            "threshold": 0.8,
            "semantic": True,
        }
    ]


def test_search_reports_fallback(client, stub_service, user_id):
    stub_service.result = RecallResult(
        query="mom",
        strategy="lexical",
        fallback=True,
        fallback_reason=FallbackReason.NO_EMBEDDING,
        memories=[],
    )

    response = client.post(SEARCH_URL, json={"user_id": user_id, "query": "mom"})

    assert response.status_code == 200
    body = response.json()
    assert body["fallback"] is True
    assert body["fallback_reason"] == "no_embedding"
    assert body["count"] == 0
    assert body["results"] == []


def test_defaults_come_from_settings(client, stub_service, user_id):
    stub_service.result = RecallResult(query="", strategy="lexical", memories=[])

    client.post(SEARCH_URL, json={"user_id": user_id})

    call = stub_service.calls[0]
    assert call["limit"] == 10
    assert call["threshold"] == 0.7


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"user_id": ""},
        {"user_id": "u1", "limit": 0},
        {"user_id": "u1", "limit": 101},
        {"user_id": "u1", "threshold": 1.5},
    ],
)
def test_malformed_request_is_rejected(client, stub_service, payload):
    response = client.post(SEARCH_URL, json=payload)

    assert response.status_code == 422
    assert stub_service.calls == []


@pytest.mark.parametrize(
    ("error", "status_code", "error_code"),
    [
        (InvalidQueryError("query embedding must be finite"), 422, ErrorCode.INVALID_INPUT),
        (ConfigurationError("DATABASE_URL is not set"), 503, ErrorCode.CONFIG_MISSING),
        (RetrievalError("Memory search_by_text failed: timeout"), 502, ErrorCode.DB_QUERY),
    ],
)
def test_application_errors_map_to_status_codes(client, stub_service, user_id, error, status_code, error_code):
    stub_service.error = error

    response = client.post(SEARCH_URL, json={"user_id": user_id, "query": "mom"})

    assert response.status_code == status_code
    body = response.json()
    assert body["error_code"] == error_code.value
    assert body["error"] == error.message
    assert "trace_id" in body


class FixedEmbeddings:
    async def embed_text(self, text):
        return [0.6, 0.8]


def test_recall_service_uses_assigned_embedding_service(monkeypatch):
    embeddings = FixedEmbeddings()
    monkeypatch.setattr(dependencies, "embedding_service", embeddings)

    service = get_recall_service()

    assert service.embeddings is embeddings


def test_recall_service_without_embedding_service(monkeypatch):
    monkeypatch.setattr(dependencies, "embedding_service", None)

    assert get_recall_service().embeddings is None
