"""
API tests for `api/prompt.py` and `api/health.py` using FastAPI's TestClient.

Covers:
- POST /api/prompt: offline answer, provider answer with media recommendation, request validation
- POST /api/reset: clears the session memory the prompt endpoint writes
- GET /api/classify and GET /api/providers
- GET /health

The orchestrator dependency is overridden with one built from test doubles, so no credentials or
network access are needed.
"""

import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_orchestrator
from core.orchestrator import ParentingOrchestrator
from main import app
from tests.fakes import FakeAdapter, make_context, make_provider

client = TestClient(app)


@pytest.fixture
def orchestrator():
    context = make_context(
        providers=[make_provider("OpenAI", priority=10), make_provider("Groq", priority=7, credential_present=False)],
        adapters={"OpenAI": FakeAdapter(answer="- Keep a calm bedtime routine")},
        video_configured=True,
    )
    instance = ParentingOrchestrator(context)
    app.dependency_overrides[get_orchestrator] = lambda: instance
    yield instance
    app.dependency_overrides.clear()


@pytest.fixture
def offline_orchestrator():
    instance = ParentingOrchestrator(make_context())
    app.dependency_overrides[get_orchestrator] = lambda: instance
    yield instance
    app.dependency_overrides.clear()


def test_prompt_offline(offline_orchestrator):
    resp = client.post("/api/prompt", json={"message": "My 2-year-old has been waking up at night"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["category"] == "Sleep"
    assert body["is_online_response"] is False
    assert body["has_web_search"] is False
    assert body["confidence"] == pytest.approx(0.6)
    assert body["response"]


def test_prompt_with_provider_and_media(orchestrator):
    resp = client.post("/api/prompt", json={
        "message": "Should I call the doctor about a rash?",
        "session_id": "parent-1",
        "urgency": "high",
    })
    assert resp.status_code == 200
    body = resp.json()
    assert body["provider"] == "OpenAI"
    assert body["response"] == "• Keep a calm bedtime routine"
    assert body["media"]["offer_voice"] is True
    assert body["media"]["offer_video"] is True
    assert orchestrator.context.memory.size("parent-1") == 2


def test_prompt_rejects_empty_message(orchestrator):
    resp = client.post("/api/prompt", json={"message": ""})
    assert resp.status_code == 422


def test_reset_clears_session(orchestrator):
    client.post("/api/prompt", json={"message": "My toddler won't nap", "session_id": "parent-2"})
    assert orchestrator.context.memory.size("parent-2") == 2

    resp = client.post("/api/reset", params={"session_id": "parent-2"})
    assert resp.status_code == 200
    assert resp.json()["response"] is True
    assert orchestrator.context.memory.size("parent-2") == 0


def test_reset_unknown_session_succeeds(orchestrator):
    resp = client.post("/api/reset", params={"session_id": "never-used"})
    assert resp.status_code == 200
    assert resp.json()["response"] is True


def test_classify(orchestrator):
    resp = client.get("/api/classify", params={"question": "My toddler has a high fever"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["urgency"] == "high"
    assert body["childAge"] == "toddler"
    assert body["analysis"]["type"] == "emergency"


def test_providers(orchestrator):
    resp = client.get("/api/providers")
    assert resp.status_code == 200
    assert resp.json() == {"configured": True, "providers": ["OpenAI"], "webSearch": False, "video": True}


def test_health():
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
