import asyncio
import json

import httpx
import pytest

from app.core.errors import GenerationFailed, MissingCredential
from app.main import app
from app.services.gemini_client import GeminiClient, build_prompt, get_gemini_client


def gemini_transport(payload, status=200, calls=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        return httpx.Response(status, json=payload)
    return httpx.MockTransport(handler)


def answer(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def make_client(payload, status=200, calls=None):
    return GeminiClient(
        api_key="test-key",
        model="gemini-test",
        base_url="https://gemini.example.com/v1beta",
        transport=gemini_transport(payload, status, calls)
    )


@pytest.fixture
def use_gemini():
    def _use(client):
        app.dependency_overrides[get_gemini_client] = lambda: client
    yield _use
    app.dependency_overrides.pop(get_gemini_client, None)


# ============================================================
# Prompt building
# ============================================================

def test_improve_prompt_wraps_section():
    system, user = build_prompt("improve", "Led a team")
    assert system.startswith("You are an expert resume writer and career coach.")
    assert "Led a team" in user


def test_analyze_sends_resume_as_json():
    _, user = build_prompt("analyze", "", {"skills": ["Python"]})
    assert json.dumps({"skills": ["Python"]}) in user


def test_unknown_action_passes_prompt_through():
    assert build_prompt("translate", "Hola") == ("", "Hola")
    assert build_prompt(None, "Hola") == ("", "Hola")


# ============================================================
# Client
# ============================================================

def test_assist_returns_first_candidate():
    calls = []
    client = make_client(answer("Sharper bullet"), calls=calls)
    assert asyncio.run(client.assist("Led a team", action="improve")) == "Sharper bullet"

    request = calls[0]
    assert request.url.path == "/v1beta/models/gemini-test:generateContent"
    assert request.headers["x-goog-api-key"] == "test-key"
    body = json.loads(request.content)
    assert body["generationConfig"]["maxOutputTokens"] == 2048
    assert "Led a team" in body["contents"][0]["parts"][0]["text"]


def test_missing_key():
    client = GeminiClient(api_key="", transport=gemini_transport(answer("x")))
    with pytest.raises(MissingCredential):
        asyncio.run(client.assist("hi"))


def test_no_candidates_uses_upstream_message():
    client = make_client({"error": {"message": "Quota exceeded"}}, status=429)
    with pytest.raises(GenerationFailed) as exc:
        asyncio.run(client.assist("hi"))
    assert exc.value.detail == "Quota exceeded"


def test_empty_candidates():
    client = make_client({"candidates": []})
    with pytest.raises(GenerationFailed) as exc:
        asyncio.run(client.assist("hi"))
    assert exc.value.detail == "No content generated"


# ============================================================
# Routes
# ============================================================

def test_route_success(client, student, use_gemini):
    use_gemini(make_client(answer("Done")))
    resp = client.post("/api/ai/resume-assist", json={"prompt": "Write a summary", "action": "generate"},
                       headers=student)
    assert resp.status_code == 200
    assert resp.json() == {"result": "Done"}


def test_route_missing_key_shape(client, student, use_gemini):
    use_gemini(GeminiClient(api_key=""))
    resp = client.post("/api/ai/resume-assist", json={"prompt": "x"}, headers=student)
    assert resp.status_code == 500
    body = resp.json()
    assert body["error"].startswith("Missing Gemini API key")
    assert body["details"] is None


def test_route_generation_failure_shape(client, student, use_gemini):
    use_gemini(make_client({"error": {"message": "Blocked"}}, status=400))
    resp = client.post("/api/ai/resume-assist", json={"prompt": "x"}, headers=student)
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to generate content", "details": "Blocked"}


def test_route_requires_auth(client):
    assert client.post("/api/ai/resume-assist", json={"prompt": "x"}).status_code == 401


def test_assist_with_stored_resume(client, student, use_gemini):
    calls = []
    use_gemini(make_client(answer("Looks good"), calls=calls))
    resume = client.post(
        "/api/resumes",
        json={"title": "CV", "basic_info": {"name": "Ada Lovelace"}},
        headers=student
    ).json()

    resp = client.post(f"/api/resumes/{resume['id']}/assist", json={"prompt": "Review it"}, headers=student)
    assert resp.status_code == 200
    assert resp.json() == {"result": "Looks good"}
    sent = json.loads(calls[0].content)["contents"][0]["parts"][0]["text"]
    assert "Based on the following resume data:" in sent
    assert "Name: Ada Lovelace" in sent
    assert sent.rstrip().endswith("Review it")
