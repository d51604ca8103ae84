import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from api.routes import router
from config.registry import GENERATION_KEY, bind_model
from config.settings import settings
from llm_gateway.gateway import RATE_LIMITED_MESSAGE


app = FastAPI()
app.include_router(router)
client = TestClient(app)

START = {"role": "QA Engineer", "difficulty": "Junior", "interviewType": "Behavioral", "duration": 10}


@pytest.mark.parametrize(
    "override",
    [
        {"role": ""},
        {"role": None},
        {"difficulty": "Wizard"},
        {"interviewType": "  "},
        {"duration": 0},
        {"duration": "ten"},
    ],
)
def test_start_validation_errors(fake_generation, override):
    resp = client.post("/api/interview/start", json={**START, **override})
    assert resp.status_code == 400
    assert fake_generation.calls == []


def test_unknown_session_is_404(fake_generation):
    resp = client.post("/api/interview/evaluate", json={"sessionId": "missing", "answer": "x"})
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Session not found"
    assert client.post("/api/interview/report", json={"sessionId": "missing"}).status_code == 404


def test_missing_fields_are_400(fake_generation):
    assert client.post("/api/interview/evaluate", json={"answer": "x"}).status_code == 400
    session_id = client.post("/api/interview/start", json=START).json()["sessionId"]
    assert client.post("/api/interview/evaluate", json={"sessionId": session_id}).status_code == 400


def test_report_before_finish_is_400(fake_generation):
    session_id = client.post("/api/interview/start", json=START).json()["sessionId"]
    resp = client.post("/api/interview/report", json={"sessionId": session_id})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Interview is not finished yet"


def test_rate_limited_generation_is_503(monkeypatch):
    monkeypatch.setattr(settings, "GENERATION_BASE_DELAY_S", 0.0)

    def throttled(**_):
        raise RuntimeError("429 RESOURCE_EXHAUSTED")

    bind_model(GENERATION_KEY, throttled)
    resp = client.post("/api/interview/start", json=START)
    assert resp.status_code == 503
    assert resp.json()["detail"] == RATE_LIMITED_MESSAGE


def test_rate_limited_report_is_503_and_retryable(monkeypatch, fake_generation):
    monkeypatch.setattr(settings, "GENERATION_BASE_DELAY_S", 0.0)
    session_id = client.post("/api/interview/start", json=START).json()["sessionId"]

    def throttled(*, kind, messages, inputs):
        if kind == "report":
            raise RuntimeError("429 RESOURCE_EXHAUSTED")
        return fake_generation(kind=kind, messages=messages, inputs=inputs)

    bind_model(GENERATION_KEY, throttled)
    resp = client.post("/api/interview/report", json={"sessionId": session_id, "timeExpired": True})
    assert resp.status_code == 503
    assert client.get(f"/api/sessions/{session_id}").json()["status"] == "in-progress"

    bind_model(GENERATION_KEY, fake_generation)
    resp = client.post("/api/interview/report", json={"sessionId": session_id, "timeExpired": True})
    assert resp.status_code == 200
    assert resp.json()["percentageScore"] == 80


def test_generation_failure_is_502():
    def broken(**_):
        raise RuntimeError("upstream exploded")

    bind_model(GENERATION_KEY, broken)
    resp = client.post("/api/interview/start", json=START)
    assert resp.status_code == 502
    assert "upstream exploded" in resp.json()["detail"]


def test_abandon_then_evaluate_is_400(fake_generation):
    session_id = client.post("/api/interview/start", json=START).json()["sessionId"]
    resp = client.post("/api/interview/abandon", json={"sessionId": session_id})
    assert resp.status_code == 200
    assert resp.json() == {"sessionId": session_id, "status": "abandoned"}
    assert client.post("/api/interview/evaluate", json={"sessionId": session_id, "answer": "x"}).status_code == 400
