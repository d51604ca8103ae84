import json
import os
import sys
import tempfile
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from api.routes import reset_machine
from config.registry import GENERATION_KEY, bind_model, unbind_model
from config.settings import settings
from storage.migrate import migrate


REPORT_REPLY = {
    "overallScore": 8,
    "percentageScore": 80,
    "strengths": ["Clear structure", "Good trade-off analysis"],
    "improvements": ["Quantify impact"],
    "sampleAnswers": [
        {"question": "Q1", "originalAnswer": "a1", "improvedAnswer": "better a1"},
        {"question": "Q2", "originalAnswer": "a2", "improvedAnswer": "better a2"},
        {"question": "Q3", "originalAnswer": "a3", "improvedAnswer": "better a3"},
    ],
    "suggestedTopics": ["Caching", "Observability"],
}


class ScriptedGeneration:
    """Registry-compatible fake that answers per prompt kind and records calls."""

    def __init__(self, scores=None, report=None):
        self.scores = list(scores or [])
        self.default_score = 8
        self.report = REPORT_REPLY if report is None else report
        self.calls = []

    def __call__(self, *, kind, messages, inputs):
        self.calls.append((kind, dict(inputs)))
        if kind == "question":
            count = sum(1 for k, _ in self.calls if k == "question")
            return f"Main question {count} at {inputs['effective_difficulty']} level?"
        if kind == "follow_up":
            return "Can you walk through a concrete example?"
        if kind == "evaluation":
            score = self.scores.pop(0) if self.scores else self.default_score
            return json.dumps({"score": score, "feedback": f"Scored {score}"})
        if kind == "report":
            return self.report if isinstance(self.report, str) else json.dumps(self.report)
        raise AssertionError(f"unexpected prompt kind {kind}")

    def inputs_for(self, kind):
        return [inputs for k, inputs in self.calls if k == kind]


@pytest.fixture(autouse=True)
def tmp_db(monkeypatch):
    td = tempfile.TemporaryDirectory()
    db_path = os.path.join(td.name, "test.db")
    monkeypatch.setattr(settings, "DB_PATH", db_path, raising=False)
    migrate(db_path)
    reset_machine()
    try:
        yield db_path
    finally:
        reset_machine()
        unbind_model(GENERATION_KEY)
        td.cleanup()


@pytest.fixture
def fake_generation():
    fake = ScriptedGeneration()
    bind_model(GENERATION_KEY, fake)
    return fake
