import sqlite3

import pytest

from agents.question_sequencer import QuestionSequencer, SequencerStep
from interview_session.errors import InputValidationError, PersistenceError, SessionNotActive, SessionNotFound
from interview_session.machine import SessionStateMachine, total_questions_for
from llm_gateway.gateway import GenerationFailure, GenerationGateway, RateLimited
from storage.sessions import SqliteSessionRepository


@pytest.mark.parametrize(
    "duration,expected",
    [(5, 4), (10, 4), (12.4, 4), (15, 6), (20, 8), (25, 10), (30, 12), (60, 12)],
)
def test_total_questions_for_duration(duration, expected):
    assert total_questions_for(duration) == expected


def _machine(fake):
    return SessionStateMachine(SqliteSessionRepository(), GenerationGateway(fake, sleep=lambda _: None))


@pytest.mark.parametrize(
    "role,difficulty,interview_type,duration",
    [
        ("", "Mid", "Technical", 15),
        ("   ", "Mid", "Technical", 15),
        ("Engineer", "Expert", "Technical", 15),
        ("Engineer", "Mid", None, 15),
        ("Engineer", "Mid", "Technical", 0),
        ("Engineer", "Mid", "Technical", -5),
        ("Engineer", "Mid", "Technical", "15"),
        ("Engineer", "Mid", "Technical", True),
        ("Engineer", "Mid", "Technical", float("nan")),
    ],
)
def test_start_rejects_invalid_input(fake_generation, role, difficulty, interview_type, duration):
    machine = _machine(fake_generation)
    with pytest.raises(InputValidationError):
        machine.start(role, difficulty, interview_type, duration)
    assert fake_generation.calls == []


def test_start_persists_first_question(fake_generation):
    machine = _machine(fake_generation)
    outcome = machine.start("Engineer", "Mid", "Technical", 20)
    assert outcome.question_number == 1
    assert outcome.total_questions == 8
    assert not outcome.is_follow_up
    session = SqliteSessionRepository().find(outcome.session_id)
    assert session.status == "in-progress"
    assert len(session.questions) == 1
    assert session.questions[0].question == outcome.question
    assert fake_generation.inputs_for("question")[0]["effective_difficulty"] == "Mid"


def test_start_generation_failure_persists_nothing(tmp_db):
    def broken(**_):
        raise RuntimeError("upstream down")

    machine = SessionStateMachine(SqliteSessionRepository(), GenerationGateway(broken))
    with pytest.raises(GenerationFailure):
        machine.start("Engineer", "Mid", "Technical", 15)
    conn = sqlite3.connect(tmp_db)
    try:
        assert conn.execute("SELECT COUNT(*) FROM interview_sessions").fetchone()[0] == 0
    finally:
        conn.close()
    assert len(machine.states) == 0


def test_submit_unknown_session(fake_generation):
    with pytest.raises(SessionNotFound):
        _machine(fake_generation).submit_answer("nope", "answer")


def test_submit_requires_session_id_and_answer(fake_generation):
    machine = _machine(fake_generation)
    with pytest.raises(InputValidationError):
        machine.submit_answer("", "answer")
    sid = machine.start("Engineer", "Mid", "Technical", 10).session_id
    with pytest.raises(InputValidationError):
        machine.submit_answer(sid, None)


def test_empty_answer_is_evaluated(fake_generation):
    machine = _machine(fake_generation)
    sid = machine.start("Engineer", "Mid", "Technical", 10).session_id
    outcome = machine.submit_answer(sid, "")
    assert outcome.evaluation.score == 8
    assert fake_generation.inputs_for("evaluation")[0]["answer"] == ""


def test_session_without_live_state_is_not_active(fake_generation):
    machine = _machine(fake_generation)
    sid = machine.start("Engineer", "Mid", "Technical", 10).session_id
    machine.states.delete(sid)
    with pytest.raises(SessionNotActive):
        machine.submit_answer(sid, "answer")


def test_evaluation_failure_leaves_state_untouched(fake_generation):
    machine = _machine(fake_generation)
    sid = machine.start("Engineer", "Mid", "Technical", 10).session_id
    before = machine.states.get(sid)

    def throttled(**_):
        raise RuntimeError("429 RESOURCE_EXHAUSTED")

    machine_throttled = SessionStateMachine(
        SqliteSessionRepository(),
        GenerationGateway(throttled, max_retries=1, sleep=lambda _: None),
        state_store=machine.states,
    )
    with pytest.raises(RateLimited):
        machine_throttled.submit_answer(sid, "answer")
    assert machine.states.get(sid) == before
    assert not SqliteSessionRepository().find(sid).questions[0].answered


def test_persistence_failure_leaves_state_untouched(fake_generation):
    class FailingRepo(SqliteSessionRepository):
        fail = False

        def save(self, session):
            if self.fail:
                raise PersistenceError("disk full")
            super().save(session)

    repo = FailingRepo()
    machine = SessionStateMachine(repo, GenerationGateway(fake_generation))
    sid = machine.start("Engineer", "Mid", "Technical", 10).session_id
    before = machine.states.get(sid)
    repo.fail = True
    with pytest.raises(PersistenceError):
        machine.submit_answer(sid, "answer")
    assert machine.states.get(sid) == before


def test_sequencer_step_without_question_is_rejected(fake_generation):
    class QuestionlessSequencer(QuestionSequencer):
        def advance(self, session, state, *, score):
            return SequencerStep(state=state)

    gateway = GenerationGateway(fake_generation)
    machine = SessionStateMachine(SqliteSessionRepository(), gateway, sequencer=QuestionlessSequencer(gateway))
    sid = machine.start("Engineer", "Mid", "Technical", 10).session_id
    before = machine.states.get(sid)
    with pytest.raises(RuntimeError, match="no question"):
        machine.submit_answer(sid, "answer")
    assert machine.states.get(sid) == before
    assert len(SqliteSessionRepository().find(sid).questions) == 1


def test_report_before_completion_is_rejected(fake_generation):
    machine = _machine(fake_generation)
    sid = machine.start("Engineer", "Mid", "Technical", 10).session_id
    with pytest.raises(SessionNotActive) as info:
        machine.complete(sid)
    assert "not finished" in str(info.value)


def test_time_expired_closes_session_early(fake_generation):
    fake_generation.scores = [6, 9]
    machine = _machine(fake_generation)
    sid = machine.start("Engineer", "Mid", "Technical", 10).session_id
    machine.submit_answer(sid, "first")
    machine.submit_answer(sid, "second")
    final = machine.complete(sid, time_expired=True)
    assert final.session.status == "completed"
    assert len(final.session.questions) == 3
    assert len(final.session.answered_questions()) == 2
    assert machine.states.get(sid) is None
    with pytest.raises(SessionNotActive):
        machine.submit_answer(sid, "late")


def test_rate_limited_report_keeps_session_open(fake_generation):
    throttle = {"report": True}

    def capability(*, kind, messages, inputs):
        if kind == "report" and throttle["report"]:
            raise RuntimeError("429 RESOURCE_EXHAUSTED")
        return fake_generation(kind=kind, messages=messages, inputs=inputs)

    machine = SessionStateMachine(
        SqliteSessionRepository(),
        GenerationGateway(capability, max_retries=1, sleep=lambda _: None),
    )
    sid = machine.start("Engineer", "Mid", "Technical", 10).session_id
    outcome = machine.submit_answer(sid, "answer")
    while not outcome.is_complete:
        outcome = machine.submit_answer(sid, "answer")

    with pytest.raises(RateLimited):
        machine.complete(sid)
    stored = SqliteSessionRepository().find(sid)
    assert stored.status == "in-progress"
    assert stored.completed_at is None
    assert stored.strengths == []
    assert machine.states.get(sid) is not None

    throttle["report"] = False
    final = machine.complete(sid)
    assert final.session.status == "completed"
    assert final.report.strengths == ["Clear structure", "Good trade-off analysis"]
    assert machine.states.get(sid) is None


def test_abandon(fake_generation):
    machine = _machine(fake_generation)
    sid = machine.start("Engineer", "Mid", "Technical", 10).session_id
    session = machine.abandon(sid)
    assert session.status == "abandoned"
    assert SqliteSessionRepository().find(sid).status == "abandoned"
    with pytest.raises(SessionNotActive):
        machine.abandon(sid)
    with pytest.raises(SessionNotActive):
        machine.complete(sid, time_expired=True)
