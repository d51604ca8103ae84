import sqlite3
from datetime import datetime, timedelta, timezone

import pytest

from agents.types import Report, SampleAnswer
from config.settings import settings
from interview_session.errors import PersistenceError
from interview_session.models import QuestionRecord, Session
from storage.sessions import SqliteSessionRepository

BASE = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)


def _session(session_id, **overrides):
    data = dict(
        session_id=session_id,
        role="Backend Engineer",
        difficulty="Mid",
        interview_type="Technical",
        duration=15,
        total_questions=6,
        questions=[QuestionRecord(question="What is idempotency?")],
        started_at=BASE,
    )
    data.update(overrides)
    return Session(**data)


def _complete(session, pct, completed_at):
    session.apply_report(
        Report(
            overall_score=pct / 10,
            percentage_score=pct,
            strengths=["Clear"],
            improvements=["Depth"],
            sample_answers=[SampleAnswer(question="Q", original_answer="a", improved_answer="b")],
            suggested_topics=["Caching"],
        ),
        completed_at,
    )
    return session


def test_save_and_find_round_trip():
    repo = SqliteSessionRepository()
    session = _session("s1")
    repo.save(session)
    loaded = repo.find("s1")
    assert loaded == session
    assert repo.find("missing") is None


def test_save_replaces_question_log():
    repo = SqliteSessionRepository()
    session = _session("s1")
    repo.save(session)
    session.questions[0] = session.questions[0].model_copy(update={"answer": "Same result", "score": 7, "answered": True})
    session.questions.append(QuestionRecord(question="Follow-up?", is_follow_up=True, parent_question_index=0))
    repo.save(session)
    loaded = repo.find("s1")
    assert [q.question for q in loaded.questions] == ["What is idempotency?", "Follow-up?"]
    assert loaded.questions[0].answered
    assert loaded.questions[1].parent_question_index == 0


def test_completed_report_fields_persist():
    repo = SqliteSessionRepository()
    repo.save(_complete(_session("s1"), 70, BASE + timedelta(minutes=15)))
    loaded = repo.find("s1")
    assert loaded.status == "completed"
    assert loaded.percentage_score == 70
    assert loaded.sample_answers[0].improved_answer == "b"
    assert loaded.completed_at == BASE + timedelta(minutes=15)


def test_list_completed_newest_first_and_stats():
    repo = SqliteSessionRepository()
    repo.save(_complete(_session("old"), 40, BASE + timedelta(hours=1)))
    repo.save(_complete(_session("new"), 90, BASE + timedelta(hours=2)))
    repo.save(_session("live"))
    summaries = repo.list_completed(limit=50)
    assert [s.session_id for s in summaries] == ["new", "old"]
    assert len(repo.list_completed(limit=1)) == 1
    stats = repo.completion_stats()
    assert stats.total_interviews == 2
    assert stats.average_score == 65


def test_same_second_completions_keep_order(tmp_db):
    repo = SqliteSessionRepository()
    repo.save(_complete(_session("first"), 50, BASE))
    repo.save(_complete(_session("second"), 60, BASE + timedelta(microseconds=250)))
    assert [s.session_id for s in repo.list_completed()] == ["second", "first"]
    conn = sqlite3.connect(tmp_db)
    try:
        stored = conn.execute("SELECT completed_at FROM interview_sessions WHERE session_id = 'first'").fetchone()[0]
    finally:
        conn.close()
    assert stored == "2024-05-01T09:00:00.000000+00:00"
    assert repo.find("first").completed_at == BASE


def test_stats_empty_database():
    stats = SqliteSessionRepository().completion_stats()
    assert stats.total_interviews == 0
    assert stats.average_score == 0


def test_sqlite_errors_become_persistence_errors(tmp_db):
    conn = sqlite3.connect(tmp_db)
    conn.execute("DROP TABLE session_questions")
    conn.commit()
    conn.close()
    with pytest.raises(PersistenceError):
        SqliteSessionRepository().save(_session("s1"))
    assert settings.DB_PATH == tmp_db


def test_migrate_is_idempotent_and_versioned(tmp_db):
    from storage.migrate import SCHEMA_VERSION, migrate

    migrate(tmp_db)
    conn = sqlite3.connect(tmp_db)
    try:
        assert conn.execute("PRAGMA user_version").fetchone()[0] == SCHEMA_VERSION
        tables = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")}
    finally:
        conn.close()
    assert {"interview_sessions", "session_questions"} <= tables
