"""Persistence of interview sessions and their question logs."""
from __future__ import annotations

import json
import sqlite3
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol

from pydantic import BaseModel

from agents.types import SampleAnswer
from interview_session.errors import PersistenceError
from interview_session.models import QuestionRecord, Session

from .sqlite import get_conn


class SessionRepository(Protocol):
    def save(self, session: Session) -> None: ...

    def find(self, session_id: str) -> Optional[Session]: ...


class SessionSummary(BaseModel):
    session_id: str
    role: str
    difficulty: str
    interview_type: str
    duration: float
    overall_score: float
    percentage_score: int
    completed_at: Optional[datetime] = None


class CompletionStats(BaseModel):
    total_interviews: int
    average_score: int


class SqliteSessionRepository:
    """Upsert/find over sessions; each ``save`` is a single transaction."""

    def save(self, session: Session) -> None:
        try:
            with get_conn() as conn:
                conn.execute(
                    """
                    INSERT INTO interview_sessions (
                        session_id, role, difficulty, interview_type, duration, total_questions,
                        overall_score, percentage_score, strengths, improvements, sample_answers,
                        suggested_topics, status, started_at, completed_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    ON CONFLICT(session_id) DO UPDATE SET
                        overall_score = excluded.overall_score,
                        percentage_score = excluded.percentage_score,
                        strengths = excluded.strengths,
                        improvements = excluded.improvements,
                        sample_answers = excluded.sample_answers,
                        suggested_topics = excluded.suggested_topics,
                        status = excluded.status,
                        completed_at = excluded.completed_at
                    """,
                    (
                        session.session_id,
                        session.role,
                        session.difficulty,
                        session.interview_type,
                        session.duration,
                        session.total_questions,
                        session.overall_score,
                        session.percentage_score,
                        json.dumps(session.strengths),
                        json.dumps(session.improvements),
                        json.dumps([item.model_dump(by_alias=True) for item in session.sample_answers]),
                        json.dumps(session.suggested_topics),
                        session.status,
                        session.started_at.isoformat(timespec="microseconds"),
                        session.completed_at.isoformat(timespec="microseconds") if session.completed_at else None,
                    ),
                )
                conn.execute("DELETE FROM session_questions WHERE session_id = ?", (session.session_id,))
                conn.executemany(
                    """
                    INSERT INTO session_questions (
                        session_id, position, question, answer, score, feedback,
                        is_follow_up, parent_question_index, answered
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    [
                        (
                            session.session_id,
                            position,
                            record.question,
                            record.answer,
                            record.score,
                            record.feedback,
                            int(record.is_follow_up),
                            record.parent_question_index,
                            int(record.answered),
                        )
                        for position, record in enumerate(session.questions)
                    ],
                )
        except sqlite3.Error as exc:
            raise PersistenceError(f"Unable to save session {session.session_id}") from exc

    def find(self, session_id: str) -> Optional[Session]:
        try:
            with get_conn() as conn:
                header = conn.execute(
                    "SELECT * FROM interview_sessions WHERE session_id = ?",
                    (session_id,),
                ).fetchone()
                if header is None:
                    return None
                rows = conn.execute(
                    "SELECT * FROM session_questions WHERE session_id = ? ORDER BY position ASC",
                    (session_id,),
                ).fetchall()
        except sqlite3.Error as exc:
            raise PersistenceError(f"Unable to load session {session_id}") from exc
        return _session_from_rows(header, rows)

    def list_completed(self, limit: int = 50) -> List[SessionSummary]:
        """Most recently completed sessions first."""

        try:
            with get_conn() as conn:
                rows = conn.execute(
                    """
                    SELECT session_id, role, difficulty, interview_type, duration,
                           overall_score, percentage_score, completed_at
                    FROM interview_sessions
                    WHERE status = 'completed'
                    ORDER BY completed_at DESC
                    LIMIT ?
                    """,
                    (limit,),
                ).fetchall()
        except sqlite3.Error as exc:
            raise PersistenceError("Unable to list sessions") from exc
        return [SessionSummary(**dict(row)) for row in rows]

    def completion_stats(self) -> CompletionStats:
        try:
            with get_conn() as conn:
                row = conn.execute(
                    """
                    SELECT COUNT(*) AS total, AVG(percentage_score) AS average
                    FROM interview_sessions
                    WHERE status = 'completed'
                    """
                ).fetchone()
        except sqlite3.Error as exc:
            raise PersistenceError("Unable to compute session stats") from exc
        average = row["average"]
        return CompletionStats(
            total_interviews=int(row["total"]),
            average_score=int(round(average)) if average is not None else 0,
        )


def _session_from_rows(header: sqlite3.Row, rows: List[sqlite3.Row]) -> Session:
    data: Dict[str, Any] = dict(header)
    for key in ("strengths", "improvements", "suggested_topics"):
        data[key] = json.loads(data[key] or "[]")
    data["sample_answers"] = [SampleAnswer.model_validate(item) for item in json.loads(data["sample_answers"] or "[]")]
    data["questions"] = [
        QuestionRecord(
            question=row["question"],
            answer=row["answer"],
            score=row["score"],
            feedback=row["feedback"],
            is_follow_up=bool(row["is_follow_up"]),
            parent_question_index=row["parent_question_index"],
            answered=bool(row["answered"]),
        )
        for row in rows
    ]
    return Session.model_validate(data)


__all__ = ["CompletionStats", "SessionRepository", "SessionSummary", "SqliteSessionRepository"]
