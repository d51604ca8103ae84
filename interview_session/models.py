from __future__ import annotations  # Session domain models

from datetime import datetime, timezone
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from agents.types import Report, SampleAnswer

SessionStatus = Literal["in-progress", "completed", "abandoned"]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class QuestionRecord(BaseModel):  # One asked question and, once answered, its evaluation
    question: str
    answer: str = ""
    score: float = Field(default=0.0, ge=0.0, le=10.0)
    feedback: str = ""
    is_follow_up: bool = False
    parent_question_index: Optional[int] = None
    answered: bool = False


class Session(BaseModel):  # Persisted interview session
    session_id: str
    role: str
    difficulty: str
    interview_type: str
    duration: float
    total_questions: int
    questions: List[QuestionRecord] = Field(default_factory=list)
    overall_score: float = 0.0
    percentage_score: int = 0
    strengths: List[str] = Field(default_factory=list)
    improvements: List[str] = Field(default_factory=list)
    sample_answers: List[SampleAnswer] = Field(default_factory=list)
    suggested_topics: List[str] = Field(default_factory=list)
    status: SessionStatus = "in-progress"
    started_at: datetime = Field(default_factory=utcnow)
    completed_at: Optional[datetime] = None

    def answered_questions(self) -> List[QuestionRecord]:
        return [record for record in self.questions if record.answered]

    def apply_report(self, report: Report, completed_at: datetime) -> None:  # Freeze aggregates and close the session
        self.overall_score = report.overall_score
        self.percentage_score = report.percentage_score
        self.strengths = list(report.strengths)
        self.improvements = list(report.improvements)
        self.sample_answers = list(report.sample_answers)
        self.suggested_topics = list(report.suggested_topics)
        self.status = "completed"
        self.completed_at = completed_at


class SessionPhase(str, Enum):  # Decision phase of a live session
    AWAITING_ANSWER = "awaiting_answer"
    FOLLOW_UP_PENDING = "follow_up_pending"
    MAIN_PENDING = "main_pending"
    COMPLETE = "complete"


class SessionState(BaseModel):  # Ephemeral per-session decision counters
    current_question_index: int = Field(default=0, ge=0)
    follow_up_used: bool = False
    answered_count: int = Field(default=0, ge=0)
    main_questions_asked: int = Field(default=1, ge=0)
    adjusted_difficulty: Optional[str] = None
    phase: SessionPhase = SessionPhase.AWAITING_ANSWER


__all__ = [
    "QuestionRecord",
    "Session",
    "SessionPhase",
    "SessionState",
    "SessionStatus",
    "utcnow",
]
