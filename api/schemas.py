"""Pydantic schemas for the interview session API."""
from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from agents.types import Evaluation, SampleAnswer


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class StartReq(_CamelModel):
    role: Optional[str] = None
    difficulty: Optional[str] = None
    interview_type: Optional[str] = Field(default=None, alias="interviewType")
    duration: Any = None


class EvaluateReq(_CamelModel):
    session_id: Optional[str] = Field(default=None, alias="sessionId")
    answer: Optional[str] = None


class ReportReq(_CamelModel):
    session_id: Optional[str] = Field(default=None, alias="sessionId")
    time_expired: bool = Field(default=False, alias="timeExpired")


class SessionRef(_CamelModel):
    session_id: Optional[str] = Field(default=None, alias="sessionId")


class StartResp(_CamelModel):
    session_id: str = Field(alias="sessionId")
    question: str
    question_number: int = Field(alias="questionNumber")
    total_questions: int = Field(alias="totalQuestions")
    is_follow_up: bool = Field(alias="isFollowUp")
    duration: float


class EvaluateResp(_CamelModel):
    evaluation: Evaluation
    is_complete: bool = Field(alias="isComplete")
    question_number: int = Field(alias="questionNumber")
    total_questions: int = Field(alias="totalQuestions")
    next_question: Optional[str] = Field(default=None, alias="nextQuestion")
    is_follow_up: Optional[bool] = Field(default=None, alias="isFollowUp")
    display_number: Optional[str] = Field(default=None, alias="displayNumber")


class QuestionView(_CamelModel):
    question: str
    answer: str
    score: float
    feedback: str
    is_follow_up: bool = Field(alias="isFollowUp")
    answered: bool


class ReportResp(_CamelModel):
    session_id: str = Field(alias="sessionId")
    overall_score: float = Field(alias="overallScore")
    percentage_score: int = Field(alias="percentageScore")
    strengths: List[str]
    improvements: List[str]
    sample_answers: List[SampleAnswer] = Field(alias="sampleAnswers")
    suggested_topics: List[str] = Field(alias="suggestedTopics")
    questions: List[QuestionView]
    role: str
    difficulty: str
    interview_type: str = Field(alias="interviewType")
    duration: float
    completed_at: Optional[datetime] = Field(default=None, alias="completedAt")


class SessionDetail(ReportResp):
    status: str
    total_questions: int = Field(alias="totalQuestions")
    started_at: datetime = Field(alias="startedAt")


class SessionListItem(_CamelModel):
    session_id: str = Field(alias="sessionId")
    role: str
    difficulty: str
    interview_type: str = Field(alias="interviewType")
    duration: float
    overall_score: float = Field(alias="overallScore")
    percentage_score: int = Field(alias="percentageScore")
    completed_at: Optional[datetime] = Field(default=None, alias="completedAt")


class StatsResp(_CamelModel):
    total_interviews: int = Field(alias="totalInterviews")
    average_score: int = Field(alias="averageScore")


class AbandonResp(_CamelModel):
    session_id: str = Field(alias="sessionId")
    status: str


class HealthResp(_CamelModel):
    status: str
    timestamp: datetime
    generation_bound: bool = Field(alias="generationBound")


__all__ = [
    "AbandonResp",
    "EvaluateReq",
    "EvaluateResp",
    "HealthResp",
    "QuestionView",
    "ReportReq",
    "ReportResp",
    "SessionDetail",
    "SessionListItem",
    "SessionRef",
    "StartReq",
    "StartResp",
    "StatsResp",
]
