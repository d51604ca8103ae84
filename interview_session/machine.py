"""Session lifecycle: start, answer submission and completion.

The machine reads and writes the persisted :class:`Session` once per
operation and keeps the short-lived decision counters in an injected
:class:`SessionStateStore`. New state is only stored after the session write
succeeds, so a failed generation or persistence call leaves both untouched.
"""
from __future__ import annotations

import math
import uuid
from datetime import datetime
from typing import Callable, Optional

from pydantic import BaseModel

from agents.difficulty import LEVELS, is_level
from agents.question_sequencer import QuestionSequencer
from agents.report_synthesizer import ReportSynthesizer
from agents.response_evaluator import AnswerEvaluator
from agents.types import Evaluation, Report
from config.settings import settings
from llm_gateway.gateway import GenerationGateway
from observability import log_event, span
from storage.sessions import SessionRepository

from .errors import InputValidationError, SessionNotActive, SessionNotFound
from .models import Session, SessionPhase, SessionState, utcnow
from .state_store import InMemorySessionStateStore, SessionStateStore


class StartOutcome(BaseModel):
    session_id: str
    question: str
    question_number: int = 1
    total_questions: int
    is_follow_up: bool = False
    duration: float


class EvaluationOutcome(BaseModel):
    evaluation: Evaluation
    is_complete: bool
    question_number: int
    total_questions: int
    next_question: Optional[str] = None
    is_follow_up: bool = False
    display_number: Optional[str] = None


class FinalReport(BaseModel):
    report: Report
    session: Session


def total_questions_for(duration: float) -> int:
    """One main question per 2.5 minutes, clamped to [4, 12]."""

    count = math.floor(duration / settings.MINUTES_PER_QUESTION)
    return max(settings.MIN_QUESTIONS, min(settings.MAX_QUESTIONS, count))


def _require_text(name: str, value: object) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InputValidationError(f"Missing required field: {name}")
    return value.strip()


def _require_duration(value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InputValidationError("duration must be a number of minutes")
    if not math.isfinite(value) or value <= 0:
        raise InputValidationError("duration must be a positive number of minutes")
    return float(value)


class SessionStateMachine:
    """Drive one interview session from first question to final report."""

    def __init__(
        self,
        repository: SessionRepository,
        gateway: GenerationGateway,
        *,
        state_store: Optional[SessionStateStore] = None,
        evaluator: Optional[AnswerEvaluator] = None,
        sequencer: Optional[QuestionSequencer] = None,
        synthesizer: Optional[ReportSynthesizer] = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._repository = repository
        self._states = state_store if state_store is not None else InMemorySessionStateStore()
        self._evaluator = evaluator or AnswerEvaluator(gateway)
        self._sequencer = sequencer or QuestionSequencer(gateway)
        self._synthesizer = synthesizer or ReportSynthesizer(gateway)
        self._clock = clock

    @property
    def states(self) -> SessionStateStore:
        return self._states

    def start(self, role: str, difficulty: str, interview_type: str, duration: float) -> StartOutcome:
        role = _require_text("role", role)
        interview_type = _require_text("interviewType", interview_type)
        if not is_level(difficulty):
            raise InputValidationError(f"difficulty must be one of: {', '.join(LEVELS)}")
        minutes = _require_duration(duration)

        total = total_questions_for(minutes)
        session_id = str(uuid.uuid4())
        with span(session_id, "first_question"):
            first = self._sequencer.first_question(role=role, difficulty=difficulty, interview_type=interview_type)
        session = Session(
            session_id=session_id,
            role=role,
            difficulty=difficulty,
            interview_type=interview_type,
            duration=minutes,
            total_questions=total,
            questions=[first],
            started_at=self._clock(),
        )
        self._repository.save(session)
        self._states.put(session_id, SessionState())
        log_event("session_started", session_id, role=role, difficulty=difficulty, total_questions=total)
        return StartOutcome(
            session_id=session_id,
            question=first.question,
            total_questions=total,
            duration=minutes,
        )

    def submit_answer(self, session_id: str, answer: str) -> EvaluationOutcome:
        session_id = _require_text("sessionId", session_id)
        if not isinstance(answer, str):
            raise InputValidationError("Missing required field: answer")
        session = self._load(session_id)
        state = self._states.get(session_id)
        if state is None or state.phase is not SessionPhase.AWAITING_ANSWER or session.status != "in-progress":
            raise SessionNotActive(session_id)

        index = state.current_question_index
        current = session.questions[index]
        with span(session_id, "evaluate", question_number=index + 1):
            evaluation = self._evaluator.evaluate(
                question=current.question,
                answer=answer,
                role=session.role,
                difficulty=session.difficulty,
            )
        session.questions[index] = current.model_copy(
            update={
                "answer": answer,
                "score": evaluation.score,
                "feedback": evaluation.feedback,
                "answered": True,
            }
        )
        with span(session_id, "sequence"):
            step = self._sequencer.advance(session, state, score=evaluation.score)

        if step.is_complete:
            self._repository.save(session)
            self._states.put(session_id, step.state)
            answered = len(session.answered_questions())
            log_event("answer_evaluated", session_id, score=evaluation.score, action="complete", question_number=answered)
            return EvaluationOutcome(
                evaluation=evaluation,
                is_complete=True,
                question_number=answered,
                total_questions=session.total_questions,
            )

        if step.question is None:
            raise RuntimeError(f"Sequencer produced no question for session {session_id}")
        session.questions.append(step.question)
        nxt = step.state.model_copy(update={"current_question_index": len(session.questions) - 1})
        self._repository.save(session)
        self._states.put(session_id, nxt)

        is_follow_up = step.question.is_follow_up
        number = nxt.main_questions_asked
        log_event(
            "answer_evaluated",
            session_id,
            score=evaluation.score,
            action="follow_up" if is_follow_up else "next_main",
            question_number=number,
        )
        return EvaluationOutcome(
            evaluation=evaluation,
            is_complete=False,
            question_number=number,
            total_questions=session.total_questions,
            next_question=step.question.question,
            is_follow_up=is_follow_up,
            display_number=f"{number} (Follow-up)" if is_follow_up else str(number),
        )

    def complete(self, session_id: str, *, time_expired: bool = False) -> FinalReport:
        """Synthesize the report and close the session.

        Without ``time_expired`` the sequencer must already have signalled
        completion. With it, an in-progress session is closed early and only
        its answered questions feed the report.
        """

        session_id = _require_text("sessionId", session_id)
        session = self._load(session_id)
        state = self._states.get(session_id)
        if state is None or session.status != "in-progress":
            raise SessionNotActive(session_id)
        if state.phase is not SessionPhase.COMPLETE and not time_expired:
            raise SessionNotActive(session_id, "Interview is not finished yet")

        with span(session_id, "report"):
            report = self._synthesizer.synthesize(
                role=session.role,
                difficulty=session.difficulty,
                interview_type=session.interview_type,
                records=session.answered_questions(),
            )
        session.apply_report(report, self._clock())
        self._repository.save(session)
        self._states.delete(session_id)
        log_event(
            "session_completed",
            session_id,
            score=report.overall_score,
            outcome="time_expired" if time_expired else "completed",
        )
        return FinalReport(report=report, session=session)

    def abandon(self, session_id: str) -> Session:
        session_id = _require_text("sessionId", session_id)
        session = self._load(session_id)
        if session.status != "in-progress":
            raise SessionNotActive(session_id)
        session.status = "abandoned"
        self._repository.save(session)
        self._states.delete(session_id)
        log_event("session_abandoned", session_id)
        return session

    def _load(self, session_id: str) -> Session:
        session = self._repository.find(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return session


__all__ = [
    "EvaluationOutcome",
    "FinalReport",
    "SessionStateMachine",
    "StartOutcome",
    "total_questions_for",
]
