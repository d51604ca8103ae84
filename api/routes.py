"""FastAPI routes for interview session control and history."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response

from api.schemas import (
    AbandonResp,
    EvaluateReq,
    EvaluateResp,
    QuestionView,
    ReportReq,
    ReportResp,
    SessionDetail,
    SessionListItem,
    SessionRef,
    StartReq,
    StartResp,
    StatsResp,
)
from config.settings import settings
from interview_session.errors import (
    InputValidationError,
    PersistenceError,
    SessionNotActive,
    SessionNotFound,
)
from interview_session.machine import SessionStateMachine
from interview_session.models import Session
from llm_gateway.gateway import GenerationFailure, GenerationGateway, RateLimited
from session_reports import generate_session_report_pdf
from storage.sessions import SqliteSessionRepository


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

_repository: Optional[SqliteSessionRepository] = None
_machine: Optional[SessionStateMachine] = None


def get_repository() -> SqliteSessionRepository:
    global _repository
    if _repository is None:
        _repository = SqliteSessionRepository()
    return _repository


def get_machine() -> SessionStateMachine:
    global _machine
    if _machine is None:
        _machine = SessionStateMachine(get_repository(), GenerationGateway())
    return _machine


def reset_machine() -> None:  # Drop cached collaborators so the next request rebuilds them
    global _repository, _machine
    _repository = None
    _machine = None


@contextmanager
def _http_errors(action: str) -> Iterator[None]:
    try:
        yield
    except InputValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except SessionNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except SessionNotActive as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except RateLimited as exc:
        logger.warning("Generation rate-limited during %s", action)
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    except GenerationFailure as exc:
        logger.exception("Generation failed during %s", action)
        raise HTTPException(status_code=502, detail=f"Unable to {action}: {exc}") from exc
    except PersistenceError as exc:
        logger.exception("Persistence failed during %s", action)
        raise HTTPException(status_code=500, detail=f"Unable to {action}") from exc


def _question_views(session: Session) -> List[QuestionView]:
    return [
        QuestionView(
            question=record.question,
            answer=record.answer,
            score=record.score,
            feedback=record.feedback,
            is_follow_up=record.is_follow_up,
            answered=record.answered,
        )
        for record in session.questions
    ]


def _report_fields(session: Session) -> dict:
    return {
        "session_id": session.session_id,
        "overall_score": session.overall_score,
        "percentage_score": session.percentage_score,
        "strengths": session.strengths,
        "improvements": session.improvements,
        "sample_answers": session.sample_answers,
        "suggested_topics": session.suggested_topics,
        "questions": _question_views(session),
        "role": session.role,
        "difficulty": session.difficulty,
        "interview_type": session.interview_type,
        "duration": session.duration,
        "completed_at": session.completed_at,
    }


@router.post("/interview/start", response_model=StartResp)
def start_interview(req: StartReq, machine: SessionStateMachine = Depends(get_machine)) -> StartResp:
    with _http_errors("start interview"):
        outcome = machine.start(req.role, req.difficulty, req.interview_type, req.duration)
    return StartResp(
        session_id=outcome.session_id,
        question=outcome.question,
        question_number=outcome.question_number,
        total_questions=outcome.total_questions,
        is_follow_up=outcome.is_follow_up,
        duration=outcome.duration,
    )


@router.post("/interview/evaluate", response_model=EvaluateResp, response_model_exclude_none=True)
def evaluate_answer(req: EvaluateReq, machine: SessionStateMachine = Depends(get_machine)) -> EvaluateResp:
    with _http_errors("evaluate answer"):
        outcome = machine.submit_answer(req.session_id, req.answer)
    if outcome.is_complete:
        return EvaluateResp(
            evaluation=outcome.evaluation,
            is_complete=True,
            question_number=outcome.question_number,
            total_questions=outcome.total_questions,
        )
    return EvaluateResp(
        evaluation=outcome.evaluation,
        is_complete=False,
        question_number=outcome.question_number,
        total_questions=outcome.total_questions,
        next_question=outcome.next_question,
        is_follow_up=outcome.is_follow_up,
        display_number=outcome.display_number,
    )


@router.post("/interview/report", response_model=ReportResp)
def generate_report(req: ReportReq, machine: SessionStateMachine = Depends(get_machine)) -> ReportResp:
    with _http_errors("generate report"):
        final = machine.complete(req.session_id, time_expired=req.time_expired)
    return ReportResp(**_report_fields(final.session))


@router.post("/interview/abandon", response_model=AbandonResp)
def abandon_interview(req: SessionRef, machine: SessionStateMachine = Depends(get_machine)) -> AbandonResp:
    with _http_errors("abandon interview"):
        session = machine.abandon(req.session_id)
    return AbandonResp(session_id=session.session_id, status=session.status)


@router.get("/sessions", response_model=List[SessionListItem])
def list_sessions(repository: SqliteSessionRepository = Depends(get_repository)) -> List[SessionListItem]:
    with _http_errors("list sessions"):
        summaries = repository.list_completed(limit=settings.RECENT_SESSIONS_LIMIT)
    return [SessionListItem(**summary.model_dump()) for summary in summaries]


@router.get("/sessions/stats", response_model=StatsResp)
def session_stats(repository: SqliteSessionRepository = Depends(get_repository)) -> StatsResp:
    with _http_errors("compute statistics"):
        stats = repository.completion_stats()
    return StatsResp(total_interviews=stats.total_interviews, average_score=stats.average_score)


def _load_session(repository: SqliteSessionRepository, session_id: str) -> Session:
    with _http_errors("load session"):
        session = repository.find(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


@router.get("/sessions/{session_id}", response_model=SessionDetail)
def get_session(session_id: str, repository: SqliteSessionRepository = Depends(get_repository)) -> SessionDetail:
    session = _load_session(repository, session_id)
    return SessionDetail(
        **_report_fields(session),
        status=session.status,
        total_questions=session.total_questions,
        started_at=session.started_at,
    )


@router.get("/sessions/{session_id}/report.pdf")
def download_session_report(
    session_id: str, repository: SqliteSessionRepository = Depends(get_repository)
) -> Response:
    session = _load_session(repository, session_id)
    if session.status != "completed":
        raise HTTPException(status_code=400, detail="Session report not available until the interview is completed")
    pdf_bytes = generate_session_report_pdf(session)
    filename = f"interview-report-{session_id}.pdf"
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


__all__ = ["get_machine", "get_repository", "reset_machine", "router"]
