"""Adaptive sequencing of interview questions.

The sequencer owns the decision policy that runs once per submitted answer:

1. Adjust difficulty: a score of 8 or more steps the declared level up, 4 or
   less steps it down, anything between clears the override.
2. A follow-up is due when none has been used yet and either the score sits in
   the inclusive 4-7 band after at least two answers, or at least three main
   questions have already been asked.
3. The session is complete when every main question has been asked and no
   follow-up is due.

:func:`transition` applies that policy to a :class:`SessionState` and returns
the new state; :class:`QuestionSequencer` then asks the gateway for the text of
whatever question the new phase calls for.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

from agents.difficulty import step_down, step_up
from agents.prompts import FOLLOW_UP, QUESTION
from interview_session.models import QuestionRecord, Session, SessionPhase, SessionState
from llm_gateway.gateway import GenerationGateway

HIGH_SCORE = 8.0
LOW_SCORE = 4.0
FOLLOW_UP_BAND = (4.0, 7.0)
FOLLOW_UP_MIN_ANSWERS = 2
FORCED_FOLLOW_UP_AFTER = 3


def adjusted_difficulty(declared: str, score: float) -> Optional[str]:
    if score >= HIGH_SCORE:
        return step_up(declared)
    if score <= LOW_SCORE:
        return step_down(declared)
    return None


def should_follow_up(state: SessionState, score: float) -> bool:
    """``state`` must already count the answer being scored."""

    if state.follow_up_used:
        return False
    low, high = FOLLOW_UP_BAND
    in_band = low <= score <= high and state.answered_count >= FOLLOW_UP_MIN_ANSWERS
    return in_band or state.main_questions_asked >= FORCED_FOLLOW_UP_AFTER


def transition(state: SessionState, *, score: float, declared_difficulty: str, total_questions: int) -> SessionState:
    """Apply one evaluated answer to ``state`` and return the next state.

    Raises:
        ValueError: If ``state`` is not waiting for an answer.
    """

    if state.phase is not SessionPhase.AWAITING_ANSWER:
        raise ValueError(f"cannot score an answer in phase {state.phase.value}")
    scored = state.model_copy(
        update={
            "answered_count": state.answered_count + 1,
            "adjusted_difficulty": adjusted_difficulty(declared_difficulty, score),
        }
    )
    follow_up = should_follow_up(scored, score)
    if scored.main_questions_asked >= total_questions and not follow_up:
        return scored.model_copy(update={"phase": SessionPhase.COMPLETE})
    if follow_up:
        return scored.model_copy(update={"phase": SessionPhase.FOLLOW_UP_PENDING, "follow_up_used": True})
    return scored.model_copy(
        update={
            "phase": SessionPhase.MAIN_PENDING,
            "main_questions_asked": scored.main_questions_asked + 1,
        }
    )


def format_history(records: Iterable[QuestionRecord]) -> str:  # Previous questions block for the question prompt
    lines = [
        f'Q{idx}: "{record.question}" (Score: {record.score:g}/10)'
        for idx, record in enumerate((r for r in records if r.answered), start=1)
    ]
    if not lines:
        return "Generate the first question for this interview."
    return (
        "Previous questions and scores in this session:\n"
        + "\n".join(lines)
        + "\n\nGenerate a NEW question that hasn't been asked yet. Adjust complexity based on candidate performance."
    )


@dataclass(frozen=True)
class SequencerStep:
    state: SessionState
    question: Optional[QuestionRecord] = None

    @property
    def is_complete(self) -> bool:
        return self.state.phase is SessionPhase.COMPLETE


class QuestionSequencer:
    """Decide the next action and produce the next question's text."""

    def __init__(self, gateway: GenerationGateway) -> None:
        self._gateway = gateway

    def first_question(self, *, role: str, difficulty: str, interview_type: str) -> QuestionRecord:
        text = self._main_question_text(role, difficulty, interview_type, [], None)
        return QuestionRecord(question=text)

    def advance(self, session: Session, state: SessionState, *, score: float) -> SequencerStep:
        """Score the current record's answer into ``state`` and build what comes next.

        The returned state is AWAITING_ANSWER (with a question) or COMPLETE
        (without one). ``current_question_index`` is left for the caller to
        move once the question is appended.
        """

        nxt = transition(
            state,
            score=score,
            declared_difficulty=session.difficulty,
            total_questions=session.total_questions,
        )
        if nxt.phase is SessionPhase.COMPLETE:
            return SequencerStep(state=nxt)
        if nxt.phase is SessionPhase.FOLLOW_UP_PENDING:
            parent_index = state.current_question_index
            parent = session.questions[parent_index]
            text = self._gateway.generate(
                FOLLOW_UP,
                {
                    "question": parent.question,
                    "answer": parent.answer,
                    "role": session.role,
                    "difficulty": session.difficulty,
                },
            )
            record = QuestionRecord(question=text, is_follow_up=True, parent_question_index=parent_index)
        else:
            text = self._main_question_text(
                session.role,
                session.difficulty,
                session.interview_type,
                session.questions,
                nxt.adjusted_difficulty,
            )
            record = QuestionRecord(question=text)
        return SequencerStep(
            state=nxt.model_copy(update={"phase": SessionPhase.AWAITING_ANSWER}),
            question=record,
        )

    def _main_question_text(
        self,
        role: str,
        difficulty: str,
        interview_type: str,
        history: List[QuestionRecord],
        override: Optional[str],
    ) -> str:
        return self._gateway.generate(
            QUESTION,
            {
                "role": role,
                "difficulty": difficulty,
                "effective_difficulty": override or difficulty,
                "interview_type": interview_type,
                "history_block": format_history(history),
            },
        )


__all__ = [
    "QuestionSequencer",
    "SequencerStep",
    "adjusted_difficulty",
    "format_history",
    "should_follow_up",
    "transition",
]
