"""LLM-backed answer evaluator with a neutral fallback."""
from __future__ import annotations

import logging

from agents.parsing import parse
from agents.prompts import EVALUATION
from agents.types import Evaluation
from llm_gateway.gateway import GenerationGateway

logger = logging.getLogger(__name__)

NEUTRAL_SCORE = 5.0
GENERIC_FEEDBACK = "Answer received and noted."

MIN_SCORE = 0.0
MAX_SCORE = 10.0


def neutral_evaluation() -> Evaluation:
    return Evaluation(score=NEUTRAL_SCORE, feedback=GENERIC_FEEDBACK)


def _round_1dp(value: float) -> float:
    return float(f"{value:.1f}")


def _normalize(parsed: Evaluation) -> Evaluation:
    bounded = _round_1dp(max(MIN_SCORE, min(MAX_SCORE, float(parsed.score))))
    feedback = " ".join(parsed.feedback.split()) or GENERIC_FEEDBACK
    return Evaluation(score=bounded, feedback=feedback)


class AnswerEvaluator:
    """Score a single answer on a 0-10 scale with short feedback.

    Malformed replies never fail the request; they collapse to a neutral
    score so the session can keep moving. Generation failures still
    propagate from the gateway.
    """

    def __init__(self, gateway: GenerationGateway) -> None:
        self._gateway = gateway

    def evaluate(self, *, question: str, answer: str, role: str, difficulty: str) -> Evaluation:
        raw = self._gateway.generate(
            EVALUATION,
            {
                "question": question,
                "answer": answer,
                "role": role,
                "difficulty": difficulty,
            },
        )
        result = parse(raw, Evaluation)
        if not result.ok:
            logger.warning("Evaluation fallback: %s", result.error)
            return neutral_evaluation()
        return _normalize(result.unwrap_or(neutral_evaluation()))


__all__ = ["AnswerEvaluator", "GENERIC_FEEDBACK", "NEUTRAL_SCORE", "neutral_evaluation"]
