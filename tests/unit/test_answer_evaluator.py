import pytest

from agents.response_evaluator import GENERIC_FEEDBACK, NEUTRAL_SCORE, AnswerEvaluator
from llm_gateway.gateway import GenerationFailure, GenerationGateway


def _evaluator(reply):
    def capability(**_):
        if isinstance(reply, Exception):
            raise reply
        return reply

    return AnswerEvaluator(GenerationGateway(capability, sleep=lambda _: None))


def _evaluate(evaluator):
    return evaluator.evaluate(question="Explain indexes.", answer="They speed up reads.", role="DBA", difficulty="Mid")


def test_parses_score_and_feedback():
    result = _evaluate(_evaluator('{"score": 7.25, "feedback": "Good,  but shallow."}'))
    assert result.score == 7.2
    assert result.feedback == "Good, but shallow."


def test_clamps_out_of_range_scores():
    assert _evaluate(_evaluator('{"score": 14, "feedback": "wow"}')).score == 10.0
    assert _evaluate(_evaluator('{"score": -3, "feedback": "no"}')).score == 0.0


def test_malformed_reply_falls_back_to_neutral():
    result = _evaluate(_evaluator("Great answer, 8 out of 10!"))
    assert result.score == NEUTRAL_SCORE
    assert result.feedback == GENERIC_FEEDBACK


def test_empty_feedback_replaced():
    assert _evaluate(_evaluator('{"score": 6}')).feedback == GENERIC_FEEDBACK


def test_generation_failure_propagates():
    with pytest.raises(GenerationFailure):
        _evaluate(_evaluator(RuntimeError("connection reset")))
