"""Final performance report synthesis."""
from __future__ import annotations

import logging
from typing import List, Sequence

from pydantic import BaseModel, ConfigDict, Field

from agents.parsing import parse
from agents.prompts import REPORT
from agents.types import Report, SampleAnswer
from interview_session.models import QuestionRecord
from llm_gateway.gateway import GenerationGateway

logger = logging.getLogger(__name__)

MAX_SAMPLE_ANSWERS = 2

FALLBACK_STRENGTHS = ["Completed the interview", "Showed willingness to engage", "Attempted all questions"]
FALLBACK_IMPROVEMENTS = ["Provide more detailed answers", "Include practical examples", "Structure responses better"]
FALLBACK_TOPICS = ["Core fundamentals", "System design basics", "Problem-solving patterns", "Communication skills"]


class ReportDraft(BaseModel):  # Raw report shape as returned by the model
    model_config = ConfigDict(populate_by_name=True)

    overall_score: float = Field(alias="overallScore")
    percentage_score: float = Field(alias="percentageScore")
    strengths: List[str] = Field(default_factory=list)
    improvements: List[str] = Field(default_factory=list)
    sample_answers: List[SampleAnswer] = Field(default_factory=list, alias="sampleAnswers")
    suggested_topics: List[str] = Field(default_factory=list, alias="suggestedTopics")


def mean_score(records: Sequence[QuestionRecord]) -> float:
    if not records:
        return 0.0
    return sum(record.score for record in records) / len(records)


def fallback_report(mean: float) -> Report:
    """Deterministic report built from the mean score alone."""

    return Report(
        overall_score=round(mean, 1),
        percentage_score=int(round(mean * 10)),
        strengths=list(FALLBACK_STRENGTHS),
        improvements=list(FALLBACK_IMPROVEMENTS),
        sample_answers=[],
        suggested_topics=list(FALLBACK_TOPICS),
    )


def _clean(items: Sequence[str]) -> List[str]:
    return [" ".join(item.split()) for item in items if item and item.strip()]


def _normalize(draft: ReportDraft) -> Report:
    return Report(
        overall_score=round(max(0.0, min(10.0, draft.overall_score)), 1),
        percentage_score=int(round(max(0.0, min(100.0, draft.percentage_score)))),
        strengths=_clean(draft.strengths),
        improvements=_clean(draft.improvements),
        sample_answers=list(draft.sample_answers[:MAX_SAMPLE_ANSWERS]),
        suggested_topics=_clean(draft.suggested_topics),
    )


def format_transcript(records: Sequence[QuestionRecord]) -> str:
    blocks = []
    for idx, record in enumerate(records, start=1):
        label = f"Q{idx} (Follow-up)" if record.is_follow_up else f"Q{idx}"
        blocks.append(
            f'{label}: "{record.question}"\n'
            f'Answer: "{record.answer}"\n'
            f"Score: {record.score:g}/10\n"
            f"Feedback: {record.feedback}"
        )
    return "\n\n".join(blocks) or "(no answered questions)"


class ReportSynthesizer:
    """Aggregate a session's answered questions into a :class:`Report`.

    An unparseable reply degrades to :func:`fallback_report`; generation
    errors propagate so the caller can retry without closing the session.
    """

    def __init__(self, gateway: GenerationGateway) -> None:
        self._gateway = gateway

    def synthesize(
        self,
        *,
        role: str,
        difficulty: str,
        interview_type: str,
        records: Sequence[QuestionRecord],
    ) -> Report:
        mean = mean_score(records)
        raw = self._gateway.generate(
            REPORT,
            {
                "role": role,
                "difficulty": difficulty,
                "interview_type": interview_type,
                "mean_score": f"{mean:.1f}",
                "transcript": format_transcript(records),
            },
        )
        result = parse(raw, ReportDraft)
        if not result.ok:
            logger.warning("Report fallback: %s", result.error)
            return fallback_report(mean)
        return _normalize(result.value)  # type: ignore[arg-type]


__all__ = ["ReportSynthesizer", "fallback_report", "format_transcript", "mean_score"]
