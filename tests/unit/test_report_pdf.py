from datetime import datetime, timezone

from agents.types import Report, SampleAnswer
from interview_session.models import QuestionRecord, Session
from session_reports import generate_session_report_pdf


def _completed_session():
    session = Session(
        session_id="s1",
        role="Platform Engineer “SRE”",
        difficulty="Senior",
        interview_type="Mixed",
        duration=10,
        total_questions=4,
        questions=[
            QuestionRecord(question="How do you roll back a bad deploy?", answer="Blue–green switch.", score=7, feedback="Good", answered=True),
            QuestionRecord(question="What if the schema changed?", is_follow_up=True, parent_question_index=0),
        ],
        started_at=datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc),
    )
    session.apply_report(
        Report(
            overall_score=7.0,
            percentage_score=70,
            strengths=["Calm under pressure"],
            improvements=["Mention data migrations"],
            sample_answers=[SampleAnswer(question="Rollback?", original_answer="Switch", improved_answer="Switch, then verify")],
            suggested_topics=["Expand/contract migrations"],
        ),
        datetime(2024, 5, 1, 9, 12, tzinfo=timezone.utc),
    )
    return session


def test_generates_pdf_bytes():
    payload = generate_session_report_pdf(_completed_session())
    assert isinstance(payload, bytes)
    assert payload.startswith(b"%PDF")
    assert len(payload) > 1000


def test_handles_empty_report_sections():
    session = _completed_session()
    session.strengths = []
    session.sample_answers = []
    assert generate_session_report_pdf(session).startswith(b"%PDF")
