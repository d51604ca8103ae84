from __future__ import annotations  # Styled PDF rendering for completed sessions

import re
import textwrap
from datetime import datetime, timezone
from typing import Any, List, Sequence, Tuple

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from interview_session.models import QuestionRecord, Session

ACCENT = (20, 128, 120)  # Banner and rule color
TEXT = (30, 30, 30)
MUTED = (105, 105, 105)  # Answers and empty-section notes
RULE = (225, 225, 225)
QUESTION_BG = (236, 247, 245)  # Question heading fill


def _format_datetime(value: datetime | None) -> str:
    if value is None:
        return "-"
    if value.tzinfo is None:
        return value.strftime("%Y-%m-%d %H:%M")
    return value.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")


def _effective_width(pdf: FPDF) -> float:  # Compute effective page width
    return float(pdf.w) - float(pdf.l_margin) - float(pdf.r_margin)


def _summarize(text: str, width: int = 600) -> str:  # Collapse whitespace and shorten long answers
    cleaned = " ".join(text.split()) if text else ""
    if not cleaned:
        return "-"
    segments = [seg.strip() for seg in re.split(r"(?<=[.!?])\s+", cleaned) if seg.strip()]
    snippet = " ".join(segments[:6]) or cleaned
    return textwrap.shorten(snippet, width=width, placeholder="...")


class ReportPDF(FPDF):  # PDF with header banner and paginated footer
    def __init__(self, title: str) -> None:
        super().__init__()
        self.header_title = title

    def _prepare_text(self, text: Any) -> str:  # Core fonts only cover latin-1
        value = "" if text is None else str(text)
        value = value.replace("•", "-").replace("…", "...").replace("—", "-").replace("–", "-")
        value = value.replace("‘", "'").replace("’", "'").replace("“", '"').replace("”", '"')
        return value.encode("latin-1", "ignore").decode("latin-1")

    def cell(self, w=None, h=None, text="", *args, **kwargs):
        return super().cell(w, h, self._prepare_text(text), *args, **kwargs)

    def multi_cell(self, w, h=None, text="", *args, **kwargs):
        return super().multi_cell(w, h, self._prepare_text(text), *args, **kwargs)

    def header(self) -> None:
        if self.page_no() == 1:
            self.set_fill_color(*ACCENT)
            self.rect(0, 0, self.w, 22, style="F")
            self.set_text_color(255, 255, 255)
            self.set_font("Helvetica", "B", 16)
            self.set_xy(self.l_margin, 7)
            self.cell(0, 8, self.header_title, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
            self.set_text_color(*TEXT)
            self.set_y(28)
        else:
            self.set_text_color(80, 80, 80)
            self.set_font("Helvetica", "B", 11)
            self.set_xy(self.l_margin, 8)
            self.cell(0, 6, self.header_title, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
            self.set_draw_color(*ACCENT)
            self.set_line_width(0.4)
            self.line(self.l_margin, self.get_y() + 1, self.w - self.r_margin, self.get_y() + 1)
            self.set_text_color(*TEXT)
            self.ln(5)

    def footer(self) -> None:
        self.set_y(-12)
        self.set_draw_color(*RULE)
        self.set_line_width(0.2)
        self.line(self.l_margin, self.get_y(), self.w - self.r_margin, self.get_y())
        self.set_text_color(120, 120, 120)
        self.set_font("Helvetica", "", 9)
        self.cell(0, 10, f"Page {self.page_no()}/{{nb}}", align="R")


def _section_title(pdf: ReportPDF, title: str) -> None:
    pdf.set_text_color(*TEXT)
    pdf.set_x(pdf.l_margin)
    pdf.set_font("Helvetica", "B", 13)
    pdf.cell(0, 9, title, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_draw_color(*RULE)
    pdf.set_line_width(0.2)
    y = pdf.get_y()
    pdf.line(pdf.l_margin, y, pdf.l_margin + _effective_width(pdf), y)
    pdf.ln(2)


def _meta_block(pdf: ReportPDF, rows: List[Tuple[str, str]]) -> None:  # Two-column label/value grid
    col = _effective_width(pdf) / 2.0
    for idx in range(0, len(rows), 2):
        left = rows[idx]
        right = rows[idx + 1] if idx + 1 < len(rows) else ("", "")
        pdf.set_x(pdf.l_margin)
        pdf.set_text_color(*MUTED)
        pdf.set_font("Helvetica", "", 10)
        pdf.cell(col, 6, left[0], new_x=XPos.RIGHT, new_y=YPos.TOP)
        pdf.cell(col, 6, right[0], new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_text_color(*TEXT)
        pdf.set_font("Helvetica", "B", 11)
        pdf.cell(col, 6, left[1], new_x=XPos.RIGHT, new_y=YPos.TOP)
        pdf.cell(col, 6, right[1], new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(2)


def _bullets(pdf: ReportPDF, items: Sequence[str], empty: str) -> None:
    pdf.set_x(pdf.l_margin)
    pdf.set_font("Helvetica", "", 11)
    if not items:
        pdf.set_text_color(*MUTED)
        pdf.multi_cell(_effective_width(pdf), 6, empty, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_text_color(*TEXT)
        pdf.ln(2)
        return
    for item in items:
        pdf.multi_cell(_effective_width(pdf), 6, f"- {item}", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(2)


def _question_label(index: int, record: QuestionRecord) -> str:
    label = f"Q{index}"
    if record.is_follow_up:
        label += " (Follow-up)"
    return label


def _render_questions(pdf: ReportPDF, questions: Sequence[QuestionRecord]) -> None:
    width = _effective_width(pdf)
    for idx, record in enumerate(questions, start=1):
        pdf.set_x(pdf.l_margin)
        pdf.set_fill_color(*QUESTION_BG)
        pdf.set_font("Helvetica", "B", 11)
        score = f"{record.score:g}/10" if record.answered else "not answered"
        pdf.multi_cell(width, 7, f"{_question_label(idx, record)}  [{score}]", fill=True, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_font("Helvetica", "", 10)
        pdf.multi_cell(width, 5.5, record.question, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_text_color(*MUTED)
        pdf.multi_cell(width, 5.5, f"Answer: {_summarize(record.answer)}", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        if record.feedback:
            pdf.multi_cell(width, 5.5, f"Feedback: {record.feedback}", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_text_color(*TEXT)
        pdf.ln(3)


def generate_session_report_pdf(session: Session) -> bytes:
    """Render a completed session as PDF bytes."""

    pdf = ReportPDF(f"Interview Report: {session.role}")
    pdf.alias_nb_pages()
    pdf.set_auto_page_break(auto=True, margin=16)
    pdf.add_page()

    _meta_block(
        pdf,
        [
            ("Role", session.role),
            ("Difficulty", session.difficulty),
            ("Interview type", session.interview_type),
            ("Duration", f"{session.duration:g} min"),
            ("Overall score", f"{session.overall_score:.1f}/10"),
            ("Percentage", f"{session.percentage_score}%"),
            ("Started", _format_datetime(session.started_at)),
            ("Completed", _format_datetime(session.completed_at)),
        ],
    )

    _section_title(pdf, "Strengths")
    _bullets(pdf, session.strengths, "No strengths recorded.")
    _section_title(pdf, "Areas to improve")
    _bullets(pdf, session.improvements, "No improvement areas recorded.")
    _section_title(pdf, "Suggested topics")
    _bullets(pdf, session.suggested_topics, "No topics suggested.")

    if session.sample_answers:
        _section_title(pdf, "Improved sample answers")
        width = _effective_width(pdf)
        for sample in session.sample_answers:
            pdf.set_font("Helvetica", "B", 10)
            pdf.multi_cell(width, 5.5, sample.question, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
            pdf.set_font("Helvetica", "", 10)
            pdf.set_text_color(*MUTED)
            pdf.multi_cell(width, 5.5, f"Your answer: {_summarize(sample.original_answer)}", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
            pdf.set_text_color(*TEXT)
            pdf.multi_cell(width, 5.5, f"Stronger answer: {sample.improved_answer}", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
            pdf.ln(3)

    _section_title(pdf, "Question log")
    _render_questions(pdf, session.questions)

    return bytes(pdf.output())


__all__ = ["ReportPDF", "generate_session_report_pdf"]
