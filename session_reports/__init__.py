from __future__ import annotations  # Session report package exports

from .pdf import ReportPDF, generate_session_report_pdf

__all__ = ["ReportPDF", "generate_session_report_pdf"]
