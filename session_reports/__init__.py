from __future__ import annotations  # Interview report package exports

from .models import CategoryStats, InterviewReport
from .pdf import generate_interview_report_pdf
from .report import build_report, performance_label

__all__ = [
    "CategoryStats",
    "InterviewReport",
    "build_report",
    "generate_interview_report_pdf",
    "performance_label",
]
