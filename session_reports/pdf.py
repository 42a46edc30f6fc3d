from __future__ import annotations  # Styled PDF rendering for interview reports

import os
from datetime import datetime
from typing import Any, List, Optional, Sequence, Tuple

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from interviews.models import Question

from .models import InterviewReport

DEJAVU_SANS = "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"  # System font
DEJAVU_SANS_BOLD = "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf"  # System font

ACCENT = (45, 115, 245)  # Palette accent
TEXT = (34, 34, 34)  # Primary text color
MUTED = (100, 100, 100)  # Secondary text color
RULE = (230, 230, 230)  # Divider color
SOFT_ACCENT_BG = (243, 248, 255)  # Highlight background
GOOD = (16, 185, 129)  # Score >= 7
FAIR = (245, 158, 11)  # Score >= 5
POOR = (239, 68, 68)  # Low or skipped

UNANSWERED_MARKER = "Question skipped - scored 0/10"


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:  # Parse ISO timestamp
    if not value:
        return None
    normalized = value[:-1] + "+00:00" if value.endswith("Z") else value
    try:
        return datetime.fromisoformat(normalized)
    except ValueError:
        return None


def _format_datetime(value: Optional[datetime]) -> str:  # Format timestamp for display
    if not value:
        return "-"
    return value.strftime("%d %b %Y, %I:%M %p").lstrip("0").replace(" 0", " ")


def _effective_width(pdf: FPDF) -> float:  # Compute effective page width
    return float(pdf.w) - float(pdf.l_margin) - float(pdf.r_margin)


def _score_color(score: Optional[float]) -> Tuple[int, int, int]:
    if score is None:
        return POOR
    if score >= 7:
        return GOOD
    if score >= 5:
        return FAIR
    return POOR


def _category_label(category: str) -> str:
    return category.replace("-", " ").title()


class ReportPDF(FPDF):  # PDF with custom header/footer styling
    def __init__(self, *args, accent: Tuple[int, int, int] = ACCENT, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.accent = accent
        self.header_title = "Interview Report"
        self.header_subtitle = ""
        self._font_regular = "Helvetica"
        self._font_bold = "Helvetica"
        self._supports_unicode = False

    def use_unicode_font(self) -> None:  # Register DejaVu when the system ships it
        if not (os.path.exists(DEJAVU_SANS) and os.path.exists(DEJAVU_SANS_BOLD)):
            return
        self.add_font("DejaVu", "", DEJAVU_SANS)
        self.add_font("DejaVu", "B", DEJAVU_SANS_BOLD)
        self._font_regular = "DejaVu"
        self._font_bold = "DejaVu"
        self._supports_unicode = True

    @property
    def bullet(self) -> str:
        return "•" if self._supports_unicode else "-"

    def _prepare_text(self, text: Any) -> str:  # Core fonts only cover latin-1
        value = "" if text is None else str(text)
        if self._supports_unicode:
            return value
        cleaned = value.replace("•", "-").replace("’", "'").replace("—", "-").replace("–", "-")
        return cleaned.encode("latin-1", "ignore").decode("latin-1")

    def cell(self, w=None, h=None, text="", *args, **kwargs):  # Sanitise before drawing
        return super().cell(w, h, self._prepare_text(text), *args, **kwargs)

    def multi_cell(self, w, h=None, text="", *args, **kwargs):  # Sanitise before drawing
        return super().multi_cell(w, h, self._prepare_text(text), *args, **kwargs)

    def header(self) -> None:  # Banner on the cover page, slim title afterwards
        usable = _effective_width(self)
        if self.page_no() == 1:
            self.set_fill_color(*self.accent)
            self.rect(0, 0, self.w, 34, style="F")
            self.set_text_color(255, 255, 255)
            self.set_xy(self.l_margin, 7)
            self.set_font(self._font_bold, "B", 18)
            self.cell(usable, 9, self.header_title, align="C", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
            if self.header_subtitle:
                self.set_font(self._font_regular, "", 11)
                self.cell(usable, 7, self.header_subtitle, align="C", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
            self.set_text_color(*TEXT)
            self.set_y(40)
        else:
            self.set_text_color(80, 80, 80)
            self.set_xy(self.l_margin, 8)
            self.set_font(self._font_bold, "B", 11)
            self.cell(usable, 6, self.header_title, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
            mark = self.get_y()
            self.set_draw_color(*self.accent)
            self.set_line_width(0.4)
            self.line(self.l_margin, mark + 1, self.w - self.r_margin, mark + 1)
            self.set_text_color(*TEXT)
            self.ln(4)

    def footer(self) -> None:  # Render footer with pagination
        self.set_y(-12)
        self.set_draw_color(*RULE)
        self.set_line_width(0.2)
        self.line(self.l_margin, self.get_y(), self.w - self.r_margin, self.get_y())
        self.set_text_color(120, 120, 120)
        self.set_font(self._font_regular, "", 9)
        self.cell(0, 10, "Mock interview report", align="L")
        self.set_x(self.l_margin)
        self.cell(0, 10, f"Page {self.page_no()}/{{nb}}", align="R")


def _section_title(pdf: ReportPDF, title: str) -> None:  # Render styled section title
    if pdf.get_y() + 24 > pdf.page_break_trigger:
        pdf.add_page()
    pdf.set_text_color(*TEXT)
    pdf.set_x(pdf.l_margin)
    pdf.set_font(pdf._font_bold, "B", 13)
    pdf.cell(0, 9, title, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_draw_color(*RULE)
    pdf.set_line_width(0.2)
    y = pdf.get_y()
    pdf.line(pdf.l_margin, y, pdf.l_margin + _effective_width(pdf), y)
    pdf.ln(2)


def _text_height(pdf: ReportPDF, width: float, text: str, line_height: float) -> float:  # Estimate multi-cell height
    lines = pdf.multi_cell(width, line_height, text or "-", dry_run=True, output="LINES")
    return line_height * max(1, len(lines))


def _render_score_card(pdf: ReportPDF, report: InterviewReport) -> None:  # Big score plus performance label
    width = _effective_width(pdf)
    top = pdf.get_y()
    pdf.set_fill_color(*SOFT_ACCENT_BG)
    pdf.rect(pdf.l_margin, top, width, 30, style="F")
    pdf.set_xy(pdf.l_margin + 6, top + 5)
    pdf.set_text_color(*_score_color(report.overall_score))
    pdf.set_font(pdf._font_bold, "B", 26)
    pdf.cell(40, 12, f"{report.overall_score:.1f}", new_x=XPos.RIGHT, new_y=YPos.TOP)
    pdf.set_text_color(*MUTED)
    pdf.set_font(pdf._font_regular, "", 12)
    pdf.cell(14, 12, "/10", new_x=XPos.RIGHT, new_y=YPos.TOP)
    pdf.set_text_color(*TEXT)
    pdf.set_font(pdf._font_bold, "B", 14)
    pdf.cell(width - 66, 12, report.performance_label, align="R", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_x(pdf.l_margin + 6)
    pdf.set_text_color(*MUTED)
    pdf.set_font(pdf._font_regular, "", 10)
    pdf.cell(width - 12, 6, "Overall score (unanswered questions count as 0)", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_y(top + 34)
    pdf.set_text_color(*TEXT)


def _render_table(
    pdf: ReportPDF,
    headers: Sequence[str],
    rows: Sequence[Sequence[str]],
    fractions: Sequence[float],
    *,
    empty: str,
) -> None:  # Striped table with accent header row
    widths = [_effective_width(pdf) * fraction for fraction in fractions]
    pdf.set_x(pdf.l_margin)
    pdf.set_fill_color(*ACCENT)
    pdf.set_text_color(255, 255, 255)
    pdf.set_font(pdf._font_bold, "B", 10)
    for idx, title in enumerate(headers):
        pdf.cell(widths[idx], 8, title, align="L", fill=True)
    pdf.ln(8)
    pdf.set_text_color(*TEXT)
    if not rows:
        pdf.set_x(pdf.l_margin)
        pdf.set_text_color(*MUTED)
        pdf.set_font(pdf._font_regular, "", 10)
        pdf.multi_cell(_effective_width(pdf), 6, empty, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_text_color(*TEXT)
        pdf.ln(4)
        return
    pdf.set_font(pdf._font_regular, "", 10)
    for idx, row in enumerate(rows):
        fill = idx % 2 == 0
        if fill:
            pdf.set_fill_color(247, 250, 255)
        pdf.set_x(pdf.l_margin)
        for col, value in enumerate(row):
            pdf.cell(widths[col], 7, value, border=0, fill=fill)
        pdf.ln(7)
    pdf.ln(3)


def _statistics_rows(report: InterviewReport) -> List[Tuple[str, str]]:
    return [
        ("Total questions", str(report.total_questions)),
        ("Answered", str(report.answered)),
        ("Unanswered (counted as 0)", str(report.unanswered)),
        ("Overall score", f"{report.overall_score:.1f}/10"),
        ("Average of answered", f"{report.answered_average:.1f}/10"),
        ("Mode", report.mode.title()),
        ("Seniority", report.difficulty.title()),
    ]


def _render_list_box(pdf: ReportPDF, title: str, items: Sequence[str], color: Tuple[int, int, int]) -> None:
    if not items:
        return
    width = _effective_width(pdf)
    pdf.set_x(pdf.l_margin)
    pdf.set_fill_color(*color)
    pdf.set_text_color(255, 255, 255)
    pdf.set_font(pdf._font_bold, "B", 11)
    pdf.cell(width, 7, f"  {title}", fill=True, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_text_color(*TEXT)
    pdf.set_font(pdf._font_regular, "", 10)
    pdf.ln(1)
    for item in items:
        pdf.set_x(pdf.l_margin + 3)
        pdf.multi_cell(width - 3, 5.5, f"{pdf.bullet} {item}", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(3)


def _render_question(pdf: ReportPDF, index: int, question: Question) -> None:  # One transcript block
    width = _effective_width(pdf)
    line = 5.5
    answer = (question.user_answer or "").strip()
    estimate = 14 + _text_height(pdf, width - 30, question.question, line)
    if answer:
        estimate += _text_height(pdf, width - 8, answer, line)
    if question.feedback:
        estimate += _text_height(pdf, width - 12, question.feedback, line) + 6
    if pdf.get_y() + min(estimate, 120) > pdf.page_break_trigger:
        pdf.add_page()

    top = pdf.get_y()
    pdf.set_fill_color(*ACCENT)
    pdf.rect(pdf.l_margin, top, 8, 8, style="F")
    pdf.set_xy(pdf.l_margin, top + 1)
    pdf.set_text_color(255, 255, 255)
    pdf.set_font(pdf._font_bold, "B", 10)
    pdf.cell(8, 6, str(index), align="C")

    badge = f"{question.score}/10" if question.answered and question.score is not None else "0/10"
    pdf.set_fill_color(*_score_color(question.score if question.answered else None))
    pdf.set_xy(pdf.l_margin + width - 20, top)
    pdf.cell(20, 8, badge, align="C", fill=True)

    pdf.set_xy(pdf.l_margin + 10, top)
    pdf.set_text_color(*MUTED)
    pdf.set_font(pdf._font_bold, "B", 8)
    pdf.cell(width - 32, 4, _category_label(question.category).upper(), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_x(pdf.l_margin + 10)
    pdf.set_text_color(*TEXT)
    pdf.set_font(pdf._font_bold, "B", 10)
    pdf.multi_cell(width - 32, line, question.question, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_y(max(pdf.get_y(), top + 9) + 1)

    pdf.set_font(pdf._font_regular, "", 10)
    if answer:
        pdf.set_x(pdf.l_margin + 4)
        pdf.set_text_color(60, 60, 60)
        pdf.multi_cell(width - 8, line, f"A: {answer}", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    else:
        pdf.set_x(pdf.l_margin + 4)
        pdf.set_text_color(*POOR)
        pdf.set_font(pdf._font_bold, "B", 10)
        pdf.cell(width - 8, line, UNANSWERED_MARKER, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_font(pdf._font_regular, "", 10)

    if question.feedback:
        pdf.ln(1)
        box_top = pdf.get_y()
        box_height = _text_height(pdf, width - 12, question.feedback, line) + 8
        pdf.set_fill_color(*SOFT_ACCENT_BG)
        pdf.rect(pdf.l_margin + 4, box_top, width - 8, box_height, style="F")
        pdf.set_xy(pdf.l_margin + 6, box_top + 1.5)
        pdf.set_text_color(*ACCENT)
        pdf.set_font(pdf._font_bold, "B", 9)
        pdf.cell(width - 12, 5, "Feedback", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_x(pdf.l_margin + 6)
        pdf.set_text_color(*TEXT)
        pdf.set_font(pdf._font_regular, "", 9)
        pdf.multi_cell(width - 12, line, question.feedback, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_y(max(pdf.get_y(), box_top + box_height))

    bottom = pdf.get_y() + 2
    pdf.set_draw_color(*RULE)
    pdf.set_line_width(0.2)
    pdf.line(pdf.l_margin, bottom, pdf.l_margin + width, bottom)
    pdf.set_y(bottom + 4)
    pdf.set_text_color(*TEXT)


def generate_interview_report_pdf(report: InterviewReport) -> bytes:  # Build PDF payload for an interview report
    pdf = ReportPDF()
    pdf.use_unicode_font()
    pdf.alias_nb_pages()
    created = _format_datetime(_parse_datetime(report.created_at))
    pdf.header_title = "Interview Report"
    pdf.header_subtitle = f"{report.job_title} - {created}"
    pdf.set_margins(15, 22, 15)
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.add_page()

    _render_score_card(pdf, report)

    _section_title(pdf, "Interview Statistics")
    _render_table(pdf, ["Metric", "Value"], _statistics_rows(report), [0.6, 0.4], empty="No statistics available.")

    _section_title(pdf, "Performance by Category")
    _render_table(
        pdf,
        ["Category", "Questions", "Avg Score", "Best", "Worst"],
        [
            (_category_label(c.category), str(c.count), f"{c.average:.1f}", str(c.best), str(c.worst))
            for c in report.categories
        ],
        [0.36, 0.16, 0.16, 0.16, 0.16],
        empty="No answered questions to break down.",
    )

    if report.overall_feedback:
        _section_title(pdf, "Overall Feedback")
        pdf.set_x(pdf.l_margin)
        pdf.set_font(pdf._font_regular, "", 10)
        pdf.multi_cell(_effective_width(pdf), 5.5, report.overall_feedback, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.ln(3)

    if report.strengths or report.weaknesses or report.recommendations:
        _section_title(pdf, "Strengths and Areas for Improvement")
        _render_list_box(pdf, "Key Strengths", report.strengths, GOOD)
        _render_list_box(pdf, "Areas for Improvement", report.weaknesses, POOR)
        _render_list_box(pdf, "Recommendations", report.recommendations, ACCENT)

    _section_title(pdf, "Interview Conversation")
    if not report.questions:
        pdf.set_text_color(*MUTED)
        pdf.set_font(pdf._font_regular, "", 10)
        pdf.multi_cell(_effective_width(pdf), 6, "No questions recorded for this interview.")
    for index, question in enumerate(report.questions, start=1):
        _render_question(pdf, index, question)

    return bytes(pdf.output())


__all__ = ["ReportPDF", "UNANSWERED_MARKER", "generate_interview_report_pdf"]
