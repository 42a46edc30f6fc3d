from __future__ import annotations  # Report assembly from stored interviews

from typing import List, Tuple

from interviews.models import Interview
from services.scoring import category_breakdown, summarize_scores

from .models import InterviewReport

PERFORMANCE_BANDS: List[Tuple[float, str]] = [  # Lower bound -> label, checked top down
    (9.0, "Exceptional"),
    (8.0, "Excellent"),
    (7.0, "Good"),
    (6.0, "Satisfactory"),
    (5.0, "Needs Improvement"),
]
LOWEST_BAND = "Requires Work"


def performance_label(score: float) -> str:  # Human label for an overall score
    for floor, label in PERFORMANCE_BANDS:
        if score >= floor:
            return label
    return LOWEST_BAND


def build_report(interview: Interview) -> InterviewReport:  # Scores are always recomputed from the rounds
    scores = summarize_scores(interview.questions)
    return InterviewReport(
        interview_id=interview.id,
        job_title=interview.job_title,
        mode=interview.mode,
        difficulty=interview.difficulty,
        status=interview.status,
        created_at=interview.created_at,
        tech_stack=list(interview.tech_stack),
        total_questions=scores.total,
        answered=scores.answered,
        unanswered=scores.unanswered,
        overall_score=scores.overall_score,
        answered_average=scores.answered_average,
        performance_label=performance_label(scores.overall_score),
        categories=category_breakdown(interview.questions),
        overall_feedback=interview.overall_feedback,
        strengths=list(interview.strengths or []),
        weaknesses=list(interview.weaknesses or []),
        recommendations=list(interview.recommendations or []),
        questions=list(interview.questions),
    )


__all__ = ["LOWEST_BAND", "PERFORMANCE_BANDS", "build_report", "performance_label"]
