from __future__ import annotations  # Interview report domain models

from typing import List, Optional

from pydantic import BaseModel, Field

from interviews.models import Question
from services.scoring import CategoryStats


class InterviewReport(BaseModel):  # Scored snapshot of one interview for API and PDF
    interview_id: str
    job_title: str
    mode: str
    difficulty: str
    status: str
    created_at: str
    tech_stack: List[str] = Field(default_factory=list)
    total_questions: int
    answered: int
    unanswered: int
    overall_score: float
    answered_average: float
    performance_label: str
    categories: List[CategoryStats] = Field(default_factory=list)
    overall_feedback: Optional[str] = None
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    questions: List[Question] = Field(default_factory=list)


__all__ = ["CategoryStats", "InterviewReport"]
