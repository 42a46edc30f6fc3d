"""Interview and question records persisted by the session store."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

QuestionCategory = Literal["technical", "behavioral", "system-design"]
DifficultyLevel = Literal["junior", "mid", "senior"]
InterviewStatus = Literal["ongoing", "completed"]
InterviewMode = Literal["screening", "technical", "behavioral"]

QUESTION_CATEGORIES: tuple[str, ...] = ("technical", "behavioral", "system-design")
DIFFICULTY_LEVELS: tuple[str, ...] = ("junior", "mid", "senior")
INTERVIEW_MODES: tuple[str, ...] = ("screening", "technical", "behavioral")


def utc_now() -> str:
    """Return the current UTC time as a sortable ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


class Question(BaseModel):
    """One interview round. Answer fields stay empty until the round is answered."""

    id: str = ""
    question: str
    category: QuestionCategory = "technical"
    expected_keywords: List[str] = Field(default_factory=list)
    follow_ups: List[str] = Field(default_factory=list)
    created_at: Optional[str] = None

    user_answer: Optional[str] = None
    score: Optional[int] = Field(default=None, ge=1, le=10)
    feedback: Optional[str] = None
    ideal_answer: Optional[str] = None

    @property
    def answered(self) -> bool:
        return bool(self.user_answer)


class Interview(BaseModel):
    """A single interview attempt and its ordered rounds."""

    id: str
    user_id: str = "anonymous"
    job_description: str
    job_title: str
    tech_stack: List[str] = Field(default_factory=list)
    difficulty: DifficultyLevel
    mode: InterviewMode
    status: InterviewStatus = "ongoing"
    created_at: str
    questions: List[Question] = Field(default_factory=list)

    overall_score: Optional[float] = None
    overall_feedback: Optional[str] = None
    strengths: Optional[List[str]] = None
    weaknesses: Optional[List[str]] = None
    recommendations: Optional[List[str]] = None

    @property
    def completed(self) -> bool:
        return self.status == "completed"

    @property
    def round_count(self) -> int:
        return len(self.questions)

    def find_question(self, question_id: str) -> Optional[Question]:
        for question in self.questions:
            if question.id == question_id:
                return question
        return None


__all__ = [
    "DIFFICULTY_LEVELS",
    "DifficultyLevel",
    "INTERVIEW_MODES",
    "Interview",
    "InterviewMode",
    "InterviewStatus",
    "QUESTION_CATEGORIES",
    "Question",
    "QuestionCategory",
    "utc_now",
]
