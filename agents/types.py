"""Shared collaborator contracts for interview agents."""
from typing import List, Optional, Protocol, Sequence

from pydantic import BaseModel, Field, field_validator

from interviews.models import DifficultyLevel, InterviewMode, Question, QuestionCategory


class JobProfile(BaseModel):
    job_title: str
    tech_stack: List[str] = Field(default_factory=list)
    difficulty: DifficultyLevel

    @field_validator("difficulty", mode="before")
    @classmethod
    def _normalize_difficulty(cls, value):
        return value.strip().lower() if isinstance(value, str) else value


class GeneratedQuestion(BaseModel):
    question: str
    category: QuestionCategory = "technical"
    expected_keywords: List[str] = Field(default_factory=list)
    follow_ups: List[str] = Field(default_factory=list)

    @field_validator("category", mode="before")
    @classmethod
    def _normalize_category(cls, value):  # "System Design" -> "system-design"
        return value.strip().lower().replace(" ", "-") if isinstance(value, str) else value


class PriorRound(BaseModel):
    question: str
    user_answer: Optional[str] = None
    category: QuestionCategory


class AnswerEvaluation(BaseModel):
    score: float  # raw, clamped to 1..10 by the controller
    feedback: str
    missing_concepts: List[str] = Field(default_factory=list)
    follow_up_needed: bool = False
    strengths: List[str] = Field(default_factory=list)
    ideal_answer: Optional[str] = None


class OverallFeedback(BaseModel):
    overall_score: Optional[float] = None  # advisory only
    overall_feedback: str
    strengths: List[str] = Field(default_factory=list)
    weaknesses: Optional[List[str]] = None
    recommendations: List[str] = Field(default_factory=list)


class QuestionGenerator(Protocol):
    def parse(self, job_description: str) -> JobProfile: ...

    def generate(
        self,
        *,
        job_description: str,
        job_title: str,
        tech_stack: Sequence[str],
        difficulty: DifficultyLevel,
        round_number: int,
        prior_rounds: Sequence[PriorRound],
        mode: InterviewMode,
    ) -> GeneratedQuestion: ...


class AnswerEvaluator(Protocol):
    def evaluate(
        self,
        question: str,
        answer: str,
        expected_keywords: Sequence[str],
        category: QuestionCategory,
    ) -> AnswerEvaluation: ...


class FeedbackSummarizer(Protocol):
    def summarize(
        self,
        job_title: str,
        answered_questions: Sequence[Question],
        *,
        total_questions: Optional[int] = None,
    ) -> OverallFeedback: ...


__all__ = [
    "AnswerEvaluation",
    "AnswerEvaluator",
    "FeedbackSummarizer",
    "GeneratedQuestion",
    "JobProfile",
    "OverallFeedback",
    "PriorRound",
    "QuestionGenerator",
]
