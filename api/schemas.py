"""Pydantic schemas for the interview API."""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from agents.career_advisor import ChatTurn
from interviews.models import InterviewMode, Question


class StartReq(BaseModel):
    job_description: str = Field(min_length=1)
    mode: InterviewMode = "technical"


class AnswerReq(BaseModel):
    answer: str


class ChatReq(BaseModel):
    message: str
    history: List[ChatTurn] = Field(default_factory=list)


class EvaluationPayload(BaseModel):
    score: int
    feedback: str
    missing_concepts: List[str] = Field(default_factory=list)
    follow_up_needed: bool = False
    strengths: List[str] = Field(default_factory=list)
    ideal_answer: Optional[str] = None


class SessionResp(BaseModel):
    interview_id: str
    phase: str
    round: int
    max_rounds: int
    job_title: str
    tech_stack: List[str] = Field(default_factory=list)
    difficulty: str
    mode: str
    question: Optional[Question] = None
    evaluation: Optional[EvaluationPayload] = None
    warnings: List[str] = Field(default_factory=list)
    event_log: List[dict] = Field(default_factory=list)


class InterviewSummary(BaseModel):
    interview_id: str
    job_title: str
    mode: str
    difficulty: str
    status: str
    created_at: str
    total_questions: int
    answered: int
    overall_score: Optional[float] = None


class CurrentSessionResp(BaseModel):
    interview_id: Optional[str] = None


class ChatResp(BaseModel):
    reply: str


class ResetResp(BaseModel):
    interview_id: str
    phase: str


__all__ = [
    "AnswerReq",
    "ChatReq",
    "ChatResp",
    "CurrentSessionResp",
    "EvaluationPayload",
    "InterviewSummary",
    "ResetResp",
    "SessionResp",
    "StartReq",
]
