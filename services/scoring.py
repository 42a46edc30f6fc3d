"""Score clamping, aggregation and cross-interview analytics."""
from __future__ import annotations

import math
from collections import Counter
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Literal, Sequence

from pydantic import BaseModel, Field

from interviews.models import DIFFICULTY_LEVELS, QUESTION_CATEGORIES, Interview, Question

MIN_SCORE = 1
MAX_SCORE = 10
TOP_N = 5
TREND_WINDOW = 3


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with ties away from zero for positives (``2.25 -> 2.3``)."""

    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def _round1(value: float) -> float:
    return round_half_up(value, 1)


def clamp_score(raw: float) -> int:
    """Map an evaluator's raw score onto the stored 1..10 integer scale."""

    if raw is None or not math.isfinite(raw):
        raise ValueError(f"Score must be a finite number, got {raw!r}")
    return int(min(MAX_SCORE, max(MIN_SCORE, math.floor(raw + 0.5))))


class ScoreSummary(BaseModel):
    total: int
    answered: int
    unanswered: int
    score_sum: int
    overall_score: float
    answered_average: float


class CategoryStats(BaseModel):
    category: str
    count: int
    average: float
    best: int
    worst: int


def _answered_scores(questions: Iterable[Question]) -> List[int]:
    return [q.score for q in questions if q.answered and q.score is not None]


def overall_score(questions: Sequence[Question]) -> float:
    """Sum of answered scores over every round created, unanswered rounds count as zero."""

    if not questions:
        return 0.0
    return _round1(sum(_answered_scores(questions)) / len(questions))


def answered_average(questions: Sequence[Question]) -> float:
    scores = _answered_scores(questions)
    if not scores:
        return 0.0
    return _round1(sum(scores) / len(scores))


def summarize_scores(questions: Sequence[Question]) -> ScoreSummary:
    scores = _answered_scores(questions)
    return ScoreSummary(
        total=len(questions),
        answered=len(scores),
        unanswered=len(questions) - len(scores),
        score_sum=sum(scores),
        overall_score=overall_score(questions),
        answered_average=answered_average(questions),
    )


def category_breakdown(questions: Sequence[Question]) -> List[CategoryStats]:
    """Per-category stats over answered rounds, in the canonical category order."""

    buckets: Dict[str, List[int]] = {}
    for q in questions:
        if q.answered and q.score is not None:
            buckets.setdefault(q.category, []).append(q.score)
    return [
        CategoryStats(
            category=category,
            count=len(buckets[category]),
            average=_round1(sum(buckets[category]) / len(buckets[category])),
            best=max(buckets[category]),
            worst=min(buckets[category]),
        )
        for category in QUESTION_CATEGORIES
        if category in buckets
    ]


class TimelinePoint(BaseModel):
    interview_id: str
    created_at: str
    job_title: str
    overall_score: float


class RankedItem(BaseModel):
    text: str
    count: int


class AnalyticsSummary(BaseModel):
    total_interviews: int = 0
    total_questions: int = 0
    total_answered: int = 0
    average_score: float = 0.0
    response_rate: int = 0
    timeline: List[TimelinePoint] = Field(default_factory=list)
    category_averages: Dict[str, float] = Field(default_factory=dict)
    difficulty_averages: Dict[str, float] = Field(default_factory=dict)
    mode_distribution: Dict[str, int] = Field(default_factory=dict)
    top_strengths: List[RankedItem] = Field(default_factory=list)
    top_weaknesses: List[RankedItem] = Field(default_factory=list)
    trend: Literal["up", "down", "flat"] = "flat"


def _top(items: Iterable[str]) -> List[RankedItem]:
    # Counter.most_common keeps first-seen order among ties
    return [RankedItem(text=text, count=count) for text, count in Counter(items).most_common(TOP_N)]


def analytics(interviews: Iterable[Interview]) -> AnalyticsSummary:
    """Aggregate completed interviews. Returns an empty summary when none are completed."""

    completed = sorted((i for i in interviews if i.completed), key=lambda i: i.created_at)
    if not completed:
        return AnalyticsSummary()

    scores = [i.overall_score or 0.0 for i in completed]
    mean = sum(scores) / len(scores)
    total_questions = sum(len(i.questions) for i in completed)
    total_answered = sum(len(_answered_scores(i.questions)) for i in completed)

    per_category: Dict[str, List[int]] = {}
    for interview in completed:
        for q in interview.questions:
            if q.answered and q.score is not None:
                per_category.setdefault(q.category, []).append(q.score)

    per_difficulty: Dict[str, List[float]] = {}
    for interview in completed:
        if interview.overall_score is not None:
            per_difficulty.setdefault(interview.difficulty, []).append(interview.overall_score)

    recent = scores[-TREND_WINDOW:]
    return AnalyticsSummary(
        total_interviews=len(completed),
        total_questions=total_questions,
        total_answered=total_answered,
        average_score=_round1(mean),
        response_rate=int(round_half_up(100 * total_answered / total_questions)) if total_questions else 0,
        timeline=[
            TimelinePoint(
                interview_id=i.id,
                created_at=i.created_at,
                job_title=i.job_title,
                overall_score=i.overall_score or 0.0,
            )
            for i in completed
        ],
        category_averages={
            c: _round1(sum(per_category[c]) / len(per_category[c])) for c in QUESTION_CATEGORIES if c in per_category
        },
        difficulty_averages={
            d: _round1(sum(per_difficulty[d]) / len(per_difficulty[d])) for d in DIFFICULTY_LEVELS if d in per_difficulty
        },
        mode_distribution=dict(Counter(i.mode for i in completed)),
        top_strengths=_top(s for i in completed for s in (i.strengths or [])),
        top_weaknesses=_top(w for i in completed for w in (i.weaknesses or [])),
        trend="up" if sum(recent) / len(recent) >= mean else "down",
    )


__all__ = [
    "AnalyticsSummary",
    "CategoryStats",
    "MAX_SCORE",
    "MIN_SCORE",
    "RankedItem",
    "ScoreSummary",
    "TimelinePoint",
    "analytics",
    "answered_average",
    "category_breakdown",
    "clamp_score",
    "overall_score",
    "round_half_up",
    "summarize_scores",
]
