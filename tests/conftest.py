import os
import sys
import tempfile
from pathlib import Path
from typing import List, Optional, Sequence

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from agents.types import AnswerEvaluation, GeneratedQuestion, JobProfile, OverallFeedback  # noqa: E402
from config.registry import (  # noqa: E402
    ANSWER_EVALUATOR_KEY,
    FEEDBACK_SUMMARIZER_KEY,
    QUESTION_GENERATOR_KEY,
    bind_model,
    unbind_all,
)
from config.settings import settings  # noqa: E402
from interviews.errors import EvaluationError, GenerationError, ParseError, SummaryError  # noqa: E402
from services import sessions  # noqa: E402
from storage.interviews import InterviewStore  # noqa: E402
from storage.migrate import migrate  # noqa: E402


@pytest.fixture(autouse=True)
def tmp_db(monkeypatch):
    td = tempfile.TemporaryDirectory()
    db_path = os.path.join(td.name, "test.db")
    monkeypatch.setattr(settings, "DB_PATH", db_path, raising=False)
    migrate(db_path)
    unbind_all()
    sessions.clear()
    try:
        yield db_path
    finally:
        unbind_all()
        sessions.clear()
        td.cleanup()


@pytest.fixture
def store(tmp_db) -> InterviewStore:
    return InterviewStore(Path(tmp_db))


class FakeGenerator:
    def __init__(self, profile: Optional[JobProfile] = None, *, fail_parse: bool = False, fail_generate: bool = False):
        self.profile = profile or JobProfile(job_title="Backend Engineer", tech_stack=["Go", "Postgres"], difficulty="senior")
        self.fail_parse = fail_parse
        self.fail_generate = fail_generate
        self.calls: List[dict] = []

    def parse(self, job_description: str) -> JobProfile:
        if self.fail_parse:
            raise ParseError("parse down")
        return self.profile

    def generate(self, **kwargs) -> GeneratedQuestion:
        self.calls.append(kwargs)
        if self.fail_generate:
            raise GenerationError("generator down")
        round_number = kwargs["round_number"]
        return GeneratedQuestion(
            question=f"Question {round_number}?",
            category="behavioral" if round_number % 2 == 0 else "technical",
            expected_keywords=["k1", "k2"],
            follow_ups=["more?"],
        )


class FakeEvaluator:
    def __init__(self, scores: Sequence[float] = (8,), *, fail: bool = False):
        self.scores = list(scores)
        self.fail = fail
        self.calls: List[tuple] = []

    def evaluate(self, question, answer, expected_keywords, category) -> AnswerEvaluation:
        self.calls.append((question, answer, list(expected_keywords), category))
        if self.fail:
            raise EvaluationError("evaluator down")
        score = self.scores[min(len(self.calls), len(self.scores)) - 1]
        return AnswerEvaluation(score=score, feedback=f"Scored {score}", strengths=["clear"], ideal_answer="Ideal.")


class FakeSummarizer:
    def __init__(self, feedback: Optional[OverallFeedback] = None, *, fail: bool = False):
        self.feedback = feedback or OverallFeedback(
            overall_score=9.9,
            overall_feedback="Solid interview.",
            strengths=["Communication"],
            weaknesses=None,
            recommendations=["Practice system design"],
        )
        self.fail = fail
        self.calls: List[tuple] = []

    def summarize(self, job_title, answered_questions, *, total_questions=None) -> OverallFeedback:
        self.calls.append((job_title, list(answered_questions), total_questions))
        if self.fail:
            raise SummaryError("summarizer down")
        return self.feedback


@pytest.fixture
def fakes():
    return FakeGenerator(), FakeEvaluator(), FakeSummarizer()


@pytest.fixture
def fake_models(fakes):
    generator, evaluator, summarizer = fakes
    bind_model(QUESTION_GENERATOR_KEY, generator)
    bind_model(ANSWER_EVALUATOR_KEY, evaluator)
    bind_model(FEEDBACK_SUMMARIZER_KEY, summarizer)
    return fakes
