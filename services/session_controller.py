"""Round-by-round interview lifecycle.

The controller drives one interview through ``start -> (submit_answer |
next_question)* -> finish``. Collaborator failures never stall a session: each
call site substitutes a fixed fallback, records a warning and keeps going.
Domain and storage errors propagate unchanged and leave the phase as it was.
"""
from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Literal, Optional

from agents.answer_evaluator import fallback_evaluation
from agents.feedback_summarizer import fallback_feedback, skipped_weakness
from agents.question_generator import fallback_question
from agents.types import (
    AnswerEvaluation,
    AnswerEvaluator,
    FeedbackSummarizer,
    GeneratedQuestion,
    JobProfile,
    OverallFeedback,
    PriorRound,
    QuestionGenerator,
)
from interviews.errors import CollaboratorError, InvalidStateError
from interviews.models import INTERVIEW_MODES, Interview, Question
from jd_analysis import FALLBACK_STACK, fallback_profile
from observability import log_event, span
from services.scoring import clamp_score, summarize_scores
from storage.interviews import InterviewStore

logger = logging.getLogger(__name__)

Phase = Literal["uninitialized", "awaiting_answer", "evaluating", "finished"]

MAX_ROUNDS = 10


class InterviewSessionController:
    """Owns the phase machine for a single active interview."""

    def __init__(
        self,
        store: InterviewStore,
        *,
        generator: QuestionGenerator,
        evaluator: AnswerEvaluator,
        summarizer: FeedbackSummarizer,
    ) -> None:
        self._store = store
        self._generator = generator
        self._evaluator = evaluator
        self._summarizer = summarizer
        self._busy = threading.Lock()
        self._phase: Phase = "uninitialized"
        self._interview: Optional[Interview] = None
        self._warnings: List[str] = []
        self._events: List[Dict[str, Any]] = []

    @classmethod
    def resume(
        cls,
        store: InterviewStore,
        interview_id: str,
        *,
        generator: QuestionGenerator,
        evaluator: AnswerEvaluator,
        summarizer: FeedbackSummarizer,
    ) -> "InterviewSessionController":
        """Rebuild a controller from a persisted interview.

        Raises ``NotFoundError`` for unknown ids and ``InvalidStateError`` for an
        ongoing record that has no rounds.
        """

        interview = store.require(interview_id)
        controller = cls(store, generator=generator, evaluator=evaluator, summarizer=summarizer)
        if interview.completed:
            controller._phase = "finished"
        elif interview.questions:
            controller._phase = "awaiting_answer"
        else:
            raise InvalidStateError(f"Interview '{interview_id}' has no rounds to resume")
        controller._interview = interview
        log_event("session_resumed", interview.id, phase=controller._phase, round=controller.current_round)
        return controller

    # ------------------------------------------------------------------ state

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def current_round(self) -> int:
        return self._interview.round_count if self._interview is not None else 0

    @property
    def interview(self) -> Optional[Interview]:
        return self._interview

    @property
    def current_question(self) -> Optional[Question]:
        if self._interview is None or not self._interview.questions:
            return None
        return self._interview.questions[-1]

    @property
    def warnings(self) -> List[str]:
        return list(self._warnings)

    @property
    def events(self) -> List[Dict[str, Any]]:
        return list(self._events)

    # ------------------------------------------------------------- operations

    def start(self, job_description: str, mode: str) -> Interview:
        """Parse the job description, create the interview and its first round."""

        with self._exclusive("start"):
            self._require("uninitialized")
            if mode not in INTERVIEW_MODES:
                raise ValueError(f"Unknown interview mode '{mode}'")
            if not job_description.strip():
                raise ValueError("Job description must not be empty")
            self._warnings.clear()

            profile = self._parse(job_description)
            first = self._generate(
                job_description=job_description,
                job_title=profile.job_title,
                tech_stack=profile.tech_stack,
                difficulty=profile.difficulty,
                round_number=1,
                prior_rounds=[],
                mode=mode,
            )
            interview = self._store.create(
                job_description,
                profile.job_title,
                profile.difficulty,
                mode,
                tech_stack=profile.tech_stack,
                first_question=_to_question(first),
            )

            self._interview = interview
            self._phase = "awaiting_answer"
            log_event("session_started", interview.id, mode=mode, round=1, phase=self._phase)
            return interview

    def submit_answer(self, answer_text: str) -> AnswerEvaluation:
        """Evaluate and persist the answer for the current round. Does not advance."""

        with self._exclusive("submit_answer"):
            self._require("awaiting_answer")
            interview = self._active()
            question = interview.questions[-1]
            if question.answered:
                raise InvalidStateError(f"Round {self.current_round} has already been answered")
            if not answer_text or not answer_text.strip():
                raise ValueError("Answer must not be empty")
            self._warnings.clear()

            self._phase = "evaluating"
            try:
                evaluation = self._evaluate(question, answer_text)
                score = self._clamped(evaluation)
                updated = self._store.record_answer(
                    interview.id,
                    question.id,
                    answer_text,
                    score,
                    evaluation.feedback,
                    ideal_answer=evaluation.ideal_answer,
                )
            finally:
                self._phase = "awaiting_answer"

            self._interview = updated
            log_event("answer_recorded", interview.id, round=self.current_round, score=score)
            return evaluation.model_copy(update={"score": float(score)})

    def next_question(self) -> Question:
        """Append the next round. Skipping the current round is allowed."""

        with self._exclusive("next_question"):
            self._require("awaiting_answer")
            if self.current_round >= MAX_ROUNDS:
                raise InvalidStateError(f"Interview is limited to {MAX_ROUNDS} rounds")
            interview = self._active()
            self._warnings.clear()

            next_round = self.current_round + 1
            prior = [
                PriorRound(question=q.question, user_answer=q.user_answer or "Not answered", category=q.category)
                for q in interview.questions
            ]
            generated = self._generate(
                job_description=interview.job_description,
                job_title=interview.job_title,
                tech_stack=interview.tech_stack or list(FALLBACK_STACK),
                difficulty=interview.difficulty,
                round_number=next_round,
                prior_rounds=prior,
                mode=interview.mode,
            )
            updated = self._store.append_question(interview.id, _to_question(generated))

            self._interview = updated
            log_event("round_started", interview.id, round=next_round, phase=self._phase)
            return updated.questions[-1]

    def finish(self) -> Interview:
        """Summarize, persist the final scores and release the current-session pointer."""

        with self._exclusive("finish"):
            self._require("awaiting_answer")
            interview = self._active()
            self._warnings.clear()

            scores = summarize_scores(interview.questions)
            answered = [q for q in interview.questions if q.answered]
            feedback = self._summarize(interview.job_title, answered, scores.total, scores.unanswered)
            weaknesses = feedback.weaknesses
            if weaknesses is None:
                weaknesses = [skipped_weakness(scores.unanswered)] if scores.unanswered else []

            completed = self._store.complete(
                interview.id,
                scores.overall_score,
                feedback.overall_feedback,
                feedback.strengths,
                weaknesses,
                recommendations=feedback.recommendations,
            )
            if self._store.get_current_session_id() == interview.id:
                self._store.clear_current_session_id()

            self._interview = completed
            self._phase = "finished"
            log_event(
                "session_finished",
                interview.id,
                round=self.current_round,
                overall_score=scores.overall_score,
                phase=self._phase,
            )
            return completed

    def reset(self) -> None:
        """Drop the in-memory interview. The stored record is kept.

        Rejected with ``InvalidStateError`` while another operation is running.
        """

        with self._exclusive("reset"):
            session_id = self._interview.id if self._interview else None
            self._interview = None
            self._phase = "uninitialized"
            self._warnings.clear()
            log_event("session_reset", session_id, phase=self._phase)

    # -------------------------------------------------------------- internals

    @contextmanager
    def _exclusive(self, operation: str) -> Iterator[None]:
        if not self._busy.acquire(blocking=False):
            raise InvalidStateError(f"Another operation is in progress; '{operation}' rejected")
        try:
            yield
        finally:
            self._busy.release()

    def _require(self, phase: Phase) -> None:
        if self._phase != phase:
            raise InvalidStateError(f"Operation requires phase '{phase}', controller is '{self._phase}'")

    def _active(self) -> Interview:
        if self._interview is None:
            raise InvalidStateError("No active interview")
        return self._interview

    def _warn(self, collaborator: str, exc: Exception) -> None:
        message = f"{collaborator} failed, fallback used: {exc}"
        self._warnings.append(message)
        session_id = self._interview.id if self._interview else None
        logger.warning(message)
        log_event("collaborator_fallback", session_id, level=logging.WARNING, collaborator=collaborator, outcome="fallback")

    def _parse(self, job_description: str) -> JobProfile:
        with span(self._events, "parse"):
            try:
                return self._generator.parse(job_description)
            except CollaboratorError as exc:
                self._warn("parse", exc)
                return fallback_profile()

    def _generate(self, **kwargs: Any) -> GeneratedQuestion:
        with span(self._events, "generate"):
            try:
                return self._generator.generate(**kwargs)
            except CollaboratorError as exc:
                self._warn("generate", exc)
                return fallback_question(kwargs["tech_stack"])

    def _evaluate(self, question: Question, answer_text: str) -> AnswerEvaluation:
        with span(self._events, "evaluate"):
            try:
                return self._evaluator.evaluate(
                    question.question,
                    answer_text,
                    question.expected_keywords,
                    question.category,
                )
            except CollaboratorError as exc:
                self._warn("evaluate", exc)
                return fallback_evaluation()

    def _clamped(self, evaluation: AnswerEvaluation) -> int:
        try:
            return clamp_score(evaluation.score)
        except ValueError as exc:
            self._warn("evaluate", exc)
            return clamp_score(fallback_evaluation().score)

    def _summarize(self, job_title: str, answered: List[Question], total: int, unanswered: int) -> OverallFeedback:
        with span(self._events, "summarize"):
            try:
                return self._summarizer.summarize(job_title, answered, total_questions=total)
            except CollaboratorError as exc:
                self._warn("summarize", exc)
                return fallback_feedback(len(answered), unanswered)


def _to_question(generated: GeneratedQuestion) -> Question:
    return Question(
        question=generated.question,
        category=generated.category,
        expected_keywords=list(generated.expected_keywords),
        follow_ups=list(generated.follow_ups),
    )


__all__ = ["InterviewSessionController", "MAX_ROUNDS", "Phase"]
