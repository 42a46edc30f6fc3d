"""Process-wide controller registry and collaborator wiring for the HTTP layer."""
from __future__ import annotations

import threading
from pathlib import Path
from typing import Dict, Optional, Tuple

from agents.answer_evaluator import evaluator_with_config
from agents.career_advisor import CareerAdvisor, advisor_with_config
from agents.feedback_summarizer import summarizer_with_config
from agents.question_generator import generator_with_config
from agents.types import AnswerEvaluator, FeedbackSummarizer, QuestionGenerator
from config import (
    ANSWER_EVALUATOR_KEY,
    CAREER_ADVISOR_KEY,
    FEEDBACK_SUMMARIZER_KEY,
    QUESTION_GENERATOR_KEY,
    get_model,
    is_bound,
    settings,
)
from services.session_controller import InterviewSessionController
from storage.interviews import InterviewStore

Collaborators = Tuple[QuestionGenerator, AnswerEvaluator, FeedbackSummarizer]

_CONTROLLERS: Dict[str, InterviewSessionController] = {}
_LOCK = threading.Lock()


def open_store() -> InterviewStore:
    """Return a store bound to the configured database path."""

    return InterviewStore(Path(settings.DB_PATH))


def collaborators() -> Collaborators:
    """Registry-bound collaborators win over the LLM-backed defaults."""

    config_path = Path(settings.APP_CONFIG_PATH)
    generator = get_model(QUESTION_GENERATOR_KEY) if is_bound(QUESTION_GENERATOR_KEY) else generator_with_config(config_path)
    evaluator = get_model(ANSWER_EVALUATOR_KEY) if is_bound(ANSWER_EVALUATOR_KEY) else evaluator_with_config(config_path)
    summarizer = (
        get_model(FEEDBACK_SUMMARIZER_KEY) if is_bound(FEEDBACK_SUMMARIZER_KEY) else summarizer_with_config(config_path)
    )
    return generator, evaluator, summarizer


def career_advisor() -> CareerAdvisor:
    if is_bound(CAREER_ADVISOR_KEY):
        return get_model(CAREER_ADVISOR_KEY)
    return advisor_with_config(Path(settings.APP_CONFIG_PATH))


def new_controller(store: InterviewStore) -> InterviewSessionController:
    generator, evaluator, summarizer = collaborators()
    return InterviewSessionController(store, generator=generator, evaluator=evaluator, summarizer=summarizer)


def register(controller: InterviewSessionController) -> None:
    interview = controller.interview
    if interview is None:
        raise ValueError("Only controllers with an interview can be registered")
    with _LOCK:
        _CONTROLLERS[interview.id] = controller


def controller_for(interview_id: str, store: InterviewStore) -> InterviewSessionController:
    """Return the live controller for ``interview_id``, resuming it from the store if needed."""

    with _LOCK:
        existing = _CONTROLLERS.get(interview_id)
        if existing is not None:
            return existing
        generator, evaluator, summarizer = collaborators()
        controller = InterviewSessionController.resume(
            store,
            interview_id,
            generator=generator,
            evaluator=evaluator,
            summarizer=summarizer,
        )
        _CONTROLLERS[interview_id] = controller
        return controller


def discard(interview_id: str) -> Optional[InterviewSessionController]:
    with _LOCK:
        return _CONTROLLERS.pop(interview_id, None)


def live(interview_id: str) -> Optional[InterviewSessionController]:
    with _LOCK:
        return _CONTROLLERS.get(interview_id)


def clear() -> None:
    with _LOCK:
        _CONTROLLERS.clear()


__all__ = [
    "Collaborators",
    "career_advisor",
    "clear",
    "collaborators",
    "controller_for",
    "discard",
    "live",
    "new_controller",
    "open_store",
    "register",
]
