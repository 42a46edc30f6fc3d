"""Configuration package for the interview coach services."""
from .registry import (
    ANSWER_EVALUATOR_KEY,
    CAREER_ADVISOR_KEY,
    FEEDBACK_SUMMARIZER_KEY,
    QUESTION_GENERATOR_KEY,
    bind_model,
    get_model,
    is_bound,
    unbind_all,
)
from .routes import AppConfig, LlmRoute, load_config, load_route, route_for
from .settings import Settings, settings

__all__ = [
    "ANSWER_EVALUATOR_KEY",
    "AppConfig",
    "CAREER_ADVISOR_KEY",
    "FEEDBACK_SUMMARIZER_KEY",
    "LlmRoute",
    "QUESTION_GENERATOR_KEY",
    "Settings",
    "bind_model",
    "get_model",
    "is_bound",
    "load_config",
    "load_route",
    "route_for",
    "settings",
    "unbind_all",
]
