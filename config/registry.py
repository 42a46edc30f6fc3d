"""In-memory registry for interview collaborators."""
from typing import Any, Dict

_REGISTRY: Dict[str, Any] = {}


def bind_model(key: str, impl: Any) -> None:
    """Bind a collaborator implementation to a registry key."""
    _REGISTRY[key] = impl


def get_model(key: str) -> Any:
    """Retrieve a collaborator from the registry.

    Raises:
        KeyError: If nothing has been bound for ``key``.
    """

    if key not in _REGISTRY:
        raise KeyError(f"Model not bound in registry: {key}")
    return _REGISTRY[key]


def is_bound(key: str) -> bool:
    return key in _REGISTRY


def unbind_all() -> None:
    _REGISTRY.clear()


QUESTION_GENERATOR_KEY = "models.question_generator"
ANSWER_EVALUATOR_KEY = "models.answer_evaluator"
FEEDBACK_SUMMARIZER_KEY = "models.feedback_summarizer"
CAREER_ADVISOR_KEY = "models.career_advisor"
