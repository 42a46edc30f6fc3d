"""Interview domain records and errors."""
from .errors import (
    ChatError,
    CollaboratorError,
    EvaluationError,
    GenerationError,
    InterviewError,
    InvalidStateError,
    NotFoundError,
    ParseError,
    StorageError,
    SummaryError,
)
from .models import (
    DIFFICULTY_LEVELS,
    INTERVIEW_MODES,
    QUESTION_CATEGORIES,
    DifficultyLevel,
    Interview,
    InterviewMode,
    InterviewStatus,
    Question,
    QuestionCategory,
    utc_now,
)

__all__ = [
    "ChatError",
    "CollaboratorError",
    "DIFFICULTY_LEVELS",
    "DifficultyLevel",
    "EvaluationError",
    "GenerationError",
    "INTERVIEW_MODES",
    "Interview",
    "InterviewError",
    "InterviewMode",
    "InterviewStatus",
    "InvalidStateError",
    "NotFoundError",
    "ParseError",
    "QUESTION_CATEGORIES",
    "Question",
    "QuestionCategory",
    "StorageError",
    "SummaryError",
    "utc_now",
]
