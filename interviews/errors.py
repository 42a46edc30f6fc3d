"""Error taxonomy shared by the store, the controller and the collaborators."""
from __future__ import annotations


class InterviewError(RuntimeError):  # Base error for the interview domain
    pass


class NotFoundError(InterviewError, LookupError):  # Unknown interview or question id
    pass


class InvalidStateError(InterviewError):  # Operation not allowed in the current phase
    pass


class StorageError(InterviewError):  # Persistence layer failure
    pass


class CollaboratorError(InterviewError):  # External generation/evaluation call failed
    pass


class ParseError(CollaboratorError):
    pass


class GenerationError(CollaboratorError):
    pass


class EvaluationError(CollaboratorError):
    pass


class SummaryError(CollaboratorError):
    pass


class ChatError(CollaboratorError):
    pass


__all__ = [
    "ChatError",
    "CollaboratorError",
    "EvaluationError",
    "GenerationError",
    "InterviewError",
    "InvalidStateError",
    "NotFoundError",
    "ParseError",
    "StorageError",
    "SummaryError",
]
