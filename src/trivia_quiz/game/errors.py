"""Exceptions raised by the trivia game core."""

from __future__ import annotations

__all__ = [
    "TriviaQuizError",
    "QuizValidationError",
    "GenerationError",
    "InvalidTransitionError",
]


class TriviaQuizError(RuntimeError):
    """Base class for recoverable game errors shown to the player."""


class QuizValidationError(TriviaQuizError):
    """Raised when player input is rejected; the session is left unchanged."""


class GenerationError(TriviaQuizError):
    """Raised when a question set could not be obtained or validated."""


class InvalidTransitionError(TriviaQuizError):
    """Raised when an intent is not accepted in the current phase."""
