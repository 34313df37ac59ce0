"""Shared testing helpers for the trivia_quiz test suite."""

from .questions import (  # noqa: F401
    FakeCompletionClient,
    FakeQuestionSource,
    make_payload,
    make_question,
    make_questions,
    make_raw_question,
)

__all__ = [
    "FakeCompletionClient",
    "FakeQuestionSource",
    "make_payload",
    "make_question",
    "make_questions",
    "make_raw_question",
]
