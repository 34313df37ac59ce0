"""Question builders and fake generation backends."""

from __future__ import annotations

import json
import time
from typing import Any, Iterable, Sequence

from trivia_quiz.game.models import Question, SessionConfig


def make_question(
    prompt: str = "What is the chemical symbol for gold?",
    *,
    options: Sequence[str] = ("Au", "Ag", "Go", "Gd"),
    correct_index: int = 0,
    category: str = "Science",
) -> Question:
    return Question(
        prompt=prompt,
        options=tuple(options),
        correct_index=correct_index,
        category=category,
    )


def make_questions(
    count: int,
    *,
    correct_index: int = 0,
    categories: Sequence[str] = ("Science",),
) -> tuple[Question, ...]:
    return tuple(
        make_question(
            f"Question number {index + 1}?",
            options=(
                f"opt {index}a",
                f"opt {index}b",
                f"opt {index}c",
                f"opt {index}d",
            ),
            correct_index=correct_index,
            category=categories[index % len(categories)],
        )
        for index in range(count)
    )


def make_raw_question(**overrides: Any) -> dict[str, Any]:
    raw: dict[str, Any] = {
        "question": "What is the chemical symbol for gold?",
        "options": ["Au", "Ag", "Go", "Gd"],
        "correctAnswer": 0,
        "category": "Science",
    }
    raw.update(overrides)
    return raw


def make_payload(entries: Iterable[dict[str, Any]]) -> str:
    return json.dumps({"questions": list(entries)})


class FakeCompletionClient:
    """Returns queued replies (or raises queued exceptions) in order."""

    def __init__(self, *replies: Any, delay: float = 0.0) -> None:
        self._replies = list(replies)
        self._delay = delay
        self.prompts: list[str] = []

    def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self._delay:
            time.sleep(self._delay)
        reply = self._replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        return reply


class FakeQuestionSource:
    """Async source returning prebuilt questions or raising an error."""

    def __init__(self, *outcomes: Any) -> None:
        self._outcomes = list(outcomes)
        self.configs: list[SessionConfig] = []

    async def generate(self, config: SessionConfig) -> tuple[Question, ...]:
        self.configs.append(config)
        outcome = self._outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return tuple(outcome)
