"""Value types shared by the trivia state machine, scorer and views."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Union

from .errors import QuizValidationError

OPTION_COUNT = 4
OPTION_LETTERS = "ABCD"

DEFAULT_CATEGORIES: tuple[str, ...] = (
    "Science",
    "History",
    "Geography",
    "Sports",
    "Movies",
    "Music",
    "Literature",
    "Art",
    "Technology",
    "Food",
    "Animals",
    "Space",
)
DEFAULT_QUESTION_COUNTS: tuple[int, ...] = (5, 10, 15, 20)


class Difficulty(Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @classmethod
    def parse(cls, value: Union["Difficulty", str]) -> "Difficulty":
        """Accept a member or its case-insensitive name/value."""

        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            normalized = value.strip().lower()
            for member in cls:
                if member.value == normalized:
                    return member
        allowed = ", ".join(member.value for member in cls)
        raise QuizValidationError(
            f"Unknown difficulty '{value}'. Choose one of: {allowed}."
        )


class SessionPhase(Enum):
    SETUP = "setup"
    LOADING = "loading"
    PLAYING = "playing"
    RESULTS = "results"


@dataclass(frozen=True)
class GameRules:
    """Legal values the player may choose from during setup."""

    categories: tuple[str, ...] = DEFAULT_CATEGORIES
    question_counts: tuple[int, ...] = DEFAULT_QUESTION_COUNTS

    def __post_init__(self) -> None:
        if not self.categories:
            raise QuizValidationError("At least one category must be offered.")
        if len(set(self.categories)) != len(self.categories):
            raise QuizValidationError("Category labels must be unique.")
        if not self.question_counts or any(
            count <= 0 for count in self.question_counts
        ):
            raise QuizValidationError(
                "Question counts must be positive integers."
            )


@dataclass(frozen=True)
class SessionConfig:
    """The player's setup choices; categories keep their selection order."""

    categories: tuple[str, ...] = ()
    difficulty: Difficulty = Difficulty.MEDIUM
    question_count: int = 5

    def toggled(self, label: str) -> "SessionConfig":
        if label in self.categories:
            remaining = tuple(c for c in self.categories if c != label)
            return replace(self, categories=remaining)
        return replace(self, categories=self.categories + (label,))

    def is_selected(self, label: str) -> bool:
        return label in self.categories


@dataclass(frozen=True)
class Question:
    """A generated multiple-choice question with exactly four options."""

    prompt: str
    options: tuple[str, ...]
    correct_index: int
    category: str

    def __post_init__(self) -> None:
        if len(self.options) != OPTION_COUNT:
            raise QuizValidationError(
                f"A question needs exactly {OPTION_COUNT} options."
            )
        if not 0 <= self.correct_index < OPTION_COUNT:
            raise QuizValidationError(
                f"Correct option index {self.correct_index} is out of range."
            )

    @property
    def correct_option(self) -> str:
        return self.options[self.correct_index]

    def option_text(self, index: int | None) -> str | None:
        if index is None or not 0 <= index < len(self.options):
            return None
        return self.options[index]


@dataclass(frozen=True)
class AnswerRecord:
    """The committed answer for one question."""

    question_index: int
    selected_index: int
    is_correct: bool


def option_letter(index: int) -> str:
    return OPTION_LETTERS[index]
