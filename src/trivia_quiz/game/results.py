"""End-of-session summary derived from the question tuple and answer log."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence

from .errors import QuizValidationError
from .models import AnswerRecord, Question
from .scoring import tally_score


class Grade(Enum):
    """Qualitative band for a percentage; bands are checked top-down."""

    EXCELLENT = ("excellent", 80, "Excellent!")
    GOOD = ("good", 60, "Good job!")
    FAIR = ("fair", 40, "Not bad!")
    NEEDS_IMPROVEMENT = ("needs improvement", 0, "Keep studying!")

    def __init__(self, label: str, threshold: int, headline: str) -> None:
        self.label = label
        self.threshold = threshold
        self.headline = headline

    @classmethod
    def for_percentage(cls, percentage: int) -> "Grade":
        for grade in cls:
            if percentage >= grade.threshold:
                return grade
        return cls.NEEDS_IMPROVEMENT


@dataclass(frozen=True)
class QuestionReview:
    index: int
    question: Question
    selected_index: int
    is_correct: bool

    @property
    def selected_text(self) -> str | None:
        return self.question.option_text(self.selected_index)

    @property
    def correct_text(self) -> str:
        return self.question.correct_option


@dataclass(frozen=True)
class CategorySummary:
    category: str
    asked: int
    correct: int

    @property
    def accuracy(self) -> float:
        if self.asked == 0:
            return 0.0
        return self.correct / self.asked


@dataclass(frozen=True)
class QuizResults:
    score: int
    total: int
    percentage: int
    grade: Grade
    reviews: tuple[QuestionReview, ...]
    per_category: dict[str, CategorySummary] = field(default_factory=dict)

    @property
    def incorrect(self) -> tuple[QuestionReview, ...]:
        return tuple(review for review in self.reviews if not review.is_correct)


def percentage_of(score: int, total: int) -> int:
    """``score / total * 100`` rounded half up; 0 for an empty session."""

    if total <= 0:
        return 0
    return (score * 200 + total) // (2 * total)


def build_results(
    questions: Sequence[Question], answers: Sequence[AnswerRecord]
) -> QuizResults:
    if len(questions) != len(answers):
        raise QuizValidationError(
            f"Results need one answer per question; got {len(answers)} "
            f"answers for {len(questions)} questions."
        )

    reviews: list[QuestionReview] = []
    asked: dict[str, int] = defaultdict(int)
    correct: dict[str, int] = defaultdict(int)
    for index, (question, answer) in enumerate(zip(questions, answers)):
        if answer.question_index != index:
            raise QuizValidationError(
                f"Answer log is out of order at position {index}."
            )
        reviews.append(
            QuestionReview(
                index=index,
                question=question,
                selected_index=answer.selected_index,
                is_correct=answer.is_correct,
            )
        )
        asked[question.category] += 1
        if answer.is_correct:
            correct[question.category] += 1

    score = tally_score(answers)
    percentage = percentage_of(score, len(questions))
    return QuizResults(
        score=score,
        total=len(questions),
        percentage=percentage,
        grade=Grade.for_percentage(percentage),
        reviews=tuple(reviews),
        per_category={
            category: CategorySummary(
                category=category,
                asked=count,
                correct=correct[category],
            )
            for category, count in asked.items()
        },
    )
