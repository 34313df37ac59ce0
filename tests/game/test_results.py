from __future__ import annotations

import pytest

from fixtures import make_question, make_questions
from trivia_quiz.game.errors import QuizValidationError
from trivia_quiz.game.models import AnswerRecord
from trivia_quiz.game.results import Grade, build_results, percentage_of


@pytest.mark.parametrize(
    "score, total, expected",
    [
        (0, 5, 0),
        (5, 5, 100),
        (2, 3, 67),
        (1, 3, 33),
        (1, 8, 13),
        (1, 40, 3),
        (0, 0, 0),
    ],
)
def test_percentage_of_rounds_half_up(score, total, expected) -> None:
    assert percentage_of(score, total) == expected


@pytest.mark.parametrize(
    "percentage, grade",
    [
        (100, Grade.EXCELLENT),
        (80, Grade.EXCELLENT),
        (79, Grade.GOOD),
        (60, Grade.GOOD),
        (59, Grade.FAIR),
        (40, Grade.FAIR),
        (39, Grade.NEEDS_IMPROVEMENT),
        (0, Grade.NEEDS_IMPROVEMENT),
    ],
)
def test_grade_bands(percentage, grade) -> None:
    assert Grade.for_percentage(percentage) is grade


def test_grade_headlines() -> None:
    assert Grade.EXCELLENT.headline == "Excellent!"
    assert Grade.GOOD.headline == "Good job!"
    assert Grade.FAIR.headline == "Not bad!"
    assert Grade.NEEDS_IMPROVEMENT.headline == "Keep studying!"


def test_build_results_summarises_game() -> None:
    questions = (
        make_question("Q1", correct_index=1, category="Science"),
        make_question("Q2", correct_index=0, category="History"),
        make_question("Q3", correct_index=3, category="Science"),
    )
    answers = (
        AnswerRecord(0, 1, True),
        AnswerRecord(1, 2, False),
        AnswerRecord(2, 3, True),
    )

    results = build_results(questions, answers)

    assert results.score == 2
    assert results.total == 3
    assert results.percentage == 67
    assert results.grade is Grade.GOOD
    assert [r.is_correct for r in results.reviews] == [True, False, True]
    wrong = results.incorrect
    assert len(wrong) == 1
    assert wrong[0].selected_text == "Go"
    assert wrong[0].correct_text == "Au"
    science = results.per_category["Science"]
    assert (science.asked, science.correct) == (2, 2)
    assert results.per_category["History"].accuracy == 0.0


def test_build_results_perfect_game() -> None:
    questions = make_questions(5, correct_index=0)
    answers = tuple(AnswerRecord(i, 0, True) for i in range(5))
    results = build_results(questions, answers)
    assert results.percentage == 100
    assert results.grade is Grade.EXCELLENT


def test_build_results_requires_one_answer_per_question() -> None:
    with pytest.raises(QuizValidationError):
        build_results(make_questions(2), (AnswerRecord(0, 0, True),))


def test_build_results_rejects_out_of_order_log() -> None:
    answers = (AnswerRecord(1, 0, True), AnswerRecord(0, 0, True))
    with pytest.raises(QuizValidationError):
        build_results(make_questions(2), answers)
