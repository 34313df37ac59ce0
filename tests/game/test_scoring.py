from __future__ import annotations

from fixtures import make_question
from trivia_quiz.game.models import AnswerRecord
from trivia_quiz.game.scoring import evaluate_answer, tally_score


def test_evaluate_answer_marks_correct_choice() -> None:
    question = make_question(correct_index=2)
    record = evaluate_answer(4, question, 2)
    assert record == AnswerRecord(
        question_index=4, selected_index=2, is_correct=True
    )


def test_evaluate_answer_marks_wrong_choice() -> None:
    record = evaluate_answer(0, make_question(correct_index=2), 3)
    assert record.is_correct is False
    assert record.selected_index == 3


def test_tally_score_counts_correct_records() -> None:
    answers = [
        AnswerRecord(0, 1, True),
        AnswerRecord(1, 0, False),
        AnswerRecord(2, 3, True),
    ]
    assert tally_score(answers) == 2
    assert tally_score([]) == 0
