from __future__ import annotations

from collections.abc import Iterable

from .models import AnswerRecord, Question


def evaluate_answer(
    question_index: int, question: Question, selected_index: int
) -> AnswerRecord:
    """Commit ``selected_index`` for a question.

    Correctness is decided here once and carried on the record; nothing
    downstream compares indices again.
    """

    return AnswerRecord(
        question_index=question_index,
        selected_index=selected_index,
        is_correct=selected_index == question.correct_index,
    )


def tally_score(answers: Iterable[AnswerRecord]) -> int:
    return sum(1 for answer in answers if answer.is_correct)
