"""Session controller: owns the current state and talks to the gateway.

:class:`TriviaSession` is the only object the presentation layer touches. It
forwards player intents to the pure transitions in :mod:`.state`, swaps in
the returned state as one unit, and exposes a frozen :class:`SessionView`
read model for rendering.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol, Union

from . import state as transitions
from .errors import GenerationError, InvalidTransitionError, TriviaQuizError
from .models import (
    Difficulty,
    GameRules,
    Question,
    SessionConfig,
    SessionPhase,
    option_letter,
)
from .results import QuizResults, build_results

logger = logging.getLogger(__name__)

OptionMark = str
MARK_IDLE: OptionMark = "idle"
MARK_SELECTED: OptionMark = "selected"
MARK_CORRECT: OptionMark = "correct"
MARK_WRONG: OptionMark = "wrong"
MARK_DIMMED: OptionMark = "dimmed"


class QuestionSource(Protocol):
    async def generate(self, config: SessionConfig) -> tuple[Question, ...]:
        """Return exactly ``config.question_count`` questions."""


@dataclass(frozen=True)
class OptionView:
    index: int
    letter: str
    text: str
    mark: OptionMark


@dataclass(frozen=True)
class SessionView:
    """Everything needed to paint the current phase."""

    phase: SessionPhase
    available_categories: tuple[str, ...]
    question_counts: tuple[int, ...]
    config: SessionConfig
    question: Question | None
    question_number: int | None
    total_questions: int
    score: int
    pending_selection: int | None
    answer_revealed: bool
    options: tuple[OptionView, ...]
    advance_label: str | None
    results: QuizResults | None
    error: str | None


def option_marks(
    question: Question, selected: int | None, revealed: bool
) -> tuple[OptionMark, ...]:
    """Display mark for each option.

    Before reveal only the pending choice is highlighted. After reveal the
    correct option is ``correct``, a different pending choice is ``wrong`` and
    the rest are ``dimmed``.
    """

    marks: list[OptionMark] = []
    for index in range(len(question.options)):
        if revealed:
            if index == question.correct_index:
                marks.append(MARK_CORRECT)
            elif index == selected:
                marks.append(MARK_WRONG)
            else:
                marks.append(MARK_DIMMED)
        elif index == selected:
            marks.append(MARK_SELECTED)
        else:
            marks.append(MARK_IDLE)
    return tuple(marks)


class TriviaSession:
    """One player's trivia session from setup through results."""

    def __init__(
        self,
        source: QuestionSource,
        *,
        rules: GameRules | None = None,
        config: SessionConfig | None = None,
    ) -> None:
        self._source = source
        self._state = transitions.initial_state(rules, config)
        self._error: str | None = None

    @property
    def state(self) -> transitions.SessionState:
        return self._state

    @property
    def last_error(self) -> str | None:
        return self._error

    def toggle_category(self, label: str) -> None:
        self._apply(transitions.toggle_category, label)

    def set_difficulty(self, value: Union[Difficulty, str]) -> None:
        self._apply(transitions.set_difficulty, value)

    def set_question_count(self, value: int) -> None:
        self._apply(transitions.set_question_count, value)

    def select_answer(self, index: int) -> None:
        self._apply(transitions.select_answer, index)

    def advance(self) -> None:
        previous = self._state
        self._apply(transitions.advance)
        current = self._state
        if len(current.answers) > len(previous.answers):
            record = current.answers[-1]
            logger.debug(
                "Answer recorded",
                extra={
                    "question_index": record.question_index,
                    "selected_index": record.selected_index,
                    "correct": record.is_correct,
                    "score": current.score,
                },
            )
        if current.phase is SessionPhase.RESULTS:
            results = self.results()
            logger.info(
                "Game finished",
                extra={
                    "score": results.score,
                    "total": results.total,
                    "percentage": results.percentage,
                },
            )

    def reset_game(self) -> None:
        self._apply(transitions.reset)
        logger.debug("Session reset to setup")

    async def start_game(self) -> None:
        """Request questions and enter PLAYING, or fall back to SETUP.

        The session stays in LOADING while the request is pending; every other
        intent, including a second start, is rejected until it resolves.
        """

        self._apply(transitions.begin_loading)
        logger.debug(
            "Entered loading",
            extra={"categories": list(self._state.config.categories)},
        )
        try:
            questions = await self._source.generate(self._state.config)
            self._state = transitions.install_questions(self._state, questions)
        except GenerationError as exc:
            self._fail_loading(str(exc))
            raise
        except Exception as exc:
            self._fail_loading(f"Failed to generate questions: {exc}")
            raise GenerationError(str(exc)) from exc
        except BaseException:
            # Cancelled or interrupted: back to SETUP before propagating.
            self._fail_loading("Question generation was interrupted.")
            raise
        self._error = None
        logger.info(
            "Game started",
            extra={"question_count": len(self._state.questions)},
        )

    def results(self) -> QuizResults:
        if self._state.phase is not SessionPhase.RESULTS:
            raise InvalidTransitionError(
                "Results are only available once the game is finished."
            )
        return build_results(self._state.questions, self._state.answers)

    def view(self) -> SessionView:
        current = self._state
        question = current.current_question
        options: tuple[OptionView, ...] = ()
        advance_label = None
        if question is not None:
            marks = option_marks(
                question, current.pending_selection, current.answer_revealed
            )
            options = tuple(
                OptionView(index, option_letter(index), text, mark)
                for index, (text, mark) in enumerate(
                    zip(question.options, marks)
                )
            )
            if not current.answer_revealed:
                advance_label = "Check answer"
            elif current.is_last_question:
                advance_label = "Finish game"
            else:
                advance_label = "Next question"
        return SessionView(
            phase=current.phase,
            available_categories=current.rules.categories,
            question_counts=current.rules.question_counts,
            config=current.config,
            question=question,
            question_number=(
                current.current_index + 1
                if current.current_index is not None
                else None
            ),
            total_questions=len(current.questions),
            score=current.score,
            pending_selection=current.pending_selection,
            answer_revealed=current.answer_revealed,
            options=options,
            advance_label=advance_label,
            results=(
                self.results()
                if current.phase is SessionPhase.RESULTS
                else None
            ),
            error=self._error,
        )

    def _apply(self, transition, *args) -> None:
        before = self._state.phase
        try:
            updated = transition(self._state, *args)
        except TriviaQuizError as exc:
            self._error = str(exc)
            raise
        self._state = updated
        self._error = None
        if updated.phase is not before:
            logger.debug(
                "Phase changed",
                extra={"from": before.value, "to": updated.phase.value},
            )

    def _fail_loading(self, message: str) -> None:
        self._state = transitions.fail_loading(self._state)
        self._error = message
        logger.warning("Game start failed", extra={"reason": message})
