"""Pure transitions for the trivia session lifecycle.

Every function takes a :class:`SessionState` and returns a new one; a
rejected intent raises and leaves the caller holding the old state. The
lifecycle is::

    SETUP -> LOADING -> PLAYING -> RESULTS -> SETUP
               |
               +-> SETUP (generation failed)

While PLAYING, ``advance`` is two-step: the first call reveals the correct
option, the second commits an :class:`AnswerRecord` and moves on.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Sequence, Union

from .errors import GenerationError, InvalidTransitionError, QuizValidationError
from .models import (
    OPTION_COUNT,
    AnswerRecord,
    Difficulty,
    GameRules,
    Question,
    SessionConfig,
    SessionPhase,
)
from .scoring import evaluate_answer

__all__ = [
    "SessionState",
    "initial_state",
    "toggle_category",
    "set_difficulty",
    "set_question_count",
    "begin_loading",
    "install_questions",
    "fail_loading",
    "select_answer",
    "advance",
    "reset",
]


@dataclass(frozen=True)
class SessionState:
    rules: GameRules = field(default_factory=GameRules)
    config: SessionConfig = field(default_factory=SessionConfig)
    phase: SessionPhase = SessionPhase.SETUP
    questions: tuple[Question, ...] = ()
    current_index: int | None = None
    pending_selection: int | None = None
    answer_revealed: bool = False
    answers: tuple[AnswerRecord, ...] = ()
    score: int = 0

    @property
    def current_question(self) -> Question | None:
        if self.phase is not SessionPhase.PLAYING or self.current_index is None:
            return None
        return self.questions[self.current_index]

    @property
    def is_last_question(self) -> bool:
        return (
            self.current_index is not None
            and self.current_index + 1 == len(self.questions)
        )


def initial_state(
    rules: GameRules | None = None,
    config: SessionConfig | None = None,
) -> SessionState:
    """Return a SETUP state, checking ``config`` against ``rules``."""

    rules = rules or GameRules()
    config = config or SessionConfig(question_count=rules.question_counts[0])
    for label in config.categories:
        _require_known_category(rules, label)
    if len(set(config.categories)) != len(config.categories):
        raise QuizValidationError("Selected categories must be unique.")
    _require_allowed_count(rules, config.question_count)
    return SessionState(rules=rules, config=config)


def toggle_category(state: SessionState, label: str) -> SessionState:
    _require_phase(state, SessionPhase.SETUP, "change categories")
    _require_known_category(state.rules, label)
    return replace(state, config=state.config.toggled(label))


def set_difficulty(
    state: SessionState, value: Union[Difficulty, str]
) -> SessionState:
    _require_phase(state, SessionPhase.SETUP, "change difficulty")
    difficulty = Difficulty.parse(value)
    return replace(state, config=replace(state.config, difficulty=difficulty))


def set_question_count(state: SessionState, value: int) -> SessionState:
    _require_phase(state, SessionPhase.SETUP, "change the question count")
    _require_allowed_count(state.rules, value)
    return replace(state, config=replace(state.config, question_count=value))


def begin_loading(state: SessionState) -> SessionState:
    _require_phase(state, SessionPhase.SETUP, "start a game")
    if not state.config.categories:
        raise QuizValidationError("Please select at least one category!")
    return replace(state, phase=SessionPhase.LOADING)


def install_questions(
    state: SessionState, questions: Sequence[Question]
) -> SessionState:
    _require_phase(state, SessionPhase.LOADING, "install questions")
    batch = tuple(questions)
    if not batch:
        raise GenerationError("No questions were generated.")
    if len(batch) != state.config.question_count:
        raise GenerationError(
            f"Expected {state.config.question_count} questions but received "
            f"{len(batch)}."
        )
    return replace(
        state,
        phase=SessionPhase.PLAYING,
        questions=batch,
        current_index=0,
        pending_selection=None,
        answer_revealed=False,
        answers=(),
        score=0,
    )


def fail_loading(state: SessionState) -> SessionState:
    _require_phase(state, SessionPhase.LOADING, "abort loading")
    return _cleared(state)


def select_answer(state: SessionState, index: int) -> SessionState:
    _require_phase(state, SessionPhase.PLAYING, "select an answer")
    if state.answer_revealed:
        raise InvalidTransitionError(
            "The answer is already revealed; advance to continue."
        )
    if isinstance(index, bool) or not 0 <= index < OPTION_COUNT:
        raise QuizValidationError(
            f"Option {index} does not exist; choose 0 to {OPTION_COUNT - 1}."
        )
    return replace(state, pending_selection=index)


def advance(state: SessionState) -> SessionState:
    _require_phase(state, SessionPhase.PLAYING, "advance")
    if not state.answer_revealed:
        if state.pending_selection is None:
            raise QuizValidationError("Please select an answer!")
        return replace(state, answer_revealed=True)

    index, selected = state.current_index, state.pending_selection
    if index is None or selected is None:
        raise InvalidTransitionError("There is no revealed answer to commit.")
    record = evaluate_answer(index, state.questions[index], selected)
    answers = state.answers + (record,)
    score = state.score + int(record.is_correct)
    next_index = index + 1
    if next_index < len(state.questions):
        return replace(
            state,
            current_index=next_index,
            pending_selection=None,
            answer_revealed=False,
            answers=answers,
            score=score,
        )
    return replace(
        state,
        phase=SessionPhase.RESULTS,
        current_index=None,
        pending_selection=None,
        answer_revealed=False,
        answers=answers,
        score=score,
    )


def reset(state: SessionState) -> SessionState:
    """Go back to SETUP keeping the player's configuration."""

    _require_phase(state, SessionPhase.RESULTS, "play again")
    return _cleared(state)


def _cleared(state: SessionState) -> SessionState:
    return SessionState(rules=state.rules, config=state.config)


def _require_phase(
    state: SessionState, phase: SessionPhase, action: str
) -> None:
    if state.phase is not phase:
        raise InvalidTransitionError(
            f"Cannot {action} while the session is {state.phase.value}."
        )


def _require_known_category(rules: GameRules, label: str) -> None:
    if label not in rules.categories:
        raise QuizValidationError(f"Unknown category '{label}'.")


def _require_allowed_count(rules: GameRules, value: int) -> None:
    if isinstance(value, bool) or value not in rules.question_counts:
        allowed = ", ".join(str(count) for count in rules.question_counts)
        raise QuizValidationError(
            f"Question count must be one of: {allowed}."
        )
