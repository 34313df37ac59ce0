"""Rich console front end for a :class:`TriviaSession`.

The loop reads one line per turn from an injectable input provider, maps it
to a player intent for the current phase, and repaints from
:meth:`TriviaSession.view`. Nothing here touches session state directly.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Callable, Literal

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .errors import GenerationError, TriviaQuizError
from .models import OPTION_LETTERS, SessionPhase
from .results import QuizResults
from .session import (
    MARK_CORRECT,
    MARK_DIMMED,
    MARK_SELECTED,
    MARK_WRONG,
    SessionView,
    TriviaSession,
)

InputProvider = Callable[[], str]

CommandType = Literal[
    "toggle",
    "difficulty",
    "count",
    "start",
    "select",
    "advance",
    "reset",
    "quit",
]

_MARK_STYLES = {
    MARK_SELECTED: "bold green",
    MARK_CORRECT: "bold black on green",
    MARK_WRONG: "bold white on red",
    MARK_DIMMED: "dim",
}


@dataclass(frozen=True)
class PlayerCommand:
    type: CommandType
    value: object = None


def parse_command(raw: str | None, phase: SessionPhase) -> PlayerCommand | None:
    """Map a line of input to a command valid for ``phase``."""

    if raw is None:
        return None
    text = raw.strip()
    lowered = text.lower()
    if lowered in {"q", "quit", "exit"}:
        return PlayerCommand("quit")

    if phase is SessionPhase.SETUP:
        return _parse_setup(lowered)
    if phase is SessionPhase.PLAYING:
        if lowered in {"", "n", "next", "check", "finish"}:
            return PlayerCommand("advance")
        if len(lowered) == 1 and lowered.upper() in OPTION_LETTERS:
            return PlayerCommand(
                "select", OPTION_LETTERS.index(lowered.upper())
            )
        return None
    if phase is SessionPhase.RESULTS:
        if lowered in {"p", "play", "again", "r", "reset"}:
            return PlayerCommand("reset")
        return None
    return None


def _parse_setup(lowered: str) -> PlayerCommand | None:
    if lowered in {"s", "start"}:
        return PlayerCommand("start")
    if lowered.isdigit():
        return PlayerCommand("toggle", int(lowered))
    head, _, tail = lowered.partition(" ")
    tail = tail.strip()
    if head in {"d", "difficulty"} and tail:
        return PlayerCommand("difficulty", tail)
    if head in {"c", "count"} and tail.isdigit():
        return PlayerCommand("count", int(tail))
    return None


def run_trivia_session(
    session: TriviaSession,
    console: Console,
    input_provider: InputProvider,
) -> QuizResults | None:
    """Drive ``session`` until the player quits.

    Returns the results of the last finished game, or ``None`` when the
    player quit before finishing one.
    """

    finished: QuizResults | None = None
    while True:
        view = session.view()
        _render(console, view)
        try:
            raw = input_provider()
        except (EOFError, KeyboardInterrupt, StopIteration):
            console.print("\n[bold yellow]Session interrupted.[/]")
            return finished
        command = parse_command(raw, view.phase)
        if command is None:
            console.print("[red]Unrecognized command. Try again.[/]")
            continue
        if command.type == "quit":
            console.print("[bold yellow]Thanks for playing![/]")
            return finished
        try:
            _apply_command(session, console, command, view)
        except TriviaQuizError as exc:
            console.print(Text(str(exc), style="red"))
            continue
        if session.state.phase is SessionPhase.RESULTS:
            finished = session.results()


def _apply_command(
    session: TriviaSession,
    console: Console,
    command: PlayerCommand,
    view: SessionView,
) -> None:
    if command.type == "toggle":
        position = int(command.value)  # type: ignore[arg-type]
        if not 1 <= position <= len(view.available_categories):
            console.print(f"[red]There is no category number {position}.[/]")
            return
        session.toggle_category(view.available_categories[position - 1])
    elif command.type == "difficulty":
        session.set_difficulty(str(command.value))
    elif command.type == "count":
        session.set_question_count(int(command.value))  # type: ignore[arg-type]
    elif command.type == "start":
        _start(session, console)
    elif command.type == "select":
        session.select_answer(int(command.value))  # type: ignore[arg-type]
    elif command.type == "advance":
        session.advance()
    elif command.type == "reset":
        session.reset_game()


def _start(session: TriviaSession, console: Console) -> None:
    with console.status("Generating questions...", spinner="dots"):
        try:
            asyncio.run(session.start_game())
        except GenerationError as exc:
            message = f"Failed to generate questions. Please try again.\n{exc}"
            console.print(
                Panel(
                    Text(message),
                    title="Generation failed",
                    border_style="red",
                )
            )
        except KeyboardInterrupt:
            console.print("[bold yellow]Question generation interrupted.[/]")


def _render(console: Console, view: SessionView) -> None:
    if view.phase is SessionPhase.SETUP:
        _render_setup(console, view)
    elif view.phase is SessionPhase.PLAYING:
        _render_question(console, view)
    elif view.phase is SessionPhase.RESULTS:
        _render_results(console, view)


def _render_setup(console: Console, view: SessionView) -> None:
    console.print()
    console.rule(Text("Trivia", style="bold green"))

    table = Table(show_header=False, box=box.SIMPLE, expand=False)
    table.add_column("#", justify="right", style="cyan")
    table.add_column("Category")
    for number, label in enumerate(view.available_categories, start=1):
        chosen = view.config.is_selected(label)
        marker = "[x]" if chosen else "[ ]"
        table.add_row(
            str(number),
            Text(f"{marker} {label}", style="bold green" if chosen else ""),
        )
    console.print(table)

    counts = "/".join(str(count) for count in view.question_counts)
    console.print(
        Text.assemble(
            ("Difficulty: ", "bold"),
            (view.config.difficulty.value, "green"),
            ("   Questions: ", "bold"),
            (str(view.config.question_count), "green"),
            (f" (of {counts})", "dim"),
        )
    )
    console.print(
        Text(
            "Commands: <number> toggle category, d <easy|medium|hard>, "
            "c <count>, start, quit",
            style="dim",
        )
    )


def _render_question(console: Console, view: SessionView) -> None:
    question = view.question
    if question is None:
        return
    console.print()
    console.rule(
        Text.assemble(
            (f"Question {view.question_number}", "bold cyan"),
            (f" of {view.total_questions}", "dim"),
            (f"   Score: {view.score}", "bold green"),
        )
    )
    console.print(Text(f" {question.category} ", style="black on green"))
    console.print(Text(question.prompt, style="bold"))

    table = Table(show_header=False, box=box.SIMPLE, expand=True)
    table.add_column("Key", justify="center", style="cyan")
    table.add_column("Option")
    table.add_column("", justify="center")
    for option in view.options:
        check = (
            "✓"
            if option.mark == MARK_CORRECT
            and view.pending_selection == option.index
            else ""
        )
        table.add_row(
            f"{option.letter}.",
            Text(option.text, style=_MARK_STYLES.get(option.mark, "")),
            check,
        )
    console.print(table)

    hint = (
        "Press Enter to continue"
        if view.answer_revealed
        else "Choose A-D, then press Enter"
    )
    console.print(Text(f"[{view.advance_label}] {hint} | quit", style="dim"))


def _render_results(console: Console, view: SessionView) -> None:
    results = view.results
    if results is None:
        return
    console.print()
    console.rule(Text("Results", style="bold magenta"))
    console.print(
        Panel(
            Text.assemble(
                (f"{results.score}/{results.total}\n", "bold green"),
                (f"{results.percentage}% Correct\n", "bold"),
                (results.grade.headline, ""),
            ),
            box=box.ROUNDED,
            expand=False,
        )
    )

    reviews = Table(title="Your answers", box=box.SIMPLE, expand=True)
    reviews.add_column("#", justify="right")
    reviews.add_column("Question", overflow="fold")
    reviews.add_column("Your answer")
    reviews.add_column("Correct answer")
    reviews.add_column("Result", justify="center")
    for review in results.reviews:
        reviews.add_row(
            str(review.index + 1),
            review.question.prompt,
            Text(
                review.selected_text or "-",
                style="green" if review.is_correct else "red",
            ),
            "" if review.is_correct else review.correct_text,
            "✅" if review.is_correct else "❌",
        )
    console.print(reviews)

    if len(results.per_category) > 1:
        per_category = Table(title="Per category", box=box.SIMPLE)
        per_category.add_column("Category")
        per_category.add_column("Asked", justify="right")
        per_category.add_column("Correct", justify="right")
        per_category.add_column("Accuracy", justify="right")
        for summary in results.per_category.values():
            per_category.add_row(
                summary.category,
                str(summary.asked),
                str(summary.correct),
                f"{summary.accuracy * 100:.0f}%",
            )
        console.print(per_category)

    console.print(Text("Commands: play (play again), quit", style="dim"))
