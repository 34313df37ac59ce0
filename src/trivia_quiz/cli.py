"""Command-line entry point for the trivia quiz."""

from __future__ import annotations

import argparse
import sys
from importlib import metadata
from pathlib import Path
from typing import Optional, Sequence

from rich.console import Console

from trivia_quiz import config as config_mod
from trivia_quiz.core.ai import load_client
from trivia_quiz.core.logging import configure_logger
from trivia_quiz.core.workspace import WorkspaceError, ensure_workspace
from trivia_quiz.game.errors import QuizValidationError
from trivia_quiz.game.gateway import OpenAICompletionClient, QuestionGateway
from trivia_quiz.game.models import Difficulty
from trivia_quiz.game.session import TriviaSession
from trivia_quiz.game.view import InputProvider, run_trivia_session


def _make_console() -> Console:
    return Console()


def _make_input_provider(console: Console) -> InputProvider:
    return lambda: console.input("[bold green]> [/]")


def _error(message: str) -> None:
    sys.stderr.write(f"Error: {message}\n")


def _build_gateway(settings: config_mod.OpenAIConfig) -> QuestionGateway:
    client = load_client(base_url=settings.api_base)
    completion = OpenAICompletionClient(
        model=settings.model,
        temperature=settings.temperature,
        max_output_tokens=settings.max_output_tokens,
        request_timeout=settings.request_timeout_seconds,
        client=client,
    )
    return QuestionGateway(
        completion, timeout=settings.request_timeout_seconds
    )


def _cmd_play(args: argparse.Namespace) -> int:
    try:
        cfg = config_mod.load_config(
            explicit_path=args.config, workspace_path=args.workspace
        )
        layout = ensure_workspace(path=args.workspace)
    except (config_mod.ConfigError, WorkspaceError) as exc:
        _error(str(exc))
        return 2

    logger, log_path = configure_logger(
        "trivia_quiz",
        log_dir=layout.path_for("logs"),
        level=cfg.logging.level,
        verbose=bool(args.verbose or cfg.logging.verbose),
        filename="trivia.log",
    )
    logger.debug(
        "trivia play invoked",
        extra={"config_source": cfg.source, "log_path": log_path},
    )

    try:
        gateway = _build_gateway(cfg.openai)
    except RuntimeError as exc:
        logger.error("OpenAI client unavailable", extra={"reason": str(exc)})
        _error(str(exc))
        return 1

    session = TriviaSession(
        gateway,
        rules=cfg.quiz.rules(),
        config=cfg.quiz.session_config(),
    )
    try:
        for label in dict.fromkeys(args.category or []):
            session.toggle_category(label)
        if args.difficulty:
            session.set_difficulty(args.difficulty)
        if args.count is not None:
            session.set_question_count(args.count)
    except QuizValidationError as exc:
        _error(str(exc))
        return 2

    console = _make_console()
    results = run_trivia_session(
        session, console, _make_input_provider(console)
    )
    if results is not None:
        logger.info(
            "trivia play finished",
            extra={"score": results.score, "total": results.total},
        )
    return 0


def _cmd_config_init(args: argparse.Namespace) -> int:
    try:
        path, _ = config_mod.resolve_config_path(
            explicit_path=args.config, workspace_path=args.workspace
        )
        written = config_mod.write_template(path, overwrite=args.force)
    except (config_mod.ConfigError, WorkspaceError) as exc:
        _error(str(exc))
        return 2
    print(f"Created template {written}")
    return 0


def _cmd_config_path(args: argparse.Namespace) -> int:
    try:
        path, _ = config_mod.resolve_config_path(
            explicit_path=args.config, workspace_path=args.workspace
        )
    except WorkspaceError as exc:
        _error(str(exc))
        return 2
    suffix = "" if path.exists() else " (not created yet)"
    print(f"{path}{suffix}")
    return 0


def _version() -> str:
    try:
        return metadata.version("trivia-quiz")
    except metadata.PackageNotFoundError:
        return "unknown"


def _add_location_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to a TOML config file (defaults to the workspace config).",
    )
    parser.add_argument(
        "--workspace",
        type=Path,
        help="Override the data directory holding config and logs.",
    )


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="trivia",
        description="Multiple-choice trivia with AI-generated questions",
    )
    p.add_argument("-V", "--version", action="version", version=_version())
    sub = p.add_subparsers(dest="command", required=True)

    sp_play = sub.add_parser("play", help="Start an interactive trivia game")
    _add_location_args(sp_play)
    sp_play.add_argument(
        "--category",
        action="append",
        metavar="NAME",
        help="Preselect a category (repeatable)",
    )
    sp_play.add_argument(
        "--difficulty", choices=[d.value for d in Difficulty]
    )
    sp_play.add_argument("--count", type=int, help="Number of questions")
    sp_play.add_argument(
        "--verbose",
        action="store_true",
        help="Mirror log output to stderr",
    )

    sp_cfg = sub.add_parser("config", help="Manage trivia.toml")
    cfg_sub = sp_cfg.add_subparsers(dest="action", required=True)
    sp_init = cfg_sub.add_parser("init", help="Write the default template")
    _add_location_args(sp_init)
    sp_init.add_argument(
        "--force", action="store_true", help="Overwrite an existing file"
    )
    sp_path = cfg_sub.add_parser("path", help="Show the config location")
    _add_location_args(sp_path)
    return p


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    if args.command == "play":
        return _cmd_play(args)
    if args.command == "config" and args.action == "init":
        return _cmd_config_init(args)
    if args.command == "config" and args.action == "path":
        return _cmd_config_path(args)
    parser.print_help()  # pragma: no cover - argparse enforces choices
    return 2  # pragma: no cover


if __name__ == "__main__":  # pragma: no cover - manual invocation guard
    raise SystemExit(main())
